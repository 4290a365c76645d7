"""
Session adapter exposing the current identity from the identity provider.
"""

from typing import Callable, List, Optional

from ..models.core import ANONYMOUS, Authenticated, Identity
from ..utils.cognito_client import IdentityProvider
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

IdentityListener = Callable[[Identity], None]


class SessionAdapter:
    """Single source of the current identity for the rest of the client."""

    def __init__(self, provider: IdentityProvider):
        self._provider = provider
        self._identity: Identity = ANONYMOUS
        self._listeners: List[IdentityListener] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    def start(self) -> Identity:
        """Read the provider's current session and follow its changes."""
        if self._unsubscribe is None:
            self._unsubscribe = self._provider.subscribe(self._on_provider_change)
        self._set(self._provider.get_current_session())
        return self._identity

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def current(self) -> Identity:
        return self._identity

    def authenticated(self) -> Optional[Authenticated]:
        return self._identity if isinstance(self._identity, Authenticated) else None

    def subscribe(self, on_change: IdentityListener) -> Callable[[], None]:
        self._listeners.append(on_change)

        def unsubscribe() -> None:
            if on_change in self._listeners:
                self._listeners.remove(on_change)

        return unsubscribe

    def sign_in(self, username: str, password: str) -> Identity:
        """Sign in through the provider; the identity arrives through the change stream."""
        identity = self._provider.sign_in(username, password)
        # Providers that do not emit on sign-in still update the adapter
        self._set(identity)
        return self._identity

    def sign_out(self) -> None:
        self._provider.sign_out()
        self._set(None)

    def _on_provider_change(self, identity: Optional[Authenticated]) -> None:
        self._set(identity)

    def _set(self, identity: Optional[Authenticated]) -> None:
        new_identity: Identity = identity if identity is not None else ANONYMOUS
        if new_identity == self._identity:
            return
        self._identity = new_identity
        if isinstance(new_identity, Authenticated):
            logger.info(f'Session changed: signed in as {new_identity.id}')
        else:
            logger.info('Session changed: anonymous')
        for listener in list(self._listeners):
            listener(new_identity)
