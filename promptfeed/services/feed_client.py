"""
Per-session composition of the feed client.
"""

from typing import Optional

from ..models.core import Identity
from ..utils.cognito_client import CognitoError, CognitoIdentityProvider, IdentityProvider
from ..utils.config import AppConfig
from ..utils.logging_config import get_logger
from ..utils.persistence_client import PersistenceAPI, PersistenceClient
from ..utils.scheduler import Scheduler
from .coordinator import Clipboard, MutationCoordinator
from .entity_store import EntityStore
from .faceting import FeedView, ProfileStats, profile_stats
from .notification_queue import NotificationQueue
from .session_adapter import SessionAdapter

logger = get_logger(__name__)


class FeedClient:
    """One client session: the store, session, notification queue and coordinator wired together."""

    def __init__(self,
                 store: EntityStore,
                 session: SessionAdapter,
                 notifications: NotificationQueue,
                 coordinator: MutationCoordinator):
        self.store = store
        self.session = session
        self.notifications = notifications
        self.coordinator = coordinator
        self.view = FeedView(store)
        self._started = False

    @classmethod
    def create(cls,
               app_config: Optional[AppConfig] = None,
               api: Optional[PersistenceAPI] = None,
               provider: Optional[IdentityProvider] = None,
               clipboard: Optional[Clipboard] = None,
               scheduler: Optional[Scheduler] = None) -> 'FeedClient':
        """
        Build a client from configuration, with optional collaborator overrides.

        Args:
            app_config: AppConfig instance, uses default if None
            api: Persistence API (defaults to the REST client)
            provider: Identity provider (defaults to Cognito)
            clipboard: Optional clipboard capability
            scheduler: Scheduler for notification expiry

        Returns:
            Unstarted FeedClient
        """
        if app_config is None:
            from ..utils.config import config as default_config
            app_config = default_config

        api = api or PersistenceClient(app_config.persistence)
        provider = provider or CognitoIdentityProvider(app_config.cognito)

        store = EntityStore()
        session = SessionAdapter(provider)
        notifications = NotificationQueue(scheduler or Scheduler(), expiry_ms=app_config.feed.notification_expiry_ms)
        coordinator = MutationCoordinator(store,
                                          session,
                                          notifications,
                                          api,
                                          offline_fallback=app_config.feed.offline_fallback,
                                          clipboard=clipboard)
        return cls(store, session, notifications, coordinator)

    async def start(self) -> bool:
        """
        Resolve the current session, follow identity changes and load the feed.

        Returns:
            True if live data was loaded
        """
        try:
            self.session.start()
        except CognitoError as e:
            logger.warning(f'Could not restore session, continuing anonymously: {e}')
            self.notifications.error('Could not restore your session')
        if not self._started:
            self.session.subscribe(self._on_identity_change)
            self._started = True
        loaded = await self.coordinator.reload()
        logger.info(f'Feed client started with {len(self.store)} prompts')
        return loaded

    def _on_identity_change(self, identity: Identity) -> None:
        # Offline seed data and author-dependent views follow the user
        self.coordinator.schedule_reload()

    def sign_in(self, username: str, password: str) -> bool:
        try:
            self.session.sign_in(username, password)
        except CognitoError as e:
            logger.warning(f'Sign-in failed: {e}')
            self.notifications.error('Sign-in failed')
            return False
        return True

    def sign_out(self) -> None:
        self.session.sign_out()
        self.notifications.success('Logged out successfully')

    def profile(self) -> ProfileStats:
        return profile_stats(self.store.prompts, self.session.current())

    async def close(self) -> None:
        await self.coordinator.drain()
        self.session.stop()
