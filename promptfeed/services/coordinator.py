"""
Optimistic mutation coordinator.

Every command is gated on the session, applied to the entity store at once, and,
for create and delete, confirmed against the persistence API in a background task
whose completion commits or rolls back the local change.
"""

import asyncio
from typing import Callable, Dict, Optional, Protocol, Set

from ..models.core import Authenticated, PromptInput
from ..models.errors import AuthorizationError, NotFoundRace, RemoteFailure, ValidationError
from ..utils.logging_config import get_logger
from ..utils.persistence_client import PersistenceAPI, PersistenceError
from .entity_store import EntityStore
from .mutations import AddComment, CreatePrompt, DeletePrompt, Mutation, ToggleLike
from .notification_queue import NotificationQueue
from .seed_data import offline_prompts
from .session_adapter import SessionAdapter

logger = get_logger(__name__)


class Clipboard(Protocol):

    def copy(self, text: str) -> bool:
        ...


class MutationCoordinator:
    """Applies feed commands optimistically and settles them against the server."""

    def __init__(self,
                 store: EntityStore,
                 session: SessionAdapter,
                 notifications: NotificationQueue,
                 api: PersistenceAPI,
                 offline_fallback: str = 'seed',
                 clipboard: Optional[Clipboard] = None):
        """
        Args:
            store: Entity store to mutate
            session: Source of the current identity
            notifications: Queue receiving user-facing messages
            api: Persistence API used for loads and confirmations
            offline_fallback: 'seed' to show the offline prompts when loading fails, 'error' to keep the store
            clipboard: Optional clipboard capability for copy_prompt
        """
        self.store = store
        self.session = session
        self.notifications = notifications
        self.api = api
        self.offline_fallback = offline_fallback
        self.clipboard = clipboard
        self._pending: Set[asyncio.Task] = set()
        # In-flight creates by provisional id
        self._creates: Dict[str, CreatePrompt] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def _track(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait until every in-flight confirmation and reload has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def _require_identity(self, message: str) -> Authenticated:
        identity = self.session.authenticated()
        if identity is None:
            raise AuthorizationError(message)
        return identity

    def _execute(self,
                 build: Callable[[Authenticated], Mutation],
                 gate_message: str,
                 success_message: Optional[str] = None) -> Optional[Mutation]:
        try:
            actor = self._require_identity(gate_message)
            mutation = build(actor)
            mutation.apply()
        except (AuthorizationError, ValidationError) as e:
            logger.info(f'Rejected command: {e}')
            self.notifications.error(str(e))
            return None
        except NotFoundRace as e:
            logger.debug(f'Ignoring command on vanished entity: {e}')
            return None

        if success_message:
            self.notifications.success(success_message)

        if mutation.remote:
            mutation.confirmation = self._track(self._confirm(mutation))
        else:
            mutation.commit()
        return mutation

    async def _confirm(self, mutation: Mutation) -> None:
        try:
            result = await mutation.confirm(self.api)
        except PersistenceError as e:
            self._fail(mutation, RemoteFailure(f'Failed to {mutation.description}: {e}'))
        except Exception as e:
            logger.error(f'Unexpected error confirming {mutation.description}: {e}')
            self._fail(mutation, RemoteFailure(f'Failed to {mutation.description}: {e}'))
        else:
            mutation.commit(result)
            return

        if mutation.resync_on_failure:
            await self.reload()

    def _fail(self, mutation: Mutation, failure: RemoteFailure) -> None:
        logger.error(str(failure))
        mutation.rollback(str(failure))
        self.notifications.error(str(failure))

    def share_prompt(self, title: str, content: str, category: Optional[str] = None) -> Optional[Mutation]:
        """Prepend a new prompt and confirm it with the server."""
        prompt_input = PromptInput(title=title, content=content, category=category)
        mutation = self._execute(lambda actor: CreatePrompt(self.store, actor, prompt_input),
                                 'Please login to share prompts', 'Prompt Shared!')
        if mutation is not None:
            provisional = mutation.provisional.id
            self._creates[provisional] = mutation
            mutation.confirmation.add_done_callback(lambda _: self._creates.pop(provisional, None))
        return mutation

    def delete_prompt(self, prompt_id: str) -> Optional[Mutation]:
        """Remove one of the current user's prompts and confirm it with the server."""
        pending_create = self._creates.get(prompt_id)
        return self._execute(lambda actor: DeletePrompt(self.store, actor, prompt_id, pending_create),
                             'Please login to delete prompts', 'Prompt deleted')

    def toggle_like(self, prompt_id: str) -> Optional[Mutation]:
        return self._execute(lambda actor: ToggleLike(self.store, actor, prompt_id), 'Login to like posts')

    def add_comment(self, prompt_id: str, text: str) -> Optional[Mutation]:
        return self._execute(lambda actor: AddComment(self.store, actor, prompt_id, text), 'Login to comment')

    def copy_prompt(self, prompt_id: str) -> bool:
        """Copy a prompt's content through the clipboard capability."""
        prompt = self.store.get(prompt_id)
        if prompt is None:
            return False
        if self.clipboard is None or not self.clipboard.copy(prompt.content):
            self.notifications.error('Could not copy to clipboard')
            return False
        self.notifications.success('Copied to clipboard')
        return True

    async def reload(self) -> bool:
        """
        Replace the store with the server's prompts, applying the offline policy on failure.

        Returns:
            True if live data was loaded
        """
        try:
            await self.store.load(self.api)
            return True
        except RemoteFailure as e:
            if self.offline_fallback == 'seed':
                logger.warning(f'{e}; showing offline prompts')
                self.store.replace_confirmed(offline_prompts(self.session.current()))
                self.notifications.error('Could not reach the server, showing offline prompts')
            else:
                logger.error(str(e))
                self.notifications.error('Could not load prompts')
            return False

    def schedule_reload(self) -> asyncio.Task:
        return self._track(self.reload())
