"""
Two-phase optimistic mutations against the entity store.

Each mutation is applied locally first, then either committed with the server's
result or rolled back to exactly the state it replaced.
"""

import asyncio
from typing import Any, Optional, Tuple

from ..models.core import Authenticated, Comment, Prompt, PromptInput
from ..models.errors import AuthorizationError, NotFoundRace
from ..utils.logging_config import get_logger
from ..utils.persistence_client import PersistenceAPI
from ..utils.timestamp_utils import is_provisional_id
from .entity_store import EntityStore

logger = get_logger(__name__)


class Mutation:
    """Base class for optimistic mutations.

    Subclasses that talk to the persistence API set `remote = True` and implement
    `confirm`. Local-only mutations are committed as soon as they are applied.
    Destructive mutations set `resync_on_failure` so a failed confirmation is
    followed by a full reload.
    """

    remote = False
    resync_on_failure = False
    description = 'mutation'

    def __init__(self, store: EntityStore, actor: Authenticated):
        self.store = store
        self.actor = actor
        self.applied = False
        self.settled = False
        self.confirmation: Optional[asyncio.Task] = None

    def apply(self) -> None:
        raise NotImplementedError

    async def confirm(self, api: PersistenceAPI) -> Any:
        return None

    def commit(self, server_result: Any = None) -> None:
        self.settled = True

    def rollback(self, reason: str) -> None:
        self.settled = True


class CreatePrompt(Mutation):
    remote = True
    description = 'share prompt'

    def __init__(self, store: EntityStore, actor: Authenticated, prompt_input: PromptInput):
        super().__init__(store, actor)
        self.prompt_input = prompt_input
        self.provisional: Optional[Prompt] = None
        self.reconciled: Optional[Prompt] = None
        # Server record, kept even when the provisional prompt was removed meanwhile
        self.canonical: Optional[Prompt] = None

    def apply(self) -> None:
        self.provisional = self.store.create(self.prompt_input, self.actor)
        self.applied = True

    async def confirm(self, api: PersistenceAPI) -> Prompt:
        return await api.create_prompt(self.provisional.title, self.provisional.content, self.provisional.category)

    def commit(self, server_result: Prompt = None) -> None:
        super().commit(server_result)
        self.canonical = server_result
        reconciled = self.store.reconcile(self.provisional.id, server_result)
        self.reconciled = reconciled
        if reconciled is None:
            logger.debug(f'Provisional prompt {self.provisional.id} was removed before confirmation')
        else:
            logger.debug(f'Reconciled {self.provisional.id} -> {reconciled.id}')

    def rollback(self, reason: str) -> None:
        super().rollback(reason)
        self.store.settle(self.provisional.id)
        self.store.delete(self.provisional.id)
        logger.info(f'Rolled back provisional prompt {self.provisional.id}: {reason}')


class DeletePrompt(Mutation):
    remote = True
    resync_on_failure = True
    description = 'delete prompt'

    def __init__(self,
                 store: EntityStore,
                 actor: Authenticated,
                 prompt_id: str,
                 pending_create: Optional[CreatePrompt] = None):
        """
        Args:
            store: Entity store to mutate
            actor: Identity issuing the delete
            prompt_id: Id of the prompt to delete
            pending_create: In-flight create that produced the prompt, when it is still provisional
        """
        super().__init__(store, actor)
        self.prompt_id = prompt_id
        self.pending_create = pending_create
        self.removed: Optional[Tuple[int, Prompt]] = None
        self.target_id: Optional[str] = None

    def apply(self) -> None:
        prompt = self.store.get(self.prompt_id)
        if prompt is None:
            raise NotFoundRace(f'Prompt {self.prompt_id} is gone')
        if prompt.author_id != self.actor.id:
            raise AuthorizationError('You can only delete your own prompts')
        self.removed = self.store.delete(self.prompt_id)
        self.applied = True

    async def confirm(self, api: PersistenceAPI) -> None:
        if self.pending_create is not None:
            # Provisional ids never reach the server; delete the record the create produced
            await self.pending_create.confirmation
            if self.pending_create.canonical is None:
                logger.debug(f'Create of {self.prompt_id} failed, nothing to delete remotely')
                return
            self.target_id = self.pending_create.canonical.id
        elif is_provisional_id(self.prompt_id):
            logger.debug(f'Prompt {self.prompt_id} was never confirmed, nothing to delete remotely')
            return
        else:
            self.target_id = self.prompt_id
        await api.delete_prompt(self.target_id)

    def commit(self, server_result: Any = None) -> None:
        super().commit(server_result)
        if self.target_id is not None and self.target_id != self.prompt_id:
            # A reload may have brought in the server copy meanwhile
            self.store.delete(self.target_id)

    def rollback(self, reason: str) -> None:
        super().rollback(reason)
        if self.target_id != self.prompt_id:
            # The provisional copy is stale; the resync brings back the server record
            return
        index, prompt = self.removed
        if self.store.restore(index, prompt):
            logger.info(f'Restored prompt {self.prompt_id} after failed delete: {reason}')


class ToggleLike(Mutation):
    description = 'like prompt'

    def __init__(self, store: EntityStore, actor: Authenticated, prompt_id: str):
        super().__init__(store, actor)
        self.prompt_id = prompt_id

    def apply(self) -> None:
        self.store.toggle_like(self.prompt_id)
        self.applied = True

    def rollback(self, reason: str) -> None:
        super().rollback(reason)
        try:
            self.store.toggle_like(self.prompt_id)
        except NotFoundRace:
            logger.debug(f'Prompt {self.prompt_id} gone before like rollback')


class AddComment(Mutation):
    description = 'comment'

    def __init__(self, store: EntityStore, actor: Authenticated, prompt_id: str, text: str):
        super().__init__(store, actor)
        self.prompt_id = prompt_id
        self.text = text
        self.comment: Optional[Comment] = None

    def apply(self) -> None:
        self.comment = self.store.add_comment(self.prompt_id, self.actor.display_name, self.text)
        self.applied = True

    def rollback(self, reason: str) -> None:
        super().rollback(reason)
        self.store.remove_comment(self.prompt_id, self.comment.id)
