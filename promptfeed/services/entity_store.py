"""
Entity store holding the canonical local view of the prompt feed.
"""

from dataclasses import replace
from typing import Callable, List, Optional, Sequence, Set, Tuple

from ..models.core import DEFAULT_AUTHOR_ID, Authenticated, Comment, Prompt, PromptInput
from ..models.errors import NotFoundRace, RemoteFailure, ValidationError
from ..utils.logging_config import get_logger
from ..utils.persistence_client import PersistenceAPI, PersistenceError
from ..utils.timestamp_utils import provisional_id, utc_now

logger = get_logger(__name__)

StoreListener = Callable[[Tuple[Prompt, ...]], None]


class EntityStore:
    """Ordered, newest-first collection of prompts and their comments.

    Prompts are immutable values; every mutation swaps the stored value so
    snapshots handed out earlier never change underneath their holders.
    """

    def __init__(self, prompts: Sequence[Prompt] = ()):
        self._prompts: List[Prompt] = list(prompts)
        self._listeners: List[StoreListener] = []
        # Provisional ids whose create confirmation has not settled yet
        self._unconfirmed: Set[str] = set()

    @property
    def prompts(self) -> Tuple[Prompt, ...]:
        return tuple(self._prompts)

    def __len__(self) -> int:
        return len(self._prompts)

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.prompts
        for listener in list(self._listeners):
            listener(snapshot)

    def _index_of(self, prompt_id: str) -> Optional[int]:
        for index, prompt in enumerate(self._prompts):
            if prompt.id == prompt_id:
                return index
        return None

    def get(self, prompt_id: str) -> Optional[Prompt]:
        index = self._index_of(prompt_id)
        return None if index is None else self._prompts[index]

    def replace(self, prompts: Sequence[Prompt]) -> None:
        """Replace the collection, ordered newest-first (stable for equal timestamps)."""
        self._prompts = sorted(prompts, key=lambda p: p.created_at, reverse=True)
        self._notify()

    def replace_confirmed(self, prompts: Sequence[Prompt]) -> None:
        """Replace the server-backed prompts while keeping unconfirmed local ones in front."""
        provisional = [p for p in self._prompts if p.id in self._unconfirmed]
        self.replace(prompts)
        if provisional:
            self._prompts = provisional + self._prompts
            self._notify()

    async def load(self, api: PersistenceAPI) -> None:
        """
        Replace the collection with the persistence API's list result.

        Provisional prompts whose create is still in flight are kept.

        Raises:
            RemoteFailure: If the list request fails; the store is left unchanged
        """
        try:
            prompts = await api.list_prompts()
        except PersistenceError as e:
            raise RemoteFailure(f'Could not load prompts: {e}')

        self.replace_confirmed(prompts)
        logger.info(f'Loaded {len(prompts)} prompts')

    def create(self, prompt_input: PromptInput, author: Authenticated) -> Prompt:
        """
        Prepend a provisional prompt authored by the given identity.

        Raises:
            ValidationError: If title or content is blank
        """
        title = prompt_input.title.strip()
        content = prompt_input.content.strip()
        if not title or not content:
            raise ValidationError('Title and content are required')

        category = (prompt_input.category or '').strip() or None
        prompt = Prompt(id=provisional_id(),
                        author_id=author.id,
                        author_name=author.display_name,
                        title=title,
                        content=content,
                        category=category,
                        created_at=utc_now())
        self._prompts.insert(0, prompt)
        self._unconfirmed.add(prompt.id)
        self._notify()
        return prompt

    def settle(self, provisional: str) -> None:
        """Mark a provisional prompt's create as finished; later reloads no longer keep it."""
        self._unconfirmed.discard(provisional)

    def delete(self, prompt_id: str) -> Optional[Tuple[int, Prompt]]:
        """
        Remove a prompt and its comments.

        Returns:
            (position, prompt) of the removed entry, or None if it was already gone
        """
        index = self._index_of(prompt_id)
        if index is None:
            return None
        prompt = self._prompts.pop(index)
        self._notify()
        return index, prompt

    def restore(self, index: int, prompt: Prompt) -> bool:
        """Put a removed prompt back at its former position unless it already reappeared."""
        if self._index_of(prompt.id) is not None:
            return False
        self._prompts.insert(min(index, len(self._prompts)), prompt)
        self._notify()
        return True

    def toggle_like(self, prompt_id: str) -> Prompt:
        """
        Flip liked_by_user and move likes by one in the same step.

        Raises:
            NotFoundRace: If the prompt no longer exists
        """
        index = self._index_of(prompt_id)
        if index is None:
            raise NotFoundRace(f'Prompt {prompt_id} is gone')
        prompt = self._prompts[index].with_like_toggled()
        self._prompts[index] = prompt
        self._notify()
        return prompt

    def add_comment(self, prompt_id: str, user_name: str, text: str) -> Comment:
        """
        Append a comment to a prompt.

        Raises:
            ValidationError: If text is blank
            NotFoundRace: If the prompt no longer exists
        """
        if not text or not text.strip():
            raise ValidationError('Comment cannot be empty')
        index = self._index_of(prompt_id)
        if index is None:
            raise NotFoundRace(f'Prompt {prompt_id} is gone')

        comment = Comment(id=provisional_id('comment'), user_name=user_name, text=text, created_at=utc_now())
        prompt = self._prompts[index]
        self._prompts[index] = replace(prompt, comments=prompt.comments + (comment, ))
        self._notify()
        return comment

    def remove_comment(self, prompt_id: str, comment_id: str) -> bool:
        index = self._index_of(prompt_id)
        if index is None:
            return False
        prompt = self._prompts[index]
        comments = tuple(c for c in prompt.comments if c.id != comment_id)
        if len(comments) == len(prompt.comments):
            return False
        self._prompts[index] = replace(prompt, comments=comments)
        self._notify()
        return True

    def reconcile(self, provisional: str, canonical: Prompt) -> Optional[Prompt]:
        """
        Swap server-canonical fields into a provisional prompt.

        Local social state (likes, liked_by_user, comments) made while the create was
        in flight is kept. Author fields fall back to the local values when the server
        did not record them. If the canonical copy is already present the provisional one is dropped.

        Returns:
            The reconciled prompt, or None if the provisional prompt was removed meanwhile
        """
        self.settle(provisional)
        index = self._index_of(provisional)
        if index is None:
            return None

        local = self._prompts[index]
        if self._index_of(canonical.id) is not None:
            # A reload already brought in the canonical copy
            del self._prompts[index]
            self._notify()
            return self.get(canonical.id)

        author_known = canonical.author_id != DEFAULT_AUTHOR_ID
        reconciled = replace(local,
                             id=canonical.id,
                             title=canonical.title or local.title,
                             content=canonical.content or local.content,
                             category=canonical.category,
                             created_at=canonical.created_at,
                             author_id=canonical.author_id if author_known else local.author_id,
                             author_name=canonical.author_name if author_known else local.author_name)
        self._prompts[index] = reconciled
        self._notify()
        return reconciled
