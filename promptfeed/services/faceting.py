"""
Faceting and search over the feed. Everything here is derived from the current
store contents on every call; nothing is cached.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from ..models.core import Authenticated, Identity, Prompt
from .entity_store import EntityStore

ALL_CATEGORY = 'All'


@dataclass(frozen=True)
class ProfileStats:
    posts: int
    likes_received: int


def categories(prompts: Iterable[Prompt]) -> List[str]:
    """Distinct non-empty categories in first-seen order, led by the synthetic 'All' facet."""
    seen = []
    for prompt in prompts:
        if prompt.category and prompt.category not in seen:
            seen.append(prompt.category)
    return [ALL_CATEGORY] + seen


def filter_prompts(prompts: Iterable[Prompt], search_text: str = '', active_category: str = ALL_CATEGORY) -> List[Prompt]:
    """
    Select prompts matching a search string and a category, keeping their order.

    Args:
        prompts: Prompts in display order
        search_text: Case-insensitive substring of title + content
        active_category: Category to keep, or 'All'

    Returns:
        Matching prompts in their original relative order
    """
    needle = (search_text or '').lower()
    matches = []
    for prompt in prompts:
        if needle not in (prompt.title + prompt.content).lower():
            continue
        if active_category != ALL_CATEGORY and prompt.category != active_category:
            continue
        matches.append(prompt)
    return matches


def profile_stats(prompts: Sequence[Prompt], identity: Identity) -> ProfileStats:
    """Number of prompts authored by the identity and the likes they received."""
    if not isinstance(identity, Authenticated):
        return ProfileStats(posts=0, likes_received=0)
    own = [p for p in prompts if p.author_id == identity.id]
    return ProfileStats(posts=len(own), likes_received=sum(p.likes for p in own))


class FeedView:
    """Current search and category selection over a live store."""

    def __init__(self, store: EntityStore):
        self.store = store
        self.search_text = ''
        self.active_category = ALL_CATEGORY

    def categories(self) -> List[str]:
        return categories(self.store.prompts)

    def visible(self) -> List[Prompt]:
        return filter_prompts(self.store.prompts, self.search_text, self.active_category)
