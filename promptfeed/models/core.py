"""
Core data models for the prompt feed.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from ..utils.timestamp_utils import parse_timestamp

DEFAULT_AUTHOR_ID = 'other_user'
DEFAULT_AUTHOR_NAME = 'Anonymous'


@dataclass(frozen=True)
class Comment:
    """A short reply owned by exactly one prompt."""
    id: str  # Unique within the parent prompt
    user_name: str
    text: str
    created_at: datetime

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Comment':
        return cls(id=str(record['id']),
                   user_name=record.get('user_name') or 'User',
                   text=record.get('text', ''),
                   created_at=parse_timestamp(record['created_at']))


@dataclass(frozen=True)
class Prompt:
    """A user-authored shareable text unit with social metadata.

    `liked_by_user` is local to this client and never sent to the server.
    """
    id: str  # Provisional client id until reconciled with the server
    author_id: str
    author_name: str
    title: str
    content: str
    category: Optional[str]
    created_at: datetime
    likes: int = 0
    liked_by_user: bool = False
    comments: Tuple[Comment, ...] = field(default_factory=tuple)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Prompt':
        """Build a prompt from a persistence API record, filling the social defaults."""
        comments = tuple(Comment.from_record(c) for c in record.get('comments') or [])
        return cls(id=str(record['id']),
                   author_id=record.get('author_id') or DEFAULT_AUTHOR_ID,
                   author_name=record.get('author_name') or DEFAULT_AUTHOR_NAME,
                   title=record.get('title', ''),
                   content=record.get('content', ''),
                   category=record.get('category') or None,
                   created_at=parse_timestamp(record['created_at']),
                   likes=max(int(record.get('likes') or 0), 0),
                   liked_by_user=False,
                   comments=comments)

    def with_like_toggled(self) -> 'Prompt':
        liked = not self.liked_by_user
        likes = self.likes + 1 if liked else max(self.likes - 1, 0)
        return replace(self, liked_by_user=liked, likes=likes)


@dataclass(frozen=True)
class PromptInput:
    """Payload of the share-prompt form."""
    title: str
    content: str
    category: Optional[str] = None


class NotificationKind(str, Enum):
    SUCCESS = 'success'
    ERROR = 'error'


@dataclass(frozen=True)
class Notification:
    """An ephemeral user-facing message."""
    id: int  # Unique and monotonic within one queue
    message: str
    kind: NotificationKind


@dataclass(frozen=True)
class Authenticated:
    """A signed-in user as reported by the identity provider."""
    id: str
    display_name: str
    avatar_url: Optional[str] = None
    email: Optional[str] = None

    @staticmethod
    def derive_display_name(full_name: Optional[str], email: Optional[str]) -> str:
        """Full name, else the local part of the e-mail address, else 'Anonymous'."""
        if full_name and full_name.strip():
            return full_name.strip()
        if email and email.split('@')[0]:
            return email.split('@')[0]
        return DEFAULT_AUTHOR_NAME


@dataclass(frozen=True)
class Anonymous:
    """No signed-in user."""
    pass


Identity = Union[Authenticated, Anonymous]

ANONYMOUS = Anonymous()
