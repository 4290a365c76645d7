"""
Timestamp utilities for consistent time handling across the feed.
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_millis(timestamp: Optional[float] = None) -> int:
    """Convert a Unix timestamp in seconds to integer milliseconds.

    Args:
        timestamp: Unix timestamp in seconds (optional, uses current time if None)

    Returns:
        Milliseconds since the epoch
    """
    if timestamp is None:
        timestamp = time.time()
    return int(timestamp * 1000)


def parse_timestamp(value) -> datetime:
    """Parse a server timestamp into a timezone-aware datetime.

    Accepts datetimes, ISO-8601 strings (including a trailing 'Z') and Unix seconds.
    Naive values are taken to be UTC.

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value, tz=timezone.utc)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f'Unsupported timestamp value: {value!r}')

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def relative_time(moment: datetime, now: Optional[datetime] = None) -> str:
    """Render a timestamp relative to now, the way the feed displays it.

    Args:
        moment: Timestamp to describe
        now: Reference time (defaults to the current UTC time)

    Returns:
        'Just now', 'Nm ago', 'Nh ago', 'Nd ago' or the ISO date for anything older than a week
    """
    now = now or utc_now()
    seconds = int((now - moment).total_seconds())

    if seconds < 60:
        return 'Just now'
    minutes = seconds // 60
    if minutes < 60:
        return f'{minutes}m ago'
    hours = minutes // 60
    if hours < 24:
        return f'{hours}h ago'
    days = hours // 24
    if days < 7:
        return f'{days}d ago'
    return moment.date().isoformat()


def provisional_id(prefix: str = 'local') -> str:
    """Generate a client-side id for an entity the server has not confirmed yet."""
    return f'{prefix}-{uuid.uuid4().hex}'


def is_provisional_id(entity_id: str) -> bool:
    return entity_id.startswith('local-')
