"""
Notification queue for ephemeral success/error messages.
"""

import time
from typing import Callable, Dict, List, Optional, Tuple

from ..models.core import Notification, NotificationKind
from ..utils.logging_config import get_logger
from ..utils.scheduler import ScheduledTask, Scheduler
from ..utils.timestamp_utils import to_millis

logger = get_logger(__name__)

NotificationListener = Callable[[Tuple[Notification, ...]], None]


class NotificationQueue:
    """Ordered queue of notifications with per-entry auto-expiry.

    Ids come from the millisecond clock; two appends in the same tick are
    separated by bumping past the last issued id.
    """

    def __init__(self,
                 scheduler: Scheduler,
                 expiry_ms: int = 3000,
                 clock: Callable[[], float] = time.time):
        """
        Args:
            scheduler: Scheduler used for the expiry timers
            expiry_ms: Lifetime of a visible notification in milliseconds
            clock: Time source in seconds
        """
        self._scheduler = scheduler
        self._expiry_seconds = expiry_ms / 1000
        self._clock = clock
        self._items: List[Notification] = []
        self._timers: Dict[int, ScheduledTask] = {}
        self._last_id = 0
        self._listeners: List[NotificationListener] = []

    @property
    def items(self) -> Tuple[Notification, ...]:
        return tuple(self._items)

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.items
        for listener in list(self._listeners):
            listener(snapshot)

    def _next_id(self) -> int:
        candidate = to_millis(self._clock())
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return candidate

    def append(self, message: str, kind: NotificationKind = NotificationKind.SUCCESS) -> Notification:
        """
        Add a notification at the end of the queue.

        Args:
            message: Text shown to the user
            kind: success or error

        Returns:
            The created notification
        """
        notification = Notification(id=self._next_id(), message=message, kind=NotificationKind(kind))
        self._items.append(notification)
        logger.debug(f'Notification {notification.id} ({notification.kind.value}): {message}')
        self._notify()
        return notification

    def success(self, message: str) -> Notification:
        return self.append(message, NotificationKind.SUCCESS)

    def error(self, message: str) -> Notification:
        return self.append(message, NotificationKind.ERROR)

    def mark_visible(self, notification_id: int) -> Optional[ScheduledTask]:
        """
        Start the expiry timer once the notification has actually been shown.

        Marking a removed notification, or one whose timer is already running, is a no-op.

        Returns:
            The expiry task, or None if nothing was scheduled
        """
        if notification_id in self._timers:
            return None
        if not any(n.id == notification_id for n in self._items):
            return None

        task = self._scheduler.schedule(self._expiry_seconds, lambda: self.remove(notification_id))
        self._timers[notification_id] = task
        return task

    def remove(self, notification_id: int) -> bool:
        """
        Remove a notification and cancel its expiry timer. Idempotent.

        Returns:
            True if a notification was removed
        """
        task = self._timers.pop(notification_id, None)
        if task is not None:
            task.cancel()

        for index, notification in enumerate(self._items):
            if notification.id == notification_id:
                del self._items[index]
                self._notify()
                return True
        return False
