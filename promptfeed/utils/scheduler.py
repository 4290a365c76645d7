"""
Cancellable scheduled tasks on top of the asyncio event loop.
"""

import asyncio
from typing import Callable, Optional

from .logging_config import get_logger

logger = get_logger(__name__)


class ScheduledTask:
    """A single delayed callback that can be cancelled at most once."""

    def __init__(self, callback: Callable[[], None]):
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self.cancelled = False
        self.fired = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        """Cancel the task. Cancelling a fired or already cancelled task is a no-op."""
        if not self.pending:
            return
        self.cancelled = True
        if self._handle is not None:
            self._handle.cancel()

    def run(self) -> None:
        """Invoke the callback unless the task was cancelled or already fired."""
        if not self.pending:
            return
        self.fired = True
        try:
            self._callback()
        except Exception as e:
            logger.error(f'Scheduled callback failed: {e}')
            raise


class Scheduler:
    """Schedules callbacks on an event loop with per-task cancellation."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Args:
            loop: Event loop to schedule on (defaults to the running loop at schedule time)
        """
        self._loop = loop

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledTask:
        """
        Run callback after delay_seconds.

        Args:
            delay_seconds: Delay before the callback fires
            callback: Zero-argument callable

        Returns:
            ScheduledTask handle for cancellation
        """
        loop = self._loop or asyncio.get_running_loop()
        task = ScheduledTask(callback)
        task._handle = loop.call_later(delay_seconds, task.run)
        return task
