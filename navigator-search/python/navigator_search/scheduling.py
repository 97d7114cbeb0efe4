"""
Debounce scheduling

A ``Debouncer`` keeps at most one evaluation pending. Scheduling while one is
in flight is a no-op; the callback reads whatever state is current when the
timer fires, so the latest value wins.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, Protocol

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Any:
        ...

class AsyncioScheduler:
    """
    Schedules callbacks on an asyncio event loop.

    Without an explicit ``loop`` the running loop is used, so timers must be
    armed from inside a coroutine or callback. Synchronous callers inject
    their own ``Scheduler`` instead.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as e:
                raise ValidationError(
                    "Debounced queries need a running asyncio event loop or an injected scheduler"
                ) from e
        return loop.call_later(delay, callback)

class Debouncer:
    """Trailing-edge debounce with a single in-flight timer"""

    def __init__(self, delay: float, callback: Callable[[], None], scheduler: Optional[Scheduler] = None):
        self.delay = delay
        self.callback = callback
        self.scheduler = scheduler or AsyncioScheduler()
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def schedule(self) -> bool:
        """Arm the timer unless one is already pending; returns True if armed"""
        if self._pending:
            return False
        self.scheduler.call_later(self.delay, self._fire)
        self._pending = True
        logger.debug(f"Debounce timer armed ({self.delay}s)")
        return True

    def _fire(self) -> None:
        try:
            self.callback()
        finally:
            self._pending = False
