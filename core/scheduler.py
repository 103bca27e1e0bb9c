"""
Periodic callback timers for the engine's tick and screen poll.

Each IntervalTimer runs its callback on a daemon thread every `interval`
seconds until cancelled. The callback runs synchronously on that thread,
so a slow callback delays the next one instead of overlapping it.
"""

import logging
import threading
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """Interface shared by all periodic timers used by the engine."""

    def start(self) -> None:
        ...

    def cancel(self) -> None:
        ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


class IntervalTimer:
    """Repeating timer backed by a daemon thread."""

    def __init__(self, interval: float, callback: Callable[[], None], name: Optional[str] = None):
        self.interval = interval
        self.callback = callback
        self.name = name or getattr(callback, "__name__", "interval-timer")
        self._cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_active(self) -> bool:
        """True between start() and cancel()."""
        return self._thread is not None and not self._cancelled.is_set()

    def start(self) -> None:
        """Start firing. Calling start() twice is ignored."""
        if self._thread is not None:
            logger.debug(f"Timer {self.name} already started")
            return
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        """
        Stop firing. Does not wait for an in-flight callback, so it is safe
        to call from inside the callback itself.
        """
        self._cancelled.set()

    def _run(self) -> None:
        while not self._cancelled.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                # A failing callback must not kill the timer
                logger.error(f"Timer {self.name} callback error: {e}", exc_info=True)


def thread_timer_factory(interval: float, callback: Callable[[], None]) -> IntervalTimer:
    """Default TimerFactory used by the engine."""
    return IntervalTimer(interval, callback)
