"""Focus session state."""

import math
import time
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List

import config

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle state of the focus timer."""
    IDLE = config.STATE_IDLE
    FOCUS = config.STATE_FOCUS
    BREAK = config.STATE_BREAK


@dataclass
class Session:
    """
    A single work/break cycle.

    Holds the countdown plus the settings captured when the session started,
    so edits to the settings file mid-session do not affect it.

    The countdown runs against a deadline on `clock` (monotonic seconds),
    so late or missed ticks never stretch an interval.
    """

    work_minutes: int = config.DEFAULT_WORK_MINUTES
    break_minutes: int = config.DEFAULT_BREAK_MINUTES
    blocked_sites: List[str] = field(default_factory=list)
    auto_close_tabs: bool = False
    state: SessionState = SessionState.IDLE
    remaining_seconds: int = 0
    distraction_count: int = 0
    deadline: float = 0.0
    clock: Callable[[], float] = field(default=time.monotonic, repr=False, compare=False)

    @property
    def is_active(self) -> bool:
        """True while in focus or break."""
        return self.state is not SessionState.IDLE

    def begin_focus(self) -> None:
        """Enter the work interval with a full countdown."""
        self.state = SessionState.FOCUS
        self.remaining_seconds = self.work_minutes * 60
        self.deadline = self.clock() + self.remaining_seconds
        self.distraction_count = 0
        logger.info(f"Focus started: {self.work_minutes}m work / {self.break_minutes}m break")

    def begin_break(self) -> None:
        """Enter the break interval with a full countdown."""
        self.state = SessionState.BREAK
        self.remaining_seconds = self.break_minutes * 60
        self.deadline = self.clock() + self.remaining_seconds
        logger.info(
            f"Break started: {self.break_minutes}m "
            f"({self.distraction_count} distraction(s) during focus)"
        )

    def reset(self) -> None:
        """Return to idle. Safe to call repeatedly."""
        self.state = SessionState.IDLE
        self.remaining_seconds = 0
        self.deadline = 0.0

    def count_down(self) -> bool:
        """
        Recompute the remaining time from the deadline.

        Returns:
            True once the current interval has expired.
        """
        if not self.is_active:
            return False
        self.remaining_seconds = max(0, math.ceil(self.deadline - self.clock()))
        return self.remaining_seconds == 0

    def format_remaining(self) -> str:
        """Remaining time as m:ss."""
        minutes, seconds = divmod(self.remaining_seconds, 60)
        return f"{minutes}:{seconds:02d}"

    def status_text(self) -> str:
        """Label for the status surface (icon + mm:ss, or the ready label)."""
        if not self.is_active:
            return config.STATUS_READY_TEXT
        icon = config.STATUS_ICONS[self.state.value]
        return f"{icon} {self.format_remaining()}"
