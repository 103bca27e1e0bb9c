"""
SessionEngine: focus timer and distraction monitor for PomoGuard.

Owns the work/break state machine, the 1-second countdown tick and the
3-second screen poll. Has zero UI dependencies: hosts pass in a Notifier
(menu bar, tray, console) and optionally a timer factory and clock.

Both periodic callbacks share the engine's Session. The countdown follows a
monotonic deadline, so a slow or blocked callback never loses time. State
changes happen under a re-entrant lock that is never held across external
calls (window inspection, tab closing, dialogs). Status labels are pushed
while it is held. Every continuation after an external call re-checks the
session generation and drops stale results.
"""

import time
import random
import threading
import logging
from typing import Callable, Dict, List, Optional

import config
from core.notifier import Notifier, ConsoleNotifier
from core.scheduler import TimerFactory, TimerHandle, thread_timer_factory
from core.settings import SettingsManager
from tracking.session import Session, SessionState
from screen.blocklist import Blocklist
from screen.window_detector import WindowDetector
from screen.tab_closer import TabCloser

logger = logging.getLogger(__name__)


def validate_durations(work_minutes, break_minutes) -> Optional[str]:
    """
    Check work/break durations.

    Returns:
        A user-facing error message, or None if both are valid.
    """
    checks = (
        ("Work", work_minutes, config.MAX_WORK_MINUTES),
        ("Break", break_minutes, config.MAX_BREAK_MINUTES),
    )
    for label, value, limit in checks:
        if not isinstance(value, int) or isinstance(value, bool):
            return f"{label} duration must be a whole number of minutes."
        if value <= 0 or value > limit:
            return f"{label} duration must be between 1 and {limit} minutes."
    return None


def parse_minutes(text: Optional[str]) -> Optional[int]:
    """Parse user input like " 25 " into an int, or None if not a number."""
    if text is None:
        return None
    try:
        return int(text.strip())
    except ValueError:
        return None


class SessionEngine:
    """
    Core focus session engine.

    Handles:
    - Session lifecycle (start, custom start, stop)
    - Countdown tick and focus → break → idle transitions
    - Screen distraction polling during focus
    - Manual diagnostics (check screen, close tabs now)
    """

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        settings_manager: Optional[SettingsManager] = None,
        window_detector: Optional[WindowDetector] = None,
        tab_closer: Optional[TabCloser] = None,
        timer_factory: Optional[TimerFactory] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        """Initialise the engine in the idle state."""
        self.notifier: Notifier = notifier or ConsoleNotifier()
        self.settings_manager = settings_manager or SettingsManager()
        self.window_detector = window_detector or WindowDetector()
        self.tab_closer = tab_closer or TabCloser()
        self._timer_factory: TimerFactory = timer_factory or thread_timer_factory
        self._clock = clock or time.monotonic

        self.session: Session = Session(clock=self._clock)

        self._tick_timer: Optional[TimerHandle] = None
        self._monitor_timer: Optional[TimerHandle] = None

        # Bumped on every start/stop; continuations compare against it
        self._generation: int = 0
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def is_running(self) -> bool:
        return self.session.is_active

    @property
    def has_tick_timer(self) -> bool:
        return self._tick_timer is not None

    @property
    def has_monitor_timer(self) -> bool:
        return self._monitor_timer is not None

    def start_session(
        self,
        work_minutes: Optional[int] = None,
        break_minutes: Optional[int] = None,
    ) -> Dict:
        """
        Start a new focus session.

        Args:
            work_minutes: Work interval; configured workTime if None.
            break_minutes: Break interval; configured breakTime if None.

        Returns:
            {"success": bool, "error": str | None, "error_type": str | None}
            error_type values: "already_running", "invalid_duration"
        """
        with self._lock:
            if self.session.is_active:
                error = "Timer already running!"
                error_type = "already_running"
            else:
                settings = self.settings_manager.load()
                if work_minutes is None:
                    work_minutes = settings.work_time
                if break_minutes is None:
                    break_minutes = settings.break_time

                error = validate_durations(work_minutes, break_minutes)
                error_type = "invalid_duration" if error else None

                if not error:
                    self.session = Session(
                        work_minutes=work_minutes,
                        break_minutes=break_minutes,
                        blocked_sites=list(settings.blocked_sites),
                        auto_close_tabs=settings.auto_close_tabs,
                        clock=self._clock,
                    )
                    self.session.begin_focus()
                    self._generation += 1
                    self._start_tick_timer()
                    self._start_monitor_timer()
                    self._notify_status_change(config.STATE_FOCUS, self.session.status_text())

        if error_type == "already_running":
            logger.info("Start ignored: session already running")
            self._notify("warning", error)
            return {"success": False, "error": error, "error_type": error_type}
        if error:
            logger.info(f"Start rejected: {error}")
            self._notify("error", error)
            return {"success": False, "error": error, "error_type": error_type}

        self._notify("info", f"🍅 Focus started! {work_minutes} minutes of focus time.")
        return {"success": True, "error": None, "error_type": None}

    def start_custom_session(self) -> Dict:
        """
        Prompt for work and break durations, then start a session.

        Returns:
            Same shape as start_session(); error_type may also be "cancelled".
        """
        if self.is_running:
            return self.start_session()

        settings = self.settings_manager.load()

        work_text = self._prompt(
            f"Work duration in minutes (1-{config.MAX_WORK_MINUTES})",
            str(settings.work_time),
        )
        if work_text is None:
            return {"success": False, "error": None, "error_type": "cancelled"}

        break_text = self._prompt(
            f"Break duration in minutes (1-{config.MAX_BREAK_MINUTES})",
            str(settings.break_time),
        )
        if break_text is None:
            return {"success": False, "error": None, "error_type": "cancelled"}

        work_minutes = parse_minutes(work_text)
        break_minutes = parse_minutes(break_text)
        if work_minutes is None or break_minutes is None:
            error = "Please enter whole numbers of minutes."
            self._notify("error", error)
            return {"success": False, "error": error, "error_type": "invalid_duration"}

        return self.start_session(work_minutes, break_minutes)

    def stop_session(self, user_initiated: bool = True) -> Dict:
        """
        Stop the current session. Does nothing when already idle.

        Args:
            user_initiated: Show "Timer stopped." when True.

        Returns:
            {"success": bool}
        """
        with self._lock:
            if not self.session.is_active:
                return {"success": False}
            self._end_session_locked()
            self._notify_status_change(config.STATE_IDLE, config.STATUS_READY_TEXT)

        if user_initiated:
            self._notify("info", "Timer stopped.")
        logger.info("Session stopped")
        return {"success": True}

    def tick(self) -> None:
        """
        Refresh the countdown from the session deadline (tick timer callback).

        Focus expiry moves to the break; break expiry ends the session and
        offers to start another with the same durations.
        """
        transition = None
        with self._lock:
            if not self.session.is_active:
                return

            expired = self.session.count_down()
            work_minutes = self.session.work_minutes
            break_minutes = self.session.break_minutes

            if expired and self.session.state is SessionState.FOCUS:
                self._cancel_monitor_timer()
                self.session.begin_break()
                self._cancel_tick_timer()
                self._start_tick_timer()
                transition = "break"
            elif expired:
                self._end_session_locked()
                transition = "done"

            self._notify_status_change(self.session.state.value, self.session.status_text())

        if transition == "break":
            self._notify("info", f"🎉 Time's up! Take a {break_minutes} minute break.")
        elif transition == "done":
            logger.info("Break finished, session complete")
            choice = self._ask(
                "☕ Break over! Ready to work again?",
                [config.ACTION_START_NEW, config.ACTION_NOT_NOW],
            )
            if choice == config.ACTION_START_NEW:
                self.start_session(work_minutes, break_minutes)

    def poll_screen(self) -> None:
        """
        Check the foreground window for distractions (monitor timer callback).

        No-op outside focus. Inspection failures are skipped silently.
        """
        with self._lock:
            if self.session.state is not SessionState.FOCUS:
                return
            generation = self._generation
            blocklist = Blocklist(self.session.blocked_sites)
            auto_close = self.session.auto_close_tabs

        if not blocklist:
            return

        try:
            window = self.window_detector.get_active_window()
        except Exception as e:
            logger.debug(f"Window inspection failed: {e}")
            return
        if window is None:
            logger.debug("No window information this cycle")
            return

        is_distracted, match = blocklist.check_distraction(window.app_name, window.window_title)
        if not is_distracted:
            return

        with self._lock:
            if not self._is_current(generation):
                logger.debug("Session changed during inspection, discarding result")
                return
            self.session.distraction_count += 1

        logger.info(f"Distraction: '{match}' in {window.app_name}")
        title, message = random.choice(config.DISTRACTION_ALERTS)

        if auto_close:
            self._alert(title, f"{message}\n\n{match} is on your blocklist. Closing it now.")
            if not self._is_current(generation):
                return
            self._close_tabs(blocklist.sites, user_initiated=False, generation=generation)
        else:
            choice = self._ask(
                f"{title} {message}\n\n{match} is on your blocklist.",
                list(config.DISTRACTION_ACTIONS),
            )
            if choice == config.ACTION_CLOSE_TABS and self._is_current(generation):
                self._close_tabs(blocklist.sites, user_initiated=True, generation=generation)

    def check_screen_now(self) -> Dict:
        """
        Inspect and classify the active window once, regardless of state.

        Returns:
            {"success": bool, "app_name", "window_title", "is_distracted", "match"}
        """
        try:
            window = self.window_detector.get_active_window()
        except Exception as e:
            logger.warning(f"Window inspection failed: {e}")
            window = None

        if window is None:
            reason = self.window_detector.last_error or "Could not detect the active window."
            self._notify(
                "warning",
                f"{reason}\n\n{self.window_detector.get_permission_instructions()}",
            )
            return {"success": False, "app_name": None, "window_title": None,
                    "is_distracted": False, "match": None}

        blocklist = self._current_blocklist()
        is_distracted, match = blocklist.check_distraction(window.app_name, window.window_title)

        verdict = f"Distracting (matches '{match}')" if is_distracted else "Not distracting"
        self._notify(
            "info",
            f"App: {window.app_name}\n"
            f"Window: {window.window_title or '(no title)'}\n"
            f"{verdict}",
        )
        return {
            "success": True,
            "app_name": window.app_name,
            "window_title": window.window_title,
            "is_distracted": is_distracted,
            "match": match,
        }

    def close_tabs_now(self) -> Dict:
        """
        Close blocked tabs immediately.

        Returns:
            {"success": bool, "closed": int, "error_type": str | None}
        """
        blocklist = self._current_blocklist()
        if not blocklist:
            self._notify(
                "warning",
                f"No blocked sites configured. Add some to blockedSites in {self.settings_manager.settings_path}.",
            )
            return {"success": False, "closed": 0, "error_type": "empty_blocklist"}

        closed = self._close_tabs(blocklist.sites, user_initiated=True)
        if closed is None:
            return {"success": False, "closed": 0, "error_type": "tab_close_failed"}
        return {"success": True, "closed": closed, "error_type": None}

    def get_status(self) -> Dict:
        """
        Get current engine status (for hosts that poll).

        Returns:
            dict with keys: is_running, state, remaining_seconds, display,
            work_minutes, break_minutes, distraction_count.
        """
        with self._lock:
            return {
                "is_running": self.session.is_active,
                "state": self.session.state.value,
                "remaining_seconds": self.session.remaining_seconds,
                "display": self.session.status_text(),
                "work_minutes": self.session.work_minutes,
                "break_minutes": self.session.break_minutes,
                "distraction_count": self.session.distraction_count,
            }

    def cleanup(self) -> None:
        """Clean up resources. Call before app quit."""
        if self.is_running:
            self.stop_session(user_initiated=False)
        logger.info("Engine cleanup complete")

    # ------------------------------------------------------------------
    # Session helpers
    # ------------------------------------------------------------------

    def _end_session_locked(self) -> None:
        """Cancel both timers and return to idle. Caller holds the lock."""
        self._cancel_tick_timer()
        self._cancel_monitor_timer()
        self.session.reset()
        self._generation += 1

    def _is_current(self, generation: int) -> bool:
        """True if the session captured at `generation` is still in focus."""
        with self._lock:
            return generation == self._generation and self.session.state is SessionState.FOCUS

    def _current_blocklist(self) -> Blocklist:
        """Active session's blocklist, or the configured one when idle."""
        with self._lock:
            if self.session.is_active:
                return Blocklist(self.session.blocked_sites)
        return Blocklist(self.settings_manager.load().blocked_sites)

    def _close_tabs(
        self,
        sites: List[str],
        user_initiated: bool,
        generation: Optional[int] = None,
    ) -> Optional[int]:
        """
        Run the tab closer and report the count.

        Failures are logged, and shown to the user only when they asked for
        the action.

        Returns:
            Number of tabs closed, or None on failure.
        """
        try:
            closed = self.tab_closer.close_tabs(sites)
        except Exception as e:
            logger.warning(f"Closing tabs failed: {e}")
            if user_initiated:
                self._notify("warning", f"Could not close tabs: {e}")
            return None

        if generation is not None and not self._is_current(generation):
            logger.debug(f"Closed {closed} tab(s) after the session changed, not reporting")
            return closed

        self._notify("info", f"Closed {closed} distracting tab(s).")
        return closed

    # ------------------------------------------------------------------
    # Timer management (caller holds the lock)
    # ------------------------------------------------------------------

    def _start_tick_timer(self) -> None:
        self._tick_timer = self._timer_factory(config.TICK_INTERVAL, self.tick)
        self._tick_timer.start()

    def _start_monitor_timer(self) -> None:
        self._monitor_timer = self._timer_factory(config.SCREEN_CHECK_INTERVAL, self.poll_screen)
        self._monitor_timer.start()

    def _cancel_tick_timer(self) -> None:
        if self._tick_timer is not None:
            self._tick_timer.cancel()
            self._tick_timer = None

    def _cancel_monitor_timer(self) -> None:
        if self._monitor_timer is not None:
            self._monitor_timer.cancel()
            self._monitor_timer = None

    # ------------------------------------------------------------------
    # Notifier wrappers (a broken UI must not break the timer)
    # ------------------------------------------------------------------

    def _notify_status_change(self, status: str, text: str) -> None:
        """
        Push the status label. Caller holds the lock, so a label never
        overtakes the state change that produced it.
        """
        try:
            self.notifier.set_status(status, text)
        except Exception as e:
            logger.debug(f"set_status error: {e}")

    def _notify(self, level: str, message: str) -> None:
        """Call notifier.info / warning / error."""
        try:
            getattr(self.notifier, level)(message)
        except Exception as e:
            logger.debug(f"Notifier {level} error: {e}")

    def _ask(self, message: str, actions: List[str]) -> Optional[str]:
        try:
            return self.notifier.ask(message, actions)
        except Exception as e:
            logger.debug(f"Notifier ask error: {e}")
            return None

    def _alert(self, title: str, message: str) -> None:
        try:
            self.notifier.alert(title, message)
        except Exception as e:
            logger.debug(f"Notifier alert error: {e}")

    def _prompt(self, message: str, default: str) -> Optional[str]:
        try:
            return self.notifier.prompt(message, default)
        except Exception as e:
            logger.debug(f"Notifier prompt error: {e}")
            return None
