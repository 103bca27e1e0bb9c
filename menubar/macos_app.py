"""
PomoGuard macOS menu bar application using rumps.

The menu bar title shows the countdown (🍅 24:59 / ☕ 4:59). Session
controls, diagnostics and settings live in the dropdown menu. Engine
timers run on worker threads, so a modal dialog on the main thread never
stalls the countdown. Every AppKit call is handed to the main thread with
PyObjCTools.AppHelper.callAfter.
"""

import subprocess
import logging
import threading
from typing import Any, Callable, List, Optional

import rumps
from PyObjCTools import AppHelper

import config
from core.engine import SessionEngine
from core.settings import SettingsManager
from screen.applescript import run_osascript, quote

logger = logging.getLogger(__name__)


def _on_main_thread(func: Callable[..., Any], *args, wait: bool = False) -> Any:
    """
    Run func on the AppKit main thread.

    Called from the main thread it runs inline. From a worker thread it is
    queued with callAfter; with wait=True the caller blocks for the result
    and any exception is re-raised in the caller.
    """
    if threading.current_thread() is threading.main_thread():
        return func(*args)

    if not wait:
        AppHelper.callAfter(func, *args)
        return None

    done = threading.Event()
    outcome = {}

    def run() -> None:
        try:
            outcome["result"] = func(*args)
        except Exception as e:
            outcome["error"] = e
        finally:
            done.set()

    AppHelper.callAfter(run)
    done.wait()
    if "error" in outcome:
        raise outcome["error"]
    return outcome.get("result")


class PomoGuardMenuBar(rumps.App):
    """macOS menu bar application for PomoGuard. Also the engine's Notifier."""

    def __init__(self) -> None:
        """Initialise the menu bar app and engine."""
        super().__init__(
            name=config.APP_NAME,
            title=config.STATUS_READY_TEXT,
            quit_button=None,
        )

        self.settings_manager = SettingsManager()
        self.engine = SessionEngine(notifier=self, settings_manager=self.settings_manager)

        # Status display (non-clickable)
        self.status_item = rumps.MenuItem("Ready to start")
        self.status_item.set_callback(None)

        # Session controls
        self.start_item = rumps.MenuItem("Start Focus Session", callback=self._start)
        self.custom_item = rumps.MenuItem("Start Custom Session…", callback=self._start_custom)
        self.stop_item = rumps.MenuItem("Stop", callback=None)

        # Screen tools
        self.check_item = rumps.MenuItem("Check Screen Now", callback=self._check_screen)
        self.close_tabs_item = rumps.MenuItem("Close Distracting Tabs Now", callback=self._close_tabs)

        # Settings
        self.auto_close_item = rumps.MenuItem("Auto-close Distracting Tabs", callback=self._toggle_auto_close)
        self.auto_close_item.state = 1 if self.settings_manager.load().auto_close_tabs else 0
        self.settings_item = rumps.MenuItem("Edit Settings…", callback=self._edit_settings)

        self.quit_item = rumps.MenuItem("Quit PomoGuard", callback=self._quit_app)

        self.menu = [
            self.status_item,
            None,
            self.start_item,
            self.custom_item,
            self.stop_item,
            None,
            self.check_item,
            self.close_tabs_item,
            None,
            self.auto_close_item,
            self.settings_item,
            None,
            self.quit_item,
        ]

    # ------------------------------------------------------------------
    # Session controls
    # ------------------------------------------------------------------

    def _start(self, sender) -> None:
        self.engine.start_session()

    def _start_custom(self, sender) -> None:
        self.engine.start_custom_session()

    def _stop(self, sender) -> None:
        self.engine.stop_session()

    def _check_screen(self, sender) -> None:
        self.engine.check_screen_now()

    def _close_tabs(self, sender) -> None:
        self.engine.close_tabs_now()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def _toggle_auto_close(self, sender) -> None:
        """Flip the autoCloseTabs setting (applies from the next session)."""
        settings = self.settings_manager.set_auto_close_tabs(not sender.state)
        sender.state = 1 if settings.auto_close_tabs else 0

    def _edit_settings(self, sender) -> None:
        """Open settings.json in the default text editor."""
        path = self.settings_manager.ensure_file()
        try:
            subprocess.run(["open", "-t", str(path)], check=True, timeout=10)
            logger.info(f"Opened settings: {path}")
        except (subprocess.SubprocessError, OSError) as e:
            logger.error(f"Failed to open settings file: {e}")
            rumps.alert(title=config.APP_NAME, message=f"Settings file: {path}")

    # ------------------------------------------------------------------
    # Notifier (may be called from engine worker threads)
    # ------------------------------------------------------------------

    def set_status(self, status: str, text: str) -> None:
        _on_main_thread(self._apply_status, status, text)

    def info(self, message: str) -> None:
        _on_main_thread(self._show_notification, "", message)

    def warning(self, message: str) -> None:
        _on_main_thread(self._show_alert, config.APP_NAME, message)

    def error(self, message: str) -> None:
        _on_main_thread(self._show_alert, f"{config.APP_NAME} Error", message)

    def ask(self, message: str, actions: List[str]) -> Optional[str]:
        return _on_main_thread(self._show_choice, message, actions, wait=True)

    def alert(self, title: str, message: str) -> None:
        """
        Native alert that gives up after config.ALERT_DISMISS_SECONDS.

        osascript shows it from its own process, so the calling thread
        waits here and the main thread stays free.
        """
        script = (
            f"display alert {quote(title)} message {quote(message)} "
            f"as warning giving up after {config.ALERT_DISMISS_SECONDS}"
        )
        try:
            run_osascript(script, timeout=config.ALERT_DISMISS_SECONDS + 5)
        except (subprocess.TimeoutExpired, OSError) as e:
            logger.warning(f"Native alert failed, using notification: {e}")
            _on_main_thread(self._show_notification, title, message)

    def prompt(self, message: str, default: str = "") -> Optional[str]:
        return _on_main_thread(self._show_prompt, message, default, wait=True)

    # ------------------------------------------------------------------
    # AppKit helpers (main thread only)
    # ------------------------------------------------------------------

    def _apply_status(self, status: str, text: str) -> None:
        """Update the menu bar title and enable the matching controls."""
        self.title = text
        running = status != config.STATE_IDLE
        labels = {
            config.STATE_IDLE: "Ready to start",
            config.STATE_FOCUS: "Focussing",
            config.STATE_BREAK: "On a break",
        }
        self.status_item.title = labels.get(status, "Ready to start")
        self.start_item.set_callback(None if running else self._start)
        self.custom_item.set_callback(None if running else self._start_custom)
        self.stop_item.set_callback(self._stop if running else None)

    def _show_notification(self, subtitle: str, message: str) -> None:
        rumps.notification(title=config.APP_NAME, subtitle=subtitle, message=message)

    def _show_alert(self, title: str, message: str) -> None:
        rumps.alert(title=title, message=message)

    def _show_choice(self, message: str, actions: List[str]) -> Optional[str]:
        """Modal alert with up to three buttons (ok / cancel / other)."""
        buttons = list(actions[:3])
        clicked = rumps.alert(
            title=config.APP_NAME,
            message=message,
            ok=buttons[0] if buttons else None,
            cancel=buttons[1] if len(buttons) > 1 else None,
            other=buttons[2] if len(buttons) > 2 else None,
        )
        # rumps returns 1 for ok, 0 for cancel, -1 for other
        index = {1: 0, 0: 1, -1: 2}.get(clicked)
        if index is None or index >= len(buttons):
            return None
        return buttons[index]

    def _show_prompt(self, message: str, default: str) -> Optional[str]:
        window = rumps.Window(
            message=message,
            title=config.APP_NAME,
            default_text=default,
            ok="OK",
            cancel="Cancel",
            dimensions=(220, 24),
        )
        response = window.run()
        if not response.clicked:
            return None
        return response.text

    # ------------------------------------------------------------------
    # Quit
    # ------------------------------------------------------------------

    def _quit_app(self, sender) -> None:
        """Clean up and quit."""
        self.engine.cleanup()
        rumps.quit_application()
