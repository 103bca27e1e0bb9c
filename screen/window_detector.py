"""
Foreground window detection for screen monitoring.

Reads the frontmost application name and its window title through
AppleScript (System Events). Only macOS is supported; other platforms
report no information.
"""

import sys
import subprocess
import logging
from typing import Optional
from dataclasses import dataclass

import config
from screen.applescript import run_osascript, is_permission_error

logger = logging.getLogger(__name__)

_FRONT_WINDOW_SCRIPT = '''
tell application "System Events"
    set frontApp to first application process whose frontmost is true
    set appName to name of frontApp
    try
        set windowTitle to name of front window of frontApp
    on error
        set windowTitle to ""
    end try
    return appName & "|||" & windowTitle
end tell
'''


@dataclass
class WindowInfo:
    """Snapshot of the currently active window."""
    app_name: str
    window_title: str


class WindowDetector:
    """
    Detector for the active window.

    get_active_window() never raises. On failure it returns None and keeps
    a short description in `last_error` for user-triggered diagnostics.
    """

    def __init__(self):
        """Initialise the window detector for the current platform."""
        self.platform = sys.platform
        self.last_error: Optional[str] = None

    @property
    def is_supported(self) -> bool:
        """True on platforms with a window query implementation."""
        return self.platform == "darwin"

    def get_active_window(self) -> Optional[WindowInfo]:
        """
        Get information about the currently active window.

        Returns:
            WindowInfo, or None if detection fails.
        """
        self.last_error = None
        if not self.is_supported:
            self.last_error = f"Window detection is not supported on {self.platform}"
            logger.debug(self.last_error)
            return None

        try:
            return self._get_active_window_macos()
        except subprocess.TimeoutExpired:
            self.last_error = "Timed out reading the active window"
            logger.warning(self.last_error)
            return None
        except OSError as e:
            self.last_error = f"Could not run osascript: {e}"
            logger.error(self.last_error)
            return None
        except Exception as e:
            self.last_error = f"Unexpected error reading the active window: {e}"
            logger.error(self.last_error)
            return None

    def _get_active_window_macos(self) -> Optional[WindowInfo]:
        """
        Query System Events for the frontmost process and window title.

        Returns:
            WindowInfo or None if AppleScript fails.
        """
        result = run_osascript(_FRONT_WINDOW_SCRIPT, timeout=config.WINDOW_QUERY_TIMEOUT)

        if result.returncode != 0:
            stderr = result.stderr.strip()
            logger.warning(f"AppleScript failed with code {result.returncode}: {stderr}")
            if is_permission_error(stderr):
                self.last_error = "Accessibility/Automation permission is required"
            else:
                self.last_error = f"AppleScript error: {stderr or result.returncode}"
            return None

        output = result.stdout.strip()

        if "|||" in output:
            app_name, window_title = output.split("|||", 1)
        else:
            app_name, window_title = output, ""

        return WindowInfo(app_name=app_name, window_title=window_title)

    def get_permission_instructions(self) -> str:
        """
        Get instructions for enabling screen monitoring permissions.

        Returns:
            Platform-specific instructions string.
        """
        if self.platform == "darwin":
            return (
                "Screen monitoring needs two permissions:\n"
                "1. System Settings → Privacy & Security → Accessibility: enable PomoGuard\n"
                "   (or the terminal you run it from).\n"
                "2. System Settings → Privacy & Security → Automation: allow\n"
                "   'System Events' and your browsers.\n"
                "Restart PomoGuard after enabling them."
            )
        return f"Screen monitoring is not supported on {self.platform}."
