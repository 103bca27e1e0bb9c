"""
Close browser tabs whose URL or title matches the blocklist.

macOS only. Each scriptable browser is handled with its own AppleScript
call; results are summed and a failure in one browser does not stop the
others. Browsers that are not running are skipped so they are never
launched by the script.
"""

import sys
import subprocess
import logging
from typing import Dict, List, Optional

import config
from screen.applescript import run_osascript, is_permission_error, quote, contains_any

logger = logging.getLogger(__name__)


class TabCloseError(Exception):
    """Raised when no browser tabs could be closed because of a failure."""


# Tab property holding the page title, per AppleScript dialect
_TITLE_PROPERTY = {
    "chromium": "title",
    "safari": "name",
}


def build_close_script(browser: str, dialect: str, patterns: List[str]) -> str:
    """
    Build the AppleScript that closes matching tabs in one browser.

    Tabs are walked back to front so closing one does not shift the
    indices of those still to be visited. The script returns the count.
    """
    title_property = _TITLE_PROPERTY[dialect]
    condition = contains_any(["tabUrl", "tabTitle"], patterns)
    return f'''
tell application {quote(browser)}
    set closedCount to 0
    repeat with w in windows
        repeat with i from (count of tabs of w) to 1 by -1
            set t to tab i of w
            set tabUrl to ""
            set tabTitle to ""
            try
                set tabUrl to URL of t
                set tabTitle to {title_property} of t
            end try
            if {condition} then
                close t
                set closedCount to closedCount + 1
            end if
        end repeat
    end repeat
    return closedCount
end tell
'''


class TabCloser:
    """Closes blocked tabs in every running scriptable browser."""

    def __init__(self, browsers: Optional[Dict[str, str]] = None):
        """
        Args:
            browsers: Mapping of application name to AppleScript dialect.
                Defaults to config.TAB_CLOSER_BROWSERS.
        """
        self.platform = sys.platform
        self.browsers = browsers if browsers is not None else dict(config.TAB_CLOSER_BROWSERS)

    @property
    def is_supported(self) -> bool:
        return self.platform == "darwin"

    def close_tabs(self, blocked_sites: List[str]) -> int:
        """
        Close every tab matching any blocked site.

        Args:
            blocked_sites: Case-insensitive substrings of URLs or titles.

        Returns:
            Total number of tabs closed across browsers.

        Raises:
            TabCloseError: Unsupported platform, or every running browser failed.
        """
        if not self.is_supported:
            raise TabCloseError(f"Closing tabs is not supported on {self.platform}")

        patterns = [site for site in blocked_sites if site]
        if not patterns:
            return 0

        total = 0
        succeeded = 0
        errors = []

        for browser, dialect in self.browsers.items():
            try:
                if not self._is_running(browser):
                    continue
                closed = self._close_in_browser(browser, dialect, patterns)
                total += closed
                succeeded += 1
                if closed:
                    logger.info(f"Closed {closed} tab(s) in {browser}")
            except TabCloseError as e:
                logger.warning(f"{browser}: {e}")
                errors.append(f"{browser}: {e}")
            except (subprocess.TimeoutExpired, OSError) as e:
                logger.warning(f"{browser}: could not run AppleScript: {e}")
                errors.append(f"{browser}: {e}")

        if errors and not succeeded:
            raise TabCloseError("; ".join(errors))

        return total

    def _is_running(self, browser: str) -> bool:
        """Check whether a browser is running without launching it."""
        result = run_osascript(
            f"return application {quote(browser)} is running",
            timeout=config.WINDOW_QUERY_TIMEOUT,
        )
        if result.returncode != 0:
            logger.debug(f"Could not check if {browser} is running: {result.stderr.strip()}")
            return False
        return result.stdout.strip().lower() == "true"

    def _close_in_browser(self, browser: str, dialect: str, patterns: List[str]) -> int:
        """Run the close script for one browser and parse the count."""
        script = build_close_script(browser, dialect, patterns)
        result = run_osascript(script, timeout=config.TAB_CLOSE_TIMEOUT)

        if result.returncode != 0:
            stderr = result.stderr.strip()
            if is_permission_error(stderr):
                raise TabCloseError(f"Automation permission for {browser} is required")
            raise TabCloseError(f"AppleScript failed: {stderr or result.returncode}")

        try:
            return int(result.stdout.strip() or 0)
        except ValueError:
            raise TabCloseError(f"Unexpected AppleScript output: {result.stdout.strip()!r}")
