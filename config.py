"""Configuration settings for PomoGuard."""

import os
import sys
from pathlib import Path
from dotenv import load_dotenv


def is_bundled() -> bool:
    """
    Check if the application is running from a PyInstaller bundle.

    Returns:
        True if running from a bundled executable, False otherwise.
    """
    return getattr(sys, 'frozen', False) and hasattr(sys, '_MEIPASS')


def get_base_dir() -> Path:
    """
    Get the base directory for bundled resources.

    Returns:
        _MEIPASS when bundled, otherwise the directory containing this file.
    """
    if is_bundled():
        meipass = getattr(sys, '_MEIPASS', None)
        if meipass:
            return Path(meipass)
    return Path(__file__).parent


def get_user_data_dir() -> Path:
    """
    Get the directory for user-writable data (settings).

    For development: BASE_DIR/data
    For bundled apps: a per-user folder that survives updates.

    Returns:
        Path to the user data directory.
    """
    if not is_bundled():
        return Path(__file__).parent / "data"

    if sys.platform == 'darwin':
        data_dir = Path.home() / "Library" / "Application Support" / "PomoGuard"
    elif sys.platform == 'win32':
        appdata = os.environ.get('APPDATA')
        if appdata:
            data_dir = Path(appdata) / "PomoGuard"
        else:
            data_dir = Path.home() / "AppData" / "Roaming" / "PomoGuard"
    else:
        data_dir = Path.home() / ".local" / "share" / "PomoGuard"

    try:
        data_dir.mkdir(parents=True, exist_ok=True)
    except Exception:
        data_dir = Path.home() / ".pomoguard"
        data_dir.mkdir(parents=True, exist_ok=True)

    return data_dir


def _get_int_env(name: str, default: int) -> int:
    """Read an integer from the environment, falling back on bad values."""
    value = os.getenv(name, "")
    if not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        import logging
        logging.getLogger(__name__).warning(
            f"{name}={value!r} is not an integer, using {default}"
        )
        return default


def _get_bool_env(name: str, default: bool) -> bool:
    """Read a boolean flag from the environment."""
    value = os.getenv(name, "")
    if not value.strip():
        return default
    return value.strip().lower() in ("true", "1", "yes", "on")


def _get_list_env(name: str) -> list:
    """Read a comma-separated list from the environment."""
    value = os.getenv(name, "")
    return [item.strip() for item in value.split(",") if item.strip()]


# Load environment variables from .env file (only in development)
if not is_bundled():
    _env_path = Path(__file__).parent / ".env"
    load_dotenv(_env_path)

BASE_DIR = get_base_dir()
USER_DATA_DIR = get_user_data_dir()

APP_NAME = "PomoGuard"

# Persisted user settings (workTime, breakTime, blockedSites, autoCloseTabs)
SETTINGS_FILE = USER_DATA_DIR / "settings.json"

# Defaults used when the settings file has no value
DEFAULT_WORK_MINUTES = _get_int_env("WORK_TIME", 25)
DEFAULT_BREAK_MINUTES = _get_int_env("BREAK_TIME", 5)
DEFAULT_BLOCKED_SITES = _get_list_env("BLOCKED_SITES")
DEFAULT_AUTO_CLOSE_TABS = _get_bool_env("AUTO_CLOSE_TABS", False)

# Accepted duration range (minutes, inclusive upper bound)
MAX_WORK_MINUTES = 180
MAX_BREAK_MINUTES = 60

# Timer periods (seconds)
TICK_INTERVAL = 1
SCREEN_CHECK_INTERVAL = 3

# Session states
STATE_IDLE = "idle"
STATE_FOCUS = "focus"
STATE_BREAK = "break"

# Status bar icons per state
STATUS_ICONS = {
    STATE_IDLE: "🍅",
    STATE_FOCUS: "🍅",
    STATE_BREAK: "☕",
}
STATUS_READY_TEXT = "🍅 Ready"

# Substrings identifying browser processes (matched case-insensitively)
KNOWN_BROWSERS = (
    "chrome",
    "chromium",
    "safari",
    "firefox",
    "microsoft edge",
    "brave",
    "opera",
    "vivaldi",
)

# Scriptable browsers on macOS, grouped by AppleScript dialect
TAB_CLOSER_BROWSERS = {
    "Google Chrome": "chromium",
    "Brave Browser": "chromium",
    "Microsoft Edge": "chromium",
    "Vivaldi": "chromium",
    "Safari": "safari",
}

# AppleScript subprocess timeouts (seconds)
WINDOW_QUERY_TIMEOUT = 2
TAB_CLOSE_TIMEOUT = 10

# Native distraction alert, auto-dismissed after this many seconds
ALERT_DISMISS_SECONDS = 8

# Distraction alerts, one picked at random per detection.
# Each tuple: (title, message)
DISTRACTION_ALERTS = [
    ("Caught you!", "That tab is not going to finish your work for you."),
    ("Focus time", "The tomato is still ticking. Back to it!"),
    ("Hey there", "This site can wait until your break."),
    ("Gentle nudge", "You asked us to keep you away from this one."),
    ("Almost there", "Stay with it, the break is coming soon."),
]

# Choices offered when auto-close is off
ACTION_CLOSE_TABS = "Close Tabs"
ACTION_BACK_TO_WORK = "Back to Work"
ACTION_IGNORE = "Ignore"
DISTRACTION_ACTIONS = [ACTION_CLOSE_TABS, ACTION_BACK_TO_WORK, ACTION_IGNORE]

ACTION_START_NEW = "Start New Session"
ACTION_NOT_NOW = "Not Now"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")  # Can override in .env: DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
