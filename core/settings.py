"""
Persistence of user settings (durations, blocked sites, auto-close flag).

Stored as JSON using the same camelCase keys the user edits:
    {"workTime": 25, "breakTime": 5, "blockedSites": [], "autoCloseTabs": false}
"""

import json
import os
import tempfile
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import config
from screen.blocklist import normalize_sites

logger = logging.getLogger(__name__)


@dataclass
class FocusSettings:
    """User-configurable settings, read by the engine at session start."""

    work_time: int = config.DEFAULT_WORK_MINUTES
    break_time: int = config.DEFAULT_BREAK_MINUTES
    blocked_sites: List[str] = field(default_factory=lambda: list(config.DEFAULT_BLOCKED_SITES))
    auto_close_tabs: bool = config.DEFAULT_AUTO_CLOSE_TABS

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert settings to a dictionary for JSON serialization.

        Returns:
            Dictionary using the persisted camelCase keys.
        """
        return {
            "workTime": self.work_time,
            "breakTime": self.break_time,
            "blockedSites": list(self.blocked_sites),
            "autoCloseTabs": self.auto_close_tabs,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FocusSettings':
        """
        Create settings from a dictionary, keeping defaults for missing or
        malformed values.

        Args:
            data: Parsed JSON object.

        Returns:
            New FocusSettings instance
        """
        defaults = cls()

        work_time = data.get("workTime", defaults.work_time)
        if not _is_positive_int(work_time):
            logger.warning(f"Invalid workTime {work_time!r}, using {defaults.work_time}")
            work_time = defaults.work_time

        break_time = data.get("breakTime", defaults.break_time)
        if not _is_positive_int(break_time):
            logger.warning(f"Invalid breakTime {break_time!r}, using {defaults.break_time}")
            break_time = defaults.break_time

        blocked_sites = data.get("blockedSites", defaults.blocked_sites)
        if not isinstance(blocked_sites, list):
            logger.warning("blockedSites must be a list, using defaults")
            blocked_sites = defaults.blocked_sites

        auto_close = data.get("autoCloseTabs", defaults.auto_close_tabs)
        if not isinstance(auto_close, bool):
            logger.warning(f"Invalid autoCloseTabs {auto_close!r}, using {defaults.auto_close_tabs}")
            auto_close = defaults.auto_close_tabs

        return cls(
            work_time=work_time,
            break_time=break_time,
            blocked_sites=normalize_sites(blocked_sites),
            auto_close_tabs=auto_close,
        )


def _is_positive_int(value: Any) -> bool:
    # bool is an int subclass; reject it explicitly
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class SettingsManager:
    """
    Loads and saves FocusSettings.

    load() re-reads the file every call so a session started after the user
    edits settings.json picks up the change.
    """

    def __init__(self, settings_path: Optional[Path] = None):
        """
        Args:
            settings_path: Path to the JSON settings file.
        """
        self.settings_path = settings_path or config.SETTINGS_FILE

    def load(self) -> FocusSettings:
        """
        Load settings from file, or defaults if missing or invalid.

        Returns:
            FocusSettings instance
        """
        if not self.settings_path.exists():
            return FocusSettings()

        try:
            with open(self.settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("settings file must contain a JSON object")
            return FocusSettings.from_dict(data)
        except (json.JSONDecodeError, ValueError, IOError, OSError) as e:
            logger.warning(f"Invalid settings file {self.settings_path}, using defaults: {e}")
            return FocusSettings()

    def save(self, settings: FocusSettings) -> bool:
        """
        Save settings atomically (temp file, then rename).

        Args:
            settings: Settings to persist.

        Returns:
            True if saved successfully, False otherwise
        """
        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)

            temp_fd, temp_path = tempfile.mkstemp(
                suffix='.tmp',
                prefix='settings_',
                dir=self.settings_path.parent
            )

            try:
                with os.fdopen(temp_fd, 'w', encoding="utf-8") as f:
                    json.dump(settings.to_dict(), f, indent=2)
                os.replace(temp_path, self.settings_path)
            except Exception:
                try:
                    os.unlink(temp_path)
                except OSError:
                    pass
                raise

            logger.info(f"Saved settings to {self.settings_path}")
            return True

        except Exception as e:
            logger.error(f"Failed to save settings: {e}")
            return False

    def ensure_file(self) -> Path:
        """Write the defaults if no settings file exists yet (for editing)."""
        if not self.settings_path.exists():
            self.save(FocusSettings())
        return self.settings_path

    def set_auto_close_tabs(self, enabled: bool) -> FocusSettings:
        """Persist a new auto-close flag and return the updated settings."""
        settings = self.load()
        settings.auto_close_tabs = enabled
        self.save(settings)
        logger.info(f"Auto-close tabs {'enabled' if enabled else 'disabled'}")
        return settings
