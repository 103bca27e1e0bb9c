"""
Blocklist matching for screen monitoring.

A window counts as a distraction only when it belongs to a known browser
and its title contains one of the blocked site substrings.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import config

logger = logging.getLogger(__name__)


def is_browser(app_name: Optional[str]) -> bool:
    """
    Check whether an application name belongs to a known browser.

    Args:
        app_name: Process / application name, e.g. "Google Chrome".

    Returns:
        True if any known browser name is a substring (case-insensitive).
    """
    if not app_name:
        return False
    app_lower = app_name.lower()
    return any(browser in app_lower for browser in config.KNOWN_BROWSERS)


def normalize_sites(sites: Iterable) -> List[str]:
    """
    Clean a raw list of blocked sites.

    Strips whitespace, drops empty and non-string entries, and removes
    case-insensitive duplicates while keeping the original order.
    """
    cleaned = []
    seen = set()
    for site in sites or []:
        if not isinstance(site, str):
            logger.warning(f"Ignoring non-string blocklist entry: {site!r}")
            continue
        site = site.strip()
        if not site or site.lower() in seen:
            continue
        seen.add(site.lower())
        cleaned.append(site)
    return cleaned


@dataclass
class Blocklist:
    """Ordered, case-insensitive list of blocked site substrings."""

    sites: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.sites = normalize_sites(self.sites)

    def __bool__(self) -> bool:
        return bool(self.sites)

    def __len__(self) -> int:
        return len(self.sites)

    def match_title(self, window_title: Optional[str]) -> Optional[str]:
        """
        Find the first blocked site contained in a window title.

        Returns:
            The matching entry, or None.
        """
        if not window_title:
            return None
        title_lower = window_title.lower()
        for site in self.sites:
            if site.lower() in title_lower:
                return site
        return None

    def check_distraction(
        self,
        app_name: Optional[str],
        window_title: Optional[str],
    ) -> Tuple[bool, Optional[str]]:
        """
        Classify a window.

        Non-browser applications are never distracting, whatever their title.

        Returns:
            Tuple of (is_distracted, matched_site)
        """
        if not is_browser(app_name):
            return False, None

        match = self.match_title(window_title)
        if match:
            logger.debug(f"Distraction detected: '{match}' in title of {app_name}")
            return True, match
        return False, None
