"""Helpers for running AppleScript through osascript on macOS."""

import subprocess
import logging
from typing import List

logger = logging.getLogger(__name__)

# Substrings osascript prints on stderr when Automation/Accessibility is denied
PERMISSION_ERROR_MARKERS = ("not allowed", "assistive", "-1743", "-10827")


def run_osascript(script: str, timeout: float) -> subprocess.CompletedProcess:
    """
    Run an AppleScript snippet.

    Args:
        script: AppleScript source.
        timeout: Seconds before the subprocess is killed.

    Returns:
        The completed process (stdout/stderr as text).

    Raises:
        subprocess.TimeoutExpired, OSError: propagated to the caller.
    """
    return subprocess.run(
        ["osascript", "-e", script],
        capture_output=True,
        text=True,
        timeout=timeout,
    )


def is_permission_error(stderr: str) -> bool:
    """True if osascript stderr indicates a missing macOS permission."""
    stderr_lower = (stderr or "").lower()
    return any(marker in stderr_lower for marker in PERMISSION_ERROR_MARKERS)


def quote(text: str) -> str:
    """Return text as a double-quoted AppleScript string literal."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def contains_any(fields: List[str], patterns: List[str]) -> str:
    """
    Build an AppleScript boolean expression that is true when any field
    contains any pattern. AppleScript `contains` ignores case by default.

    Example:
        contains_any(["u", "n"], ["x.com"])
        -> '(u contains "x.com") or (n contains "x.com")'
    """
    clauses = [
        f"({field_name} contains {quote(pattern)})"
        for pattern in patterns
        for field_name in fields
    ]
    return " or ".join(clauses) if clauses else "false"
