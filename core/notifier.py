"""
Notifier interface between the SessionEngine and whatever UI hosts it.

The macOS menu bar app, the tray app and the console mode each implement
these methods. The engine never imports a UI toolkit.
"""

import queue
import logging
import threading
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """
    Status surface and dialogs used by the engine.

    Methods that wait for the user (ask, prompt, alert) may block; the engine
    never holds its lock while calling them. set_status() is called with the
    lock held, so it must return without waiting on the UI.
    """

    def set_status(self, status: str, text: str) -> None:
        """
        Update the persistent status label.

        Args:
            status: Machine-readable state ("idle", "focus", "break").
            text: Display text, e.g. "🍅 24:59".
        """
        ...

    def info(self, message: str) -> None:
        """Show a transient informational message."""
        ...

    def warning(self, message: str) -> None:
        """Show a warning the user should notice."""
        ...

    def error(self, message: str) -> None:
        """Show an error message."""
        ...

    def ask(self, message: str, actions: List[str]) -> Optional[str]:
        """
        Show a modal message with a small set of choices.

        Returns:
            The chosen action, or None if dismissed.
        """
        ...

    def alert(self, title: str, message: str) -> None:
        """Show a blocking alert that dismisses itself after a timeout."""
        ...

    def prompt(self, message: str, default: str = "") -> Optional[str]:
        """
        Ask the user for a line of text.

        Returns:
            The entered text, or None if cancelled.
        """
        ...


def match_action(text: Optional[str], actions: List[str]) -> Optional[str]:
    """
    Map console input onto one of the offered actions.

    Accepts a 1-based number, the full action name, or an unambiguous
    prefix of it (case-insensitive).

    Returns:
        The matching action, or None.
    """
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None
    if text.isdigit():
        index = int(text) - 1
        return actions[index] if 0 <= index < len(actions) else None

    text_lower = text.lower()
    for action in actions:
        if action.lower() == text_lower:
            return action
    candidates = [a for a in actions if a.lower().startswith(text_lower)]
    return candidates[0] if len(candidates) == 1 else None


class ConsoleNotifier:
    """
    Notifier for CLI mode.

    Prints to stdout. With answers_from_loop=True, ask() does not read stdin
    itself: it waits until the command loop passes the next line to answer(),
    since that loop already owns input() on the main thread.
    """

    def __init__(self, answers_from_loop: bool = False) -> None:
        self.last_status: str = ""
        self.answers_from_loop = answers_from_loop
        self._pending: Optional[List[str]] = None
        self._pending_lock = threading.Lock()
        # One question at a time
        self._ask_lock = threading.Lock()
        self._answers: "queue.Queue[Optional[str]]" = queue.Queue()

    def set_status(self, status: str, text: str) -> None:
        # Only print state changes and whole minutes to keep the console readable
        if text == self.last_status:
            return
        changed_state = not self.last_status or status == "idle"
        self.last_status = text
        if changed_state or text.endswith(":00"):
            print(f"  {text}")

    def info(self, message: str) -> None:
        print(f"ℹ {message}")

    def warning(self, message: str) -> None:
        print(f"⚠ {message}")

    def error(self, message: str) -> None:
        print(f"❌ {message}")

    def ask(self, message: str, actions: List[str]) -> Optional[str]:
        with self._ask_lock:
            print(f"❓ {message}")
            for number, action in enumerate(actions, 1):
                print(f"   {number}. {action}")

            if not self.answers_from_loop:
                try:
                    line = input("   Choice: ")
                except (EOFError, KeyboardInterrupt):
                    return None
                return match_action(line, actions)

            with self._pending_lock:
                self._pending = list(actions)
            print("   Type a number or option name and press Enter.")
            return self._answers.get()

    @property
    def awaiting_answer(self) -> bool:
        """True while ask() is waiting for the command loop."""
        with self._pending_lock:
            return self._pending is not None

    def answer(self, line: Optional[str]) -> bool:
        """
        Deliver a line typed at the console to the waiting ask().

        Args:
            line: Raw input, or None to dismiss the question.

        Returns:
            True if a question was waiting and consumed the line.
        """
        with self._pending_lock:
            actions = self._pending
            self._pending = None
        if actions is None:
            return False
        self._answers.put(match_action(line, actions))
        return True

    def alert(self, title: str, message: str) -> None:
        print(f"🚨 {title}: {message}")

    def prompt(self, message: str, default: str = "") -> Optional[str]:
        try:
            value = input(f"{message} [{default}]: ").strip()
        except (EOFError, KeyboardInterrupt):
            return None
        return value or default
