"""
PomoGuard system tray application using pystray (Windows / Linux).

Runs the timer with thread-based engine timers. Screen monitoring and tab
closing are macOS only, so here those menu items report that they are
unavailable. Dialogs use short-lived tkinter windows.
"""

import os
import sys
import subprocess
import logging
import threading
from typing import List, Optional

import pystray
from PIL import Image, ImageDraw

import config
from core.engine import SessionEngine
from core.settings import SettingsManager

logger = logging.getLogger(__name__)


def _create_icon_image() -> Image.Image:
    """Draw a simple tomato icon (red circle, green leaf)."""
    image = Image.new("RGBA", (64, 64), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    draw.ellipse((6, 12, 58, 60), fill=(220, 53, 43, 255))
    draw.polygon([(32, 4), (24, 16), (40, 16)], fill=(46, 160, 67, 255))
    return image


class PomoGuardTray:
    """System tray application for PomoGuard. Also the engine's Notifier."""

    def __init__(self) -> None:
        """Initialise the tray app and engine."""
        self.settings_manager = SettingsManager()
        self.engine = SessionEngine(notifier=self, settings_manager=self.settings_manager)

        self._status_text: str = config.STATUS_READY_TEXT
        self._last_state: str = config.STATE_IDLE
        # tkinter dialogs are opened one at a time
        self._dialog_lock = threading.Lock()

        self.icon = pystray.Icon(
            name=config.APP_NAME,
            icon=_create_icon_image(),
            title=f"{config.APP_NAME} — Ready",
            menu=self._build_menu(),
        )

    # ------------------------------------------------------------------
    # Menu
    # ------------------------------------------------------------------

    def _build_menu(self) -> pystray.Menu:
        return pystray.Menu(
            pystray.MenuItem(lambda item: self._status_text, None, enabled=False),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem(
                "Start Focus Session", self._start,
                enabled=lambda item: not self.engine.is_running,
            ),
            pystray.MenuItem(
                "Start Custom Session…", self._start_custom,
                enabled=lambda item: not self.engine.is_running,
            ),
            pystray.MenuItem(
                "Stop", self._stop,
                enabled=lambda item: self.engine.is_running,
            ),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem("Check Screen Now", self._check_screen),
            pystray.MenuItem("Close Distracting Tabs Now", self._close_tabs),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem(
                "Auto-close Distracting Tabs", self._toggle_auto_close,
                checked=lambda item: self.settings_manager.load().auto_close_tabs,
            ),
            pystray.MenuItem("Edit Settings…", self._edit_settings),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem(f"Quit {config.APP_NAME}", self._quit_app),
        )

    def _start(self, icon, item) -> None:
        self.engine.start_session()

    def _start_custom(self, icon, item) -> None:
        self.engine.start_custom_session()

    def _stop(self, icon, item) -> None:
        self.engine.stop_session()

    def _check_screen(self, icon, item) -> None:
        self.engine.check_screen_now()

    def _close_tabs(self, icon, item) -> None:
        self.engine.close_tabs_now()

    def _toggle_auto_close(self, icon, item) -> None:
        current = self.settings_manager.load().auto_close_tabs
        self.settings_manager.set_auto_close_tabs(not current)

    def _edit_settings(self, icon, item) -> None:
        """Open settings.json with the platform's default handler."""
        path = self.settings_manager.ensure_file()
        try:
            if sys.platform == "win32":
                os.startfile(str(path))
            else:
                subprocess.run(["xdg-open", str(path)], check=True, timeout=10)
        except (subprocess.SubprocessError, OSError) as e:
            logger.error(f"Failed to open settings file: {e}")
            self.icon.notify(f"Settings file: {path}", config.APP_NAME)

    # ------------------------------------------------------------------
    # Notifier
    # ------------------------------------------------------------------

    def set_status(self, status: str, text: str) -> None:
        self._status_text = text
        if status == config.STATE_IDLE:
            self.icon.title = f"{config.APP_NAME} — Ready"
        else:
            self.icon.title = f"{config.APP_NAME} — {text}"
        # Menu enablement only changes on state transitions
        if status != self._last_state:
            self._last_state = status
            self.icon.update_menu()

    def info(self, message: str) -> None:
        self.icon.notify(message, config.APP_NAME)

    def warning(self, message: str) -> None:
        self.icon.notify(message, f"{config.APP_NAME} Warning")

    def error(self, message: str) -> None:
        self.icon.notify(message, f"{config.APP_NAME} Error")

    def ask(self, message: str, actions: List[str]) -> Optional[str]:
        """Yes / No / Cancel dialog mapped onto up to three actions."""
        from tkinter import messagebox

        buttons = list(actions[:3])
        if not buttons:
            return None
        legend = "\n".join(
            f"{label}: {action}" for label, action in zip(("Yes", "No", "Cancel"), buttons)
        )
        with self._dialog_lock:
            root = self._tk_root()
            try:
                if len(buttons) == 3:
                    answer = messagebox.askyesnocancel(config.APP_NAME, f"{message}\n\n{legend}", parent=root)
                    return {True: buttons[0], False: buttons[1], None: buttons[2]}[answer]
                if len(buttons) == 2:
                    answer = messagebox.askyesno(config.APP_NAME, f"{message}\n\n{legend}", parent=root)
                    return buttons[0] if answer else buttons[1]
                messagebox.showinfo(config.APP_NAME, message, parent=root)
                return buttons[0]
            finally:
                root.destroy()

    def alert(self, title: str, message: str) -> None:
        self.icon.notify(message, title)

    def prompt(self, message: str, default: str = "") -> Optional[str]:
        from tkinter import simpledialog

        with self._dialog_lock:
            root = self._tk_root()
            try:
                return simpledialog.askstring(
                    config.APP_NAME, message, initialvalue=default, parent=root
                )
            finally:
                root.destroy()

    @staticmethod
    def _tk_root():
        """Hidden, topmost Tk root used as the parent of one dialog."""
        import tkinter as tk

        root = tk.Tk()
        root.withdraw()
        root.attributes("-topmost", True)
        return root

    # ------------------------------------------------------------------
    # Quit / run
    # ------------------------------------------------------------------

    def _quit_app(self, icon, item) -> None:
        """Clean up and quit."""
        self.engine.cleanup()
        self.icon.stop()

    def run(self) -> None:
        """Start the tray application (blocks)."""
        self.icon.run()
