"""
Menu bar / system tray package for PomoGuard.

Provides a cross-platform launcher that picks the right UI:
- macOS: rumps-based native menu bar
- Windows / Linux: pystray-based system tray
"""

import sys
import logging

logger = logging.getLogger(__name__)


def run_menubar_app() -> None:
    """Launch the appropriate menu bar app for the current platform."""
    if sys.platform == "darwin":
        from menubar.macos_app import PomoGuardMenuBar
        app = PomoGuardMenuBar()
        app.run()
    else:
        from menubar.tray_app import PomoGuardTray
        logger.info("Screen monitoring is macOS only; the tray runs the timer alone.")
        app = PomoGuardTray()
        app.run()
