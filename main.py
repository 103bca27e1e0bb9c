#!/usr/bin/env python3
"""
PomoGuard - Main Entry Point

A focus timer that alternates work and break intervals and nudges you away
from blocked sites by watching the foreground browser window.

Usage:
    python main.py                # Launch menu bar / tray app (default)
    python main.py --cli          # Run a session in the terminal
    python main.py --check        # Inspect the active window once
    python main.py --close-tabs   # Close blocked tabs now
"""

import os
import sys

if getattr(sys, 'frozen', False) and hasattr(sys, '_MEIPASS'):
    _bundle_dir = sys._MEIPASS
    os.chdir(_bundle_dir)
    if _bundle_dir not in sys.path:
        sys.path.insert(0, _bundle_dir)

import logging
import argparse

import config
from core.engine import SessionEngine
from core.notifier import ConsoleNotifier

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format=config.LOG_FORMAT
)
logger = logging.getLogger(__name__)

CLI_HELP = """
Commands:
  start          Start a session with your configured durations
  custom         Start a session with custom durations
  stop           Stop the current session
  status         Show the current state and remaining time
  check          Inspect the active window once
  close          Close blocked browser tabs now
  quit           Stop and exit
"""


class ConsoleApp:
    """
    Terminal front end: reads commands from stdin while the engine's
    thread timers run the countdown and screen poll.
    """

    def __init__(self, engine: SessionEngine):
        self.engine = engine
        self.notifier = engine.notifier
        self.commands = {
            "start": self.engine.start_session,
            "custom": self.engine.start_custom_session,
            "stop": self.engine.stop_session,
            "status": self.show_status,
            "check": self.engine.check_screen_now,
            "close": self.engine.close_tabs_now,
        }

    def show_status(self) -> None:
        status = self.engine.get_status()
        if status["is_running"]:
            print(
                f"  {status['display']} ({status['state']}, "
                f"{status['distraction_count']} distraction(s))"
            )
        else:
            print(f"  {config.STATUS_READY_TEXT}")

    def run(self) -> None:
        """Command loop. Returns on quit, EOF or Ctrl+C."""
        print("\n" + "=" * 60)
        print(f"🍅 {config.APP_NAME} - Focus Timer")
        print("=" * 60)
        print(CLI_HELP)

        try:
            while True:
                try:
                    line = input("> ").strip().lower()
                except EOFError:
                    break

                # A pending question (e.g. "Start New Session?") takes the next line
                if getattr(self.notifier, "awaiting_answer", False):
                    self.notifier.answer(line)
                    continue

                if not line:
                    continue
                if line in ("quit", "q", "exit"):
                    break
                if line in ("help", "?"):
                    print(CLI_HELP)
                    continue

                command = self.commands.get(line)
                if command is None:
                    print(f"Unknown command: {line} (type 'help')")
                    continue
                command()
        except KeyboardInterrupt:
            print()
        finally:
            if getattr(self.notifier, "awaiting_answer", False):
                self.notifier.answer(None)
            self.engine.cleanup()
            print("\n👋 Goodbye!")


def main_cli() -> None:
    """Run the terminal version of the application."""
    engine = SessionEngine(notifier=ConsoleNotifier(answers_from_loop=True))
    ConsoleApp(engine).run()


def main_menubar() -> None:
    """Run the menu bar / system tray application."""
    from menubar import run_menubar_app
    run_menubar_app()


def main():
    """
    Main entry point. Parses arguments and launches appropriate mode.

    Default mode is menu bar unless another mode is specified.
    """
    parser = argparse.ArgumentParser(
        description=f"{config.APP_NAME} - Focus timer with distraction blocking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                Launch menu bar app (default)
  python main.py --cli          Run in the terminal
  python main.py --check        Diagnose window detection
  python main.py --close-tabs   Close blocked tabs once
        """
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--cli", action="store_true", help="Run in CLI mode (terminal-based)")
    mode.add_argument("--check", action="store_true", help="Inspect the active window once and exit")
    mode.add_argument("--close-tabs", action="store_true", help="Close blocked browser tabs and exit")

    args = parser.parse_args()

    try:
        if args.check:
            SessionEngine(notifier=ConsoleNotifier()).check_screen_now()
        elif args.close_tabs:
            SessionEngine(notifier=ConsoleNotifier()).close_tabs_now()
        elif args.cli:
            main_cli()
        else:
            main_menubar()
    except KeyboardInterrupt:
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        print(f"\nFatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
