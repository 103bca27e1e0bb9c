"""
Core business logic package for PomoGuard.

Contains the headless SessionEngine, its timers, settings storage and the
Notifier interface. Zero UI dependencies.
"""

from core.engine import SessionEngine

__all__ = ["SessionEngine"]
