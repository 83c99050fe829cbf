# src/pixel_canvas/models/__init__.py
"""SQLAlchemy models for the Pixel Canvas application."""

from .cell import Cell
from .quota import DailyQuota
from .session_activity import SessionActivity

__all__ = [
    "Cell",
    "DailyQuota",
    "SessionActivity",
]
