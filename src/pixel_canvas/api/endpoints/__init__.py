"""Endpoint routers for the Pixel Canvas API."""

from .pixels import router as pixels_router
from .system import router as system_router
from .visitors import router as visitors_router

__all__ = ["pixels_router", "system_router", "visitors_router"]
