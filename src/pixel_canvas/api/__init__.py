"""HTTP API for the Pixel Canvas application."""

from .endpoints import pixels_router, system_router, visitors_router

__all__ = ["pixels_router", "system_router", "visitors_router"]
