"""System and transparency endpoints for the Pixel Canvas API."""

from __future__ import annotations

import time

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from pixel_canvas.core.settings import settings

from ..dependencies import SessionDep

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return the public grid and quota rules.

    Excludes connection strings; suitable for clients that render limits.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
        "grid": {
            "size": settings.grid_size,
            "adjacency_scope": settings.adjacency_scope,
            "default_color": settings.default_color,
        },
        "quota": {
            "max_pixels_per_day": settings.max_pixels_per_day,
            "session_duration_seconds": settings.session_duration_seconds,
            "release_restores_quota": False,
        },
    }


@router.get("/health")
def get_system_health(db: SessionDep) -> dict[str, object]:
    """Health check including database connectivity."""
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {e}"

    return {
        "status": "healthy" if db_status == "healthy" else "unhealthy",
        "timestamp": int(time.time()),
        "components": {"database": db_status},
        "version": settings.app_version,
    }
