# src/pixel_canvas/main.py
"""Main entry point for the Pixel Canvas application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from pixel_canvas.api import pixels_router, system_router, visitors_router
from pixel_canvas.core.settings import settings
from pixel_canvas.db.session import create_tables
from pixel_canvas.services.lock_sweeper import LockSweepWorker

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Pixel Canvas API",
    description="Shared grid where anonymous visitors claim and lock pixels",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(pixels_router, prefix="/api")
app.include_router(visitors_router, prefix="/api")
app.include_router(system_router, prefix="/api")


@app.on_event("startup")
async def on_startup() -> None:
    if settings.auto_create_tables:
        create_tables()
    if settings.lock_sweeper_enabled:
        worker = LockSweepWorker()
        await worker.start()
        app.state.lock_sweeper = worker
    else:
        logger.info("Lock sweeper disabled")
        app.state.lock_sweeper = None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: LockSweepWorker | None = getattr(app.state, "lock_sweeper", None)
    if worker:
        await worker.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("pixel_canvas.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
