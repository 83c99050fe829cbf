# src/pixel_canvas/api/endpoints/pixels.py
"""Pixel endpoints: grid, own pixels, place, release and lock."""

from fastapi import APIRouter, Query, Response

from pixel_canvas.core.settings import settings
from pixel_canvas.schemas.pixel import (
    GridResponse,
    LockResponse,
    MineResponse,
    PixelPlace,
    PlaceResponse,
    ReleaseResponse,
)
from pixel_canvas.services.errors import PlacementError, StorageError
from pixel_canvas.services.visitors import get_visitor_log

from ..dependencies import ActiveIdentityDep, EngineDep, IdentityDep, SessionDep, raise_http

router = APIRouter(tags=["pixels"])


@router.get("/grid", response_model=GridResponse)
def get_grid(db: SessionDep, engine: EngineDep, identity: ActiveIdentityDep) -> GridResponse:
    """Return every placed cell and the grid size."""
    get_visitor_log().record(identity.ip, identity.session_id)
    try:
        grid = engine.get_grid(db)
    except StorageError as err:
        raise_http(err)
    return GridResponse(grid=grid, size=engine.settings.grid_size)


@router.get("/me", response_model=MineResponse)
def get_me(db: SessionDep, engine: EngineDep, identity: ActiveIdentityDep) -> MineResponse:
    """Return the caller's pixels and remaining daily quota."""
    try:
        mine = engine.get_mine(db, identity)
    except StorageError as err:
        raise_http(err)
    return MineResponse(
        session_id=mine.session_id,
        my_pixels=mine.pixels,
        drawn_today=mine.drawn_today,
        remaining=mine.remaining,
        max_per_day=mine.max_per_day,
    )


@router.post("/pixel", response_model=PlaceResponse)
def place_pixel(
    pixel: PixelPlace,
    db: SessionDep,
    engine: EngineDep,
    identity: IdentityDep,
) -> PlaceResponse:
    """Claim an empty cell or recolor one of the caller's unlocked cells."""
    try:
        result = engine.place(db, pixel.x, pixel.y, pixel.color, identity)
    except (PlacementError, StorageError) as err:
        raise_http(err)
    return PlaceResponse(action=result.action, session_locked=result.session_locked)


@router.delete("/pixel", response_model=ReleaseResponse)
def release_pixel(
    db: SessionDep,
    engine: EngineDep,
    identity: IdentityDep,
    x: int = Query(...),
    y: int = Query(...),
) -> ReleaseResponse:
    """Delete one of the caller's unlocked cells. Quota is not restored."""
    try:
        engine.release(db, x, y, identity)
    except (PlacementError, StorageError) as err:
        raise_http(err)
    return ReleaseResponse()


@router.post("/lock", response_model=LockResponse)
def lock_session(
    response: Response,
    db: SessionDep,
    engine: EngineDep,
    identity: IdentityDep,
) -> LockResponse:
    """Lock all of the caller's pixels now and end the session."""
    try:
        locked = engine.lock_session(db, identity)
    except StorageError as err:
        raise_http(err)
    response.delete_cookie(settings.session_cookie_name)
    return LockResponse(locked=locked)
