# src/pixel_canvas/schemas/pixel.py
"""Pixel-related Pydantic schemas.

Wire names are camelCase to match the browser client; Python attributes stay
snake_case.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class PixelPlace(BaseModel):
    """Request body for placing or recoloring a pixel."""

    x: StrictInt
    y: StrictInt
    color: Any = Field(
        default=None,
        description="Hex triplet such as #ff0000; malformed values fall back to the default color",
    )


class PlaceResponse(BaseModel):
    """Result of a successful placement."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    action: Literal["placed", "updated"]
    session_locked: bool = Field(default=False, alias="sessionLocked")


class ReleaseResponse(BaseModel):
    """Result of a successful release."""

    success: bool = True
    action: Literal["released"] = "released"


class LockResponse(BaseModel):
    """Result of voluntarily ending a session."""

    success: bool = True
    locked: int = Field(0, description="Number of cells locked by this request")


class CellState(BaseModel):
    """Public state of one placed cell."""

    color: str
    locked: bool


class GridResponse(BaseModel):
    """Every placed cell keyed by ``"x,y"``."""

    grid: dict[str, CellState]
    size: int


class PixelOut(BaseModel):
    """One of the caller's cells."""

    x: int
    y: int
    color: str
    locked: bool


class MineResponse(BaseModel):
    """The caller's cells and remaining daily quota."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    my_pixels: list[PixelOut] = Field(default_factory=list, alias="myPixels")
    drawn_today: int = Field(0, alias="drawnToday")
    remaining: int
    max_per_day: int = Field(alias="maxPerDay")
