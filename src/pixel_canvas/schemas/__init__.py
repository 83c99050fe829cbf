"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .pixel import (
    CellState,
    GridResponse,
    LockResponse,
    MineResponse,
    PixelOut,
    PixelPlace,
    PlaceResponse,
    ReleaseResponse,
)
from .visitor import VisitorOut

__all__ = [
    "CellState", "GridResponse",
    "LockResponse",
    "MineResponse", "PixelOut",
    "PixelPlace", "PlaceResponse",
    "ReleaseResponse",
    "VisitorOut",
]
