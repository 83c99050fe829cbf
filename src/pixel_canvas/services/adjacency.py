"""Chebyshev-distance adjacency between grid cells."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol


class _HasCoordinates(Protocol):
    x: int
    y: int


def chebyshev(ax: int, ay: int, bx: int, by: int) -> int:
    """Return the Chebyshev (king-move) distance between two coordinates."""
    return max(abs(ax - bx), abs(ay - by))


def touches_any(x: int, y: int, cells: Iterable[_HasCoordinates]) -> bool:
    """Return True if ``(x, y)`` is at distance exactly 1 from one of ``cells``."""
    return any(chebyshev(x, y, cell.x, cell.y) == 1 for cell in cells)

