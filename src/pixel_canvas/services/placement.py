"""Placement engine: the cell ownership state machine.

A cell moves ``EMPTY -> OWNED_UNLOCKED -> OWNED_LOCKED``. While unlocked its
owner may recolor it or release it back to ``EMPTY``; once locked it never
changes again.

Every mutating operation runs as one unit of work. The first statement of
each unit upserts the caller's session row, which serializes requests from the
same identity (a row lock on PostgreSQL, the write lock on SQLite). Quota
consumption and the cell insert are conditional statements, so neither a
second session on the same IP nor a second identity racing for the same
coordinate can slip past a limit.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pixel_canvas.core.settings import Settings, settings
from pixel_canvas.db.time import quota_day, utcnow
from pixel_canvas.models.cell import Cell
from pixel_canvas.repositories import GridStore, QuotaLedger, SessionActivityStore
from pixel_canvas.services.adjacency import touches_any
from pixel_canvas.services.errors import (
    AdjacencyError,
    ConflictError,
    LockedError,
    NotFoundError,
    NotOwnerError,
    PlacementError,
    QuotaExceededError,
    SessionCapError,
    StorageError,
    ValidationError,
)
from pixel_canvas.services.identity import Identity, is_exempt

logger = logging.getLogger(__name__)

HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")

ACTION_PLACED = "placed"
ACTION_UPDATED = "updated"
ACTION_RELEASED = "released"


@dataclass(frozen=True)
class PlaceResult:
    """Outcome of a successful placement."""

    action: str
    session_locked: bool = False


@dataclass(frozen=True)
class ReleaseResult:
    """Outcome of a successful release."""

    action: str = ACTION_RELEASED


@dataclass
class MineSummary:
    """What an identity owns and how many claims it has left today."""

    session_id: str
    pixels: list[dict[str, Any]] = field(default_factory=list)
    drawn_today: int = 0
    remaining: int = 0
    max_per_day: int = 0


class PlacementEngine:
    """Validates and applies claim, recolor, release and lock requests."""

    def __init__(
        self,
        config: Settings | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Settings to read grid and quota rules from. Defaults to the
                application settings.
            clock: Source of the current UTC time, injectable for tests.
        """
        self.settings = config or settings
        self.clock = clock

    # -- policy helpers ---------------------------------------------------

    def is_exempt(self, identity: Identity) -> bool:
        """Return True if ``identity`` has no daily limit."""
        return is_exempt(identity.ip, exempt_loopback=self.settings.exempt_loopback)

    def normalize_color(self, color: Any) -> str:
        """Return ``color`` as lowercase ``#rrggbb``, or the default when malformed."""
        if isinstance(color, str) and HEX_COLOR_RE.match(color):
            return color.lower()
        return self.settings.default_color

    def check_bounds(self, x: Any, y: Any) -> None:
        """Raise ``ValidationError`` unless ``x`` and ``y`` are integers inside the grid."""
        for value in (x, y):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError("Invalid x, y, or color")
        size = self.settings.grid_size
        if not (0 <= x < size and 0 <= y < size):
            raise ValidationError("Pixel out of bounds")

    @contextmanager
    def _unit_of_work(self, db: Session) -> Iterator[None]:
        try:
            yield
            db.commit()
        except PlacementError:
            db.rollback()
            raise
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Storage failure in placement engine: %s", err, exc_info=True)
            raise StorageError("Storage failure") from err
        except BaseException:
            db.rollback()
            raise

    # -- operations -------------------------------------------------------

    def touch(self, db: Session, identity: Identity, created_at: datetime | None = None) -> None:
        """Record activity for ``identity``'s session."""
        with self._unit_of_work(db):
            SessionActivityStore(db).touch(
                identity.session_id,
                identity.ip,
                now=self.clock(),
                created_at=created_at,
            )

    def place(self, db: Session, x: Any, y: Any, color: Any, identity: Identity) -> PlaceResult:
        """Claim an empty cell or recolor one of the caller's unlocked cells.

        Raises:
            ValidationError: Coordinates are not integers inside the grid.
            ConflictError: Another identity owns the cell, or won a race for it.
            LockedError: The caller's own cell is locked.
            QuotaExceededError: The caller's IP used up today's claims.
            SessionCapError: The session already holds the daily limit.
            AdjacencyError: The target touches no reference cell.
            StorageError: The database failed.
        """
        self.check_bounds(x, y)
        hex_color = self.normalize_color(color)
        now = self.clock()

        with self._unit_of_work(db):
            SessionActivityStore(db).touch(identity.session_id, identity.ip, now=now)
            grid = GridStore(db)
            existing = grid.get(x, y)
            if existing is not None:
                return self._recolor_existing(grid, existing, hex_color, identity)
            return self._claim_empty(db, grid, x, y, hex_color, identity, now)

    def _recolor_existing(
        self,
        grid: GridStore,
        cell: Cell,
        color: str,
        identity: Identity,
    ) -> PlaceResult:
        if not cell.is_owned_by(identity.session_id, identity.ip):
            raise ConflictError()
        if cell.locked:
            raise LockedError()
        try:
            grid.recolor(cell.x, cell.y, color, identity)
        except NotOwnerError as err:
            raise ConflictError() from err
        logger.debug("Recolored (%d, %d) for %s", cell.x, cell.y, identity.session_id)
        return PlaceResult(action=ACTION_UPDATED)

    def _claim_empty(
        self,
        db: Session,
        grid: GridStore,
        x: int,
        y: int,
        color: str,
        identity: Identity,
        now: datetime,
    ) -> PlaceResult:
        ledger = QuotaLedger(db)
        day = quota_day(now)
        limit = self.settings.max_pixels_per_day
        exempt = self.is_exempt(identity)

        held = 0
        if not exempt:
            if ledger.try_consume(identity.ip, day, limit) is None:
                raise QuotaExceededError(f"Daily limit reached ({limit} pixels per day)")
            held = grid.count_owned(identity)
            if held >= limit:
                raise SessionCapError(f"You already have {limit} pixels this session")

        self._check_adjacency(grid, x, y, identity)
        grid.claim(x, y, color, identity, now=now)
        logger.debug("Claimed (%d, %d) for %s", x, y, identity.session_id)

        if exempt:
            ledger.increment(identity.ip, day)
            return PlaceResult(action=ACTION_PLACED)

        session_locked = held + 1 >= limit
        if session_locked:
            locked = grid.lock_by_session(identity.session_id, identity.ip)
            logger.info(
                "Session %s reached %d pixels; locked %d cells",
                identity.session_id,
                limit,
                locked,
            )
        return PlaceResult(action=ACTION_PLACED, session_locked=session_locked)

    def _check_adjacency(self, grid: GridStore, x: int, y: int, identity: Identity) -> None:
        if self.settings.adjacency_scope == "own":
            if grid.count_owned(identity) == 0:
                return
            if not touches_any(x, y, grid.neighbours(x, y, identity)):
                raise AdjacencyError(
                    "Pixel must be adjacent to one of your pixels (including diagonally)"
                )
            return

        if grid.count() == 0:
            return
        if not touches_any(x, y, grid.neighbours(x, y)):
            raise AdjacencyError(
                "Pixel must be adjacent to any existing pixel (including diagonally)"
            )

    def release(self, db: Session, x: Any, y: Any, identity: Identity) -> ReleaseResult:
        """Delete one of the caller's unlocked cells.

        The day's quota is not given back.

        Raises:
            ValidationError: Coordinates are not integers inside the grid.
            NotFoundError: No cell of the caller's exists at ``(x, y)``.
            LockedError: The cell is locked.
            StorageError: The database failed.
        """
        self.check_bounds(x, y)
        with self._unit_of_work(db):
            SessionActivityStore(db).touch(identity.session_id, identity.ip, now=self.clock())
            try:
                GridStore(db).release(x, y, identity)
            except NotOwnerError as err:
                raise NotFoundError("Pixel not found or not yours") from err
        logger.debug("Released (%d, %d) for %s", x, y, identity.session_id)
        return ReleaseResult()

    def lock_session(self, db: Session, identity: Identity) -> int:
        """Immediately lock every unlocked cell of ``identity``.

        Returns:
            Number of cells locked.
        """
        with self._unit_of_work(db):
            SessionActivityStore(db).touch(identity.session_id, identity.ip, now=self.clock())
            locked = GridStore(db).lock_by_session(identity.session_id, identity.ip)
        logger.info("Session %s ended by visitor; locked %d cells", identity.session_id, locked)
        return locked

    # -- read models ------------------------------------------------------

    def get_grid(self, db: Session) -> dict[str, dict[str, Any]]:
        """Return every placed cell keyed by ``"x,y"``."""
        with self._unit_of_work(db):
            return {
                cell.key: {"color": cell.color, "locked": bool(cell.locked)}
                for cell in GridStore(db).list_all()
            }

    def get_mine(self, db: Session, identity: Identity) -> MineSummary:
        """Return the caller's cells together with today's remaining quota."""
        day = quota_day(self.clock())
        with self._unit_of_work(db):
            pixels = [_pixel_view(cell) for cell in GridStore(db).list_owned(identity)]
            drawn_today = QuotaLedger(db).count(identity.ip, day)

        if self.is_exempt(identity):
            max_per_day = self.settings.exempt_display_limit
            remaining = max_per_day
        else:
            max_per_day = self.settings.max_pixels_per_day
            remaining = max(0, max_per_day - drawn_today)

        return MineSummary(
            session_id=identity.session_id,
            pixels=pixels,
            drawn_today=drawn_today,
            remaining=remaining,
            max_per_day=max_per_day,
        )


def _pixel_view(cell: Cell) -> dict[str, Any]:
    return {"x": cell.x, "y": cell.y, "color": cell.color, "locked": bool(cell.locked)}


def get_placement_engine() -> PlacementEngine:
    """Return a placement engine bound to the application settings."""
    return PlacementEngine()
