"""Data access helpers for grid cells.

All mutations are single conditional statements so that concurrent writers
cannot interleave between a check and the write it guards. The store flushes
but never commits; the caller owns the transaction.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from pixel_canvas.db.dialect import upsert_insert
from pixel_canvas.models.cell import Cell
from pixel_canvas.services.errors import (
    ConflictError,
    LockedError,
    NotFoundError,
    NotOwnerError,
)
from pixel_canvas.services.identity import Identity

__all__ = ["GridStore"]


class GridStore:
    """Single source of truth for cell ownership."""

    def __init__(self, session: Session) -> None:
        """Initialize the store with a SQLAlchemy session."""
        self.session = session

    def get(self, x: int, y: int) -> Cell | None:
        """Return the cell at ``(x, y)``, re-read from the database."""
        return self.session.get(Cell, (x, y), populate_existing=True)

    def list_all(self) -> list[Cell]:
        """Return every placed cell."""
        return list(self.session.scalars(select(Cell)))

    def list_owned(self, identity: Identity) -> list[Cell]:
        """Return the cells owned by ``identity`` ordered by creation."""
        stmt = (
            select(Cell)
            .where(Cell.session_id == identity.session_id, Cell.ip == identity.ip)
            .order_by(Cell.created_at, Cell.x, Cell.y)
        )
        return list(self.session.scalars(stmt))

    def count(self) -> int:
        """Return the number of placed cells."""
        return self.session.scalar(select(func.count()).select_from(Cell)) or 0

    def count_owned(self, identity: Identity) -> int:
        """Return how many cells ``identity`` holds, locked or not."""
        stmt = select(func.count()).select_from(Cell).where(
            Cell.session_id == identity.session_id,
            Cell.ip == identity.ip,
        )
        return self.session.scalar(stmt) or 0

    def neighbours(self, x: int, y: int, identity: Identity | None = None) -> list[Cell]:
        """Return the cells in the 3x3 window around ``(x, y)``.

        Args:
            x: Column of the window centre.
            y: Row of the window centre.
            identity: When given, only that identity's cells are returned.
        """
        stmt = select(Cell).where(
            Cell.x.between(x - 1, x + 1),
            Cell.y.between(y - 1, y + 1),
        )
        if identity is not None:
            stmt = stmt.where(Cell.session_id == identity.session_id, Cell.ip == identity.ip)
        return list(self.session.scalars(stmt))

    def claim(
        self,
        x: int,
        y: int,
        color: str,
        identity: Identity,
        *,
        now: datetime,
    ) -> None:
        """Insert a new cell unless one already exists at ``(x, y)``.

        Raises:
            ConflictError: If the coordinate is already taken.
        """
        table = Cell.__table__
        stmt = upsert_insert(self.session, table).values(
            x=x,
            y=y,
            color=color,
            session_id=identity.session_id,
            ip=identity.ip,
            created_at=now,
            locked=False,
        )
        stmt = stmt.on_conflict_do_nothing(index_elements=[table.c.x, table.c.y])
        result = self.session.execute(stmt)
        if result.rowcount == 0:
            raise ConflictError()

    def recolor(self, x: int, y: int, color: str, identity: Identity) -> None:
        """Change the color of an unlocked cell owned by ``identity``.

        Raises:
            NotFoundError: If the cell does not exist.
            NotOwnerError: If another identity owns it.
            LockedError: If it is locked.
        """
        stmt = (
            update(Cell)
            .where(*self._owned_unlocked(x, y, identity))
            .values(color=color)
            .execution_options(synchronize_session="fetch")
        )
        if self.session.execute(stmt).rowcount == 0:
            self._raise_for(x, y, identity)

    def release(self, x: int, y: int, identity: Identity) -> None:
        """Delete an unlocked cell owned by ``identity``.

        Raises:
            NotFoundError: If the cell does not exist.
            NotOwnerError: If another identity owns it.
            LockedError: If it is locked.
        """
        stmt = (
            delete(Cell)
            .where(*self._owned_unlocked(x, y, identity))
            .execution_options(synchronize_session="fetch")
        )
        if self.session.execute(stmt).rowcount == 0:
            self._raise_for(x, y, identity)

    def lock_by_session(self, session_id: str, ip: str | None = None) -> int:
        """Lock every unlocked cell owned by ``session_id``.

        Idempotent: already locked cells are untouched.

        Returns:
            Number of cells that changed state.
        """
        stmt = update(Cell).where(Cell.session_id == session_id, Cell.locked.is_(False))
        if ip is not None:
            stmt = stmt.where(Cell.ip == ip)
        stmt = stmt.values(locked=True).execution_options(synchronize_session="fetch")
        return self.session.execute(stmt).rowcount

    @staticmethod
    def _owned_unlocked(x: int, y: int, identity: Identity) -> tuple:
        return (
            Cell.x == x,
            Cell.y == y,
            Cell.session_id == identity.session_id,
            Cell.ip == identity.ip,
            Cell.locked.is_(False),
        )

    def _raise_for(self, x: int, y: int, identity: Identity) -> None:
        cell = self.get(x, y)
        if cell is None:
            raise NotFoundError()
        if not cell.is_owned_by(identity.session_id, identity.ip):
            raise NotOwnerError()
        if cell.locked:
            raise LockedError()
        # The row matched on re-read, so it changed between the two statements.
        raise ConflictError("Pixel changed concurrently, try again")
