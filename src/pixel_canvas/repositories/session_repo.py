"""Session activity tracking."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from pixel_canvas.db.dialect import upsert_insert
from pixel_canvas.models.cell import Cell
from pixel_canvas.models.session_activity import SessionActivity
from pixel_canvas.services.identity import is_exempt

__all__ = ["SessionActivityStore"]


class SessionActivityStore:
    """Durable last-seen timestamp per session."""

    def __init__(self, session: Session) -> None:
        """Initialize the store with a SQLAlchemy session."""
        self.session = session

    def touch(
        self,
        session_id: str,
        ip: str,
        *,
        now: datetime,
        created_at: datetime | None = None,
    ) -> None:
        """Upsert ``last_activity = now``; ``created_at`` is only set on insert."""
        table = SessionActivity.__table__
        stmt = upsert_insert(self.session, table).values(
            session_id=session_id,
            ip=ip,
            created_at=created_at or now,
            last_activity=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.session_id],
            set_={"last_activity": stmt.excluded.last_activity},
        )
        self.session.execute(stmt)

    def get(self, session_id: str) -> SessionActivity | None:
        """Return the activity row for ``session_id``."""
        return self.session.get(SessionActivity, session_id, populate_existing=True)

    def lock_row(self, session_id: str) -> SessionActivity | None:
        """Return the row for ``session_id`` holding a row lock where supported."""
        stmt = (
            select(SessionActivity)
            .where(SessionActivity.session_id == session_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.session.scalars(stmt).first()

    def list_idle_since(
        self,
        cutoff: datetime,
        *,
        exempt_loopback: bool = True,
        only_with_unlocked_cells: bool = False,
    ) -> list[str]:
        """Return sessions whose last activity is older than ``cutoff``.

        Args:
            cutoff: Sessions seen strictly before this instant are idle.
            exempt_loopback: Skip loopback identities, which never expire.
            only_with_unlocked_cells: Skip sessions with nothing left to lock.
        """
        stmt = select(SessionActivity.session_id, SessionActivity.ip).where(
            SessionActivity.last_activity < cutoff
        )
        if only_with_unlocked_cells:
            stmt = stmt.where(
                exists().where(
                    Cell.session_id == SessionActivity.session_id,
                    Cell.locked.is_(False),
                )
            )
        stmt = stmt.order_by(SessionActivity.last_activity)
        return [
            session_id
            for session_id, ip in self.session.execute(stmt)
            if not is_exempt(ip, exempt_loopback=exempt_loopback)
        ]
