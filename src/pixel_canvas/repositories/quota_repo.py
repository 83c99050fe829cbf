"""Per-(ip, day) quota ledger."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from pixel_canvas.db.dialect import upsert_insert
from pixel_canvas.models.quota import DailyQuota

__all__ = ["QuotaLedger"]


class QuotaLedger:
    """Durable counter of cells claimed per IP and calendar day.

    Entries are created on the first claim of the day and only ever grow;
    releasing a cell does not give the claim back.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the ledger with a SQLAlchemy session."""
        self.session = session

    def count(self, ip: str, day: str) -> int:
        """Return how many claims ``ip`` made on ``day``."""
        stmt = select(DailyQuota.claims).where(DailyQuota.ip == ip, DailyQuota.day == day)
        return self.session.scalar(stmt) or 0

    def remaining(self, ip: str, day: str, daily_limit: int) -> int:
        """Return the claims left for ``ip`` on ``day``, never negative."""
        return max(0, daily_limit - self.count(ip, day))

    def increment(self, ip: str, day: str) -> int:
        """Record one claim unconditionally and return the new count."""
        table = DailyQuota.__table__
        stmt = upsert_insert(self.session, table).values(ip=ip, day=day, claims=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.ip, table.c.day],
            set_={"claims": table.c.claims + 1},
        ).returning(table.c.claims)
        return int(self.session.execute(stmt).scalar_one())

    def try_consume(self, ip: str, day: str, daily_limit: int) -> int | None:
        """Record one claim if ``ip`` is still under ``daily_limit``.

        The check and the increment are one statement, so concurrent requests
        for the same ``(ip, day)`` cannot both take the last slot.

        Returns:
            The new count, or ``None`` when the quota is already spent.
        """
        if daily_limit <= 0:
            return None
        table = DailyQuota.__table__
        stmt = upsert_insert(self.session, table).values(ip=ip, day=day, claims=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.ip, table.c.day],
            set_={"claims": table.c.claims + 1},
            where=table.c.claims < daily_limit,
        ).returning(table.c.claims)
        claims = self.session.execute(stmt).scalar_one_or_none()
        return None if claims is None else int(claims)
