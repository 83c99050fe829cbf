# src/pixel_canvas/models/quota.py
"""Per-IP daily claim counters."""

from sqlalchemy import CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pixel_canvas.db.session import Base


class DailyQuota(Base):
    """Number of cells an IP has claimed on one UTC calendar day.

    Counters only ever grow; a new day starts a new row.
    """

    __tablename__ = "daily_quota"
    __table_args__ = (
        CheckConstraint("claims >= 0", name="ck_daily_quota_claims"),
    )

    ip: Mapped[str] = mapped_column(Text, primary_key=True)
    # ISO date, "YYYY-MM-DD".
    day: Mapped[str] = mapped_column(String(10), primary_key=True)
    claims: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
