# src/pixel_canvas/models/session_activity.py
"""Last-seen bookkeeping used to expire idle sessions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from pixel_canvas.db.session import Base


class SessionActivity(Base):
    """Last activity of an anonymous session.

    This table is the single authority on idle expiry. Rows are upserted on
    every request and never deleted.
    """

    __tablename__ = "session_activity"
    __table_args__ = (
        Index("ix_session_activity_last_activity", "last_activity"),
    )

    session_id: Mapped[str] = mapped_column(Text, primary_key=True)
    ip: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_activity: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
