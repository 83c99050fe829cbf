# src/pixel_canvas/models/cell.py
"""SQLAlchemy model for grid cells and their ownership records."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from pixel_canvas.db.session import Base


class Cell(Base):
    """A claimed grid coordinate.

    The coordinate is the primary key, so at most one ownership record can
    exist per cell. Once ``locked`` is set the row is never modified again.
    """

    __tablename__ = "cell"
    __table_args__ = (
        Index("ix_cell_session_id", "session_id"),
        Index("ix_cell_ip", "ip"),
    )

    x: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    y: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    # Normalised "#rrggbb".
    color: Mapped[str] = mapped_column(String(7), nullable=False)
    session_id: Mapped[str] = mapped_column(Text, nullable=False)
    ip: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    locked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    @property
    def key(self) -> str:
        """Return the ``"x,y"`` key used by the grid payload."""
        return f"{self.x},{self.y}"

    def is_owned_by(self, session_id: str, ip: str) -> bool:
        """Return True if the cell belongs to the given identity."""
        return self.session_id == session_id and self.ip == ip
