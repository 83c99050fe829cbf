"""Background locking of idle sessions.

This module provides the LockSweeper, which permanently locks the cells of
sessions that have been idle longer than the configured session duration, and
the LockSweepWorker that runs it on a fixed period inside the application's
event loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from pixel_canvas.core.settings import Settings, settings
from pixel_canvas.db.time import utcnow
from pixel_canvas.repositories import GridStore, SessionActivityStore

# Configure logger for this module
logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    """Totals from one sweep."""

    sessions: int = 0
    cells: int = 0
    failures: int = 0


class LockSweeper:
    """Locks every unlocked cell owned by an idle session.

    Only ever moves cells from unlocked to locked, so it is safe to run
    alongside the placement engine and to run repeatedly.
    """

    def __init__(
        self,
        config: Settings | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.settings = config or settings
        self.clock = clock

    def sweep(self, db: Session, now: datetime | None = None) -> SweepReport:
        """Lock the cells of sessions idle since ``now - session_duration``.

        Each session is committed separately; a failure on one session is
        logged and rolled back without stopping the sweep.
        """
        now = now or self.clock()
        cutoff = now - self.settings.session_duration
        report = SweepReport()

        idle = SessionActivityStore(db).list_idle_since(
            cutoff,
            exempt_loopback=self.settings.exempt_loopback,
            only_with_unlocked_cells=True,
        )
        db.rollback()

        for session_id in idle:
            try:
                locked = self._lock_if_still_idle(db, session_id, cutoff)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                report.failures += 1
                logger.error("Failed to lock idle session %s: %s", session_id, e, exc_info=True)
                continue
            if locked:
                report.sessions += 1
                report.cells += locked

        if report.cells:
            logger.info(
                "Locked %d cells across %d idle sessions", report.cells, report.sessions
            )
        return report

    @staticmethod
    def _lock_if_still_idle(db: Session, session_id: str, cutoff: datetime) -> int:
        # Lock the session row first, the same order the placement engine uses.
        activity = SessionActivityStore(db).lock_row(session_id)
        if activity is None or not _before(activity.last_activity, cutoff):
            return 0
        return GridStore(db).lock_by_session(session_id)


def _before(moment: datetime, cutoff: datetime) -> bool:
    # SQLite hands back naive datetimes; every stored value is UTC.
    if moment.tzinfo is None and cutoff.tzinfo is not None:
        cutoff = cutoff.replace(tzinfo=None)
    return moment < cutoff


class LockSweepWorker:
    """Runs the lock sweep periodically in the background.

    A missed or delayed tick only delays locking; the sweep is idempotent.
    """

    def __init__(
        self,
        sweeper: LockSweeper | None = None,
        session_factory: sessionmaker[Session] | None = None,
        interval: float | None = None,
    ) -> None:
        """Initialize the worker.

        Args:
            sweeper: Sweeper to run. Defaults to one bound to the app settings.
            session_factory: Factory for per-tick sessions. Defaults to ``SessionLocal``.
            interval: Seconds between sweeps. Defaults to the configured period.
        """
        self.sweeper = sweeper or LockSweeper()
        self._session_factory = session_factory
        self.interval = max(
            0.01,
            float(interval if interval is not None else settings.lock_sweep_interval_seconds),
        )
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()
        self.last_report: SweepReport | None = None

    @property
    def running(self) -> bool:
        """Return True while the background loop is active."""
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background sweep loop."""
        if self.running:
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self._run())
        logger.info("Started lock sweeper (every %.1fs)", self.interval)

    async def stop(self) -> None:
        """Stop the background sweep loop."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None
        logger.info("Stopped lock sweeper")

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                self.last_report = await asyncio.to_thread(self.sweep_once)
            except SQLAlchemyError as e:
                logger.warning("Lock sweep failed: %s", e)
            except Exception:
                logger.exception("Unexpected error in lock sweep")
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            except TimeoutError:
                continue

    def sweep_once(self) -> SweepReport:
        """Run one sweep in a fresh database session."""
        factory = self._session_factory
        if factory is None:
            from pixel_canvas.db.session import SessionLocal

            factory = SessionLocal
        with factory() as db:
            return self.sweeper.sweep(db)
