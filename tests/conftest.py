# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOCK_SWEEPER_ENABLED", "false")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from pixel_canvas.api.dependencies import get_engine_dep
from pixel_canvas.core.settings import Settings
from pixel_canvas.db.session import Base
from pixel_canvas.db.session import get_db as app_get_session
from pixel_canvas.main import app as fastapi_app
from pixel_canvas.services.identity import Identity
from pixel_canvas.services.placement import PlacementEngine

TEST_DB_URL = "sqlite://"
START = datetime(2026, 10, 18, 12, 0, 0, tzinfo=UTC)


class FrozenClock:
    """Controllable replacement for ``utcnow``."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def naive(moment: datetime) -> datetime:
    """Strip tzinfo the way SQLite returns stored datetimes."""
    return moment.replace(tzinfo=None)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session(engine: Engine, session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def canvas_settings() -> Settings:
    """Rules used by most tests: a 100x100 grid and five pixels per day."""
    return Settings(
        GRID_SIZE=100,
        MAX_PIXELS_PER_DAY=5,
        SESSION_DURATION_SECONDS=30 * 60,
        ADJACENCY_SCOPE="grid",
        EXEMPT_LOOPBACK=True,
    )


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def placement(canvas_settings: Settings, clock: FrozenClock) -> PlacementEngine:
    return PlacementEngine(canvas_settings, clock=clock)


@pytest.fixture()
def alice() -> Identity:
    return Identity(session_id="sess_alice", ip="203.0.113.5")


@pytest.fixture()
def bob() -> Identity:
    return Identity(session_id="sess_bob", ip="198.51.100.7")


@pytest.fixture()
def local_visitor() -> Identity:
    return Identity(session_id="sess_local", ip="127.0.0.1")


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    session_factory: sessionmaker[Session],
    placement: PlacementEngine,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_engine_dep] = lambda: placement
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_engine_dep, None)


@pytest.fixture()
def client_factory(app: FastAPI, db_session: Session) -> Iterator[Callable[[str], TestClient]]:
    """Return a factory of clients that each appear to come from one IP.

    Depends on ``db_session`` so tables are wiped after API tests too.
    """
    clients: list[TestClient] = []

    def _make(ip: str = "203.0.113.10") -> TestClient:
        test_client = TestClient(app)
        test_client.headers["X-Forwarded-For"] = ip
        clients.append(test_client)
        return test_client

    try:
        yield _make
    finally:
        for test_client in clients:
            test_client.close()


@pytest.fixture()
def client(client_factory: Callable[[str], TestClient]) -> TestClient:
    return client_factory("203.0.113.10")
