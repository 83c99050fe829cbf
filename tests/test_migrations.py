"""Schema creation through Alembic and ``init_db``."""

from sqlalchemy import create_engine, inspect

from pixel_canvas.init_db import init_db
from pixel_canvas.scripts.migrate import run_upgrade_head


def test_upgrade_head_creates_canvas_tables(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    monkeypatch.setenv("ALEMBIC_URL", url)

    run_upgrade_head()

    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        assert {"cell", "daily_quota", "session_activity"} <= set(inspector.get_table_names())
        assert inspector.get_pk_constraint("cell")["constrained_columns"] == ["x", "y"]
        assert inspector.get_pk_constraint("daily_quota")["constrained_columns"] == ["ip", "day"]
    finally:
        engine.dispose()


def test_init_db_is_repeatable():
    init_db()
    init_db()
