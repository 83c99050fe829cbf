"""Tests for session activity tracking."""

from datetime import timedelta

from pixel_canvas.models import Cell
from pixel_canvas.repositories import SessionActivityStore

from conftest import START, naive


def test_touch_inserts_then_only_moves_last_activity(db_session) -> None:
    store = SessionActivityStore(db_session)
    created = START - timedelta(minutes=5)

    store.touch("sess_a", "203.0.113.5", now=START, created_at=created)
    later = START + timedelta(minutes=10)
    store.touch("sess_a", "198.51.100.1", now=later, created_at=later)

    row = store.get("sess_a")
    assert naive(row.created_at) == naive(created)
    assert naive(row.last_activity) == naive(later)
    assert row.ip == "203.0.113.5"


def test_touch_defaults_created_at_to_now(db_session) -> None:
    store = SessionActivityStore(db_session)

    store.touch("sess_a", "203.0.113.5", now=START)

    row = store.get("sess_a")
    assert naive(row.created_at) == naive(START)


def test_list_idle_since_skips_recent_and_loopback(db_session) -> None:
    store = SessionActivityStore(db_session)
    store.touch("old", "203.0.113.5", now=START - timedelta(hours=1))
    store.touch("fresh", "203.0.113.6", now=START)
    store.touch("old_local", "127.0.0.1", now=START - timedelta(hours=1))
    store.touch("old_mapped", "::ffff:127.0.0.1", now=START - timedelta(hours=1))

    cutoff = START - timedelta(minutes=30)

    assert store.list_idle_since(cutoff) == ["old"]
    assert set(store.list_idle_since(cutoff, exempt_loopback=False)) == {
        "old",
        "old_local",
        "old_mapped",
    }


def test_list_idle_since_can_skip_sessions_without_unlocked_cells(db_session) -> None:
    store = SessionActivityStore(db_session)
    past = START - timedelta(hours=1)
    store.touch("with_cells", "203.0.113.5", now=past)
    store.touch("all_locked", "203.0.113.6", now=past)
    store.touch("empty", "203.0.113.7", now=past)
    db_session.add_all([
        Cell(x=0, y=0, color="#000000", session_id="with_cells", ip="203.0.113.5",
             created_at=past, locked=False),
        Cell(x=0, y=1, color="#000000", session_id="all_locked", ip="203.0.113.6",
             created_at=past, locked=True),
    ])
    db_session.flush()

    cutoff = START - timedelta(minutes=30)

    assert store.list_idle_since(cutoff, only_with_unlocked_cells=True) == ["with_cells"]
    assert len(store.list_idle_since(cutoff)) == 3
