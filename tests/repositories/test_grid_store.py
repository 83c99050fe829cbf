"""Tests for the cell store."""

import pytest

from pixel_canvas.models import Cell
from pixel_canvas.repositories import GridStore
from pixel_canvas.services.errors import (
    ConflictError,
    LockedError,
    NotFoundError,
    NotOwnerError,
)

from conftest import START


@pytest.fixture()
def grid(db_session) -> GridStore:
    return GridStore(db_session)


def test_claim_inserts_unlocked_cell(grid, alice) -> None:
    grid.claim(3, 4, "#123456", alice, now=START)

    cell = grid.get(3, 4)
    assert cell is not None
    assert cell.color == "#123456"
    assert cell.is_owned_by(alice.session_id, alice.ip)
    assert cell.locked is False
    assert cell.key == "3,4"


def test_claim_existing_coordinate_conflicts_and_keeps_owner(grid, alice, bob) -> None:
    grid.claim(3, 4, "#123456", alice, now=START)

    with pytest.raises(ConflictError):
        grid.claim(3, 4, "#abcdef", bob, now=START)

    cell = grid.get(3, 4)
    assert cell.session_id == alice.session_id
    assert cell.color == "#123456"
    assert grid.count() == 1


def test_recolor_changes_only_color(grid, alice) -> None:
    grid.claim(1, 1, "#000000", alice, now=START)

    grid.recolor(1, 1, "#ffffff", alice)

    cell = grid.get(1, 1)
    assert (cell.x, cell.y) == (1, 1)
    assert cell.color == "#ffffff"
    assert cell.is_owned_by(alice.session_id, alice.ip)
    assert cell.locked is False


def test_recolor_failures_are_diagnosed(grid, alice, bob) -> None:
    with pytest.raises(NotFoundError):
        grid.recolor(9, 9, "#ffffff", alice)

    grid.claim(1, 1, "#000000", alice, now=START)
    with pytest.raises(NotOwnerError):
        grid.recolor(1, 1, "#ffffff", bob)

    grid.lock_by_session(alice.session_id)
    with pytest.raises(LockedError):
        grid.recolor(1, 1, "#ffffff", alice)
    assert grid.get(1, 1).color == "#000000"


def test_release_removes_owned_unlocked_cell(grid, alice) -> None:
    grid.claim(2, 2, "#000000", alice, now=START)

    grid.release(2, 2, alice)

    assert grid.get(2, 2) is None


def test_release_rejects_foreign_locked_and_missing_cells(grid, alice, bob) -> None:
    with pytest.raises(NotFoundError):
        grid.release(2, 2, alice)

    grid.claim(2, 2, "#000000", alice, now=START)
    with pytest.raises(NotOwnerError):
        grid.release(2, 2, bob)

    grid.lock_by_session(alice.session_id)
    with pytest.raises(LockedError):
        grid.release(2, 2, alice)
    assert grid.get(2, 2) is not None


def test_lock_by_session_is_idempotent(grid, alice, bob) -> None:
    grid.claim(0, 0, "#000000", alice, now=START)
    grid.claim(0, 1, "#000000", alice, now=START)
    grid.claim(5, 5, "#000000", bob, now=START)

    assert grid.lock_by_session(alice.session_id) == 2
    assert grid.lock_by_session(alice.session_id) == 0

    assert grid.get(0, 0).locked is True
    assert grid.get(0, 1).locked is True
    assert grid.get(5, 5).locked is False


def test_lock_by_session_can_be_restricted_to_ip(grid, alice) -> None:
    grid.claim(0, 0, "#000000", alice, now=START)

    assert grid.lock_by_session(alice.session_id, ip="192.0.2.99") == 0
    assert grid.lock_by_session(alice.session_id, ip=alice.ip) == 1


def test_neighbours_returns_three_by_three_window(grid, alice, bob) -> None:
    grid.claim(10, 10, "#000000", alice, now=START)
    grid.claim(11, 11, "#000000", bob, now=START)
    grid.claim(12, 12, "#000000", alice, now=START)

    around = {(c.x, c.y) for c in grid.neighbours(10, 11)}
    assert around == {(10, 10), (11, 11)}

    mine = {(c.x, c.y) for c in grid.neighbours(11, 11, alice)}
    assert mine == {(10, 10), (12, 12)}


def test_counts_and_listing(grid, alice, bob) -> None:
    assert grid.count() == 0
    assert grid.list_all() == []

    grid.claim(0, 0, "#000000", alice, now=START)
    grid.claim(0, 1, "#000000", alice, now=START)
    grid.claim(1, 1, "#000000", bob, now=START)

    assert grid.count() == 3
    assert grid.count_owned(alice) == 2
    assert {(c.x, c.y) for c in grid.list_owned(bob)} == {(1, 1)}
    assert all(isinstance(c, Cell) for c in grid.list_all())
