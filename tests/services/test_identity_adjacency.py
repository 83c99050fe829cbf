"""Tests for identity helpers and adjacency rules."""

import re
from types import SimpleNamespace

import pytest

from pixel_canvas.services.adjacency import chebyshev, touches_any
from pixel_canvas.services.identity import is_exempt, is_loopback, new_session_id


def _cells(*coords):
    return [SimpleNamespace(x=x, y=y) for x, y in coords]


def test_new_session_ids_are_unique_and_prefixed() -> None:
    first, second = new_session_id(), new_session_id()

    assert first != second
    assert re.fullmatch(r"sess_\d+_[0-9a-f]{12}", first)


@pytest.mark.parametrize(
    ("ip", "expected"),
    [
        ("127.0.0.1", True),
        ("127.8.9.10", True),
        ("::1", True),
        ("::ffff:127.0.0.1", True),
        ("203.0.113.5", False),
        ("::ffff:203.0.113.5", False),
        ("testclient", False),
        ("", False),
        (None, False),
    ],
)
def test_is_loopback(ip, expected) -> None:
    assert is_loopback(ip) is expected


def test_is_exempt_follows_flag() -> None:
    assert is_exempt("127.0.0.1") is True
    assert is_exempt("127.0.0.1", exempt_loopback=False) is False
    assert is_exempt("203.0.113.5") is False


def test_chebyshev_counts_diagonals_as_one() -> None:
    assert chebyshev(0, 0, 1, 1) == 1
    assert chebyshev(0, 0, 0, 1) == 1
    assert chebyshev(0, 0, 2, 1) == 2
    assert chebyshev(4, 4, 4, 4) == 0


def test_touches_any_requires_distance_exactly_one() -> None:
    assert touches_any(5, 5, _cells((6, 6)))
    assert touches_any(5, 5, _cells((4, 5), (9, 9)))
    assert not touches_any(5, 5, _cells((5, 5)))
    assert not touches_any(5, 5, _cells((7, 5)))
    assert not touches_any(5, 5, [])

