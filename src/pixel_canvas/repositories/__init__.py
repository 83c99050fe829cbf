"""Data access layer for cells, quotas and session activity."""

from .grid_repo import GridStore
from .quota_repo import QuotaLedger
from .session_repo import SessionActivityStore

__all__ = ["GridStore", "QuotaLedger", "SessionActivityStore"]
