"""Error taxonomy for placement, release and locking.

Every business rejection is a :class:`PlacementError` carrying a stable
machine-checkable ``kind``, the HTTP status the API maps it to, and a
human-readable reason. Storage failures are a separate class so callers can
tell a rule violation from an infrastructure problem.
"""

from __future__ import annotations


class PlacementError(Exception):
    """Base class for expected, locally handled rejections."""

    kind = "placement"
    status_code = 400
    default_reason = "Request rejected"

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason or self.default_reason
        super().__init__(self.reason)

    def as_detail(self) -> dict[str, str]:
        """Return the error payload exposed to clients."""
        return {"kind": self.kind, "error": self.reason}


class ValidationError(PlacementError):
    """Malformed or out-of-range input."""

    kind = "validation"
    default_reason = "Invalid x, y, or color"


class ConflictError(PlacementError):
    """The cell is owned by another identity."""

    kind = "conflict"
    status_code = 409
    default_reason = "Pixel already taken"


class NotOwnerError(PlacementError):
    """A mutation targeted a cell owned by someone else."""

    kind = "not_owner"
    status_code = 403
    default_reason = "Pixel belongs to another session"


class LockedError(PlacementError):
    """The caller's own cell is locked and can no longer change."""

    kind = "locked"
    status_code = 403
    default_reason = "Pixel is locked"


class QuotaExceededError(PlacementError):
    """The identity used up its daily claims."""

    kind = "quota_exceeded"
    status_code = 429
    default_reason = "Daily limit reached"


class SessionCapError(PlacementError):
    """The session already holds the maximum number of cells."""

    kind = "session_cap"
    default_reason = "Session pixel limit reached"


class AdjacencyError(PlacementError):
    """The target does not touch any reference cell."""

    kind = "adjacency"
    default_reason = "Pixel must be adjacent to an existing pixel (including diagonally)"


class NotFoundError(PlacementError):
    """There is no cell of the caller's at that coordinate."""

    kind = "not_found"
    status_code = 404
    default_reason = "Pixel not found"


class StorageError(RuntimeError):
    """Raised when the underlying store fails.

    Not retried by the engine; the caller decides what to do.
    """

    kind = "storage"
    status_code = 500
