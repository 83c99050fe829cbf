"""Dialect-aware ``INSERT ... ON CONFLICT`` construction.

SQLite and PostgreSQL both support upserts, but SQLAlchemy exposes them through
dialect-specific ``insert`` constructs. Repositories call :func:`upsert_insert`
so their atomic insert-if-absent and counter statements work on either backend.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def upsert_insert(db: Session, model: Any) -> Any:
    """Return an ``insert`` construct for ``model`` that supports ``on_conflict_*``.

    Raises:
        NotImplementedError: If the bound dialect has no upsert support here.
    """
    dialect = db.get_bind().dialect.name
    try:
        factory = _INSERTS[dialect]
    except KeyError as err:
        raise NotImplementedError(f"Upserts are not supported on {dialect!r}") from err
    return factory(model)
