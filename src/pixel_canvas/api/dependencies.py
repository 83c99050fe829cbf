"""Shared API dependencies: database session, engine and request identity."""

from typing import Annotated, NoReturn

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from pixel_canvas.core.settings import settings
from pixel_canvas.db.session import get_db
from pixel_canvas.services.errors import PlacementError, StorageError
from pixel_canvas.services.identity import Identity, new_session_id
from pixel_canvas.services.placement import PlacementEngine, get_placement_engine

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_engine_dep() -> PlacementEngine:
    """Return the placement engine."""
    return get_placement_engine()


EngineDep = Annotated[PlacementEngine, Depends(get_engine_dep)]


def client_ip(request: Request) -> str:
    """Return the caller's IP, honouring ``X-Forwarded-For`` behind a trusted proxy."""
    if settings.trust_proxy:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client is not None:
        return request.client.host
    return "unknown"


def get_identity(request: Request, response: Response) -> Identity:
    """Resolve the caller's identity, issuing a session cookie when missing."""
    session_id = request.cookies.get(settings.session_cookie_name)
    if not session_id:
        session_id = new_session_id()
        response.set_cookie(
            settings.session_cookie_name,
            session_id,
            httponly=True,
            samesite="lax",
        )
    return Identity(session_id=session_id, ip=client_ip(request))


IdentityDep = Annotated[Identity, Depends(get_identity)]


def raise_http(err: PlacementError | StorageError) -> NoReturn:
    """Translate an engine error into an ``HTTPException``."""
    if isinstance(err, StorageError):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"kind": err.kind, "error": "Internal storage failure"},
        ) from err
    raise HTTPException(status_code=err.status_code, detail=err.as_detail()) from err


def get_active_identity(identity: IdentityDep, db: SessionDep, engine: EngineDep) -> Identity:
    """Resolve the identity and record its activity once for this request."""
    try:
        engine.touch(db, identity)
    except StorageError as err:
        raise_http(err)
    return identity


# Identity whose session activity has been recorded; for read-only routes.
# Mutating routes take IdentityDep, the engine records activity itself.
ActiveIdentityDep = Annotated[Identity, Depends(get_active_identity)]
