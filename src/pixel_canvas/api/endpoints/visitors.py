"""Recent visitor endpoint."""

from fastapi import APIRouter

from pixel_canvas.schemas.visitor import VisitorOut
from pixel_canvas.services.visitors import get_visitor_log

router = APIRouter(tags=["visitors"])


@router.get("/recent-visitors", response_model=list[VisitorOut])
async def get_recent_visitors() -> list[VisitorOut]:
    """Return recent visits, newest first, without addresses."""
    return [
        VisitorOut(
            city=visit.location.city,
            country=visit.location.country,
            region=visit.location.region,
            time=visit.timestamp_ms,
        )
        for visit in get_visitor_log().recent()
    ]
