"""Recent visitor schemas."""

from pydantic import BaseModel, Field


class VisitorOut(BaseModel):
    """A recent visit without the visitor's address."""

    city: str
    country: str
    region: str | None = None
    time: int = Field(..., description="Visit time in epoch milliseconds")
