"""Renewal reminder API schemas."""

from pydantic import BaseModel, Field


class RenewalRunResponse(BaseModel):
    """Notifications created by a renewal reminder pass."""

    created: list[str] = Field(default_factory=list, description="New notification ids")
