"""Collection and object API schemas."""

from typing import Any

from pydantic import BaseModel, Field


class CollectionResponse(BaseModel):
    """Mirrored records of the caller's partition of a collection."""

    data: list[dict[str, Any]] = Field(default_factory=list)
    loading: bool = Field(
        default=False, description="True until the first snapshot has arrived"
    )


class ObjectResponse(BaseModel):
    """Mirrored value of a single-object partition."""

    value: Any = None
    loading: bool = False


class CreatedResponse(BaseModel):
    """Response for creating a record under a new push key."""

    id: str = Field(..., description="Push key of the new record")
