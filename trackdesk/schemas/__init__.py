"""Pydantic request/response schemas for the API."""

from trackdesk.schemas.collection import CollectionResponse, CreatedResponse, ObjectResponse
from trackdesk.schemas.form_entry import FormDeleteResponse, FormEntryResponse, FormEntryWrite
from trackdesk.schemas.health import HealthResponse, ReadinessErrorResponse, ReadinessResponse
from trackdesk.schemas.renewal import RenewalRunResponse

__all__ = [
    "CollectionResponse",
    "CreatedResponse",
    "FormDeleteResponse",
    "FormEntryResponse",
    "FormEntryWrite",
    "HealthResponse",
    "ObjectResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "RenewalRunResponse",
]
