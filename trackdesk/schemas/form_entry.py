"""Custom form entry API schemas."""

from typing import Any

from pydantic import BaseModel, Field


class FormEntryWrite(BaseModel):
    """Body for creating or replacing an entry. Values are stored encrypted."""

    data: dict[str, Any] = Field(
        ...,
        description="Field name -> {value, notes, attachment, ...}; groups nest",
    )


class FormEntryResponse(BaseModel):
    """A decrypted form entry."""

    id: str
    formId: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)


class FormDeleteResponse(BaseModel):
    """Result of deleting a form together with its entries."""

    form_id: str
    deleted_entries: int
