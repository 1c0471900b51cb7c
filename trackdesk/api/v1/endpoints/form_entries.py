"""Custom form entries API: entries are encrypted at rest and decrypted on read."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from trackdesk.api.v1.dependencies import get_form_entry_service, get_identity
from trackdesk.application.services import FormEntryService
from trackdesk.domain.value_objects import Identity
from trackdesk.schemas.collection import CreatedResponse
from trackdesk.schemas.form_entry import FormDeleteResponse, FormEntryResponse, FormEntryWrite

router = APIRouter()


@router.get("/{form_id}/entries", response_model=list[FormEntryResponse])
async def list_entries(
    form_id: str,
    identity: Annotated[Identity, Depends(get_identity)],
    service: Annotated[FormEntryService, Depends(get_form_entry_service)],
) -> list[FormEntryResponse]:
    """Return the decrypted entries of a form, oldest first."""
    entries = await service.list_entries(form_id, identity)
    return [FormEntryResponse(**entry) for entry in entries]


@router.post("/{form_id}/entries", response_model=CreatedResponse, status_code=201)
async def add_entry(
    form_id: str,
    body: FormEntryWrite,
    identity: Annotated[Identity, Depends(get_identity)],
    service: Annotated[FormEntryService, Depends(get_form_entry_service)],
) -> CreatedResponse:
    """Validate required fields, then store the entry encrypted."""
    entry_id = await service.add_entry(form_id, body.data, identity)
    return CreatedResponse(id=entry_id)


@router.put("/{form_id}/entries/{entry_id}", status_code=204)
async def replace_entry(
    form_id: str,
    entry_id: str,
    body: FormEntryWrite,
    identity: Annotated[Identity, Depends(get_identity)],
    service: Annotated[FormEntryService, Depends(get_form_entry_service)],
) -> Response:
    await service.update_entry(form_id, entry_id, body.data, identity)
    return Response(status_code=204)


@router.delete("/{form_id}/entries/{entry_id}", status_code=204)
async def delete_entry(
    form_id: str,
    entry_id: str,
    identity: Annotated[Identity, Depends(get_identity)],
    service: Annotated[FormEntryService, Depends(get_form_entry_service)],
) -> Response:
    await service.delete_entry(form_id, entry_id, identity)
    return Response(status_code=204)


@router.delete("/{form_id}", response_model=FormDeleteResponse)
async def delete_form(
    form_id: str,
    identity: Annotated[Identity, Depends(get_identity)],
    service: Annotated[FormEntryService, Depends(get_form_entry_service)],
) -> FormDeleteResponse:
    """Delete a form and all of its entries."""
    deleted = await service.delete_form(form_id, identity)
    return FormDeleteResponse(form_id=form_id, deleted_entries=deleted)
