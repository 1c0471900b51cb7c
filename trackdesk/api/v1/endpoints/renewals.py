"""Renewals API: run the warranty reminder pass for the calling admin."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends

from trackdesk.api.v1.dependencies import get_identity, get_renewal_service
from trackdesk.application.services import RenewalReminderService
from trackdesk.domain.value_objects import Identity
from trackdesk.schemas.renewal import RenewalRunResponse

router = APIRouter()


@router.post("/reminders", response_model=RenewalRunResponse)
async def run_reminders(
    identity: Annotated[Identity, Depends(get_identity)],
    service: Annotated[RenewalReminderService, Depends(get_renewal_service)],
    today: date | None = None,
) -> RenewalRunResponse:
    """Create reminders for renewals expiring in 0, 1, 5, 10 or 30 days."""
    return RenewalRunResponse(created=await service.run(identity, today))
