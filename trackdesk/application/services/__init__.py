"""Application services: partition resolution, live caches, envelopes, and the
form-entry and renewal workflows built on them."""

from trackdesk.application.services.envelope_codec import (
    DecodeError,
    DecryptResult,
    EnvelopeCodec,
)
from trackdesk.application.services.form_entries import (
    FormEntryService,
    check_required_fields,
)
from trackdesk.application.services.live_collection import LiveCollection, PendingWrite
from trackdesk.application.services.live_object import LiveObject
from trackdesk.application.services.path_resolver import PathResolver
from trackdesk.application.services.renewal_reminders import RenewalReminderService
from trackdesk.application.services.sync_registry import SyncRegistry

__all__ = [
    "DecodeError",
    "DecryptResult",
    "EnvelopeCodec",
    "FormEntryService",
    "LiveCollection",
    "LiveObject",
    "PathResolver",
    "PendingWrite",
    "RenewalReminderService",
    "SyncRegistry",
    "check_required_fields",
]
