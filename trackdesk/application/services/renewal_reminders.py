"""Warranty renewal reminders written into the admin's notifications."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from trackdesk.application.services.sync_registry import SyncRegistry
from trackdesk.core.constants import (
    COLLECTION_NOTIFICATIONS,
    COLLECTION_RENEWALS,
    ID_FIELD,
    OBJECT_LAST_RENEWAL_CHECK,
)
from trackdesk.domain.enums import NotificationType
from trackdesk.domain.exceptions import (
    NotAuthenticatedException,
    PartitionUnavailableException,
)
from trackdesk.domain.value_objects import Identity
from trackdesk.shared.telemetry import add_span_attributes, traced
from trackdesk.shared.utils.datetime import parse_iso_date, utc_now

logger = logging.getLogger(__name__)

# Days before expiry on which a reminder is raised
NOTIFICATION_DAYS = (0, 1, 5, 10, 30)


def reminder_message(item_name: str, days_left: int) -> str:
    if days_left == 0:
        return f'The warranty for "{item_name}" is expiring today.'
    return f'The warranty for "{item_name}" is expiring in {days_left} day(s).'


def _notified_today(
    notifications: list[dict[str, Any]], renewal_id: str, days_left: int, today: date
) -> bool:
    marker = f"{days_left} day"
    for notification in notifications:
        if notification.get("refId") != renewal_id:
            continue
        if marker not in str(notification.get("message", "")):
            continue
        try:
            if parse_iso_date(notification.get("createdAt", "")) == today:
                return True
        except (TypeError, ValueError):
            continue
    return False


class RenewalReminderService:
    """Raise reminders for renewals expiring in 0, 1, 5, 10 or 30 days."""

    def __init__(self, registry: SyncRegistry, *, snapshot_timeout: float | None = None) -> None:
        self._registry = registry
        self._snapshot_timeout = snapshot_timeout

    @staticmethod
    def collect_due(
        renewals: list[dict[str, Any]],
        notifications: list[dict[str, Any]],
        today: date,
    ) -> list[dict[str, Any]]:
        """Return the notifications to create for today.

        Expiry day reminders are always raised; earlier ones are skipped when
        the same renewal was already reminded today for the same day count.
        Renewals without a parseable renewalDate are ignored.
        """
        created_at = utc_now().isoformat()
        due: list[dict[str, Any]] = []
        for renewal in renewals:
            try:
                days_left = (parse_iso_date(renewal.get("renewalDate")) - today).days
            except (AttributeError, TypeError, ValueError):
                logger.debug("Skipping renewal %s without a valid date", renewal.get(ID_FIELD))
                continue
            if days_left not in NOTIFICATION_DAYS:
                continue
            renewal_id = renewal.get(ID_FIELD)
            if days_left > 0 and _notified_today(notifications, renewal_id, days_left, today):
                continue
            due.append(
                {
                    "refId": renewal_id,
                    "type": NotificationType.RENEWAL.value,
                    "message": reminder_message(renewal.get("itemName", ""), days_left),
                    "createdAt": created_at,
                    "read": False,
                }
            )
        return due

    @traced("renewals.run")
    async def run(self, identity: Identity | None, today: date | None = None) -> list[str]:
        """Check the admin's renewals and store the due reminders.

        Returns:
            Ids of the notifications created.

        Raises:
            NotAuthenticatedException: No identity.
            PartitionUnavailableException: Caller is not an admin.
        """
        if identity is None:
            raise NotAuthenticatedException()
        if not identity.is_admin:
            raise PartitionUnavailableException(COLLECTION_RENEWALS, identity.role.value)

        today = today or utc_now().date()
        async with (
            self._registry.collection(COLLECTION_RENEWALS, identity) as renewals,
            self._registry.collection(COLLECTION_NOTIFICATIONS, identity) as notifications,
            self._registry.object(OBJECT_LAST_RENEWAL_CHECK, identity) as last_check,
        ):
            for cache in (renewals, notifications):
                await cache.wait_loaded(self._snapshot_timeout)

            due = self.collect_due(renewals.data, notifications.data, today)
            created = [await notifications.add(notification) for notification in due]
            await last_check.set({"checkedAt": utc_now().isoformat(), "created": len(created)})
        add_span_attributes(count=len(created))
        logger.info("Renewal check for %s created %d reminders", identity.subject_id, len(created))
        return created
