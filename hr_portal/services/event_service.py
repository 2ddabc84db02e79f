"""Birthdays, work anniversaries and wish notifications."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from hr_portal.core import timeutils
from hr_portal.core.config import settings
from hr_portal.core.sharepoint import SharePointClient, SharePointError, escape_odata, sharepoint_client
from hr_portal.models.events import (
    EmployeeEvent,
    EmployeeEventRecord,
    EmployeeEventRecordInput,
    EventType,
    Notification,
)

logger = logging.getLogger(__name__)

_EVENT_SELECT = "Id,Title,Raghunatahn,WorkAnniversary,MailID,Personalid"

# Python attribute → list column ("Raghunatahn" holds the date of birth)
_EVENT_FIELDS: list[tuple[str, str]] = [
    ("name", "Title"),
    ("dob", "Raghunatahn"),
    ("work_anniversary", "WorkAnniversary"),
    ("email", "MailID"),
    ("personal_id", "Personalid"),
]

_WISH_TITLES = {
    EventType.BIRTHDAY: "Birthday Wish",
    EventType.ANNIVERSARY: "Work Anniversary Wish",
}


def _event_date(value: str | None, year: int) -> date | None:
    if not value:
        return None
    try:
        return timeutils.parse_date(value)
    except ValueError:
        return timeutils.parse_loose_date(value, year)


class EventService:
    def __init__(self, client: SharePointClient | None = None) -> None:
        self.client = client or sharepoint_client

    @property
    def site(self) -> str:
        return settings.attendance_site_url

    async def _event_items(self) -> list[dict[str, Any]]:
        return await self.client.get_items(self.site, settings.EVENTS_LIST, select=_EVENT_SELECT)

    async def get_upcoming_events(self, today: date) -> list[EmployeeEvent]:
        try:
            items = await self._event_items()
        except SharePointError as err:
            logger.warning("Failed to fetch events (%s)", err.status)
            return []

        events: list[tuple[int, EmployeeEvent]] = []
        for item in items:
            for column, suffix, event_type in (
                ("Raghunatahn", "dob", EventType.BIRTHDAY),
                ("WorkAnniversary", "anniv", EventType.ANNIVERSARY),
            ):
                day = _event_date(item.get(column), today.year)
                if day is None or day.month != today.month:
                    continue
                event = EmployeeEvent(
                    id=f"{item.get('Id')}-{suffix}",
                    employee_name=item.get("Title"),
                    type=event_type,
                    date=day.isoformat(),
                    mail_id=item.get("MailID"),
                )
                events.append((day.day, event))

        events.sort(key=lambda e: e[0])
        return [event for _, event in events]

    async def get_all_event_records(self) -> list[EmployeeEventRecord]:
        items = await self._event_items()
        return [
            EmployeeEventRecord(
                id=str(item.get("Id", "")),
                **{attr: item.get(column) for attr, column in _EVENT_FIELDS},
            )
            for item in items
        ]

    async def add_event_record(self, data: EmployeeEventRecordInput) -> EmployeeEventRecord:
        values = data.model_dump()
        fields = {column: values[attr] for attr, column in _EVENT_FIELDS if values.get(attr) is not None}
        item = await self.client.create_item(self.site, settings.EVENTS_LIST, fields)
        return EmployeeEventRecord(id=str(item.get("Id", "")), **values)

    async def update_event_record(self, record_id: str, data: EmployeeEventRecordInput) -> None:
        values = data.model_dump(exclude_unset=True)
        fields = {column: values[attr] for attr, column in _EVENT_FIELDS if attr in values}
        if fields:
            await self.client.update_item(self.site, settings.EVENTS_LIST, record_id, fields)

    async def delete_event_record(self, record_id: str) -> None:
        await self.client.delete_item(self.site, settings.EVENTS_LIST, record_id)

    # Notifications

    async def send_wish(
        self, recipient_email: str, sender_name: str, message: str, event_type: EventType
    ) -> Notification:
        fields = {
            "Title": _WISH_TITLES[event_type],
            "RecipientEmail": recipient_email,
            "SenderName": sender_name,
            "Status": "Unread",
            "Notifications": message,
        }
        item = await self.client.create_item(self.site, settings.NOTIFICATIONS_LIST, fields)
        logger.info("%s sent to %s by %s", fields["Title"], recipient_email, sender_name)
        return self._transform_notification({**fields, **item})

    def _transform_notification(self, item: dict[str, Any]) -> Notification:
        return Notification(
            id=str(item.get("Id", "")),
            title=item.get("Title"),
            message=item.get("Notifications"),
            recipient_email=item.get("RecipientEmail"),
            sender_name=item.get("SenderName"),
            status=item.get("Status") or "Unread",
            category="Wish",
            timestamp=item.get("Created"),
        )

    async def get_notifications(self, email: str) -> list[Notification]:
        if not email:
            return []
        try:
            items = await self.client.get_items(
                self.site,
                settings.NOTIFICATIONS_LIST,
                filter=f"RecipientEmail eq '{escape_odata(email)}' and Status eq 'Unread'",
                orderby="Created desc",
            )
        except SharePointError as err:
            logger.warning("Failed to fetch notifications for %s (%s)", email, err.status)
            return []
        return [self._transform_notification(item) for item in items]

    async def mark_as_read(self, notification_id: str, email: str) -> None:
        item = await self.client.get_item(self.site, settings.NOTIFICATIONS_LIST, notification_id)
        recipient = (item.get("RecipientEmail") or "").lower()
        if not email or recipient != email.lower():
            raise PermissionError("Notification belongs to another user")
        await self.client.update_item(self.site, settings.NOTIFICATIONS_LIST, notification_id, {"Status": "Read"})


event_service = EventService()
