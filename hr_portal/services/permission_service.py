"""Short-absence permission requests (at most a couple of hours)."""

from __future__ import annotations

import logging
import re
from typing import Any

from hr_portal.core import timeutils
from hr_portal.core.config import settings
from hr_portal.core.sharepoint import SharePointClient, escape_odata, sharepoint_client
from hr_portal.models.auth import UserInfo
from hr_portal.models.permission import PermissionRequest, PermissionRequestInput

logger = logging.getLogger(__name__)

_PERMISSION_SELECT = "Id,Created,Title,Author/Title,Date,Hours,Detail,Status,ApproverComments,Manager/Title,Manager/EMail"
_HOURS_SUFFIX = re.compile(r"hrs?", re.IGNORECASE)


class PermissionRequestError(ValueError):
    """Permission form failed validation."""


def normalize_hours(value: Any) -> str:
    if value is None or value == "":
        return "N/A"
    return _HOURS_SUFFIX.sub("", str(value), count=1).strip()


def _normalize_date(value: str | None) -> str:
    if not value:
        return "N/A"
    try:
        return timeutils.to_iso(value)
    except ValueError:
        return value


def validate_hours(value: str) -> float:
    try:
        hours = float(normalize_hours(value))
    except ValueError as err:
        raise PermissionRequestError("Please enter a valid number of hours.") from err

    if not hours > 0:
        raise PermissionRequestError("Please enter a valid number of hours.")
    if hours > settings.MAX_PERMISSION_HOURS:
        raise PermissionRequestError(
            f"Maximum permission allowed is {settings.MAX_PERMISSION_HOURS:g} hours. "
            "Please apply for leave for longer durations."
        )
    return hours


class PermissionService:
    def __init__(self, client: SharePointClient | None = None) -> None:
        self.client = client or sharepoint_client

    def _transform(self, item: dict[str, Any]) -> PermissionRequest:
        manager = item.get("Manager") if isinstance(item.get("Manager"), dict) else {}
        author = item.get("Author") if isinstance(item.get("Author"), dict) else {}
        return PermissionRequest(
            id=str(item.get("Id", item.get("ID", ""))),
            employee_name=item.get("Title") or author.get("Title") or "N/A",
            date=_normalize_date(item.get("Date")),
            hours=normalize_hours(item.get("Hours")),
            reason=item.get("Detail") or item.get("Reason") or "",
            status=item.get("Status") or "Pending",
            manager=manager.get("Title") or manager.get("EMail") or "",
            manager_email=manager.get("EMail"),
            approval_comments=item.get("ApproverComments") or "",
            submitted_on=_normalize_date(item.get("Created")),
        )

    async def get_permission_requests(self, employee_name: str) -> list[PermissionRequest]:
        if not employee_name:
            return []
        items = await self.client.get_items(
            settings.hr_site_url,
            settings.PERMISSION_LIST,
            select=_PERMISSION_SELECT,
            expand="Author,Manager",
            filter=f"Title eq '{escape_odata(employee_name)}'",
            orderby="Created desc",
            top=500,
        )
        return [self._transform(item) for item in items]

    async def get_all_permission_requests(self) -> list[PermissionRequest]:
        items = await self.client.get_items(
            settings.hr_site_url,
            settings.PERMISSION_LIST,
            select=_PERMISSION_SELECT,
            expand="Author,Manager",
        )
        return [self._transform(item) for item in items]

    async def create_permission_request(self, user: UserInfo, data: PermissionRequestInput) -> PermissionRequest:
        hours = validate_hours(data.hours)
        fields = {
            "Title": user.name or "",
            "Date": timeutils.to_iso(data.date),
            "Hours": f"{hours:g}",
            "Detail": data.reason,
            "Status": "Pending Manager Approval",
        }
        item = await self.client.create_item(settings.hr_site_url, settings.PERMISSION_LIST, fields)
        logger.info("Permission request submitted by %s for %s", user.email, fields["Date"])
        return self._transform(item)


permission_service = PermissionService()
