"""Leave requests, leave balances and the upcoming-leaves board."""

from __future__ import annotations

import logging
import re
from datetime import date, timedelta
from typing import Any

from hr_portal.core import timeutils
from hr_portal.core.config import settings
from hr_portal.core.sharepoint import SharePointClient, SharePointError, sharepoint_client
from hr_portal.models.auth import UserInfo
from hr_portal.models.leave import (
    LeaveBalance,
    LeaveBalanceUpdate,
    LeaveRequest,
    LeaveRequestInput,
    LeaveType,
    UpcomingLeave,
    UpcomingLeaveInput,
)

logger = logging.getLogger(__name__)

_LEAVE_SELECT = (
    "Id,Created,Title,Author/Title,Author/EMail,From,To,Leave,LeaveType,Detail,Status,"
    "Manager/Title,Manager/EMail,ApprovalComments"
)
_LEAVE_EXPAND = "Author,Manager"

_BALANCE_COLUMNS: dict[str, re.Pattern[str]] = {
    "cl": re.compile(r"^CL$|^Casual", re.IGNORECASE),
    "el": re.compile(r"^EL$|^Earned", re.IGNORECASE),
    "balance": re.compile(r"Balance", re.IGNORECASE),
    "lop": re.compile(r"LOP|Loss", re.IGNORECASE),
    "emp_name": re.compile(r"Emp|Name|Title", re.IGNORECASE),
}


class LeaveRequestError(ValueError):
    """Leave form failed validation."""


def _to_float(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        return float(str(value))
    except ValueError:
        return 0.0


def _normalize_name(name: str) -> str:
    return " ".join(name.lower().split())


def _person(item: dict[str, Any], key: str) -> dict[str, Any]:
    value = item.get(key)
    return value if isinstance(value, dict) else {}


def validate_leave_request(data: LeaveRequestInput, today: date) -> tuple[date, date]:
    start = timeutils.parse_date(data.from_date)
    end = timeutils.parse_date(data.to_date)

    if end < start:
        raise LeaveRequestError('The "To" date cannot be earlier than the "From" date.')

    if data.leave_type is LeaveType.VACATION:
        notice = today + timedelta(days=settings.VACATION_NOTICE_DAYS)
        if start < notice:
            raise LeaveRequestError(
                f"Vacation/Function leave must be applied at least {settings.VACATION_NOTICE_DAYS} days in advance."
            )
    return start, end


class LeaveService:
    def __init__(self, client: SharePointClient | None = None) -> None:
        self.client = client or sharepoint_client

    @property
    def site(self) -> str:
        return settings.hr_site_url

    def _transform_request(self, item: dict[str, Any]) -> LeaveRequest:
        author = _person(item, "Author")
        manager = _person(item, "Manager")
        return LeaveRequest(
            id=str(item.get("Id", "")),
            employee_name=item.get("Title") or author.get("Title") or "Unknown",
            leave_type=item.get("LeaveType") or "General",
            submitted_on=item.get("Created"),
            from_date=item.get("From") or item.get("EventDate") or item.get("Created"),
            to_date=item.get("To") or item.get("EndDate") or item.get("From") or item.get("Created"),
            leave_duration=item.get("Leave") or item.get("LeaveDuration") or "N/A",
            status=item.get("Status") or "Pending",
            manager=manager.get("Title") or "System (Auto)",
            manager_email=manager.get("EMail"),
            reason=item.get("Detail") or item.get("Reason") or "",
            approval_comments=item.get("ApprovalComments") or item.get("ApproverComments") or "",
        )

    async def _all_request_items(self) -> list[dict[str, Any]]:
        try:
            return await self.client.get_items(
                self.site,
                settings.LEAVE_REQUEST_LIST,
                select=_LEAVE_SELECT,
                expand=_LEAVE_EXPAND,
                orderby="Created desc",
            )
        except SharePointError as err:
            if err.status == 404:
                logger.warning("Leave Request list not found")
                return []
            raise

    async def get_leave_requests(self, email: str) -> list[LeaveRequest]:
        items = await self._all_request_items()
        email_lower = email.lower()
        return [
            self._transform_request(item)
            for item in items
            if (_person(item, "Author").get("EMail") or "").lower() == email_lower
        ]

    async def get_all_leave_requests(self, start: date | None = None, end: date | None = None) -> list[LeaveRequest]:
        requests = [self._transform_request(item) for item in await self._all_request_items()]
        if not start and not end:
            return requests

        selected: list[LeaveRequest] = []
        for request in requests:
            try:
                req_start = timeutils.parse_date(request.from_date or "")
                req_end = timeutils.parse_date(request.to_date or request.from_date or "")
            except ValueError:
                continue
            if start and req_end < start:
                continue
            if end and req_start > end:
                continue
            selected.append(request)
        return selected

    async def submit_leave_request(self, user: UserInfo, data: LeaveRequestInput, today: date) -> LeaveRequest:
        start, end = validate_leave_request(data, today)
        fields = {
            "Title": user.name or "",
            "From": start.isoformat(),
            "To": end.isoformat(),
            "LeaveType": data.leave_type.value,
            "Leave": data.leave_category.value,
            "Detail": data.reason,
            "Status": "Pending",
        }
        item = await self.client.create_item(self.site, settings.LEAVE_REQUEST_LIST, fields)
        logger.info("Leave request submitted by %s (%s to %s)", user.email, start, end)
        return self._transform_request(item)

    # Balances

    async def _balance_columns(self) -> dict[str, str]:
        try:
            fields = await self.client.get_field_names(self.site, settings.LEAVE_BALANCE_LIST)
        except SharePointError:
            logger.warning("Leave balance field discovery failed, using default column names")
            fields = []

        columns: dict[str, str] = {}
        for key, pattern in _BALANCE_COLUMNS.items():
            match = next(
                (f for f in fields if pattern.search(f["title"]) or pattern.search(f["internal_name"])),
                None,
            )
            columns[key] = match["internal_name"] if match else key
        return columns

    async def get_all_leave_balances(self) -> list[LeaveBalance]:
        columns = await self._balance_columns()
        try:
            items = await self.client.get_items(self.site, settings.LEAVE_BALANCE_LIST)
        except SharePointError as err:
            if err.status == 404:
                return []
            raise

        return [
            LeaveBalance(
                id=str(item.get("Id", "")),
                emp_name=item.get(columns["emp_name"]) or item.get("Title") or "N/A",
                cl=_to_float(item.get(columns["cl"])),
                el=_to_float(item.get(columns["el"])),
                balance=_to_float(item.get(columns["balance"])),
                lop=_to_float(item.get(columns["lop"])),
            )
            for item in items
        ]

    async def get_employee_leave_balance(self, employee_name: str) -> LeaveBalance | None:
        balances = await self.get_all_leave_balances()
        search = _normalize_name(employee_name)
        if not balances or not search:
            return None

        for balance in balances:
            if _normalize_name(balance.emp_name) == search:
                return balance

        for balance in balances:
            record = _normalize_name(balance.emp_name)
            if search in record or record in search:
                return balance

        parts = [p for p in search.split(" ") if len(p) > 1]
        if parts:
            for balance in balances:
                record = balance.emp_name.lower()
                if all(part in record for part in parts):
                    return balance

        logger.warning("No leave balance record found for %r", employee_name)
        return None

    async def update_leave_balance(self, balance_id: str, data: LeaveBalanceUpdate) -> None:
        columns = await self._balance_columns()
        fields = {columns[k]: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if fields:
            await self.client.update_item(self.site, settings.LEAVE_BALANCE_LIST, balance_id, fields)

    async def delete_leave_balance(self, balance_id: str) -> None:
        await self.client.delete_item(self.site, settings.LEAVE_BALANCE_LIST, balance_id)

    # Upcoming leaves board

    async def get_all_upcoming_leaves(self) -> list[UpcomingLeave]:
        try:
            items = await self.client.get_items(self.site, settings.UPCOMING_LEAVES_LIST)
        except SharePointError:
            logger.warning("Failed to fetch upcoming leaves")
            return []

        return [
            UpcomingLeave(
                id=str(item.get("Id", "")),
                employee_name=item.get("Title") or "",
                date=item.get("field_1") or item.get("Date") or item.get("Dates") or item.get("UpcomingDate") or "",
            )
            for item in items
        ]

    async def upcoming_leaves(self, today: date, limit: int = 5) -> list[UpcomingLeave]:
        entries: list[tuple[date | None, UpcomingLeave]] = []
        for leave in await self.get_all_upcoming_leaves():
            start, end = timeutils.parse_date_range(leave.date or "", today.year)
            if end and end < today:
                continue
            entries.append((start, leave))

        entries.sort(key=lambda e: (e[0] is None, e[0] or today))
        return [leave for _, leave in entries[:limit]]

    async def add_upcoming_leave(self, data: UpcomingLeaveInput) -> UpcomingLeave:
        item = await self.client.create_item(
            self.site, settings.UPCOMING_LEAVES_LIST, {"Title": data.employee_name, "Date": data.date}
        )
        return UpcomingLeave(id=str(item.get("Id", "")), employee_name=data.employee_name, date=data.date)

    async def update_upcoming_leave(self, leave_id: str, data: UpcomingLeaveInput) -> None:
        await self.client.update_item(
            self.site, settings.UPCOMING_LEAVES_LIST, leave_id, {"Title": data.employee_name, "Date": data.date}
        )

    async def delete_upcoming_leave(self, leave_id: str) -> None:
        await self.client.delete_item(self.site, settings.UPCOMING_LEAVES_LIST, leave_id)


leave_service = LeaveService()
