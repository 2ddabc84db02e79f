"""Manager approvals across regularization, leave and permission lists."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from hr_portal.core.config import settings
from hr_portal.core.sharepoint import SharePointClient, escape_odata, sharepoint_client
from hr_portal.models.approval import ApprovalDecision, ApprovalType, PendingApproval
from hr_portal.models.auth import UserInfo
from hr_portal.services.leave_service import LeaveService
from hr_portal.services.permission_service import PermissionService

logger = logging.getLogger(__name__)

_STATUS_FIELDS = ("Status", "status", "ApprovalStatus")
_COMMENT_FIELDS = ("ApproverComments", "ApprovalComments", "Comments", "AdminComments")
_ITEM_SELECT = "*,Manager/Title,Manager/EMail"


class ApprovalError(Exception):
    """Item is no longer awaiting a decision."""


class NotApproverError(PermissionError):
    """Caller is not the approver assigned to the item."""


def _is_pending(status: str | None) -> bool:
    return "pending" in (status or "").lower()


def _list_for(approval_type: ApprovalType) -> str:
    if approval_type is ApprovalType.REGULARIZATION:
        return settings.CHECKIN_REGULARIZATION_LIST
    if approval_type is ApprovalType.LEAVE:
        return settings.LEAVE_REQUEST_LIST
    return settings.PERMISSION_LIST


def resolve_fields(approval_type: ApprovalType, item: dict[str, Any]) -> tuple[str, str]:
    """Pick the status / comments column names actually present on an item."""
    status_field = next((f for f in _STATUS_FIELDS if f in item), "Status")
    default_comments = "ApprovalComments" if approval_type is ApprovalType.LEAVE else "ApproverComments"
    comments_field = next((f for f in _COMMENT_FIELDS if f in item), default_comments)
    return status_field, comments_field


class ApprovalService:
    def __init__(self, client: SharePointClient | None = None) -> None:
        self.client = client or sharepoint_client
        self.leave = LeaveService(self.client)
        self.permission = PermissionService(self.client)

    async def _pending_regularizations(self, approver: UserInfo, today: date) -> list[PendingApproval]:
        is_admin = approver.permission_level == "Admin"
        if not is_admin and not approver.email:
            logger.warning("No manager email for non-admin approver, returning no regularizations")
            return []

        month_start = today.replace(day=1).isoformat()
        query = (
            "(Status eq 'Pending Manager Approval' or Status eq 'Pending') "
            f"and Created ge datetime'{month_start}T00:00:00Z'"
        )
        if not is_admin:
            query += f" and Manager/EMail eq '{escape_odata(approver.email)}'"

        items = await self.client.get_items(
            settings.hr_site_url,
            settings.CHECKIN_REGULARIZATION_LIST,
            select="*,Manager/Title,Manager/EMail",
            expand="Manager",
            filter=query,
            orderby="Created desc",
        )
        pending = []
        for item in items:
            manager = item.get("Manager") if isinstance(item.get("Manager"), dict) else {}
            pending.append(
                PendingApproval(
                    id=str(item.get("Id", "")),
                    type=ApprovalType.REGULARIZATION,
                    employee_name=item.get("EmployeeName") or item.get("Title"),
                    date=item.get("Date"),
                    detail=item.get("Reason"),
                    status=item.get("Status"),
                    manager=manager.get("Title"),
                    created=item.get("Created"),
                    extra={"mail_id": item.get("MailID")},
                )
            )
        return pending

    async def get_pending(
        self, approval_type: ApprovalType, approver: UserInfo, today: date
    ) -> list[PendingApproval]:
        if approval_type is ApprovalType.REGULARIZATION:
            return await self._pending_regularizations(approver, today)

        email = (approver.email or "").lower()
        if not email:
            return []

        if approval_type is ApprovalType.LEAVE:
            requests = await self.leave.get_all_leave_requests()
            return [
                PendingApproval(
                    id=r.id,
                    type=approval_type,
                    employee_name=r.employee_name,
                    date=f"{r.from_date} - {r.to_date}",
                    detail=r.reason,
                    status=r.status,
                    manager=r.manager,
                    created=r.submitted_on,
                    extra={"leave_type": r.leave_type, "leave_duration": r.leave_duration},
                )
                for r in requests
                if _is_pending(r.status) and (r.manager_email or "").lower() == email
            ]

        requests = await self.permission.get_all_permission_requests()
        return [
            PendingApproval(
                id=r.id,
                type=approval_type,
                employee_name=r.employee_name,
                date=r.date,
                detail=r.reason,
                status=r.status,
                manager=r.manager,
                created=r.submitted_on,
                extra={"hours": r.hours},
            )
            for r in requests
            if _is_pending(r.status) and (r.manager_email or "").lower() == email
        ]

    async def update_status(
        self,
        approval_type: ApprovalType,
        item_id: str,
        decision: ApprovalDecision,
        comments: str,
        approver: UserInfo,
    ) -> dict[str, str]:
        list_title = _list_for(approval_type)
        item = await self.client.get_item(
            settings.hr_site_url, list_title, item_id, select=_ITEM_SELECT, expand="Manager"
        )

        if approver.permission_level != "Admin":
            manager = item.get("Manager") if isinstance(item.get("Manager"), dict) else {}
            manager_email = (manager.get("EMail") or "").lower()
            if not approver.email or manager_email != approver.email.lower():
                raise NotApproverError(f"{approval_type.value} #{item_id} is assigned to another approver")

        status_field, comments_field = resolve_fields(approval_type, item)
        current = item.get(status_field)
        if not _is_pending(current):
            raise ApprovalError(f"{approval_type.value} #{item_id} is already {current or 'decided'}")

        fields = {status_field: decision.value, comments_field: comments}
        await self.client.update_item(settings.hr_site_url, list_title, item_id, fields)
        logger.info("%s #%s set to %s", approval_type.value, item_id, decision.value)
        return fields


approval_service = ApprovalService()
