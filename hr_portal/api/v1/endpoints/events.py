from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from hr_portal.core import timeutils
from hr_portal.core.dependencies import get_current_user, require_role
from hr_portal.core.errors import to_http_error
from hr_portal.models.auth import UserInfo
from hr_portal.models.events import (
    EmployeeEvent,
    EmployeeEventRecord,
    EmployeeEventRecordInput,
    Notification,
    WishInput,
)
from hr_portal.services.event_service import event_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])

_manage = require_role("Admin", "HR")


@router.get("", response_model=list[EmployeeEvent])
async def upcoming_events(user: UserInfo = Depends(get_current_user)):  # noqa: B008
    try:
        return await event_service.get_upcoming_events(timeutils.local_today())
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve events") from err


@router.get("/records", response_model=list[EmployeeEventRecord])
async def list_event_records(user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        return await event_service.get_all_event_records()
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve event records") from err


@router.post("/records", response_model=EmployeeEventRecord, status_code=status.HTTP_201_CREATED)
async def add_event_record(data: EmployeeEventRecordInput, user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        return await event_service.add_event_record(data)
    except Exception as err:
        raise to_http_error(err, "Failed to add event record") from err


@router.patch("/records/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_event_record(
    record_id: str,
    data: EmployeeEventRecordInput,
    user: UserInfo = Depends(_manage),  # noqa: B008
):
    try:
        await event_service.update_event_record(record_id, data)
    except Exception as err:
        raise to_http_error(err, "Failed to update event record") from err


@router.delete("/records/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event_record(record_id: str, user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        await event_service.delete_event_record(record_id)
    except Exception as err:
        raise to_http_error(err, "Failed to delete event record") from err


@router.post("/wishes", response_model=Notification, status_code=status.HTTP_201_CREATED)
async def send_wish(data: WishInput, user: UserInfo = Depends(get_current_user)):  # noqa: B008
    try:
        return await event_service.send_wish(data.recipient_email, user.name or "", data.message, data.type)
    except Exception as err:
        raise to_http_error(err, "Failed to send wish") from err
