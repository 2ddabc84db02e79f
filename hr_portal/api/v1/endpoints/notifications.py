from __future__ import annotations

from fastapi import APIRouter, Depends, status

from hr_portal.core.dependencies import get_current_user
from hr_portal.core.errors import to_http_error
from hr_portal.models.auth import UserInfo
from hr_portal.models.events import Notification
from hr_portal.services.event_service import event_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[Notification])
async def my_notifications(user: UserInfo = Depends(get_current_user)):  # noqa: B008
    try:
        return await event_service.get_notifications(user.email or "")
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve notifications") from err


@router.post("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_as_read(notification_id: str, user: UserInfo = Depends(get_current_user)):  # noqa: B008
    try:
        await event_service.mark_as_read(notification_id, user.email or "")
    except Exception as err:
        raise to_http_error(err, "Failed to update notification") from err
