from __future__ import annotations

from fastapi import APIRouter, Depends, status

from hr_portal.core.dependencies import get_current_user, require_role
from hr_portal.core.errors import to_http_error
from hr_portal.models.attendance import Shift, ShiftInput
from hr_portal.models.auth import UserInfo
from hr_portal.services.attendance_service import attendance_service

router = APIRouter(prefix="/shifts", tags=["shifts"])


@router.get("", response_model=list[Shift])
async def list_shifts(user: UserInfo = Depends(get_current_user)):  # noqa: B008
    try:
        return await attendance_service.get_all_shifts()
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve shifts") from err


@router.post("", response_model=Shift, status_code=status.HTTP_201_CREATED)
async def add_shift(data: ShiftInput, user: UserInfo = Depends(require_role("Admin"))):  # noqa: B008
    try:
        return await attendance_service.add_shift(data)
    except Exception as err:
        raise to_http_error(err, "Failed to add shift") from err


@router.delete("/{shift_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shift(shift_id: str, user: UserInfo = Depends(require_role("Admin"))):  # noqa: B008
    try:
        await attendance_service.delete_shift(shift_id)
    except Exception as err:
        raise to_http_error(err, "Failed to delete shift") from err
