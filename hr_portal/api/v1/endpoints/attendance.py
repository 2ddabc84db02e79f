from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status

from hr_portal.core import timeutils
from hr_portal.core.dependencies import get_current_user, require_feature, require_role
from hr_portal.core.errors import to_http_error
from hr_portal.core.permissions import Feature
from hr_portal.models.attendance import (
    AttendanceRecord,
    AttendanceRecordInput,
    AttendanceRecordUpdate,
    AttendanceStatus,
    CheckInRegularizationInput,
    RegularizationCount,
    RegularizationRequest,
)
from hr_portal.models.auth import UserInfo
from hr_portal.services.attendance_service import attendance_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attendance", tags=["attendance"])

_attendance = require_feature(Feature.ATTENDANCE)
_manage = require_role("Admin", "HR")


@router.get("/status", response_model=AttendanceStatus)
async def attendance_status(user: UserInfo = Depends(_attendance)):  # noqa: B008
    try:
        return await attendance_service.get_status(user)
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve attendance status") from err


@router.post("/check-in", response_model=AttendanceRecord)
async def check_in(user: UserInfo = Depends(_attendance)):  # noqa: B008
    try:
        return await attendance_service.check_in(user)
    except Exception as err:
        raise to_http_error(err, "Failed to check in") from err


@router.post("/check-out", response_model=AttendanceRecord)
async def check_out(user: UserInfo = Depends(_attendance)):  # noqa: B008
    try:
        return await attendance_service.check_out(user)
    except Exception as err:
        raise to_http_error(err, "Failed to check out") from err


@router.get("/today", response_model=AttendanceRecord | None)
async def today_attendance(user: UserInfo = Depends(_attendance)):  # noqa: B008
    try:
        return await attendance_service.get_today_attendance(user)
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve today's attendance") from err


@router.get("/history", response_model=list[AttendanceRecord])
async def attendance_history(
    start: date,
    end: date,
    employee_id: str | None = None,
    user: UserInfo = Depends(require_feature(Feature.MONTHLY_ATTENDANCE)),  # noqa: B008
):
    target = employee_id or user.employee_id
    if target != user.employee_id and user.permission_level not in ("Admin", "HR"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions. Required: Admin, HR",
        )
    if end < start:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end must not be before start")

    try:
        return await attendance_service.get_attendance_history(target or "", start, end)
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve attendance history") from err


@router.get("/missed-checkouts", response_model=list[AttendanceRecord])
async def missed_checkouts(user: UserInfo = Depends(_attendance)):  # noqa: B008
    try:
        return await attendance_service.get_missed_checkouts(user.employee_id or "", timeutils.local_today())
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve missed check-outs") from err


@router.post("/records/{record_id}/regularize", response_model=AttendanceRecord)
async def regularize(record_id: str, user: UserInfo = Depends(_attendance)):  # noqa: B008
    try:
        return await attendance_service.request_regularization(record_id, user)
    except Exception as err:
        raise to_http_error(err, "Failed to regularize attendance") from err


@router.get("/regularizations/count", response_model=RegularizationCount)
async def regularization_count(
    month: int | None = None,
    year: int | None = None,
    user: UserInfo = Depends(_attendance),  # noqa: B008
):
    today = timeutils.local_today()
    try:
        return await attendance_service.get_regularization_usage(
            user.employee_id or "", month or today.month, year or today.year
        )
    except Exception as err:
        raise to_http_error(err, "Failed to count regularizations") from err


@router.get("/records", response_model=list[AttendanceRecord])
async def records_for_date(day: date | None = None, user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        return await attendance_service.get_attendance_for_date(day or timeutils.local_today())
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve attendance records") from err


@router.post("/records", response_model=AttendanceRecord, status_code=status.HTTP_201_CREATED)
async def create_record(data: AttendanceRecordInput, user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        record = await attendance_service.create_attendance_record(data)
    except Exception as err:
        raise to_http_error(err, "Failed to create attendance record") from err
    logger.info("Attendance record %s created by %s", record.id, user.email)
    return record


@router.patch("/records/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_record(
    record_id: str,
    data: AttendanceRecordUpdate,
    user: UserInfo = Depends(_manage),  # noqa: B008
):
    try:
        await attendance_service.update_attendance_record(record_id, data)
    except Exception as err:
        raise to_http_error(err, "Failed to update attendance record") from err


@router.delete("/records/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(record_id: str, user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        await attendance_service.delete_attendance_record(record_id)
    except Exception as err:
        raise to_http_error(err, "Failed to delete attendance record") from err
    logger.info("Attendance record %s deleted by %s", record_id, user.email)


@router.post(
    "/checkin-regularizations",
    response_model=RegularizationRequest,
    status_code=status.HTTP_201_CREATED,
)
async def submit_checkin_regularization(
    data: CheckInRegularizationInput,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    try:
        return await attendance_service.submit_checkin_regularization(user, data)
    except Exception as err:
        raise to_http_error(err, "Failed to submit regularization request") from err


@router.get("/checkin-regularizations", response_model=list[RegularizationRequest])
async def checkin_regularization_history(user: UserInfo = Depends(get_current_user)):  # noqa: B008
    try:
        return await attendance_service.get_regularization_history(user.email or "", timeutils.local_today())
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve regularization requests") from err
