from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from hr_portal.core import timeutils
from hr_portal.core.dependencies import require_feature
from hr_portal.core.errors import to_http_error
from hr_portal.core.permissions import Feature
from hr_portal.models.attendance import AttendanceRecord
from hr_portal.models.auth import UserInfo
from hr_portal.models.leave import LeaveRequest
from hr_portal.models.permission import PermissionRequest
from hr_portal.models.report import Dashboard, MonthlySummary, TeamAttendance
from hr_portal.services.attendance_service import attendance_service
from hr_portal.services.report_service import report_service

router = APIRouter(prefix="/reports", tags=["reports"])

_reports = require_feature(Feature.REPORTS)


@router.get("/dashboard", response_model=Dashboard)
async def dashboard(
    day: date | None = None,
    user: UserInfo = Depends(require_feature(Feature.DASHBOARD)),  # noqa: B008
):
    try:
        return await report_service.dashboard(user, day or timeutils.local_today())
    except Exception as err:
        raise to_http_error(err, "Failed to build dashboard") from err


@router.get("/team", response_model=TeamAttendance)
async def team_attendance(
    day: date | None = None,
    place: str | None = None,
    search: str | None = None,
    user: UserInfo = Depends(require_feature(Feature.MY_TEAM)),  # noqa: B008
):
    try:
        return await report_service.team_attendance(day or timeutils.local_today(), place, search)
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve team attendance") from err


@router.get("/monthly-summary", response_model=MonthlySummary)
async def monthly_summary(
    start: date,
    end: date,
    user: UserInfo = Depends(require_feature(Feature.MONTHLY_ATTENDANCE)),  # noqa: B008
):
    if end < start:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end must not be before start")
    try:
        return await report_service.monthly_summary(start, end)
    except Exception as err:
        raise to_http_error(err, "Failed to build monthly summary") from err


@router.get("/today", response_model=list[AttendanceRecord])
async def todays_attendance(day: date | None = None, user: UserInfo = Depends(_reports)):  # noqa: B008
    try:
        return await report_service.todays_attendance(day or timeutils.local_today())
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve attendance report") from err


@router.get("/leave", response_model=list[LeaveRequest])
async def leave_report(
    start: date | None = None,
    end: date | None = None,
    user: UserInfo = Depends(_reports),  # noqa: B008
):
    try:
        return await report_service.leave_report(start, end)
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve leave report") from err


@router.get("/permissions", response_model=list[PermissionRequest])
async def permission_report(user: UserInfo = Depends(_reports)):  # noqa: B008
    try:
        return await report_service.permission_report()
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve permission report") from err


@router.get("/attendance/{year}", response_model=list[AttendanceRecord])
async def employee_year_attendance(
    year: int,
    employee_id: str = Query(..., min_length=1),
    name: str = "",
    user: UserInfo = Depends(_reports),  # noqa: B008
):
    try:
        return await attendance_service.get_attendance_for_year(employee_id, name, year)
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve yearly attendance") from err
