from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from hr_portal.core import timeutils
from hr_portal.core.dependencies import require_feature, require_role
from hr_portal.core.errors import to_http_error
from hr_portal.core.permissions import Feature
from hr_portal.models.auth import UserInfo
from hr_portal.models.leave import (
    LeaveBalance,
    LeaveBalanceUpdate,
    LeaveRequest,
    LeaveRequestInput,
    UpcomingLeave,
    UpcomingLeaveInput,
)
from hr_portal.services.leave_service import leave_service

router = APIRouter(prefix="/leave", tags=["leave"])

_leave = require_feature(Feature.LEAVE)
_manage = require_role("Admin", "HR")


@router.get("/requests", response_model=list[LeaveRequest])
async def my_leave_requests(user: UserInfo = Depends(_leave)):  # noqa: B008
    try:
        return await leave_service.get_leave_requests(user.email or "")
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve leave requests") from err


@router.get("/requests/all", response_model=list[LeaveRequest])
async def all_leave_requests(
    start: date | None = None,
    end: date | None = None,
    user: UserInfo = Depends(_manage),  # noqa: B008
):
    try:
        return await leave_service.get_all_leave_requests(start, end)
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve leave requests") from err


@router.post("/requests", response_model=LeaveRequest, status_code=status.HTTP_201_CREATED)
async def submit_leave_request(data: LeaveRequestInput, user: UserInfo = Depends(_leave)):  # noqa: B008
    try:
        return await leave_service.submit_leave_request(user, data, timeutils.local_today())
    except Exception as err:
        raise to_http_error(err, "Failed to submit leave request") from err


@router.get("/balances", response_model=list[LeaveBalance])
async def all_leave_balances(user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        return await leave_service.get_all_leave_balances()
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve leave balances") from err


@router.get("/balances/me", response_model=LeaveBalance)
async def my_leave_balance(user: UserInfo = Depends(_leave)):  # noqa: B008
    try:
        balance = await leave_service.get_employee_leave_balance(user.name or "")
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve leave balance") from err

    if balance is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No leave balance found for '{user.name}'",
        )
    return balance


@router.patch("/balances/{balance_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_leave_balance(
    balance_id: str,
    data: LeaveBalanceUpdate,
    user: UserInfo = Depends(_manage),  # noqa: B008
):
    try:
        await leave_service.update_leave_balance(balance_id, data)
    except Exception as err:
        raise to_http_error(err, "Failed to update leave balance") from err


@router.delete("/balances/{balance_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_leave_balance(balance_id: str, user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        await leave_service.delete_leave_balance(balance_id)
    except Exception as err:
        raise to_http_error(err, "Failed to delete leave balance") from err


@router.get("/upcoming", response_model=list[UpcomingLeave])
async def upcoming_leaves(
    limit: int = Query(5, ge=1, le=50),
    user: UserInfo = Depends(_leave),  # noqa: B008
):
    try:
        return await leave_service.upcoming_leaves(timeutils.local_today(), limit=limit)
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve upcoming leaves") from err


@router.get("/upcoming/all", response_model=list[UpcomingLeave])
async def all_upcoming_leaves(user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        return await leave_service.get_all_upcoming_leaves()
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve upcoming leaves") from err


@router.post("/upcoming", response_model=UpcomingLeave, status_code=status.HTTP_201_CREATED)
async def add_upcoming_leave(data: UpcomingLeaveInput, user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        return await leave_service.add_upcoming_leave(data)
    except Exception as err:
        raise to_http_error(err, "Failed to add upcoming leave") from err


@router.patch("/upcoming/{leave_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_upcoming_leave(
    leave_id: str,
    data: UpcomingLeaveInput,
    user: UserInfo = Depends(_manage),  # noqa: B008
):
    try:
        await leave_service.update_upcoming_leave(leave_id, data)
    except Exception as err:
        raise to_http_error(err, "Failed to update upcoming leave") from err


@router.delete("/upcoming/{leave_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_upcoming_leave(leave_id: str, user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        await leave_service.delete_upcoming_leave(leave_id)
    except Exception as err:
        raise to_http_error(err, "Failed to delete upcoming leave") from err
