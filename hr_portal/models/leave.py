"""Leave request, leave balance and upcoming-leave models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class LeaveType(str, Enum):
    VACATION = "Vacation/Function"
    SICK = "Sick Leave"
    CASUAL = "Casual Leave"
    EMERGENCY = "Emergency"


class LeaveCategory(str, Enum):
    FULL_DAY = "Full Day Leave"
    HALF_DAY = "Half Day Leave"


class LeaveRequest(BaseModel):
    id: str
    employee_name: str | None = None
    leave_type: str | None = None
    submitted_on: str | None = None
    from_date: str | None = None
    to_date: str | None = None
    leave_duration: str | None = None
    status: str = "Pending"
    manager: str | None = None
    manager_email: str | None = None
    reason: str | None = None
    approval_comments: str | None = None


class LeaveRequestInput(BaseModel):
    from_date: str
    to_date: str
    leave_type: LeaveType
    leave_category: LeaveCategory = LeaveCategory.FULL_DAY
    reason: str = ""


class LeaveBalance(BaseModel):
    id: str
    emp_name: str
    cl: float = 0
    el: float = 0
    balance: float = 0
    lop: float = 0


class LeaveBalanceUpdate(BaseModel):
    emp_name: str | None = None
    cl: float | None = None
    el: float | None = None
    balance: float | None = None
    lop: float | None = None


class UpcomingLeave(BaseModel):
    id: str
    employee_name: str | None = None
    date: str | None = None


class UpcomingLeaveInput(BaseModel):
    employee_name: str
    date: str
