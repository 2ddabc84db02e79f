"""Attendance, shift and regularization models."""

from __future__ import annotations

from pydantic import BaseModel


class Shift(BaseModel):
    id: str
    name: str | None = None
    start_time: str
    end_time: str
    time_zone: str | None = None


class ShiftInput(BaseModel):
    name: str
    start_time: str
    end_time: str
    time_zone: str | None = None


class AttendanceRecord(BaseModel):
    id: str
    employee_id: str | None = None
    name: str | None = None
    email: str | None = None
    date: str
    check_in_time: str | None = None
    check_out_time: str | None = None
    status: str | None = None
    shift_id: str | None = None
    place: str | None = None
    working_hours: str | None = None
    regularized: str | None = None


class AttendanceRecordInput(BaseModel):
    """Manual record entered by HR; date may be DD/MM/YYYY or YYYY-MM-DD."""

    employee_id: str
    name: str
    email: str | None = None
    date: str
    check_in_time: str | None = None
    check_out_time: str | None = None
    status: str = "Absent"
    shift_id: str | None = None
    place: str | None = None


class AttendanceRecordUpdate(BaseModel):
    date: str | None = None
    check_in_time: str | None = None
    check_out_time: str | None = None
    status: str | None = None
    working_hours: str | None = None
    place: str | None = None


class AttendanceStatus(BaseModel):
    state: str
    message: str | None = None
    time_zone: str | None = None
    shift: Shift | None = None
    today: AttendanceRecord | None = None


class CheckInRegularizationInput(BaseModel):
    date: str
    reason: str


class RegularizationRequest(BaseModel):
    id: str
    employee_name: str | None = None
    mail_id: str | None = None
    date: str | None = None
    manager: str | None = None
    reason: str | None = None
    status: str | None = None
    approver_comments: str | None = None
    created: str | None = None


class RegularizationCount(BaseModel):
    month: int
    year: int
    used: int
    limit: int
