"""Aggregated attendance views: monthly summary, dashboard, team."""

from __future__ import annotations

from pydantic import BaseModel

from hr_portal.models.attendance import AttendanceRecord
from hr_portal.models.events import EmployeeEvent
from hr_portal.models.leave import UpcomingLeave


class MonthlySummaryRow(BaseModel):
    employee_id: str | None = None
    name: str | None = None
    department: str | None = None
    location: str | None = None
    present: int = 0
    absent: int = 0
    leave: int = 0
    half_day: int = 0
    holiday: int = 0
    total_working_days: int = 0


class MonthlySummary(BaseModel):
    from_date: str
    to_date: str
    rows: list[MonthlySummaryRow] = []
    missed_checkouts: list[AttendanceRecord] = []
    regularized: list[AttendanceRecord] = []


class Absentee(BaseModel):
    name: str | None = None
    department: str | None = None
    location: str | None = None


class DashboardStats(BaseModel):
    total_employees: int = 0
    checked_in: int = 0
    on_leave: int = 0
    absent: int = 0


class Dashboard(BaseModel):
    date: str
    stats: DashboardStats
    absentees: list[Absentee] = []
    by_location: dict[str, DashboardStats] = {}
    upcoming_leaves: list[UpcomingLeave] = []
    events: list[EmployeeEvent] = []


class TeamStats(BaseModel):
    total: int = 0
    present: int = 0
    absent: int = 0
    on_leave: int = 0


class TeamAttendance(BaseModel):
    date: str
    stats: TeamStats
    records: list[AttendanceRecord] = []
