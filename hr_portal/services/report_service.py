"""Aggregated attendance views: monthly summary, dashboard and team."""

from __future__ import annotations

import logging
from datetime import date, timedelta

from hr_portal.core import timeutils
from hr_portal.models.attendance import AttendanceRecord
from hr_portal.models.auth import UserInfo
from hr_portal.models.employee import Employee
from hr_portal.models.leave import LeaveRequest
from hr_portal.models.permission import PermissionRequest
from hr_portal.models.report import (
    Absentee,
    Dashboard,
    DashboardStats,
    MonthlySummary,
    MonthlySummaryRow,
    TeamAttendance,
    TeamStats,
)
from hr_portal.services.attendance_service import AttendanceService, attendance_service, is_regularized
from hr_portal.services.employee_service import EmployeeService, employee_service
from hr_portal.services.event_service import EventService, event_service
from hr_portal.services.leave_service import LeaveService, leave_service
from hr_portal.services.permission_service import PermissionService, permission_service

logger = logging.getLogger(__name__)

_TEAM_EXCLUDED_DEPARTMENTS = ("Information Technology", "Accounts", "HR")
_ALL_PLACES_LEVELS = ("Admin", "HR")


def _belongs(record: AttendanceRecord, employee: Employee) -> bool:
    return record.employee_id == employee.id or (bool(record.name) and record.name == employee.name)


def _same_place(place: str | None, other: str | None) -> bool:
    return (place or "").strip().lower() == (other or "").strip().lower()


def classify_status(status: str | None) -> str | None:
    """Bucket an attendance status for the monthly summary."""
    value = (status or "").lower()
    if not value:
        return None
    if value in ("present", "on time"):
        return "present"
    if value in ("half-day", "half day", "late"):
        return "half_day"
    if "leave" in value:
        return "leave"
    if value in ("absent", "in"):
        return "absent"
    if value == "holiday":
        return "holiday"
    return None


def weekdays(start: date, end: date) -> list[date]:
    days = []
    current = start
    while current <= end:
        if not timeutils.is_weekend(current):
            days.append(current)
        current += timedelta(days=1)
    return days


def summarize_month(
    employees: list[Employee],
    records: list[AttendanceRecord],
    start: date,
    end: date,
) -> list[MonthlySummaryRow]:
    by_date: dict[str, list[AttendanceRecord]] = {}
    for record in records:
        by_date.setdefault(record.date, []).append(record)

    days = [timeutils.format_date(d) for d in weekdays(start, end)]
    rows = []
    for employee in employees:
        row = MonthlySummaryRow(
            employee_id=employee.id,
            name=employee.name,
            department=employee.department,
            location=employee.place,
        )
        for day in days:
            record = next((r for r in by_date.get(day, []) if _belongs(r, employee)), None)
            bucket = classify_status(record.status) if record else None
            if bucket:
                setattr(row, bucket, getattr(row, bucket) + 1)
        row.total_working_days = row.present + row.absent + row.leave + row.half_day
        rows.append(row)
    return rows


class ReportService:
    def __init__(
        self,
        employees: EmployeeService | None = None,
        attendance: AttendanceService | None = None,
        leave: LeaveService | None = None,
        events: EventService | None = None,
        permissions: PermissionService | None = None,
    ) -> None:
        self.employees = employees or employee_service
        self.attendance = attendance or attendance_service
        self.leave = leave or leave_service
        self.events = events or event_service
        self.permissions = permissions or permission_service

    async def monthly_summary(self, start: date, end: date) -> MonthlySummary:
        employees = await self.employees.get_all_employees()
        records = await self.attendance.get_attendance_in_range(start, end)
        today_str = timeutils.format_date(timeutils.local_today())
        return MonthlySummary(
            from_date=start.isoformat(),
            to_date=end.isoformat(),
            rows=summarize_month(employees, records, start, end),
            missed_checkouts=[
                r for r in records if r.check_in_time and not r.check_out_time and r.date != today_str
            ],
            regularized=[r for r in records if is_regularized(r.regularized)],
        )

    async def dashboard(self, user: UserInfo, day: date) -> Dashboard:
        employees = await self.employees.get_all_employees()
        records = await self.attendance.get_attendance_for_date(day)
        logger.debug("Dashboard for %s on %s: %s records", user.email, day, len(records))

        sees_all = user.permission_level in _ALL_PLACES_LEVELS

        def visible(place: str | None) -> bool:
            if sees_all:
                return True
            if not user.place:
                return False
            return _same_place(place, user.place)

        merged: list[AttendanceRecord] = []
        for record in records:
            employee = next((e for e in employees if _belongs(record, e)), None)
            merged.append(
                record.model_copy(
                    update={
                        "name": record.name or (employee.name if employee else "Unknown"),
                        "place": record.place or (employee.place if employee else "N/A"),
                        "status": record.status or "Present",
                    }
                )
            )

        visible_records = [r for r in merged if visible(r.place)]
        visible_employees = [e for e in employees if visible(e.place)]
        absentees = [e for e in visible_employees if not any(_belongs(r, e) for r in records)]

        stats = DashboardStats(
            total_employees=len(visible_employees),
            checked_in=len(visible_records),
            on_leave=sum(1 for r in visible_records if "Leave" in (r.status or "")),
            absent=len(absentees),
        )

        by_location: dict[str, DashboardStats] = {}
        if sees_all:
            for employee in employees:
                place = employee.place or "N/A"
                loc = by_location.setdefault(place, DashboardStats())
                loc.total_employees += 1
                if any(_belongs(r, employee) for r in records):
                    loc.checked_in += 1
                else:
                    loc.absent += 1
            for record in merged:
                if "Leave" in (record.status or "") and record.place in by_location:
                    by_location[record.place].on_leave += 1

        return Dashboard(
            date=day.isoformat(),
            stats=stats,
            absentees=[Absentee(name=e.name, department=e.department, location=e.place) for e in absentees],
            by_location=by_location,
            upcoming_leaves=await self.leave.upcoming_leaves(day),
            events=await self.events.get_upcoming_events(day),
        )

    async def team_attendance(
        self, day: date, place: str | None = None, search: str | None = None
    ) -> TeamAttendance:
        employees = await self.employees.get_all_employees()
        records = await self.attendance.get_attendance_for_date(day)

        team: list[AttendanceRecord] = []
        for record in records:
            employee = next((e for e in employees if _belongs(record, e)), None)
            if not employee or employee.department in _TEAM_EXCLUDED_DEPARTMENTS:
                continue
            team.append(
                record.model_copy(
                    update={
                        "name": record.name or employee.name or "Unknown",
                        "place": record.place or employee.place or "N/A",
                        "status": record.status or "Present",
                    }
                )
            )

        if place and place != "All":
            team = [r for r in team if _same_place(r.place, place)]
        if search:
            team = [r for r in team if search.lower() in (r.name or "").lower()]

        stats = TeamStats(
            total=len(team),
            present=sum(1 for r in team if r.status == "IN"),
            absent=sum(1 for r in team if r.status == "Absent"),
            on_leave=sum(1 for r in team if "Leave" in (r.status or "") or "Holiday" in (r.status or "")),
        )
        return TeamAttendance(date=day.isoformat(), stats=stats, records=team)

    async def todays_attendance(self, day: date) -> list[AttendanceRecord]:
        records = await self.attendance.get_attendance_for_date(day)
        return [
            r.model_copy(
                update={
                    "working_hours": r.working_hours
                    or (timeutils.calculate_duration(r.date, r.check_in_time, r.check_out_time) if r.check_out_time else None)
                }
            )
            for r in records
        ]

    async def leave_report(self, start: date | None = None, end: date | None = None) -> list[LeaveRequest]:
        return await self.leave.get_all_leave_requests(start, end)

    async def permission_report(self) -> list[PermissionRequest]:
        return await self.permissions.get_all_permission_requests()


report_service = ReportService()
