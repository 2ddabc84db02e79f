"""Shifts, check-in/check-out and attendance regularization."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any

from hr_portal.core import timeutils
from hr_portal.core.config import settings
from hr_portal.core.sharepoint import SharePointClient, SharePointError, escape_odata, sharepoint_client
from hr_portal.models.attendance import (
    AttendanceRecord,
    AttendanceRecordInput,
    AttendanceRecordUpdate,
    AttendanceStatus,
    CheckInRegularizationInput,
    RegularizationCount,
    RegularizationRequest,
    Shift,
    ShiftInput,
)
from hr_portal.models.auth import UserInfo

logger = logging.getLogger(__name__)

_RECORD_SELECT = (
    "Id,EmployeeId,Title,StaffMail,Date,CheckInTime,CheckOutTime,Status,ShiftId,WorkingHours,Place,Regularized"
)
_MIDNIGHT = ("00:00", "12:00 AM")


class AttendanceError(Exception):
    """Attendance action rejected (outside window, no open record, ...)."""


class RegularizationLimitError(AttendanceError):
    pass


def status_for_hours(hours: float, half_day_below: float) -> str:
    if hours < 4:
        return "Absent"
    if hours < half_day_below:
        return "Half Day"
    return "Present"


def is_regularized(value: str | None) -> bool:
    return bool(value) and (value == "YES" or value.startswith("Yes"))


def _in_range(record: AttendanceRecord, start: date, end: date) -> bool:
    try:
        day = timeutils.parse_date(record.date)
    except ValueError:
        return False
    return start <= day <= end


def _is_overnight(shift: Shift) -> bool:
    return timeutils.parse_time(shift.end_time) <= timeutils.parse_time(shift.start_time)


def shift_day(local: datetime, state: timeutils.AttendanceState | None) -> date:
    """Calendar day an attendance record belongs to.

    Records are dated on the day their shift started, so a night-shift
    check-in after midnight lands on the previous day's record.
    """
    if state and state.window:
        return state.window.shift_start.date()
    return local.date()


def check_in_moment(record: AttendanceRecord, shift: Shift | None) -> datetime:
    start = timeutils.parse_date_time(record.date, record.check_in_time)
    if shift and _is_overnight(shift):
        window = timeutils.get_shift_window(shift.start_time, shift.end_time, start.date())
        if start < window.check_in_open:
            # checked in after midnight
            start += timedelta(days=1)
    return start


class AttendanceService:
    def __init__(self, client: SharePointClient | None = None) -> None:
        self.client = client or sharepoint_client

    @property
    def site(self) -> str:
        return settings.attendance_site_url

    def _transform_record(self, item: dict[str, Any]) -> AttendanceRecord:
        return AttendanceRecord(
            id=str(item.get("Id", "")),
            employee_id=str(item["EmployeeId"]) if item.get("EmployeeId") else None,
            name=item.get("Title"),
            email=item.get("StaffMail"),
            date=item.get("Date") or "",
            check_in_time=item.get("CheckInTime"),
            check_out_time=item.get("CheckOutTime"),
            status=item.get("Status"),
            shift_id=str(item["ShiftId"]) if item.get("ShiftId") else None,
            place=item.get("Place"),
            working_hours=item.get("WorkingHours"),
            regularized=item.get("Regularized"),
        )

    def _transform_shift(self, item: dict[str, Any]) -> Shift:
        return Shift(
            id=str(item.get("Id", "")),
            name=item.get("Title"),
            start_time=item.get("StartTime") or "09:00",
            end_time=item.get("EndTime") or "18:00",
            time_zone=item.get("TimeZone") or settings.DEFAULT_TIME_ZONE,
        )

    # Shifts

    async def get_all_shifts(self) -> list[Shift]:
        items = await self.client.get_items(self.site, settings.SHIFTS_LIST)
        return [self._transform_shift(item) for item in items]

    async def get_shift(self, shift_id: str | None) -> Shift | None:
        if not shift_id:
            return None
        for shift in await self.get_all_shifts():
            if shift.id == str(shift_id):
                return shift
        return None

    async def add_shift(self, data: ShiftInput) -> Shift:
        fields = {
            "Title": data.name,
            "StartTime": data.start_time,
            "EndTime": data.end_time,
            "TimeZone": data.time_zone or settings.DEFAULT_TIME_ZONE,
        }
        item = await self.client.create_item(self.site, settings.SHIFTS_LIST, fields)
        return self._transform_shift(item)

    async def delete_shift(self, shift_id: str) -> None:
        await self.client.delete_item(self.site, settings.SHIFTS_LIST, shift_id)

    # Reads

    async def _query(self, filter: str | None = None, top: int | None = 5000) -> list[AttendanceRecord]:  # noqa: A002
        items = await self.client.get_items(
            self.site,
            settings.ATTENDANCE_LIST,
            select=_RECORD_SELECT,
            filter=filter,
            orderby="Created desc",
            top=top,
        )
        return [self._transform_record(item) for item in items]

    # Date is matched in code, never in $filter

    async def get_record_for_day(self, employee_id: str, day: date) -> AttendanceRecord | None:
        records = await self._query(f"EmployeeId eq '{escape_odata(employee_id)}'")
        return next((r for r in records if _in_range(r, day, day)), None)

    async def get_today_attendance(self, user: UserInfo, now: datetime | None = None) -> AttendanceRecord | None:
        shift = await self.get_shift(user.shift_id)
        local = timeutils.local_now(shift.time_zone if shift else None, now)
        state = None
        if shift:
            state = timeutils.get_attendance_state(shift.start_time, shift.end_time, shift.time_zone, now)
        return await self.get_record_for_day(user.employee_id or "", shift_day(local, state))

    async def get_attendance_for_date(self, day: date) -> list[AttendanceRecord]:
        records = await self._query()
        return [r for r in records if _in_range(r, day, day)]

    async def get_attendance_for_year(self, employee_id: str, name: str, year: int) -> list[AttendanceRecord]:
        """Attendance for one employee from the per-year archive list ``Attendance {year}``.

        Older rows may only carry the employee's name, so either column matches.
        A missing archive list yields an empty result.
        """
        query = f"EmployeeId eq '{escape_odata(employee_id)}'"
        if name:
            query = f"({query} or Title eq '{escape_odata(name)}')"
        try:
            items = await self.client.get_items(
                self.site,
                f"{settings.ATTENDANCE_LIST} {year}",
                select=_RECORD_SELECT,
                filter=query,
                orderby="Created desc",
                top=5000,
            )
        except SharePointError as err:
            if err.status == 404:
                logger.warning("No attendance archive list for %s", year)
                return []
            raise
        records = [self._transform_record(item) for item in items]
        return [r for r in records if r.date.endswith(f"/{year}")]

    async def get_attendance_history(self, employee_id: str, start: date, end: date) -> list[AttendanceRecord]:
        records = await self._query(f"EmployeeId eq '{escape_odata(employee_id)}'")
        return [r for r in records if _in_range(r, start, end)]

    async def get_attendance_in_range(self, start: date, end: date) -> list[AttendanceRecord]:
        records = await self._query()
        return [r for r in records if _in_range(r, start, end)]

    async def get_missed_checkouts(self, employee_id: str, today: date) -> list[AttendanceRecord]:
        today_str = timeutils.format_date(today)
        records = await self._query(f"EmployeeId eq '{escape_odata(employee_id)}'")
        missed = [
            r
            for r in records
            if r.check_in_time and not r.check_out_time and r.date and r.date != today_str
        ]
        return sorted(missed, key=lambda r: timeutils.parse_date(r.date))

    async def get_status(self, user: UserInfo, now: datetime | None = None) -> AttendanceStatus:
        shift = await self.get_shift(user.shift_id)
        today = await self.get_today_attendance(user, now)
        if not shift:
            return AttendanceStatus(state=timeutils.ACTIVE, message="No shift assigned", today=today)

        state = timeutils.get_attendance_state(shift.start_time, shift.end_time, shift.time_zone, now)
        return AttendanceStatus(
            state=state.state,
            message=state.message,
            time_zone=state.time_zone,
            shift=shift,
            today=today,
        )

    # Check-in / check-out

    async def check_in(self, user: UserInfo, now: datetime | None = None) -> AttendanceRecord:
        if not user.employee_id:
            raise AttendanceError("No employee record linked to this account")

        shift = await self.get_shift(user.shift_id)
        local = timeutils.local_now(shift.time_zone if shift else None, now)
        state = None
        if shift:
            state = timeutils.get_attendance_state(shift.start_time, shift.end_time, shift.time_zone, now)
        record_day = shift_day(local, state)

        existing = await self.get_record_for_day(user.employee_id, record_day)
        if existing:
            logger.info("Employee %s already checked in on %s", user.employee_id, existing.date)
            return existing

        if state and state.state != timeutils.ACTIVE:
            raise AttendanceError(state.message or "Check-in is not open")

        fields = {
            "Title": user.name or "",
            "EmployeeId": user.employee_id,
            "Date": timeutils.format_date(record_day),
            "CheckInTime": timeutils.format_time_ampm(local),
            "Status": "IN",
            "ShiftId": user.shift_id or "",
            "Place": user.place or "",
            "StaffMail": user.email or "",
        }
        item = await self.client.create_item(self.site, settings.ATTENDANCE_LIST, fields)
        logger.info("Employee %s checked in at %s", user.employee_id, fields["CheckInTime"])
        return self._transform_record(item)

    async def _open_record(self, user: UserInfo, local: datetime, shift: Shift | None) -> AttendanceRecord:
        days = [local.date()]
        if shift and _is_overnight(shift):
            # overnight shifts check out on the following calendar day
            days.append(local.date() - timedelta(days=1))

        records = await self._query(f"EmployeeId eq '{escape_odata(user.employee_id or '')}'")
        for day in days:
            for record in records:
                if _in_range(record, day, day) and record.check_in_time and not record.check_out_time:
                    return record
        raise AttendanceError("No open check-in found for today")

    async def check_out(self, user: UserInfo, now: datetime | None = None) -> AttendanceRecord:
        if not user.employee_id:
            raise AttendanceError("No employee record linked to this account")

        shift = await self.get_shift(user.shift_id)
        local = timeutils.local_now(shift.time_zone if shift else None, now)
        record = await self._open_record(user, local, shift)
        record_day = timeutils.parse_date(record.date)

        if shift:
            shift_start = datetime.combine(record_day, timeutils.parse_time(shift.start_time))
            elapsed = max(0, int((local - shift_start).total_seconds() // 60))
            if elapsed < settings.MIN_WORK_DURATION_MINS:
                remaining = settings.MIN_WORK_DURATION_MINS - elapsed
                raise AttendanceError(f"Check-out is enabled in {remaining // 60}h {remaining % 60}m")

        check_out_time = timeutils.format_time_ampm(local)

        if record.check_in_time in _MIDNIGHT and check_out_time in _MIDNIGHT:
            fields: dict[str, Any] = {"CheckOutTime": check_out_time, "WorkingHours": "00:00"}
        else:
            start = check_in_moment(record, shift)
            working_hours = timeutils.format_hhmm(local - start)

            effective = timeutils.hours_between(start, local)
            if shift:
                shift_start, shift_end = timeutils.shift_bounds(record_day, shift.start_time, shift.end_time)
                effective = timeutils.hours_between(max(start, shift_start), min(local, shift_end))

            fields = {
                "CheckOutTime": check_out_time,
                "Status": status_for_hours(effective, half_day_below=6.5),
                "WorkingHours": working_hours,
            }

        await self.client.update_item(self.site, settings.ATTENDANCE_LIST, record.id, fields)
        logger.info("Employee %s checked out at %s", user.employee_id, check_out_time)
        item = await self.client.get_item(self.site, settings.ATTENDANCE_LIST, record.id)
        return self._transform_record(item)

    # Missed check-out regularization

    async def get_regularization_count(self, employee_id: str, month: int, year: int) -> int:
        records = await self._query(f"EmployeeId eq '{escape_odata(employee_id)}'")
        count = 0
        for record in records:
            if not record.date or not is_regularized(record.regularized):
                continue
            try:
                day = timeutils.parse_date(record.date)
            except ValueError:
                continue
            if day.month == month and day.year == year:
                count += 1
        return count

    async def get_regularization_usage(self, employee_id: str, month: int, year: int) -> RegularizationCount:
        used = await self.get_regularization_count(employee_id, month, year)
        return RegularizationCount(
            month=month, year=year, used=used, limit=settings.REGULARIZATION_MONTHLY_LIMIT
        )

    async def request_regularization(self, record_id: str, user: UserInfo | None = None) -> AttendanceRecord:
        item = await self.client.get_item(self.site, settings.ATTENDANCE_LIST, record_id)
        record = self._transform_record(item)

        if user and user.employee_id and record.employee_id != user.employee_id:
            raise AttendanceError("Attendance record belongs to another employee")
        if record.check_out_time:
            raise AttendanceError("Attendance record is already checked out")

        record_day = timeutils.parse_date(record.date)
        used = await self.get_regularization_count(record.employee_id or "", record_day.month, record_day.year)
        if used >= settings.REGULARIZATION_MONTHLY_LIMIT:
            raise RegularizationLimitError(
                f"Regularization limit of {settings.REGULARIZATION_MONTHLY_LIMIT} per month reached"
            )

        shift = await self.get_shift(record.shift_id)
        if not shift:
            raise AttendanceError("Shift information not found")

        check_out_time = timeutils.to_12h(shift.end_time)
        start = timeutils.parse_date_time(record.date, record.check_in_time)
        end = timeutils.parse_date_time(record.date, check_out_time)
        hours = timeutils.hours_between(start, end)

        fields = {
            "CheckOutTime": check_out_time,
            "WorkingHours": timeutils.format_hhmm(end - start),
            "Status": status_for_hours(hours, half_day_below=8),
            "Regularized": "YES",
        }
        await self.client.update_item(self.site, settings.ATTENDANCE_LIST, record_id, fields)
        logger.info("Regularized attendance record %s", record_id)
        return record.model_copy(
            update={
                "check_out_time": fields["CheckOutTime"],
                "working_hours": fields["WorkingHours"],
                "status": fields["Status"],
                "regularized": "YES",
            }
        )

    # Manual records

    async def create_attendance_record(self, data: AttendanceRecordInput) -> AttendanceRecord:
        check_in = data.check_in_time or "09:00"
        check_out = data.check_out_time or "18:00"
        working_hours = "09:00"
        if (check_in, check_out) in (("00:00", "00:00"), ("12:00 AM", "12:00 AM")):
            working_hours = "00:00"

        fields = {
            "Title": data.name,
            "StaffMail": data.email or "",
            "EmployeeId": data.employee_id,
            "Date": timeutils.format_date(timeutils.parse_date(data.date)),
            "Place": data.place or "",
            "ShiftId": data.shift_id or "",
            "Status": data.status,
            "WorkingHours": working_hours,
            "CheckInTime": check_in,
            "CheckOutTime": check_out,
        }
        item = await self.client.create_item(self.site, settings.ATTENDANCE_LIST, fields)
        return self._transform_record(item)

    async def update_attendance_record(self, record_id: str, data: AttendanceRecordUpdate) -> None:
        mapping = {
            "date": "Date",
            "check_in_time": "CheckInTime",
            "check_out_time": "CheckOutTime",
            "status": "Status",
            "working_hours": "WorkingHours",
            "place": "Place",
        }
        values = data.model_dump(exclude_unset=True)
        if "date" in values and values["date"]:
            values["date"] = timeutils.format_date(timeutils.parse_date(values["date"]))
        fields = {mapping[k]: v for k, v in values.items() if v is not None}
        if fields:
            await self.client.update_item(self.site, settings.ATTENDANCE_LIST, record_id, fields)

    async def delete_attendance_record(self, record_id: str) -> None:
        await self.client.delete_item(self.site, settings.ATTENDANCE_LIST, record_id)

    # Late / missed check-in requests

    def _transform_regularization(self, item: dict[str, Any]) -> RegularizationRequest:
        manager = item.get("Manager")
        return RegularizationRequest(
            id=str(item.get("Id", "")),
            employee_name=item.get("EmployeeName") or item.get("Title"),
            mail_id=item.get("MailID"),
            date=item.get("Date"),
            manager=manager.get("Title") if isinstance(manager, dict) else manager,
            reason=item.get("Reason"),
            status=item.get("Status"),
            approver_comments=item.get("ApproverComments"),
            created=item.get("Created"),
        )

    async def submit_checkin_regularization(
        self, user: UserInfo, data: CheckInRegularizationInput
    ) -> RegularizationRequest:
        fields = {
            "Title": user.name or "",
            "EmployeeName": user.name or "",
            "MailID": user.email or "",
            "Date": timeutils.format_date(timeutils.parse_date(data.date)),
            "Reason": data.reason,
            "Status": "Pending Manager Approval",
        }
        item = await self.client.create_item(
            settings.hr_site_url, settings.CHECKIN_REGULARIZATION_LIST, fields
        )
        logger.info("Check-in regularization submitted by %s for %s", user.email, fields["Date"])
        return self._transform_regularization(item)

    async def get_regularization_history(self, email: str, today: date) -> list[RegularizationRequest]:
        month_start = today.replace(day=1).isoformat()
        items = await self.client.get_items(
            settings.hr_site_url,
            settings.CHECKIN_REGULARIZATION_LIST,
            filter=f"MailID eq '{escape_odata(email)}' and Created ge datetime'{month_start}T00:00:00Z'",
            orderby="Created desc",
        )
        return [self._transform_regularization(item) for item in items]


attendance_service = AttendanceService()
