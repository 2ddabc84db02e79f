"""Date and time helpers for list records.

Attendance rows store dates as ``DD/MM/YYYY`` strings and times as free text
("09:05 AM", "18:00", "6:00 PM"), so everything here works on naive
wall-clock datetimes in the shift's time zone.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from hr_portal.core.config import settings

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"(\d+):(\d+)(?::(\d+))?\s*(AM|PM)?", re.IGNORECASE)

WEEKEND = "WEEKEND"
ACTIVE = "ACTIVE"
UPCOMING = "UPCOMING"
CLOSED = "CLOSED"


def parse_date(value: str) -> date:
    text = (value or "").strip()
    if "/" in text:
        day, month, year = (int(p) for p in text.split("/")[:3])
        return date(year, month, day)
    if "-" in text:
        year, month, day = (int(p) for p in text.split("T", 1)[0].split("-")[:3])
        return date(year, month, day)
    raise ValueError(f"Unrecognised date: {value!r}")


def format_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def to_iso(value: str) -> str:
    return parse_date(value).isoformat()


def format_time_ampm(value: datetime | time) -> str:
    return value.strftime("%I:%M %p")


def to_12h(value: str) -> str:
    """Convert a 24h "HH:mm" string to "h:mm AM"; 12h strings pass through."""
    upper = value.upper()
    if ":" not in value or "AM" in upper or "PM" in upper:
        return value
    hours, minutes = (int(p) for p in value.split(":")[:2])
    period = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{minutes:02d} {period}"


def _is_placeholder(value: str | None) -> bool:
    return not value or value == "-" or value == "00:00" or "--" in value


def parse_time(value: str | None) -> time:
    if _is_placeholder(value):
        return time(0, 0)

    match = _TIME_RE.search(value.replace("\u202f", " ").strip())
    if not match:
        return time(0, 0)

    hours = int(match.group(1))
    minutes = int(match.group(2))
    modifier = (match.group(4) or "").upper()
    if modifier == "AM" and hours == 12:
        hours = 0
    elif modifier == "PM" and hours < 12:
        hours += 12
    return time(hours, minutes)


def parse_date_time(date_value: str, time_value: str | None) -> datetime:
    return datetime.combine(parse_date(date_value), parse_time(time_value))


def format_hhmm(delta: timedelta) -> str:
    total_minutes = max(0, int(delta.total_seconds() // 60))
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def hours_between(start: datetime, end: datetime) -> float:
    return max(0.0, (end - start).total_seconds() / 3600)


def calculate_duration(date_value: str, start: str | None, end: str | None) -> str:
    try:
        start_dt = parse_date_time(date_value, start)
        end_dt = parse_date_time(date_value, end)
    except ValueError:
        logger.warning("Duration calculation failed for %s %s-%s", date_value, start, end)
        return "00:00"

    if end_dt < start_dt:
        end_dt += timedelta(days=1)
    return format_hhmm(end_dt - start_dt)


def is_weekend(value: date | datetime) -> bool:
    return value.weekday() >= 5


def get_zone(name: str | None) -> ZoneInfo:
    try:
        return ZoneInfo(name or settings.DEFAULT_TIME_ZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.error("Invalid timezone: %s, falling back to UTC", name)
        return ZoneInfo("UTC")


def local_now(zone_name: str | None, now: datetime | None = None) -> datetime:
    """Wall-clock time in the given zone, returned naive."""
    current = now or datetime.now(tz=ZoneInfo("UTC"))
    if current.tzinfo is None:
        current = current.replace(tzinfo=ZoneInfo("UTC"))
    return current.astimezone(get_zone(zone_name)).replace(tzinfo=None)


def local_today(zone_name: str | None = None) -> date:
    return local_now(zone_name).date()


@dataclass
class ShiftWindow:
    shift_start: datetime
    shift_end: datetime
    check_in_open: datetime
    check_out_close: datetime

    def contains(self, moment: datetime) -> bool:
        return self.check_in_open <= moment <= self.check_out_close


def shift_bounds(day: date, start_time: str, end_time: str) -> tuple[datetime, datetime]:
    start = datetime.combine(day, parse_time(start_time))
    end = datetime.combine(day, parse_time(end_time))
    if end <= start:
        end += timedelta(days=1)
    return start, end


def get_shift_window(start_time: str, end_time: str, day: date) -> ShiftWindow:
    start, end = shift_bounds(day, start_time, end_time)
    return ShiftWindow(
        shift_start=start,
        shift_end=end,
        check_in_open=start - timedelta(minutes=settings.CHECK_IN_WINDOW_MINS),
        check_out_close=end + timedelta(minutes=settings.CHECK_OUT_WINDOW_MINS),
    )


@dataclass
class AttendanceState:
    state: str
    message: str | None = None
    time_zone: str | None = None
    window: ShiftWindow | None = None


def get_attendance_state(
    start_time: str,
    end_time: str,
    time_zone: str | None,
    now: datetime | None = None,
) -> AttendanceState:
    zone = time_zone or settings.DEFAULT_TIME_ZONE
    target_now = local_now(zone, now)

    if is_weekend(target_now):
        return AttendanceState(WEEKEND, "Weekend - Enjoy your break!")

    previous = get_shift_window(start_time, end_time, target_now.date() - timedelta(days=1))
    if previous.contains(target_now):
        return AttendanceState(ACTIVE, time_zone=zone, window=previous)

    today = get_shift_window(start_time, end_time, target_now.date())
    if today.contains(target_now):
        return AttendanceState(ACTIVE, time_zone=zone, window=today)

    if target_now < today.check_in_open:
        seconds = (today.shift_start - target_now).total_seconds()
        diff_mins = int(-(-seconds // 60))
        message = f"Shift starts at {start_time}"
        if diff_mins <= settings.CHECK_IN_WINDOW_MINS:
            message = f"Check-in opens in {diff_mins} minutes"
        elif diff_mins > 60:
            diff_hours = diff_mins // 60
            message = f"Check-in opens in {diff_hours} hour{'s' if diff_hours > 1 else ''}"
        return AttendanceState(UPCOMING, message, time_zone=zone)

    return AttendanceState(CLOSED, "Attendance Closed for the day", time_zone=zone)


_LOOSE_FORMATS = ("%d %b %Y", "%d %B %Y", "%b %d %Y", "%B %d %Y", "%b %d, %Y", "%B %d, %Y", "%d-%b-%Y")
_YEARLESS_FORMATS = ("%b %d", "%B %d", "%d %b", "%d %B")


def parse_loose_date(value: str, default_year: int) -> date | None:
    """Parse free-text dates typed into lists ("5 Jan", "Jan 5 2026", "05/01/2026")."""
    text = " ".join((value or "").split())
    if not text:
        return None
    try:
        return parse_date(text)
    except ValueError:
        pass
    for fmt in _LOOSE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    for fmt in _YEARLESS_FORMATS:
        try:
            parsed = datetime.strptime(f"{text} {default_year}", f"{fmt} %Y")
        except ValueError:
            continue
        return parsed.date()
    return None


def parse_date_range(value: str, default_year: int) -> tuple[date | None, date | None]:
    """Split "A - B" ranges; a single date is both start and end."""
    text = (value or "").strip()
    if " - " in text:
        start_text, end_text = (part.strip() for part in text.split(" - ", 1))
    else:
        start_text = end_text = text

    start = parse_loose_date(start_text, default_year)
    end = parse_loose_date(end_text, default_year) or start
    if start and end and end < start:
        # "Dec 28 - Jan 3" wraps into the next year
        end = end.replace(year=start.year + 1)
    return start, end
