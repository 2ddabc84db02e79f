#!/usr/bin/env python3
"""Monthly attendance summary export.

Run from the repository root:

    python3 scripts/monthly_summary.py [--start YYYY-MM-DD] [--end YYYY-MM-DD]
                                       [--output FILE] [--dry-run] [--verbose]

Reads the Employees and Attendance lists (read-only), counts present, absent,
leave, half-day and holiday weekdays per employee and writes one CSV row per
employee. Defaults to the current month up to today.
"""

from __future__ import annotations

import argparse
import asyncio
import csv
import logging
import os
import sys
from datetime import date
from typing import TextIO

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from hr_portal.core import timeutils  # noqa: E402
from hr_portal.core.config import settings  # noqa: E402
from hr_portal.core.sharepoint import SharePointClient  # noqa: E402
from hr_portal.models.report import MonthlySummaryRow  # noqa: E402
from hr_portal.services.attendance_service import AttendanceService  # noqa: E402
from hr_portal.services.employee_service import EmployeeService  # noqa: E402
from hr_portal.services.report_service import summarize_month  # noqa: E402

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    ("employee_id", "Employee ID"),
    ("name", "Name"),
    ("department", "Department"),
    ("location", "Location"),
    ("present", "Present"),
    ("absent", "Absent"),
    ("leave", "Leave"),
    ("half_day", "Half Day"),
    ("holiday", "Holiday"),
    ("total_working_days", "Total Working Days"),
]


def write_csv(rows: list[MonthlySummaryRow], stream: TextIO) -> int:
    writer = csv.writer(stream)
    writer.writerow([header for _, header in CSV_COLUMNS])
    for row in rows:
        values = row.model_dump()
        writer.writerow(["" if values[attr] is None else values[attr] for attr, _ in CSV_COLUMNS])
    return len(rows)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export the monthly attendance summary as CSV",
    )
    parser.add_argument(
        "--start",
        type=date.fromisoformat,
        default=None,
        help="First day of the range (default: first of the current month)",
    )
    parser.add_argument(
        "--end",
        type=date.fromisoformat,
        default=None,
        help="Last day of the range (default: today)",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="CSV file to write (default: monthly_summary_<start>_<end>.csv)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the CSV to stdout instead of writing a file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return parser.parse_args(argv)


def resolve_range(args: argparse.Namespace, today: date) -> tuple[date, date]:
    start = args.start or today.replace(day=1)
    end = args.end or today
    if end < start:
        raise ValueError(f"--end {end} is before --start {start}")
    return start, end


async def export(args: argparse.Namespace) -> None:
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")

    start, end = resolve_range(args, timeutils.local_today())

    client = SharePointClient()
    await client.initialize(settings)
    if not client.initialized:
        logger.error("SharePoint is not configured. Set SHAREPOINT_TENANT_URL and the AZURE_AD_* variables.")
        return

    try:
        logger.info("Fetching employees...")
        employees = await EmployeeService(client).get_all_employees()
        logger.info("Fetching attendance from %s to %s...", start, end)
        records = await AttendanceService(client).get_attendance_in_range(start, end)
    finally:
        await client.close()

    logger.info("Found %d employees and %d attendance records", len(employees), len(records))
    rows = summarize_month(employees, records, start, end)

    if args.dry_run:
        write_csv(rows, sys.stdout)
        logger.info("[DRY RUN] No file was written.")
        return

    output = args.output or f"monthly_summary_{start.isoformat()}_{end.isoformat()}.csv"
    with open(output, "w", newline="", encoding="utf-8") as f:
        count = write_csv(rows, f)
    logger.info("Wrote %d rows to %s", count, output)


def main() -> None:
    args = parse_args()
    asyncio.run(export(args))


if __name__ == "__main__":
    main()
