"""Payslip figures derived from salary components and monthly attendance."""

from __future__ import annotations

import calendar
import logging
from datetime import date

from hr_portal.models.attendance import AttendanceRecord
from hr_portal.models.payroll import Payslip, SalaryComponents
from hr_portal.services.attendance_service import AttendanceService, attendance_service
from hr_portal.services.employee_service import EmployeeService, employee_service

logger = logging.getLogger(__name__)


def count_payable_days(records: list[AttendanceRecord]) -> int:
    return sum(1 for r in records if r.status != "Absent")


def calculate_payslip(components: SalaryComponents) -> tuple[float, float, float]:
    gross = components.basic + components.hra + components.special_allowance + components.bonus
    deductions = components.pf + components.professional_tax + components.tds
    return gross, deductions, gross - deductions


def slip_period(month: int, year: int) -> str:
    return f"{calendar.month_name[month][:3]}-{str(year)[2:]}"


class PayrollService:
    def __init__(
        self,
        employees: EmployeeService | None = None,
        attendance: AttendanceService | None = None,
    ) -> None:
        self.employees = employees or employee_service
        self.attendance = attendance or attendance_service

    async def generate_payslip(
        self, employee_id: str, month: int, year: int, components: SalaryComponents
    ) -> Payslip:
        if not 1 <= month <= 12:
            raise ValueError(f"Invalid month: {month}")

        employee = await self.employees.get_employee(employee_id)
        profile = await self.employees.get_profile_by_email(employee.email or "")

        start = date(year, month, 1)
        end = date(year, month, calendar.monthrange(year, month)[1])
        records = await self.attendance.get_attendance_history(employee_id, start, end)
        days_payable = count_payable_days(records)

        gross, deductions, net = calculate_payslip(components)
        logger.info("Payslip for employee %s %s/%s: %s payable days", employee_id, month, year, days_payable)

        return Payslip(
            employee_id=employee_id,
            employee_name=employee.name,
            designation=(profile.designation if profile else None) or employee.role,
            department=(profile.department if profile else None) or employee.department or "IT",
            location=(profile.location if profile else None) or employee.place,
            date_of_joining=profile.date_of_joining if profile else None,
            month=calendar.month_name[month],
            year=year,
            period=slip_period(month, year),
            days_payable=days_payable,
            components=components,
            gross_earnings=gross,
            total_deductions=deductions,
            net_pay=net,
        )


payroll_service = PayrollService()
