from __future__ import annotations

from pydantic import BaseModel


class SalaryComponents(BaseModel):
    basic: float = 5000
    hra: float = 2000
    special_allowance: float = 1000
    bonus: float = 0
    pf: float = 1800
    professional_tax: float = 200
    tds: float = 0


class PayslipRequest(BaseModel):
    employee_id: str
    month: int
    year: int
    components: SalaryComponents = SalaryComponents()


class Payslip(BaseModel):
    employee_id: str
    employee_name: str | None = None
    designation: str | None = None
    department: str | None = None
    location: str | None = None
    date_of_joining: str | None = None
    month: str
    year: int
    period: str
    total_working_days: str = "30.00"
    days_payable: int
    components: SalaryComponents
    gross_earnings: float
    total_deductions: float
    net_pay: float
