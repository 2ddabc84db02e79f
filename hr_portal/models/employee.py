"""Employee models for the Employees list and the EmployeeDB directory."""

from __future__ import annotations

from pydantic import BaseModel


class Employee(BaseModel):
    """Row of the Employees list that drives sign-in and attendance."""

    id: str
    name: str | None = None
    email: str | None = None
    role: str | None = None
    department: str | None = None
    shift_id: str | None = None
    place: str | None = None
    permission_level: str = "Employee"
    account_status: str = "Active"


class EmployeeInput(BaseModel):
    name: str
    email: str
    role: str | None = None
    department: str | None = None
    shift_id: str | None = None
    place: str | None = None
    permission_level: str = "Employee"


class EmployeeUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    role: str | None = None
    department: str | None = None
    shift_id: str | None = None
    place: str | None = None
    permission_level: str | None = None


class DirectoryRecordInput(BaseModel):
    name: str | None = None
    location: str | None = None
    employee_id: str | None = None
    date_of_joining: str | None = None
    date_of_birth: str | None = None
    department: str | None = None
    designation: str | None = None
    reporting_manager: str | None = None
    contact_number: str | None = None
    emergency_contact: str | None = None
    desk_number: str | None = None
    professional_email: str | None = None
    personal_email: str | None = None
    current_address: str | None = None
    permanent_address: str | None = None


class DirectoryRecord(DirectoryRecordInput):
    """EmployeeDB row; the list stores most columns as field_1..field_14."""

    id: str


class EmployeeAsset(BaseModel):
    id: str
    employee_name: str = ""
    employee_id: str = ""
    asset_type: str = "N/A"
    manufacturer: str = ""
    model: str = ""
    serial_number: str = ""
    purchase_date: str = ""
    status: str = "Active"
    assigned_date: str = ""
    processor: str = ""
    ram: str = ""
    hdd: str = ""
