"""Employees list and EmployeeDB directory access."""

from __future__ import annotations

import logging
from typing import Any

from hr_portal.core.config import settings
from hr_portal.core.sharepoint import SharePointClient, SharePointError, escape_odata, sharepoint_client
from hr_portal.models.employee import (
    DirectoryRecord,
    DirectoryRecordInput,
    Employee,
    EmployeeAsset,
    EmployeeInput,
    EmployeeUpdate,
)

logger = logging.getLogger(__name__)

_EMPLOYEE_SELECT = "Id,Title,Role,Department,Email,ShiftId,Place,PermissionLevel,AccountStatus"
_EMPLOYEE_BASE_SELECT = "Id,Title,Role,Department,Email,ShiftId,Place,PermissionLevel"

# Python attribute → Employees list column
_EMPLOYEE_FIELDS: list[tuple[str, str]] = [
    ("name", "Title"),
    ("role", "Role"),
    ("department", "Department"),
    ("email", "Email"),
    ("shift_id", "ShiftId"),
    ("place", "Place"),
    ("permission_level", "PermissionLevel"),
]

# Python attribute → EmployeeDB column
_DIRECTORY_FIELDS: list[tuple[str, str]] = [
    ("name", "Title"),
    ("location", "field_1"),
    ("employee_id", "field_2"),
    ("date_of_joining", "field_3"),
    ("date_of_birth", "field_4"),
    ("department", "field_5"),
    ("designation", "field_6"),
    ("reporting_manager", "field_7"),
    ("contact_number", "field_8"),
    ("emergency_contact", "field_9"),
    ("desk_number", "field_10"),
    ("professional_email", "field_11"),
    ("personal_email", "field_12"),
    ("current_address", "field_13"),
    ("permanent_address", "field_14"),
]

_DIRECTORY_SELECT = "Id," + ",".join(column for _, column in _DIRECTORY_FIELDS)

# Asset list column names vary; the first non-empty one wins
_ASSET_EMAIL_COLUMNS = (
    "StaffMail",
    "Staff_x0020_Mail",
    "EmployeeEmail",
    "Employee_x0020_Email",
    "Email",
    "MailID",
    "Mail_x0020_ID",
    "OfficialEmail",
    "Official_x0020_Email",
)
_ASSET_FIELDS: dict[str, tuple[str, ...]] = {
    "employee_name": ("Title", "EmployeeName", "Employee_x0020_Name"),
    "employee_id": ("EmployeeId", "EmployeeID", "Employee_x0020_ID", "EmpId"),
    "asset_type": ("AssetType", "Type", "Asset_x0020_Type", "Category"),
    "manufacturer": ("Manufacturer", "Brand", "Make"),
    "model": ("Model", "ModelNumber"),
    "serial_number": ("SerialNumber", "Serial", "SerialNo", "SN"),
    "purchase_date": ("PurchaseDate", "DatePurchased", "Purchase_x0020_Date"),
    "status": ("Status", "AssetStatus"),
    "assigned_date": ("AssignedDate", "DateAssigned", "Assigned_x0020_Date"),
    "processor": ("Processor", "CPU", "Processer"),
    "ram": ("RAM", "Memory", "Ram"),
    "hdd": ("HDD", "Storage", "Hard_x0020_Disk", "Hdd"),
}


def _to_columns(values: dict[str, Any], mapping: list[tuple[str, str]]) -> dict[str, Any]:
    return {column: values[attr] for attr, column in mapping if values.get(attr) is not None}


def _first_value(item: dict[str, Any], columns: tuple[str, ...]) -> str | None:
    for column in columns:
        value = item.get(column)
        if value:
            return str(value)
    return None


class EmployeeService:
    def __init__(self, client: SharePointClient | None = None) -> None:
        self.client = client or sharepoint_client

    def _transform_employee(self, item: dict[str, Any]) -> Employee:
        level = item.get("PermissionLevel") or "Employee"
        if level == "User":
            level = "Employee"
        return Employee(
            id=str(item.get("Id", item.get("ID", ""))),
            name=item.get("Title"),
            email=item.get("Email") or item.get("field_11") or "",
            role=item.get("Role") or item.get("field_6") or "Staff",
            department=item.get("Department") or item.get("field_5") or "General",
            shift_id=str(item["ShiftId"]) if item.get("ShiftId") else None,
            place=item.get("Place") or item.get("field_1") or "",
            permission_level=level,
            account_status=item.get("AccountStatus") or "Active",
        )

    def _transform_directory(self, item: dict[str, Any]) -> DirectoryRecord:
        data = {attr: item.get(column) for attr, column in _DIRECTORY_FIELDS}
        return DirectoryRecord(id=str(item.get("Id", "")), **data)

    async def get_all_employees(self, viewer_level: str | None = None) -> list[Employee]:
        site = settings.attendance_site_url
        try:
            items = await self.client.get_items(site, settings.EMPLOYEES_LIST, select=_EMPLOYEE_SELECT)
        except SharePointError:
            logger.warning("Employees read with AccountStatus failed, retrying without it")
            items = await self.client.get_items(site, settings.EMPLOYEES_LIST, select=_EMPLOYEE_BASE_SELECT)

        employees = [self._transform_employee(item) for item in items]
        if viewer_level == "HR":
            employees = [e for e in employees if e.permission_level != "Admin"]
        employees.sort(key=lambda e: e.account_status == "Disabled")
        return employees

    async def get_employee_by_email(self, email: str) -> Employee | None:
        if not email:
            return None
        items = await self.client.get_items(
            settings.attendance_site_url,
            settings.EMPLOYEES_LIST,
            select=_EMPLOYEE_SELECT,
            filter=f"Email eq '{escape_odata(email)}'",
            top=1,
            follow_pages=False,
        )
        if not items:
            return None
        return self._transform_employee(items[0])

    async def get_employee(self, employee_id: str) -> Employee:
        item = await self.client.get_item(settings.attendance_site_url, settings.EMPLOYEES_LIST, employee_id)
        return self._transform_employee(item)

    async def add_employee(self, data: EmployeeInput) -> Employee:
        fields = _to_columns(data.model_dump(), _EMPLOYEE_FIELDS)
        item = await self.client.create_item(settings.attendance_site_url, settings.EMPLOYEES_LIST, fields)
        return self._transform_employee(item)

    async def update_employee(self, employee_id: str, data: EmployeeUpdate) -> None:
        fields = _to_columns(data.model_dump(exclude_unset=True), _EMPLOYEE_FIELDS)
        if fields:
            await self.client.update_item(
                settings.attendance_site_url, settings.EMPLOYEES_LIST, employee_id, fields
            )

    async def delete_employee(self, employee_id: str) -> None:
        await self.client.delete_item(settings.attendance_site_url, settings.EMPLOYEES_LIST, employee_id)

    async def set_account_status(self, employee_id: str, active: bool) -> None:
        account_status = "Active" if active else "Disabled"
        await self.client.update_item(
            settings.attendance_site_url,
            settings.EMPLOYEES_LIST,
            employee_id,
            {"AccountStatus": account_status},
        )
        logger.info("Employee %s set to %s", employee_id, account_status)

    async def disable_employee(self, employee_id: str) -> None:
        await self.set_account_status(employee_id, active=False)

    async def enable_employee(self, employee_id: str) -> None:
        await self.set_account_status(employee_id, active=True)

    # EmployeeDB directory

    async def get_profile_by_email(self, email: str) -> DirectoryRecord | None:
        if not email:
            return None
        items = await self.client.get_items(
            settings.hr_site_url,
            settings.EMPLOYEE_DB_LIST,
            select=_DIRECTORY_SELECT,
            filter=f"field_11 eq '{escape_odata(email)}'",
            top=1,
            follow_pages=False,
        )
        if not items:
            return None
        return self._transform_directory(items[0])

    async def get_all_directory_records(self) -> list[DirectoryRecord]:
        items = await self.client.get_items(
            settings.hr_site_url, settings.EMPLOYEE_DB_LIST, select=_DIRECTORY_SELECT
        )
        return [self._transform_directory(item) for item in items]

    async def add_directory_record(self, data: DirectoryRecordInput) -> DirectoryRecord:
        fields = _to_columns(data.model_dump(), _DIRECTORY_FIELDS)
        item = await self.client.create_item(settings.hr_site_url, settings.EMPLOYEE_DB_LIST, fields)
        return self._transform_directory(item)

    async def update_directory_record(self, record_id: str, data: DirectoryRecordInput) -> None:
        fields = _to_columns(data.model_dump(exclude_unset=True), _DIRECTORY_FIELDS)
        if fields:
            await self.client.update_item(settings.hr_site_url, settings.EMPLOYEE_DB_LIST, record_id, fields)

    async def delete_directory_record(self, record_id: str) -> None:
        await self.client.delete_item(settings.hr_site_url, settings.EMPLOYEE_DB_LIST, record_id)

    # Assets

    def _transform_asset(self, item: dict[str, Any]) -> EmployeeAsset:
        values = {attr: _first_value(item, columns) for attr, columns in _ASSET_FIELDS.items()}
        return EmployeeAsset(
            id=str(item.get("Id", "")),
            **{attr: value for attr, value in values.items() if value is not None},
        )

    async def get_employee_assets(self, email: str) -> list[EmployeeAsset]:
        if not email:
            return []
        try:
            items = await self.client.get_items(settings.attendance_site_url, settings.ASSET_LIST)
        except SharePointError as err:
            if err.status == 404:
                logger.warning("Asset list not found")
                return []
            raise

        wanted = email.strip().lower()
        assets = [
            self._transform_asset(item)
            for item in items
            if (_first_value(item, _ASSET_EMAIL_COLUMNS) or "").strip().lower() == wanted
        ]
        logger.info("Found %d assets for %s", len(assets), email)
        return assets


employee_service = EmployeeService()
