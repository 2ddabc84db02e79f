"""Static role to feature access table."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    EMPLOYEE = "Employee"
    MANAGER = "Manager"
    HR = "HR"
    ADMIN = "Admin"
    ACCOUNTS = "Accounts"


class Feature(str, Enum):
    DASHBOARD = "Dashboard"
    ATTENDANCE = "Attendance"
    MONTHLY_ATTENDANCE = "MonthlyAttendance"
    EMPLOYEE_PROFILE = "EmployeeProfile"
    LEAVE = "Leave"
    PERMISSION = "Permission"
    HOLIDAY = "Holiday"
    MY_TEAM = "MyTeam"
    REPORTS = "Reports"
    EMPLOYEES = "Employees"
    PAYROLL = "Payroll"
    SETTINGS = "Settings"
    APPROVALS = "Approvals"


_BASE_FEATURES: frozenset[Feature] = frozenset(
    {
        Feature.DASHBOARD,
        Feature.ATTENDANCE,
        Feature.MONTHLY_ATTENDANCE,
        Feature.EMPLOYEE_PROFILE,
        Feature.LEAVE,
        Feature.PERMISSION,
        Feature.HOLIDAY,
    }
)

PERMISSION_MATRIX: dict[Role, frozenset[Feature]] = {
    Role.ADMIN: frozenset(Feature),
    Role.HR: _BASE_FEATURES | {Feature.REPORTS, Feature.EMPLOYEES},
    Role.ACCOUNTS: _BASE_FEATURES | {Feature.REPORTS, Feature.PAYROLL},
    Role.MANAGER: _BASE_FEATURES | {Feature.MY_TEAM, Feature.APPROVALS},
    Role.EMPLOYEE: _BASE_FEATURES,
}

# Designations that may approve regardless of role
_APPROVER_DESIGNATIONS = ("lead hr", "account manager", "operation manager", "ceo")


def _as_role(role: Role | str | None) -> Role | None:
    if not role:
        return None
    try:
        return Role(role)
    except ValueError:
        return None


def has_access(
    role: Role | str | None,
    feature: Feature | str,
    department: str | None = None,
    designation: str | None = None,
) -> bool:
    if not role:
        return False

    feature = Feature(feature)

    if feature is Feature.APPROVALS:
        title = (designation or "").lower()
        if any(keyword in title for keyword in _APPROVER_DESIGNATIONS):
            return True
        if (department or "").lower() == "ceo":
            return True

    resolved = _as_role(role)
    if resolved is None:
        return False

    if resolved is Role.MANAGER and department == "CEO" and feature is Feature.REPORTS:
        return True

    return feature in PERMISSION_MATRIX[resolved]


def features_for(
    role: Role | str | None,
    department: str | None = None,
    designation: str | None = None,
) -> list[str]:
    return [f.value for f in Feature if has_access(role, f, department, designation)]
