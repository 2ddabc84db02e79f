"""Short-absence permission request models."""

from __future__ import annotations

from pydantic import BaseModel


class PermissionRequest(BaseModel):
    id: str
    employee_name: str | None = None
    date: str | None = None
    hours: str | None = None
    reason: str | None = None
    status: str = "Pending"
    manager: str | None = None
    manager_email: str | None = None
    approval_comments: str | None = None
    submitted_on: str | None = None


class PermissionRequestInput(BaseModel):
    date: str
    hours: str
    reason: str = ""
