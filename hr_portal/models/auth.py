"""Authentication models for Azure AD identities mapped onto employees."""

from __future__ import annotations

from pydantic import BaseModel


class TokenIdentity(BaseModel):
    oid: str | None = None
    name: str | None = None
    email: str | None = None
    roles: list[str] = []


class UserInfo(BaseModel):
    id: str | None = None
    name: str | None = None
    email: str | None = None
    roles: list[str] = []
    employee_id: str | None = None
    permission_level: str = "Employee"
    department: str | None = None
    designation: str | None = None
    place: str | None = None
    shift_id: str | None = None


class MeResponse(BaseModel):
    user: UserInfo
    features: list[str] = []
