from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel


class ApprovalType(str, Enum):
    REGULARIZATION = "Regularization"
    LEAVE = "Leave"
    PERMISSION = "Permission"


class ApprovalDecision(str, Enum):
    APPROVED = "Approved"
    REJECTED = "Rejected"


class PendingApproval(BaseModel):
    id: str
    type: ApprovalType
    employee_name: str | None = None
    date: str | None = None
    detail: str | None = None
    status: str | None = None
    manager: str | None = None
    created: str | None = None
    extra: dict[str, Any] = {}


class ApprovalUpdate(BaseModel):
    status: ApprovalDecision
    comments: str = ""
