"""Birthday / work-anniversary events, holidays and notifications."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class EventType(str, Enum):
    BIRTHDAY = "Birthday"
    ANNIVERSARY = "Anniversary"


class EmployeeEvent(BaseModel):
    id: str
    employee_name: str | None = None
    type: EventType
    date: str
    mail_id: str | None = None


class EmployeeEventRecord(BaseModel):
    id: str
    name: str | None = None
    dob: str | None = None
    work_anniversary: str | None = None
    email: str | None = None
    personal_id: str | None = None


class EmployeeEventRecordInput(BaseModel):
    name: str | None = None
    dob: str | None = None
    work_anniversary: str | None = None
    email: str | None = None
    personal_id: str | None = None


class Holiday(BaseModel):
    id: str
    title: str
    date: str | None = None
    location: str | None = None


class Notification(BaseModel):
    id: str
    title: str | None = None
    message: str | None = None
    recipient_email: str | None = None
    sender_name: str | None = None
    status: str = "Unread"
    category: str = "Wish"
    timestamp: str | None = None


class WishInput(BaseModel):
    recipient_email: str
    message: str
    type: EventType
