from fastapi import APIRouter

from hr_portal.api.v1.endpoints import (
    approvals,
    attendance,
    directory,
    employees,
    events,
    health,
    holidays,
    leave,
    me,
    notifications,
    payroll,
    permissions,
    reports,
    shifts,
)

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(me.router)
api_router.include_router(employees.router)
api_router.include_router(directory.router)
api_router.include_router(shifts.router)
api_router.include_router(attendance.router)
api_router.include_router(leave.router)
api_router.include_router(permissions.router)
api_router.include_router(approvals.router)
api_router.include_router(holidays.router)
api_router.include_router(events.router)
api_router.include_router(notifications.router)
api_router.include_router(payroll.router)
api_router.include_router(reports.router)
