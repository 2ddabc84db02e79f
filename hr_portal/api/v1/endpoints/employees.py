from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from hr_portal.core.dependencies import require_feature, require_role
from hr_portal.core.errors import to_http_error
from hr_portal.core.permissions import Feature
from hr_portal.models.auth import UserInfo
from hr_portal.models.employee import Employee, EmployeeInput, EmployeeUpdate
from hr_portal.services.employee_service import employee_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])

_manage = require_role("Admin", "HR")


@router.get("", response_model=list[Employee])
async def list_employees(user: UserInfo = Depends(require_feature(Feature.EMPLOYEES))):  # noqa: B008
    try:
        return await employee_service.get_all_employees(viewer_level=user.permission_level)
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve employees") from err


@router.get("/{employee_id}", response_model=Employee)
async def get_employee(
    employee_id: str,
    user: UserInfo = Depends(require_feature(Feature.EMPLOYEES)),  # noqa: B008
):
    try:
        return await employee_service.get_employee(employee_id)
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve employee") from err


@router.post("", response_model=Employee, status_code=status.HTTP_201_CREATED)
async def add_employee(data: EmployeeInput, user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        employee = await employee_service.add_employee(data)
    except Exception as err:
        raise to_http_error(err, "Failed to add employee") from err
    logger.info("Employee %s added by %s", employee.id, user.email)
    return employee


@router.patch("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_employee(
    employee_id: str,
    data: EmployeeUpdate,
    user: UserInfo = Depends(_manage),  # noqa: B008
):
    try:
        await employee_service.update_employee(employee_id, data)
    except Exception as err:
        raise to_http_error(err, "Failed to update employee") from err


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(employee_id: str, user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        await employee_service.delete_employee(employee_id)
    except Exception as err:
        raise to_http_error(err, "Failed to delete employee") from err
    logger.info("Employee %s deleted by %s", employee_id, user.email)


@router.post("/{employee_id}/disable", status_code=status.HTTP_204_NO_CONTENT)
async def disable_employee(employee_id: str, user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        await employee_service.disable_employee(employee_id)
    except Exception as err:
        raise to_http_error(err, "Failed to disable employee") from err


@router.post("/{employee_id}/enable", status_code=status.HTTP_204_NO_CONTENT)
async def enable_employee(employee_id: str, user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        await employee_service.enable_employee(employee_id)
    except Exception as err:
        raise to_http_error(err, "Failed to enable employee") from err
