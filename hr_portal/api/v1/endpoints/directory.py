from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from hr_portal.core.dependencies import get_current_user, require_feature, require_role
from hr_portal.core.errors import to_http_error
from hr_portal.core.permissions import Feature
from hr_portal.models.auth import UserInfo
from hr_portal.models.employee import DirectoryRecord, DirectoryRecordInput, EmployeeAsset
from hr_portal.services.employee_service import employee_service

router = APIRouter(prefix="/directory", tags=["directory"])

_manage = require_role("Admin", "HR")


@router.get("", response_model=list[DirectoryRecord])
async def list_directory(
    user: UserInfo = Depends(require_feature(Feature.EMPLOYEE_PROFILE)),  # noqa: B008
):
    try:
        return await employee_service.get_all_directory_records()
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve directory") from err


@router.get("/me", response_model=DirectoryRecord)
async def my_profile(user: UserInfo = Depends(get_current_user)):  # noqa: B008
    try:
        profile = await employee_service.get_profile_by_email(user.email or "")
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve profile") from err

    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No directory record for '{user.email}'",
        )
    return profile


@router.get("/me/assets", response_model=list[EmployeeAsset])
async def my_assets(
    user: UserInfo = Depends(require_feature(Feature.EMPLOYEE_PROFILE)),  # noqa: B008
):
    try:
        return await employee_service.get_employee_assets(user.email or "")
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve assets") from err


@router.post("", response_model=DirectoryRecord, status_code=status.HTTP_201_CREATED)
async def add_record(data: DirectoryRecordInput, user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        return await employee_service.add_directory_record(data)
    except Exception as err:
        raise to_http_error(err, "Failed to add directory record") from err


@router.patch("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_record(
    record_id: str,
    data: DirectoryRecordInput,
    user: UserInfo = Depends(_manage),  # noqa: B008
):
    try:
        await employee_service.update_directory_record(record_id, data)
    except Exception as err:
        raise to_http_error(err, "Failed to update directory record") from err


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(record_id: str, user: UserInfo = Depends(_manage)):  # noqa: B008
    try:
        await employee_service.delete_directory_record(record_id)
    except Exception as err:
        raise to_http_error(err, "Failed to delete directory record") from err
