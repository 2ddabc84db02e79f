from __future__ import annotations

from fastapi import APIRouter, Depends, status

from hr_portal.core.dependencies import require_feature, require_role
from hr_portal.core.errors import to_http_error
from hr_portal.core.permissions import Feature
from hr_portal.models.auth import UserInfo
from hr_portal.models.permission import PermissionRequest, PermissionRequestInput
from hr_portal.services.permission_service import permission_service

router = APIRouter(prefix="/permissions", tags=["permissions"])

_permission = require_feature(Feature.PERMISSION)


@router.get("", response_model=list[PermissionRequest])
async def my_permission_requests(user: UserInfo = Depends(_permission)):  # noqa: B008
    try:
        return await permission_service.get_permission_requests(user.name or "")
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve permission requests") from err


@router.get("/all", response_model=list[PermissionRequest])
async def all_permission_requests(user: UserInfo = Depends(require_role("Admin", "HR"))):  # noqa: B008
    try:
        return await permission_service.get_all_permission_requests()
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve permission requests") from err


@router.post("", response_model=PermissionRequest, status_code=status.HTTP_201_CREATED)
async def create_permission_request(
    data: PermissionRequestInput,
    user: UserInfo = Depends(_permission),  # noqa: B008
):
    try:
        return await permission_service.create_permission_request(user, data)
    except Exception as err:
        raise to_http_error(err, "Failed to submit permission request") from err
