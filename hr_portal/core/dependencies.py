from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException, status

from hr_portal.core.auth import extract_email_from_token, extract_roles_from_token, validate_token
from hr_portal.core.config import settings
from hr_portal.core.permissions import Feature, has_access
from hr_portal.core.sharepoint import SharePointError
from hr_portal.models.auth import TokenIdentity, UserInfo
from hr_portal.services.employee_service import employee_service

logger = logging.getLogger(__name__)


async def get_current_identity(authorization: str | None = Header(None)) -> TokenIdentity:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization.split(" ", 1)[1]

    try:
        payload = await validate_token(
            token,
            settings.AZURE_AD_TENANT_ID,
            settings.AZURE_AD_CLIENT_ID,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Token validation error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    return TokenIdentity(
        oid=payload.get("oid"),
        name=payload.get("name"),
        email=extract_email_from_token(payload),
        roles=extract_roles_from_token(payload),
    )


async def get_current_user(
    identity: TokenIdentity = Depends(get_current_identity),  # noqa: B008
) -> UserInfo:
    """Map the signed-in identity onto its Employees list entry."""
    if not identity.email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    try:
        employee = await employee_service.get_employee_by_email(identity.email)
    except SharePointError as err:
        logger.error("Employee lookup for %s failed: %s", identity.email, err)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to look up employee",
        ) from err

    if employee is None:
        logger.warning("Sign-in by %s denied: not in Employees list", identity.email)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Your account is not registered. Please contact your administrator.",
        )
    if employee.account_status == "Disabled":
        logger.warning("Sign-in by %s denied: account disabled", identity.email)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has been disabled. Please contact your administrator.",
        )

    try:
        profile = await employee_service.get_profile_by_email(identity.email)
    except SharePointError as err:
        logger.warning("EmployeeDB profile lookup for %s failed (%s)", identity.email, err.status)
        profile = None

    return UserInfo(
        id=identity.oid,
        name=employee.name or identity.name,
        email=employee.email or identity.email,
        roles=identity.roles,
        employee_id=employee.id,
        permission_level=employee.permission_level or "Employee",
        department=(profile.department if profile else None) or employee.department,
        designation=profile.designation if profile else None,
        place=employee.place,
        shift_id=employee.shift_id,
    )


def require_role(*levels: str):
    async def _check_role(user: UserInfo = Depends(get_current_user)) -> UserInfo:  # noqa: B008
        if user.permission_level not in levels:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {', '.join(levels)}",
            )
        return user

    return _check_role


def require_feature(feature: Feature):
    async def _check_feature(user: UserInfo = Depends(get_current_user)) -> UserInfo:  # noqa: B008
        if not has_access(user.permission_level, feature, user.department, user.designation):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required feature: {feature.value}",
            )
        return user

    return _check_feature
