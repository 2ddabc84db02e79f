from __future__ import annotations

from fastapi import APIRouter, Depends

from hr_portal.core.dependencies import get_current_user
from hr_portal.core.permissions import features_for
from hr_portal.models.auth import MeResponse, UserInfo

router = APIRouter(prefix="/me", tags=["identity"])


@router.get("", response_model=MeResponse)
async def get_me(user: UserInfo = Depends(get_current_user)):  # noqa: B008
    return MeResponse(
        user=user,
        features=features_for(user.permission_level, user.department, user.designation),
    )
