from __future__ import annotations

from fastapi import APIRouter, Depends

from hr_portal.core.dependencies import require_feature
from hr_portal.core.errors import to_http_error
from hr_portal.core.permissions import Feature
from hr_portal.models.auth import UserInfo
from hr_portal.models.events import Holiday
from hr_portal.services.holiday_service import holiday_service

router = APIRouter(prefix="/holidays", tags=["holidays"])


@router.get("/{region}", response_model=list[Holiday])
async def list_holidays(
    region: str,
    user: UserInfo = Depends(require_feature(Feature.HOLIDAY)),  # noqa: B008
):
    try:
        return await holiday_service.get_holidays(region.lower())
    except Exception as err:
        raise to_http_error(err, "Failed to retrieve holidays") from err
