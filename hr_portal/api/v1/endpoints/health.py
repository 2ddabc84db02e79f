from __future__ import annotations

from fastapi import APIRouter, Depends

from hr_portal.core.config import settings
from hr_portal.core.dependencies import get_current_user
from hr_portal.core.sharepoint import sharepoint_client
from hr_portal.models.auth import UserInfo

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    services: dict[str, str] = {}

    for name, site_url in (
        ("sharepoint_attendance", settings.attendance_site_url),
        ("sharepoint_hr", settings.hr_site_url),
    ):
        if not sharepoint_client.initialized:
            services[name] = "not_configured"
            continue
        try:
            ok = await sharepoint_client.check_connection(site_url)
            services[name] = "ok" if ok else "error"
        except Exception:
            services[name] = "error"

    all_ok = all(v in ("ok", "not_configured") for v in services.values())

    return {
        "status": "healthy" if all_ok else "degraded",
        "version": settings.APP_VERSION,
        "services": services,
    }


@router.get("/protected")
async def health_protected(user: UserInfo = Depends(get_current_user)):  # noqa: B008
    return {"status": "ok", "user": user.model_dump()}


@router.get("/ready")
async def readiness_probe():
    return {"ready": True}
