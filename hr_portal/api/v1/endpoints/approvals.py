from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from hr_portal.core import timeutils
from hr_portal.core.dependencies import require_feature
from hr_portal.core.errors import to_http_error
from hr_portal.core.permissions import Feature
from hr_portal.models.approval import ApprovalType, ApprovalUpdate, PendingApproval
from hr_portal.models.auth import UserInfo
from hr_portal.services.approval_service import approval_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/approvals", tags=["approvals"])

_approver = require_feature(Feature.APPROVALS)


@router.get("/{approval_type}", response_model=list[PendingApproval])
async def pending_approvals(approval_type: ApprovalType, user: UserInfo = Depends(_approver)):  # noqa: B008
    try:
        return await approval_service.get_pending(approval_type, user, timeutils.local_today())
    except Exception as err:
        raise to_http_error(err, f"Failed to retrieve pending {approval_type.value.lower()} approvals") from err


@router.patch("/{approval_type}/{item_id}")
async def update_approval(
    approval_type: ApprovalType,
    item_id: str,
    data: ApprovalUpdate,
    user: UserInfo = Depends(_approver),  # noqa: B008
):
    try:
        fields = await approval_service.update_status(approval_type, item_id, data.status, data.comments, user)
    except Exception as err:
        raise to_http_error(err, "Failed to update approval status") from err

    logger.info("%s #%s %s by %s", approval_type.value, item_id, data.status.value, user.email)
    return {"id": item_id, "type": approval_type.value, "fields": fields}
