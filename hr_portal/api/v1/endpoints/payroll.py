from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from hr_portal.core.dependencies import require_feature
from hr_portal.core.errors import to_http_error
from hr_portal.core.permissions import Feature
from hr_portal.models.auth import UserInfo
from hr_portal.models.payroll import Payslip, PayslipRequest
from hr_portal.services.payroll_service import payroll_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payroll", tags=["payroll"])


@router.post("/payslip", response_model=Payslip)
async def generate_payslip(
    data: PayslipRequest,
    user: UserInfo = Depends(require_feature(Feature.PAYROLL)),  # noqa: B008
):
    try:
        payslip = await payroll_service.generate_payslip(data.employee_id, data.month, data.year, data.components)
    except Exception as err:
        raise to_http_error(err, "Failed to generate payslip") from err

    logger.info("Payslip %s for employee %s generated by %s", payslip.period, data.employee_id, user.email)
    return payslip
