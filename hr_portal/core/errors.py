from __future__ import annotations

import logging

from fastapi import HTTPException, status

from hr_portal.core.sharepoint import SharePointError
from hr_portal.services.approval_service import ApprovalError
from hr_portal.services.attendance_service import AttendanceError, RegularizationLimitError

logger = logging.getLogger(__name__)


def to_http_error(err: Exception, action: str) -> HTTPException:
    """Translate a service exception into the HTTP error returned to the caller.

    Must be called from inside the ``except`` block so unexpected errors are
    logged with their traceback.
    """
    if isinstance(err, HTTPException):
        return err
    if isinstance(err, PermissionError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(err))
    if isinstance(err, RegularizationLimitError | ApprovalError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err))
    if isinstance(err, AttendanceError | ValueError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err))
    if isinstance(err, SharePointError):
        if err.status == 404:
            return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
        logger.error("%s: %s", action, err)
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=action)

    logger.exception(action)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=action)
