"""Translation of service errors into HTTP responses."""

import structlog
from fastapi import HTTPException, status

from tasker.ai.exceptions import BadUpstreamResponseError, UpstreamError
from tasker.exceptions import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    TaskerError,
)

logger = structlog.get_logger()

_STATUS_BY_ERROR: tuple[tuple[type[TaskerError], int], ...] = (
    (InvalidArgumentError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY),
    (BadUpstreamResponseError, status.HTTP_502_BAD_GATEWAY),
)


def handle_service_error(error: Exception, detail: str = "Internal server error") -> HTTPException:
    """Convert a service error to an HTTP exception.

    Anything outside the typed hierarchy is logged and answered with
    ``detail`` only, so store or driver messages never reach the client.
    """
    if isinstance(error, TaskerError):
        for error_type, status_code in _STATUS_BY_ERROR:
            if isinstance(error, error_type):
                return HTTPException(status_code=status_code, detail=error.message)
        logger.error("Service error", code=error.code, error=error.message)
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error.message,
        )

    logger.exception("Unhandled service error", error=str(error))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail,
    )
