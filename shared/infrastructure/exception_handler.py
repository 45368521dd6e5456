"""DRF exception handler translating domain errors into HTTP responses."""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.errors import (
    ConflictError,
    DependencyFailure,
    DomainError,
    NotFoundError,
    PolicyBlockError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (PolicyBlockError, status.HTTP_409_CONFLICT),
    (DependencyFailure, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(exc: DomainError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def domain_exception_handler(exc, context):
    """Render DomainError subclasses, defer everything else to DRF."""

    if not isinstance(exc, DomainError):
        return exception_handler(exc, context)

    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"Request failed with {exc.code}: {exc}")
    else:
        logger.info(f"Request rejected with {exc.code}: {exc}")

    headers = {}
    if isinstance(exc, DependencyFailure) and exc.retryable:
        headers['Retry-After'] = '5'
    return Response(exc.to_dict(), status=status_code, headers=headers)
