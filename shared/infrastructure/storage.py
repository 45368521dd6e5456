"""Translation of storage-layer failures into domain errors."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Optional

from django.db import DatabaseError, IntegrityError  # type: ignore

from shared.domain.errors import DependencyFailure

logger = logging.getLogger(__name__)


def as_dependency_failure(exc: Optional[BaseException], resource: str) -> Optional[DependencyFailure]:
    """Return a DependencyFailure for connection-level database errors.

    Integrity errors are constraint violations and stay with the caller,
    which knows what the violated constraint means.
    """

    if isinstance(exc, DatabaseError) and not isinstance(exc, IntegrityError):
        return DependencyFailure(resource, f"{resource} is unavailable: {exc}")
    return None


@contextmanager
def storage_guard(resource: str):
    """Raise DependencyFailure when the wrapped block loses the database."""

    try:
        yield
    except DatabaseError as exc:
        failure = as_dependency_failure(exc, resource)
        if failure is None:
            raise
        logger.error(f"Storage failure on {resource}: {exc}", exc_info=True)
        raise failure from exc
