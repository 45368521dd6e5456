"""
Domain Errors

Error taxonomy shared by every bounded context:
- ValidationError: malformed or out-of-range input, never retried
- NotFoundError: missing court, time slot, booking or group reference
- ConflictError: occupied half-unit, non-consecutive span or catalog exhausted
- PolicyBlockError: blocked date or group-play session
- DependencyFailure: a backing store is unreachable (retryable)

The API layer maps these onto HTTP responses in
shared.infrastructure.exception_handler.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional


class DomainError(Exception):
    """Base class for all domain errors"""

    code = 'domain_error'

    def __init__(self, message: str = ''):
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self) -> dict:
        return {'detail': self.message, 'code': self.code}


class ValidationError(DomainError):
    """
    Raised for invalid input

    Carries every collected violation so callers can report
    all of them at once instead of failing on the first.
    """

    code = 'validation_error'

    def __init__(self, errors: Iterable[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors: List[str] = list(errors)
        super().__init__('; '.join(self.errors))

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload['errors'] = self.errors
        return payload


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist"""

    code = 'not_found'

    def __init__(self, entity: str, identifier: Any):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier} not found")


class ConflictError(DomainError):
    """Raised when requested half-units cannot be occupied"""

    code = 'conflict'

    def __init__(self, reason: str, message: str = '', conflicting_booking=None):
        self.reason = reason
        self.conflicting_booking = conflicting_booking
        super().__init__(message or f"Requested time is unavailable ({reason})")

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload['reason'] = self.reason
        booking = self.conflicting_booking
        if booking is not None:
            payload['conflicting_booking'] = {
                'id': getattr(booking, 'pk', None),
                'booking_code': getattr(booking, 'booking_code', None),
            }
        return payload


class PolicyBlockError(DomainError):
    """Raised when a blocked date or group-play session forbids booking"""

    code = 'policy_blocked'

    def __init__(self, reason: str, detail: Optional[str] = None):
        self.reason = reason
        self.detail = detail
        super().__init__(detail or f"Booking is blocked by policy ({reason})")

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload['reason'] = self.reason
        return payload


class DependencyFailure(DomainError):
    """Raised when a backing store cannot be reached"""

    code = 'dependency_failure'

    def __init__(self, resource: str, message: str = '', retryable: bool = True):
        self.resource = resource
        self.retryable = retryable
        super().__init__(message or f"{resource} is unavailable")

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload['retryable'] = self.retryable
        return payload
