"""Typed errors raised by the marketplace services.

Every service failure is one of these kinds; the API layer maps the kind to an
HTTP status code (see api/errors.py).
"""

from typing import Any


class MarketplaceError(Exception):
    """Base class for expected business-rule failures."""

    kind = "error"
    status_code = 400

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "error": self.kind, **self.extra}


class NotFoundError(MarketplaceError):
    """Entity absent, or the caller cannot see it."""

    kind = "not_found"
    status_code = 404


class ForbiddenError(MarketplaceError):
    """Authenticated but not entitled to this entity or action."""

    kind = "forbidden"
    status_code = 403


class InvalidStateError(MarketplaceError):
    """Operation not valid for the entity's current lifecycle state."""

    kind = "invalid_state"
    status_code = 400


class QuotaExceededError(MarketplaceError):
    """Free-tier or subscription limits reached."""

    kind = "quota_exceeded"
    status_code = 403


class ConflictError(MarketplaceError):
    """Duplicate bid or an already-processed payment."""

    kind = "conflict"
    status_code = 409


class DomainValidationError(MarketplaceError):
    """Malformed input that passed schema validation (e.g. max_budget < min_budget)."""

    kind = "validation_error"
    status_code = 422
