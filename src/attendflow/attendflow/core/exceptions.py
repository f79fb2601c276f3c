from __future__ import annotations

from typing import Optional

from .enums import RejectionReason


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced user or record does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class EligibilityError(ValidationError):
    """A check-in/check-out was refused by one of the enabled policy checks."""

    def __init__(self, reason: RejectionReason, message: Optional[str] = None):
        super().__init__(message or reason.value)
        self.reason = reason


class EvidenceMissingError(EligibilityError):
    """The caller did not supply evidence a required check needs."""


class EvidenceRejectedError(EligibilityError):
    """Evidence was supplied but failed the check."""


class DependencyUnavailable(DomainError):
    """A store call failed or timed out. Safe to retry; nothing was committed."""

    retryable = True
