"""
Exception handling utilities.

Defines the referral core error taxonomy and categorized exception
groups for proper error handling.
"""

from typing import Any

from sqlalchemy.exc import DBAPIError, OperationalError


class ReferralCoreError(Exception):
    """
    Base class for referral core errors.

    Carries a user-facing message plus structured context for logging.
    """

    code = "referral_error"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Serialize for transport layers."""
        return {
            "error": self.code,
            "message": self.message,
            "context": {k: str(v) for k, v in self.context.items()},
        }


class ValidationError(ReferralCoreError):
    """Malformed input, out-of-range rate or missing required field."""

    code = "validation_error"


class InvalidReferral(ReferralCoreError):
    """Referral code is unknown or its owner can no longer invite."""

    code = "invalid_referral"


class SelfReferral(ReferralCoreError):
    """User tried to bind their own referral code."""

    code = "self_referral"


class AlreadyBound(ReferralCoreError):
    """Invitee already has an inviter."""

    code = "already_bound"


class InsufficientBalance(ReferralCoreError):
    """Commission balance does not cover the requested change."""

    code = "insufficient_balance"


class InvalidTransition(ReferralCoreError):
    """Illegal status change for a commission record or payout request."""

    code = "invalid_transition"


class NotFound(ReferralCoreError):
    """Requested user, record or request does not exist."""

    code = "not_found"


class AlreadySettled(ReferralCoreError):
    """
    Duplicate settlement of an order.

    Benign under at-least-once delivery; never raised to the caller of
    the ledger, only logged.
    """

    code = "already_settled"


class ConcurrentUpdateError(ReferralCoreError):
    """A concurrent writer won a uniqueness race; the unit of work may retry."""

    code = "concurrent_update"


class ServerError(ReferralCoreError):
    """Storage failure that survived the transient retry."""

    code = "server_error"


# Exception categories based on handling strategy

# Retry the whole unit of work once
TRANSIENT_ERRORS = (
    OperationalError,       # Lock timeouts, serialization failures, dropped connections
    ConcurrentUpdateError,  # Lost a uniqueness race
)


def is_transient(exc: Exception) -> bool:
    """
    Check if a failed unit of work may be retried.

    Args:
        exc: Exception to check

    Returns:
        True if the exception is transient
    """
    if isinstance(exc, TRANSIENT_ERRORS):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated
