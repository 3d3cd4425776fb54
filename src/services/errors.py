"""Typed errors raised by the redemption code services.

Every error carries a stable ``kind`` string and an HTTP status code so the
API layer can render a structured failure without inspecting messages.
"""

from typing import Optional


class RedemptionError(Exception):
    """Base class for redemption code failures."""

    kind = "RedemptionError"
    status_code = 400
    default_message = "Redemption code request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "kind": self.kind}


# ============================================================================
# Validation Errors
# ============================================================================

class RedemptionValidationError(RedemptionError):
    """A creation or update request was rejected before touching storage."""


class InvalidNameError(RedemptionValidationError):
    kind = "InvalidName"
    default_message = "Redemption code name must be between 1 and 20 characters"


class InvalidCountError(RedemptionValidationError):
    kind = "InvalidCount"
    default_message = "Redemption code count must be greater than 0"


class CountTooLargeError(RedemptionValidationError):
    kind = "CountTooLarge"
    default_message = "Cannot generate more than 100 redemption codes in one batch"


class InvalidRandomBoundsError(RedemptionValidationError):
    kind = "InvalidRandomBounds"
    default_message = "Minimum and maximum quota must both be greater than 0 in random mode"


class MinNotLessThanMaxError(RedemptionValidationError):
    kind = "MinNotLessThanMax"
    default_message = "Minimum quota must be less than maximum quota"


class InvalidQuotaError(RedemptionValidationError):
    kind = "InvalidQuota"
    default_message = "Quota must be greater than 0"


class ExpiredInPastError(RedemptionValidationError):
    kind = "ExpiredInPast"
    default_message = "Expiration time cannot be earlier than the current time"


# ============================================================================
# Lookup / Storage Errors
# ============================================================================

class NotFoundError(RedemptionError):
    kind = "NotFound"
    status_code = 404
    default_message = "Redemption code not found"


class PersistenceFailureError(RedemptionError):
    """
    Storage failed while handling a request.

    The original exception is kept on ``original`` (and as ``__cause__`` when
    raised with ``from``) for diagnostics; the message shown to callers stays
    generic.
    """

    kind = "PersistenceFailure"
    status_code = 500
    default_message = "Failed to save redemption codes, please try again later"

    def __init__(self, original: Optional[Exception] = None, message: Optional[str] = None):
        self.original = original
        super().__init__(message)
