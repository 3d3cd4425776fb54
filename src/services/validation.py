"""Validation of redemption code creation and update requests.

Checks are pure and run in a fixed order; the first failing check raises
and no further checks are evaluated.
"""

import time
from dataclasses import dataclass
from typing import Optional

from .errors import (
    CountTooLargeError,
    ExpiredInPastError,
    InvalidCountError,
    InvalidNameError,
    InvalidQuotaError,
    InvalidRandomBoundsError,
    MinNotLessThanMaxError,
)


MAX_NAME_LENGTH = 20
MAX_BATCH_COUNT = 100


@dataclass(frozen=True)
class RedemptionBatchRequest:
    """Parameters of one batch creation request."""
    name: str
    count: int
    quota: int = 0
    expired_time: int = 0  # 0 means never expires
    random_mode: bool = False
    min_quota: int = 0
    max_quota: int = 0


def current_timestamp() -> int:
    """Current Unix time in whole seconds."""
    return int(time.time())


def validate_name(name: str) -> None:
    # len() on str counts code points, so multi-byte characters count once
    if len(name) == 0 or len(name) > MAX_NAME_LENGTH:
        raise InvalidNameError()


def validate_quota(quota: int) -> None:
    if quota <= 0:
        raise InvalidQuotaError()


def validate_expired_time(expired_time: int, now: Optional[int] = None) -> None:
    """Reject an expiration time in the past; 0 (never expires) is always accepted."""
    if now is None:
        now = current_timestamp()
    if expired_time != 0 and expired_time < now:
        raise ExpiredInPastError()


def validate_create_request(request: RedemptionBatchRequest, now: Optional[int] = None) -> None:
    """
    Validate a batch creation request.

    Args:
        request: The batch request to check
        now: Current Unix time; defaults to the system clock

    Raises:
        InvalidNameError: name is empty or longer than 20 characters
        InvalidCountError: count is not positive
        CountTooLargeError: count exceeds 100
        InvalidRandomBoundsError: random mode with a non-positive bound
        MinNotLessThanMaxError: random mode with min_quota >= max_quota
        InvalidQuotaError: fixed mode with a non-positive quota
        ExpiredInPastError: expired_time is set and already in the past
    """
    validate_name(request.name)

    if request.count <= 0:
        raise InvalidCountError()
    if request.count > MAX_BATCH_COUNT:
        raise CountTooLargeError()

    if request.random_mode:
        if request.min_quota <= 0 or request.max_quota <= 0:
            raise InvalidRandomBoundsError()
        if request.min_quota >= request.max_quota:
            raise MinNotLessThanMaxError()
    else:
        validate_quota(request.quota)

    validate_expired_time(request.expired_time, now)
