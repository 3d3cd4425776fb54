"""Construction of redemption code records for a batch."""

import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from src.database.models import Redemption, RedemptionStatus

from .quota import QuotaAllocator
from .validation import RedemptionBatchRequest, current_timestamp


def generate_redemption_key() -> str:
    """
    Generate a redemption key.

    Format: 32 lowercase hex characters from a random UUID4.
    """
    return uuid.uuid4().hex


@dataclass
class GeneratedBatch:
    """Records built for one request, with their keys in the same order."""
    redemptions: List[Redemption] = field(default_factory=list)
    keys: List[str] = field(default_factory=list)


class CodeFactory:
    """Builds the unsaved Redemption rows for a validated batch request."""

    def __init__(
        self,
        allocator: QuotaAllocator,
        clock: Callable[[], int] = current_timestamp,
        key_generator: Callable[[], str] = generate_redemption_key
    ):
        self.allocator = allocator
        self.clock = clock
        self.key_generator = key_generator

    def build(
        self,
        request: RedemptionBatchRequest,
        owner_id: int,
        created_time: Optional[int] = None
    ) -> GeneratedBatch:
        """
        Build one record per requested code.

        All records share the same created_time, read from the clock once
        for the batch unless supplied by the caller.
        """
        if created_time is None:
            created_time = self.clock()
        quotas = self.allocator.allocate(request)

        batch = GeneratedBatch()
        for quota in quotas:
            key = self.key_generator()
            batch.redemptions.append(Redemption(
                user_id=owner_id,
                name=request.name,
                key=key,
                status=RedemptionStatus.UNUSED,
                quota=quota,
                created_time=created_time,
                redeemed_time=0,
                used_user_id=0,
                expired_time=request.expired_time,
            ))
            batch.keys.append(key)

        return batch
