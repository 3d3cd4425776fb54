"""Quota allocation for redemption code batches.

Fixed-mode batches give every code the same quota. Random-mode batches draw
each code's quota independently and uniformly from [min_quota, max_quota].
"""

import random
import threading
import time
from typing import List, Optional, Protocol

from .validation import RedemptionBatchRequest


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int:
        ...


class LockedRandom:
    """
    A random generator shared between concurrent requests.

    Seeded once when constructed. Each draw holds the lock for that single
    draw only, so concurrent batches interleave instead of serializing.
    """

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = time.time_ns()
        self._rng = random.Random(seed)
        self._lock = threading.Lock()

    def randint(self, a: int, b: int) -> int:
        with self._lock:
            return self._rng.randint(a, b)


class QuotaAllocator:
    """Produces the quota values for a validated batch request."""

    def __init__(self, source: Optional[RandomSource] = None):
        self.source = source if source is not None else LockedRandom()

    def allocate(self, request: RedemptionBatchRequest) -> List[int]:
        """
        Return exactly ``request.count`` quota values.

        The request must already have passed validation; bounds are not
        re-checked here.
        """
        if not request.random_mode:
            return [request.quota] * request.count

        return [
            self.source.randint(request.min_quota, request.max_quota)
            for _ in range(request.count)
        ]
