"""Tests for quota allocation and the shared random source."""

import threading
from collections import Counter

import pytest

from src.services.quota import LockedRandom, QuotaAllocator
from src.services.validation import RedemptionBatchRequest


class ScriptedRandom:
    """Returns pre-recorded values and remembers the bounds it was asked for."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        return self.values.pop(0)


class TurnTakingSource:
    """
    Wraps a shared source and records which thread made each draw.

    After its first draw the "first" thread waits until "second" has drawn,
    which can only happen if the shared source is free between draws.
    """

    def __init__(self, inner):
        self.inner = inner
        self.draws = []
        self.first_drew = threading.Event()
        self.second_drew = threading.Event()
        self.second_got_a_turn = None

    def randint(self, a, b):
        value = self.inner.randint(a, b)
        name = threading.current_thread().name
        self.draws.append(name)
        if name == "second":
            self.second_drew.set()
        elif not self.first_drew.is_set():
            self.first_drew.set()
            self.second_got_a_turn = self.second_drew.wait(timeout=5)
        return value


class TestQuotaAllocator:

    def test_fixed_mode_repeats_quota(self):
        allocator = QuotaAllocator(ScriptedRandom([]))
        request = RedemptionBatchRequest(name="promo", count=4, quota=250)

        assert allocator.allocate(request) == [250, 250, 250, 250]

    def test_fixed_mode_does_not_draw(self):
        source = ScriptedRandom([])
        QuotaAllocator(source).allocate(RedemptionBatchRequest(name="promo", count=3, quota=1))

        assert source.calls == []

    def test_random_mode_uses_injected_source(self):
        source = ScriptedRandom([11, 20, 10])
        request = RedemptionBatchRequest(name="promo", count=3, random_mode=True, min_quota=10, max_quota=20)

        assert QuotaAllocator(source).allocate(request) == [11, 20, 10]
        assert source.calls == [(10, 20)] * 3

    def test_random_mode_stays_within_bounds(self):
        allocator = QuotaAllocator(LockedRandom(seed=42))
        request = RedemptionBatchRequest(name="promo", count=100, random_mode=True, min_quota=10, max_quota=20)

        for _ in range(20):
            quotas = allocator.allocate(request)
            assert len(quotas) == 100
            assert all(10 <= q <= 20 for q in quotas)

    def test_random_mode_is_roughly_uniform(self):
        """Every value in a small range shows up near its expected frequency."""
        allocator = QuotaAllocator(LockedRandom(seed=1234))
        request = RedemptionBatchRequest(name="promo", count=100, random_mode=True, min_quota=1, max_quota=5)

        counts = Counter()
        for _ in range(200):
            counts.update(allocator.allocate(request))

        assert set(counts) == {1, 2, 3, 4, 5}
        expected = 20000 / 5
        for value in range(1, 6):
            assert abs(counts[value] - expected) < expected * 0.1

    def test_default_source_is_created(self):
        allocator = QuotaAllocator()
        assert isinstance(allocator.source, LockedRandom)


class TestLockedRandom:

    def test_same_seed_same_sequence(self):
        a = LockedRandom(seed=7)
        b = LockedRandom(seed=7)
        assert [a.randint(1, 1000) for _ in range(10)] == [b.randint(1, 1000) for _ in range(10)]

    def test_inclusive_bounds(self):
        rng = LockedRandom(seed=3)
        values = {rng.randint(1, 2) for _ in range(200)}
        assert values == {1, 2}

    def test_lock_is_released_after_each_draw(self):
        rng = LockedRandom(seed=5)
        rng.randint(1, 10)
        assert rng._lock.acquire(blocking=False)
        rng._lock.release()

    def test_concurrent_batches_interleave_draws(self):
        """Two allocators sharing one source take turns instead of running batch after batch."""
        source = TurnTakingSource(LockedRandom(seed=5))
        request = RedemptionBatchRequest(name="promo", count=50, random_mode=True, min_quota=1, max_quota=10)
        results = {}

        def first():
            results["first"] = QuotaAllocator(source).allocate(request)

        def second():
            source.first_drew.wait(timeout=5)
            results["second"] = QuotaAllocator(source).allocate(request)

        threads = [
            threading.Thread(target=first, name="first"),
            threading.Thread(target=second, name="second"),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert source.second_got_a_turn is True
        assert len(results["first"]) == len(results["second"]) == 50
        last_first = len(source.draws) - 1 - source.draws[::-1].index("first")
        assert source.draws.index("second") < last_first

    def test_concurrent_draws(self):
        """Concurrent batches sharing one source all complete with valid values."""
        allocator = QuotaAllocator(LockedRandom(seed=99))
        request = RedemptionBatchRequest(name="promo", count=100, random_mode=True, min_quota=1, max_quota=1000)
        results = []
        errors = []

        def worker():
            try:
                results.append(allocator.allocate(request))
            except Exception as e:  # pragma: no cover
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(results) == 8
        for quotas in results:
            assert len(quotas) == 100
            assert all(1 <= q <= 1000 for q in quotas)


@pytest.mark.parametrize("count", [1, 100])
def test_allocation_length_matches_count(count):
    request = RedemptionBatchRequest(name="promo", count=count, random_mode=True, min_quota=1, max_quota=2)
    assert len(QuotaAllocator(LockedRandom(seed=0)).allocate(request)) == count
