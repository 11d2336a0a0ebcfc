"""
Tests for the growable bit store and its extension kernel.

The store must only ever add information: once a bit has been sieved it
never changes, and re-requesting a covered bound is free.
"""

import numpy as np
import pytest

from wheelsieve.errors import SieveMemoryError
from wheelsieve.store import SieveStore, round_up_cycle
from wheelsieve.verify import reference_prime_flags
from wheelsieve.wheel import CYCLE_BYTES, WHEEL_MODULUS, is_wheel_eligible, last_index_upto


def eligible_between(lo, hi):
    return [n for n in range(lo, hi) if is_wheel_eligible(n)]


class TestRounding:

    def test_round_up_cycle(self):
        assert round_up_cycle(0) == 0
        assert round_up_cycle(1) == WHEEL_MODULUS
        assert round_up_cycle(WHEEL_MODULUS) == WHEEL_MODULUS
        assert round_up_cycle(WHEEL_MODULUS + 1) == 2 * WHEEL_MODULUS


class TestExtension:
    """Extension covers whole wheel cycles and is strictly additive."""

    def test_starts_empty(self):
        store = SieveStore()
        assert store.high_water == 0
        assert store.nbytes == 0
        assert not store.covers(17)

    def test_extends_to_whole_cycles(self):
        store = SieveStore()
        added = store.extend_to(100)
        assert store.high_water == WHEEL_MODULUS
        assert added == CYCLE_BYTES
        assert store.covers(WHEEL_MODULUS - 1)
        assert not store.covers(WHEEL_MODULUS)

    def test_matches_reference(self):
        store = SieveStore()
        store.extend_to(4 * WHEEL_MODULUS)
        flags = reference_prime_flags(4 * WHEEL_MODULUS)
        for n in eligible_between(1, 4 * WHEEL_MODULUS):
            assert store.test(n) == flags[n], f"bit for {n} is {store.test(n)}"

    def test_one_is_not_prime(self):
        store = SieveStore()
        store.extend_to(1)
        assert not store.test(1)

    def test_repeat_is_noop(self):
        store = SieveStore()
        store.extend_to(10**5)
        before = store.bits.copy()
        assert store.extend_to(10**5) == 0
        assert store.extend_to(50) == 0
        assert np.array_equal(store.bits, before)

    def test_growth_never_rewrites_old_bits(self):
        """Bits below the old high-water mark survive extension unchanged."""
        store = SieveStore()
        store.extend_to(2 * WHEEL_MODULUS)
        before = store.bits.copy()
        store.extend_to(10**6)
        assert np.array_equal(store.bits[:len(before)], before)

    def test_incremental_equals_one_shot(self):
        """Many small extensions give the same bits as one large one."""
        stepped = SieveStore()
        for hi in [17, 30031, 100000, 250000, 600000]:
            stepped.extend_to(hi)
        direct = SieveStore()
        direct.extend_to(600000)
        assert stepped.high_water == direct.high_water
        assert np.array_equal(stepped.bits, direct.bits)

    def test_limit_clamps_growth(self):
        store = SieveStore(0, limit=2 * WHEEL_MODULUS)
        store.extend_to(10**6)
        assert store.high_water == 2 * WHEEL_MODULUS
        assert store.full

    def test_bad_origin_and_limit(self):
        with pytest.raises(ValueError):
            SieveStore(origin=100)
        with pytest.raises(ValueError):
            SieveStore(0, limit=12345)

    def test_allocation_failure_is_reported(self, monkeypatch):
        """A failed allocation raises SieveMemoryError and leaves the store as it was."""
        store = SieveStore()
        store.extend_to(WHEEL_MODULUS)

        def fail(*args, **kwargs):
            raise MemoryError("no memory")

        monkeypatch.setattr(np, 'empty', fail)
        with pytest.raises(SieveMemoryError):
            store.extend_to(10**6)
        assert store.high_water == WHEEL_MODULUS
        assert store.nbytes == CYCLE_BYTES


class TestOffsetStore:
    """A store with a non-zero origin sieved from another store's primes."""

    def test_offset_store_matches_reference(self):
        limit = 10 * WHEEL_MODULUS
        primary = SieveStore(0, limit)
        primary.extend_to(limit)
        extended = SieveStore(limit, name='extended')
        extended.extend_to(10**6, source=primary)

        flags = reference_prime_flags(10**6)
        for n in eligible_between(limit, 10**6)[::7]:
            assert extended.test(n) == flags[n], f"bit for {n} is {extended.test(n)}"

    def test_offset_store_counts(self):
        limit = 10 * WHEEL_MODULUS
        primary = SieveStore(0, limit)
        primary.extend_to(limit)
        extended = SieveStore(limit, name='extended')
        extended.extend_to(10**6, source=primary)

        flags = reference_prime_flags(10**6)
        assert extended.count_upto(10**6) == int(flags[limit:].sum())
        assert extended.count_upto(limit - 1) == 0


class TestCountingAndCollecting:

    def test_last_index_follows_wheel_indexing(self):
        """Stores index like the wheel itself, shifted by whole cycles and clipped."""
        store = SieveStore()
        store.extend_to(10**5)
        for n in [0, 1, 16, 17, 30030, 30031, 99999]:
            assert store.last_index_upto(n) == last_index_upto(n), f"index for {n}"
        assert store.last_index_upto(10**9) == store.nbits - 1

        offset = SieveStore(2 * WHEEL_MODULUS, name='extended')
        offset.extend_to(5 * WHEEL_MODULUS, source=store)
        assert offset.last_index_upto(2 * WHEEL_MODULUS - 1) == -1
        assert offset.last_index_upto(2 * WHEEL_MODULUS + 17) == 1
        assert offset.last_index_upto(10**9) == offset.nbits - 1

    def test_count_upto(self):
        store = SieveStore()
        store.extend_to(1000)
        # primes from 17 to 97
        assert store.count_upto(100) == 19
        assert store.count_upto(16) == 0
        assert store.count_upto(17) == 1

    def test_count_clips_to_store(self):
        store = SieveStore()
        store.extend_to(1)
        flags = reference_prime_flags(WHEEL_MODULUS)
        assert store.count_upto(10**9) == int(flags[17:].sum())

    def test_collect_resumes_when_full(self):
        store = SieveStore()
        store.extend_to(1000)
        stop = store.last_index_upto(100) + 1
        out = np.zeros(5, dtype=np.uint64)
        filled, nxt = store.collect(0, stop, out, 0)
        assert filled == 5
        assert list(out) == [17, 19, 23, 29, 31]

        rest = np.zeros(20, dtype=np.uint64)
        filled, nxt = store.collect(nxt, stop, rest, 0)
        assert nxt == stop
        assert list(rest[:filled]) == [37, 41, 43, 47, 53, 59, 61, 67, 71, 73, 79, 83, 89, 97]


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
