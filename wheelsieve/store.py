"""
Growable wheel-indexed bit store.

Responsibility: owning one packed bit array and extending it. The engine
decides which store a query goes to and how much memory may be spent.

A store covers the integers in [origin, high_water); both ends are whole
wheel cycles. The primary store starts at 0 and is capped at
PRIMARY_LIMIT, the extended store starts at PRIMARY_LIMIT and is uncapped.
Both run the same extension kernel, the extended one reading its sieving
primes from the primary store.
"""

import math
from typing import Optional

import numpy as np

from . import kernels
from .errors import SieveMemoryError
from .wheel import CYCLE_BYTES, WHEEL_MODULUS, WHEEL_SIZE, last_index_upto, wheel_table


def round_up_cycle(n: int) -> int:
    """Smallest multiple of 30030 that is >= n."""
    return -(-n // WHEEL_MODULUS) * WHEEL_MODULUS


class SieveStore:
    """
    Packed primality bits for wheel-eligible integers in one address range.

    Parameters
    ----------
    origin : int
        First integer of the range, a multiple of 30030.
    limit : int, optional
        Exclusive cap on ``high_water``. None means uncapped.
    name : str
        Label used in progress output.
    """

    def __init__(self, origin: int = 0, limit: Optional[int] = None,
                 name: str = 'primary'):
        if origin % WHEEL_MODULUS:
            raise ValueError(f"origin {origin} is not a multiple of {WHEEL_MODULUS}")
        if limit is not None and (limit % WHEEL_MODULUS or limit <= origin):
            raise ValueError(f"limit {limit} must be a multiple of {WHEEL_MODULUS} above {origin}")
        self.origin = origin
        self.limit = limit
        self.name = name
        self.high_water = origin
        self.bits = np.zeros(0, dtype=np.uint8)

    def __repr__(self) -> str:
        return (f"SieveStore({self.name}, [{self.origin:,}, {self.high_water:,}), "
                f"{self.nbytes / 1e6:.1f}MB)")

    @property
    def nbits(self) -> int:
        return self.bits.shape[0] * 8

    @property
    def nbytes(self) -> int:
        return self.bits.nbytes

    @property
    def full(self) -> bool:
        return self.limit is not None and self.high_water >= self.limit

    def covers(self, n: int) -> bool:
        return self.origin <= n < self.high_water

    def target_for(self, hi: int) -> int:
        """High-water mark that a request for [origin, hi) would produce."""
        hi = round_up_cycle(hi)
        if self.limit is not None:
            hi = min(hi, self.limit)
        return max(hi, self.high_water)

    def nbytes_for(self, hi: int) -> int:
        return (self.target_for(hi) - self.origin) // WHEEL_MODULUS * CYCLE_BYTES

    def index_of(self, n: int) -> int:
        """Local bit index of a wheel-eligible n in this store."""
        q, r = divmod(n - self.origin, WHEEL_MODULUS)
        pos = int(wheel_table().positions[r])
        if pos < 0:
            raise ValueError(f"{n} shares a factor with {WHEEL_MODULUS}")
        return q * WHEEL_SIZE + pos

    def last_index_upto(self, n: int) -> int:
        """Local index of the largest eligible integer <= n, clipped to the store."""
        if n < self.origin:
            return -1
        # origin is a whole number of cycles, so local and global indexing agree
        return min(last_index_upto(n - self.origin), self.nbits - 1)

    def test(self, n: int) -> bool:
        """Stored primality bit of n; n must be covered and wheel-eligible."""
        i = self.index_of(n)
        return bool((self.bits[i >> 3] >> (i & 7)) & 1)

    def extend_to(self, hi: int, source: Optional['SieveStore'] = None) -> int:
        """
        Sieve every integer below ``hi`` (rounded up to a wheel cycle).

        Only [high_water, hi) is marked; earlier bits are never revisited.

        Parameters
        ----------
        hi : int
            Exclusive bound requested.
        source : SieveStore, optional
            Store with origin 0 that already covers sqrt(hi). Defaults to
            this store, which is only valid for the primary store.

        Returns
        -------
        int
            Bytes added (0 if already covered).

        Raises
        ------
        SieveMemoryError
            If the grown bit array cannot be allocated.
        """
        if source is None:
            source = self
        target = self.target_for(hi)
        if target <= self.high_water:
            return 0

        old_bytes = self.nbytes
        new_bytes = self.nbytes_for(target)
        try:
            grown = np.empty(new_bytes, dtype=np.uint8)
        except (MemoryError, ValueError) as exc:
            raise SieveMemoryError(target, new_bytes, str(exc) or 'allocation failed') from exc
        grown[:old_bytes] = self.bits
        grown[old_bytes:] = 0xFF
        if old_bytes == 0 and self.origin == 0:
            grown[0] &= 0xFE  # index 0 is the integer 1

        lo = self.high_water
        self.bits = grown
        if source is self:
            source_bits = grown
        else:
            source_bits = source.bits

        table = wheel_table()
        kernels.sieve_range(
            grown, self.origin, lo, target,
            source_bits, source_bits.shape[0] * 8, math.isqrt(target - 1),
            table.residues, table.positions, table.gaps,
        )
        self.high_water = target
        return new_bytes - old_bytes

    def count_upto(self, n: int) -> int:
        """Number of primes in [origin, n] held by this store."""
        stop = self.last_index_upto(n) + 1
        if stop <= 0:
            return 0
        return int(kernels.count_set_bits(self.bits, 0, stop, kernels.POPCOUNT))

    def collect(self, start: int, stop: int, out: np.ndarray, filled: int):
        """Copy primes at local indices [start, stop) into out; see kernels.collect_primes."""
        filled, nxt = kernels.collect_primes(
            self.bits, self.origin, start, stop,
            wheel_table().residues, out, filled,
        )
        return int(filled), int(nxt)
