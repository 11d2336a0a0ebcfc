"""
Wheel table for the 30030 = 2*3*5*7*11*13 wheel.

Responsibility: residue addressing only. No sieve state, no queries.

Only integers coprime to 2, 3, 5, 7, 11 and 13 can be prime beyond those
six, and there are exactly 5760 of them in every block of 30030 consecutive
integers. Storing only those cuts memory and marking work by ~5.2x.

Index mapping:
- Index i → (i // 5760) * 30030 + residues[i % 5760]
- n → (n // 30030) * 5760 + positions[n % 30030]

For n=1:  0 * 5760 + positions[1]  = 0
For n=17: 0 * 5760 + positions[17] = 1
For n=30031: 1 * 5760 + positions[1] = 5760
"""

from functools import lru_cache
from typing import NamedTuple

import numpy as np

WHEEL_MODULUS = 30030
WHEEL_SIZE = 5760
BASE_PRIMES = (2, 3, 5, 7, 11, 13)

# 720 bytes of packed bits per wheel cycle
CYCLE_BYTES = WHEEL_SIZE // 8


class WheelTable(NamedTuple):
    residues: np.ndarray
    positions: np.ndarray
    gaps: np.ndarray
    gaps_u64: np.ndarray


def _build_table() -> WheelTable:
    residues = np.empty(WHEEL_SIZE, dtype=np.int64)
    positions = np.full(WHEEL_MODULUS, -1, dtype=np.int64)

    i = 0
    for n in range(1, WHEEL_MODULUS):
        if any(n % p == 0 for p in BASE_PRIMES):
            continue
        residues[i] = n
        positions[n] = i
        i += 1
    assert i == WHEEL_SIZE

    gaps = np.empty(WHEEL_SIZE, dtype=np.int64)
    gaps[:-1] = np.diff(residues)
    # 30029 → 30031 wraps into the next cycle
    gaps[-1] = WHEEL_MODULUS + residues[0] - residues[-1]

    table = WheelTable(residues, positions, gaps, gaps.astype(np.uint64))
    for arr in table:
        arr.setflags(write=False)
    return table


@lru_cache(maxsize=None)
def wheel_table() -> WheelTable:
    """
    Return the process-wide wheel table, building it on first use.

    Returns
    -------
    WheelTable
        Read-only ``residues`` (5760,), ``positions`` (30030,) with -1 for
        ineligible residues, and ``gaps`` (5760,) in int64 and uint64.
    """
    return _build_table()


def is_wheel_eligible(n: int) -> bool:
    """True iff n shares no factor with 30030."""
    return wheel_table().positions[n % WHEEL_MODULUS] >= 0


def index_to_n(i: int) -> int:
    """Convert global wheel index to the integer it represents."""
    q, r = divmod(i, WHEEL_SIZE)
    return q * WHEEL_MODULUS + int(wheel_table().residues[r])


def n_to_index(n: int) -> int:
    """Convert integer (coprime to 30030) to its global wheel index."""
    q, r = divmod(n, WHEEL_MODULUS)
    pos = int(wheel_table().positions[r])
    if pos < 0:
        raise ValueError(f"{n} shares a factor with {WHEEL_MODULUS}")
    return q * WHEEL_SIZE + pos


def last_index_upto(n: int) -> int:
    """
    Global index of the largest wheel-eligible integer <= n.

    Returns -1 when there is none (n == 0).
    """
    q, r = divmod(n, WHEEL_MODULUS)
    k = int(np.searchsorted(wheel_table().residues, r, side='right')) - 1
    # k == -1 falls back to the last slot of the previous cycle
    return q * WHEEL_SIZE + k
