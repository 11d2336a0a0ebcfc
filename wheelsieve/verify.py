"""
Cross-checks of the wheel sieve against a plain Eratosthenes sieve.

Responsibility: independent reference results. Shares no code with the
engine beyond the public query API.
"""

from typing import Iterable

import numpy as np

from .factors import factor_product
from .trial_division import is_prime_wheel


def reference_prime_flags(limit: int) -> np.ndarray:
    """
    Return boolean array where flags[i] is True iff i is prime.

    Parameters
    ----------
    limit : int
        Upper bound (inclusive).

    Returns
    -------
    np.ndarray
        Boolean array of length limit+1.
    """
    flags = np.ones(limit + 1, dtype=bool)
    flags[:2] = False
    for p in range(2, int(limit**0.5) + 1):
        if flags[p]:
            flags[p*p::p] = False
    return flags


def reference_primes(limit: int) -> np.ndarray:
    """Array of all primes <= limit."""
    return np.nonzero(reference_prime_flags(limit))[0]


def verify_primality(sieve, limit: int, verbose: bool = True) -> bool:
    """Compare is_prime, count and enumeration with the reference up to limit."""
    if verbose:
        print(f"\n=== Verifying primality up to {limit:,} ===")

    expected = reference_primes(limit)
    got = sieve.primes_upto(limit)

    errors = 0
    if len(got) != len(expected) or not np.array_equal(got.astype(np.int64), expected):
        errors += 1
        if verbose:
            print(f"  MISMATCH primes_upto: {len(got):,} primes vs {len(expected):,} expected")

    count = sieve.count_primes_upto(limit)
    if count != len(expected):
        errors += 1
        if verbose:
            print(f"  MISMATCH count_primes_upto: {count:,} vs {len(expected):,}")

    flags = reference_prime_flags(limit)
    step = max(1, limit // 20000)
    for n in range(0, limit + 1, step):
        if sieve.is_prime(n) != flags[n]:
            errors += 1
            if verbose and errors <= 10:
                print(f"  MISMATCH is_prime({n}): got {not flags[n]}")

    if verbose:
        if errors == 0:
            print(f"  ✓ {len(expected):,} primes match")
        else:
            print(f"  ✗ {errors:,} mismatches found")
    return errors == 0


def verify_factorizations(sieve, numbers: Iterable[int], verbose: bool = True) -> bool:
    """
    Check factor(n) multiplies back to n, is strictly increasing, has no
    zero exponents, and that every factor passes wheel trial division.
    """
    errors = 0
    checked = 0
    for n in numbers:
        n = int(n)
        factors = sieve.factor(n)
        primes = [p for p, _ in factors]
        ok = (
            factor_product(factors) == n
            and all(a < b for a, b in zip(primes, primes[1:]))
            and all(e > 0 for _, e in factors)
            and all(is_prime_wheel(p) for p in primes)
        )
        if not ok:
            errors += 1
            if verbose and errors <= 10:
                print(f"  MISMATCH factor({n}) = {factors}")
        checked += 1

    if verbose:
        if errors == 0:
            print(f"  ✓ {checked:,} factorizations verified")
        else:
            print(f"  ✗ {errors:,} of {checked:,} factorizations wrong")
    return errors == 0
