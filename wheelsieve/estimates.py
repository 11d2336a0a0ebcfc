"""
Closed-form bounds for presizing prime enumerations.

Responsibility: analytic estimates only. Both bounds are upper bounds in
the ranges where they are applied, so a walk presized with them never has
to grow (the engine still handles growth if one ever falls short).
"""

import math

# pi(n) for n < 17; primes above 13 are the first held by the sieve
SMALL_PRIME_COUNTS = (0, 0, 1, 2, 2, 3, 3, 4, 4, 4, 4, 5, 5, 6, 6, 6, 6)


def prime_count_upper_bound(n: int) -> int:
    """
    Upper bound on pi(n), the number of primes <= n.

    Uses Dusart's pi(n) < n / (ln n - 1.1) for n >= 60184 and Rosser and
    Schoenfeld's pi(n) < 1.25506 n / ln n for n > 1.

    Parameters
    ----------
    n : int
        Bound (inclusive).

    Returns
    -------
    int
        Integer >= pi(n).
    """
    if n < 17:
        return SMALL_PRIME_COUNTS[n] if n >= 0 else 0
    if n >= 60184:
        return int(n / (math.log(n) - 1.1)) + 1
    return int(1.25506 * n / math.log(n)) + 1


def nth_prime_upper_bound(k: int) -> int:
    """
    Upper bound on the k-th prime (1-based).

    Rosser's p_k < k (ln k + ln ln k) holds for k >= 6.
    """
    if k < 6:
        return 13
    return int(k * (math.log(k) + math.log(math.log(k)))) + 1
