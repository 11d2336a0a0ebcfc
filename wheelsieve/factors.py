"""
Factor records shared by sieve and trial-division factorization.
"""

from typing import List, NamedTuple, Tuple

import numpy as np

from .wheel import BASE_PRIMES


class Factor(NamedTuple):
    prime: int
    exponent: int


def strip_base_primes(n: int) -> Tuple[List[Factor], int]:
    """
    Divide 2, 3, 5, 7, 11 and 13 out of n.

    Parameters
    ----------
    n : int
        Positive integer.

    Returns
    -------
    tuple
        (factors found, remaining cofactor coprime to 30030)
    """
    found = []
    for p in BASE_PRIMES:
        e = 0
        while n % p == 0:
            n //= p
            e += 1
        if e:
            found.append(Factor(p, e))
    return found, n


def finish_factors(found: List[Factor], primes: np.ndarray, exponents: np.ndarray,
                   count: int, rest: int) -> List[Factor]:
    """Append kernel output and the final prime cofactor (if any) to found."""
    for i in range(count):
        found.append(Factor(int(primes[i]), int(exponents[i])))
    if rest > 1:
        found.append(Factor(rest, 1))
    return found


def factor_product(factors) -> int:
    """Multiply a factorization back out."""
    total = 1
    for p, e in factors:
        total *= p ** e
    return total
