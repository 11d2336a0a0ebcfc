"""
Wheel trial division.

Responsibility: memory-free primality and factorization. No sieve state.

Divides only by 17 and later integers coprime to 30030, skipping ~81% of
candidate divisors. Cheaper than building a sieve when only a handful of
numbers will be queried; for many queries use PrimeSieve instead.
"""

from typing import List

import numpy as np

from . import kernels
from .contracts import Known, Width, base_prime_verdict, check_domain
from .errors import InvalidInputError
from .factors import Factor, finish_factors, strip_base_primes
from .wheel import wheel_table


def is_prime_wheel(n, known: Known = Known.NONE, width: Width = Width.U64) -> bool:
    """
    Test primality by wheel trial division.

    Parameters
    ----------
    n : int
        Candidate in [0, 2**64 - 1] (or the U32 domain).
    known : Known
        Facts already established about n. ``Known.NOT_ONE`` skips the
        n == 1 check, the NOT_DIV flags skip base prime checks.
    width : Width
        Domain to validate n against.

    Returns
    -------
    bool
        True iff n is prime.
    """
    n = check_domain(n, width)
    verdict = base_prime_verdict(n, known)
    if verdict is not None:
        return verdict
    if n == 1 and not known & Known.NOT_ONE:
        return False
    return bool(kernels.wheel_is_prime(np.uint64(n), wheel_table().gaps_u64))


def factor_wheel(n, width: Width = Width.U64) -> List[Factor]:
    """
    Prime factorization by wheel trial division.

    Parameters
    ----------
    n : int
        Integer in [1, 2**64 - 1].
    width : Width
        Domain to validate n against.

    Returns
    -------
    list of Factor
        (prime, exponent) pairs in increasing prime order; empty for n == 1.

    Raises
    ------
    InvalidInputError
        If n == 0, which every integer divides.
    """
    n = check_domain(n, width)
    if n == 0:
        raise InvalidInputError("cannot factor 0: every integer divides it")
    found, rest = strip_base_primes(n)
    if rest == 1:
        return found

    primes = np.zeros(width.max_factors, dtype=np.uint64)
    exponents = np.zeros(width.max_factors, dtype=np.uint8)
    rest, count = kernels.wheel_divide_out(
        np.uint64(rest), wheel_table().gaps_u64, primes, exponents, 0
    )
    return finish_factors(found, primes, exponents, int(count), int(rest))
