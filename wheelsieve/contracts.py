"""
Input contracts shared by the sieve engine and trial division.

Responsibility: domain checks, precondition descriptors and coverage proofs.

Callers that already know something about n (e.g. it is odd) pass a
``Known`` descriptor instead of picking one of dozens of specialised entry
points, so the modular pre-checks they have ruled out are skipped:

    Known.NOT_DIV_2                   n is odd
    Known.NOT_DIV_235                 n is coprime to 30
    Known.NOT_DIV_2 | NOT_BASE_PRIME  n is odd and not one of 3..13
    Known.NOT_DIV_ALL                 n is coprime to 30030

Passing a descriptor that is false for n gives an unspecified answer.
"""

import enum
import operator
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .errors import InvalidInputError
from .wheel import BASE_PRIMES

UINT32_MAX = 2**32 - 1
UINT64_MAX = 2**64 - 1

# 142857 wheel cycles; the largest bound whose wheel index fits 32 bits
PRIMARY_LIMIT = 4289995710
PRIMES_BELOW_PRIMARY_LIMIT = 203056267


class Known(enum.IntFlag):
    NONE = 0
    NOT_DIV_2 = 1
    NOT_DIV_3 = 2
    NOT_DIV_5 = 4
    NOT_DIV_7 = 8
    NOT_DIV_11 = 16
    NOT_DIV_13 = 32
    NOT_BASE_PRIME = 64
    NOT_ONE = 128

    NOT_DIV_23 = NOT_DIV_2 | NOT_DIV_3
    NOT_DIV_25 = NOT_DIV_2 | NOT_DIV_5
    NOT_DIV_235 = NOT_DIV_2 | NOT_DIV_3 | NOT_DIV_5
    NOT_DIV_ALL = (NOT_DIV_2 | NOT_DIV_3 | NOT_DIV_5 | NOT_DIV_7
                   | NOT_DIV_11 | NOT_DIV_13)


_DIV_FLAGS = (Known.NOT_DIV_2, Known.NOT_DIV_3, Known.NOT_DIV_5,
              Known.NOT_DIV_7, Known.NOT_DIV_11, Known.NOT_DIV_13)


def base_prime_verdict(n: int, known: Known = Known.NONE) -> Optional[bool]:
    """
    Decide primality from the six base primes alone.

    Parameters
    ----------
    n : int
        Candidate, already domain-checked.
    known : Known
        Facts the caller has established; matching checks are skipped.

    Returns
    -------
    bool or None
        True if n is a base prime, False if a base prime divides n,
        None if the sieve or trial division must decide.
    """
    if not known & Known.NOT_BASE_PRIME:
        for p, flag in zip(BASE_PRIMES, _DIV_FLAGS):
            if n == p and not known & flag:
                return True
    for p, flag in zip(BASE_PRIMES, _DIV_FLAGS):
        if not known & flag and n % p == 0:
            return False
    return None


class Width(enum.Enum):
    """
    Integer width of a query family.

    ``U32`` mirrors the 32-bit fast family: inputs stay within the primary
    store, at most 9 distinct prime factors, ``uint32`` outputs.
    """

    U32 = 'u32'
    U64 = 'u64'

    @property
    def max_value(self) -> int:
        return PRIMARY_LIMIT if self is Width.U32 else UINT64_MAX

    @property
    def max_factors(self) -> int:
        # 2*3*5*...*29 = 6469693230 > 2**32, 2*3*...*53 > 2**64
        return 9 if self is Width.U32 else 15

    @property
    def dtype(self):
        return np.uint32 if self is Width.U32 else np.uint64

    @property
    def max_first_primes(self) -> Optional[int]:
        return PRIMES_BELOW_PRIMARY_LIMIT if self is Width.U32 else None


def check_domain(n, width: Width = Width.U64, name: str = 'n') -> int:
    """
    Validate an unsigned input and return it as a Python int.

    Raises
    ------
    InvalidInputError
        If n is not an integer, is negative, or exceeds the width's domain.
    """
    try:
        value = operator.index(n)
    except TypeError:
        raise InvalidInputError(
            f"{name} must be an integer, got {type(n).__name__}"
        ) from None
    if value < 0:
        raise InvalidInputError(f"{name} must be non-negative, got {value}")
    if value > width.max_value:
        raise InvalidInputError(
            f"{name}={value} exceeds the {width.name} domain (max {width.max_value})"
        )
    return value


@dataclass(frozen=True)
class Coverage:
    """
    Proof that every integer <= ``bound`` is queryable on one engine.

    Returned by ``PrimeSieve.ensure_coverage``. Stores never shrink, so a
    token stays valid for the lifetime of the engine that issued it.
    """

    owner: int
    bound: int

    def proves(self, owner: int, n: int) -> bool:
        return self.owner == owner and n <= self.bound
