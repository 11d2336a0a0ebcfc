"""
Sieve engine: primality, factorization, counting and enumeration.

Responsibility: routing queries to the two stores and growing them on
demand. The engine is a single mutable cache and is not thread-safe;
callers sharing one across threads must serialise access.

Typical use, when the largest query is known up front:

    sieve = PrimeSieve()
    cov = sieve.ensure_coverage(10**9)
    for n in candidates:
        if sieve.is_prime(n, Known.NOT_DIV_2, coverage=cov):
            ...

Calling queries directly also works; each one extends the sieve only as far
as it needs. Many calls with slowly increasing inputs each pay the per-call
sieve startup, so prefer one ensure_coverage to the final bound.
"""

import itertools
import math
import time
from typing import List, Optional

import numpy as np

from . import kernels
from .contracts import (
    PRIMARY_LIMIT, Coverage, Known, Width, base_prime_verdict, check_domain,
)
from .errors import InvalidInputError, PreconditionError, SieveMemoryError
from .estimates import SMALL_PRIME_COUNTS, nth_prime_upper_bound, prime_count_upper_bound
from .factors import Factor, finish_factors, strip_base_primes
from .store import SieveStore
from .wheel import BASE_PRIMES, WHEEL_MODULUS, is_wheel_eligible, wheel_table

# Keeps p * gap inside int64 in the marking kernel
MAX_SIEVE_BOUND = 2**62

# First coverage step when factor() has to grow the sieve
FACTOR_STEP = 2**20

_owners = itertools.count(1)


class PrimeSieve:
    """
    Monotonically growing wheel sieve over the unsigned 64-bit domain.

    Parameters
    ----------
    max_bound : int
        Largest integer the sieve may be extended to.
    max_bytes : int, optional
        Cap on bit-array memory plus the output buffer of the enumeration
        in progress. None means no cap beyond what numpy can allocate.
    verbose : bool
        Print a line for every store extension.
    primary_limit : int
        Where the primary store ends and the extended store begins; a
        multiple of 30030.
    initial_bound : int
        Sieve eagerly up to this bound on construction.
    """

    def __init__(self, max_bound: int = MAX_SIEVE_BOUND, max_bytes: Optional[int] = None,
                 verbose: bool = False, primary_limit: int = PRIMARY_LIMIT,
                 initial_bound: int = 0):
        if primary_limit <= 0 or primary_limit % WHEEL_MODULUS:
            raise ValueError(f"primary_limit must be a positive multiple of {WHEEL_MODULUS}")
        if not 0 < max_bound <= MAX_SIEVE_BOUND:
            raise ValueError(f"max_bound must be in (0, {MAX_SIEVE_BOUND}]")
        self.max_bound = max_bound
        self.max_bytes = max_bytes
        self.verbose = verbose
        self.primary_limit = primary_limit
        self._owner = next(_owners)
        self._primary = SieveStore(0, primary_limit, 'primary')
        self._extended = SieveStore(primary_limit, None, 'extended')
        if initial_bound:
            self.ensure_coverage(initial_bound)

    @classmethod
    def from_config(cls, config: dict) -> 'PrimeSieve':
        """Build an engine from a dict as returned by config.load_config."""
        return cls(
            max_bound=config['max_bound'],
            max_bytes=config['max_bytes'],
            verbose=config['verbose'],
            primary_limit=config['primary_limit'],
            initial_bound=config['initial_bound'],
        )

    def __repr__(self) -> str:
        return (f"PrimeSieve(coverage={self.coverage_bound:,}, "
                f"{self.nbytes / 1e6:.1f}MB)")

    @property
    def coverage_bound(self) -> int:
        """Largest integer whose primality is currently stored (0 when empty)."""
        if self._extended.high_water > self._extended.origin:
            return self._extended.high_water - 1
        return max(self._primary.high_water - 1, 0)

    @property
    def nbytes(self) -> int:
        return self._primary.nbytes + self._extended.nbytes

    # ========== Coverage ==========

    def ensure_coverage(self, n) -> Coverage:
        """
        Guarantee every integer <= n is queryable, and return proof of it.

        Idempotent and strictly additive: bounds already covered cost
        nothing, larger bounds only sieve the newly added range.

        Raises
        ------
        InvalidInputError
            If n is negative or beyond 64 bits.
        SieveMemoryError
            If n exceeds ``max_bound``, the required memory exceeds
            ``max_bytes``, or allocation fails. Coverage is unchanged.
        """
        n = check_domain(n)
        plan = [(self._primary, n + 1, None)]
        if n >= self.primary_limit:
            plan.append((self._extended, n + 1, self._primary))
        self._check_budget(n, plan)

        for store, hi, source in plan:
            if store.covers(hi - 1) or store.full:
                continue
            t0 = time.time()
            added = store.extend_to(hi, source)
            if self.verbose:
                print(f"    Sieved {store.name} store to {store.high_water:,} "
                      f"(+{added / 1e6:.1f}MB) in {time.time() - t0:.2f}s")
        return Coverage(self._owner, self.coverage_bound)

    def _check_budget(self, n: int, plan) -> None:
        needed = sum(store.nbytes_for(hi) - store.nbytes for store, hi, _ in plan)
        if n > self.max_bound:
            raise SieveMemoryError(n, needed, f"beyond max_bound={self.max_bound:,}")
        if len(plan) > 1 and math.isqrt(self._extended.target_for(n + 1) - 1) >= self.primary_limit:
            raise SieveMemoryError(n, needed, "sieving primes exceed the primary store")
        if self.max_bytes is not None and self.nbytes + needed > self.max_bytes:
            raise SieveMemoryError(
                n, self.nbytes + needed, f"exceeds max_bytes={self.max_bytes:,}"
            )

    def _check_proof(self, coverage, n: int) -> None:
        if not isinstance(coverage, Coverage):
            raise PreconditionError(
                f"coverage must be a Coverage token, got {type(coverage).__name__}"
            )
        if not coverage.proves(self._owner, n):
            raise PreconditionError(
                f"coverage token (bound {coverage.bound:,}) does not prove {n:,} "
                f"on this sieve; call ensure_coverage first"
            )

    def _store_for(self, n: int) -> SieveStore:
        return self._primary if n < self.primary_limit else self._extended

    def _stores_upto(self, n: int) -> List[SieveStore]:
        if n >= self.primary_limit:
            return [self._primary, self._extended]
        return [self._primary]

    # ========== Queries ==========

    def is_prime(self, n, known: Known = Known.NONE, coverage: Optional[Coverage] = None,
                 width: Width = Width.U64) -> bool:
        """
        Test primality against the sieve.

        Parameters
        ----------
        n : int
            Candidate.
        known : Known
            Facts already established about n; matching pre-checks are
            skipped.
        coverage : Coverage, optional
            Token from ensure_coverage proving n is covered. When given the
            sieve is never extended.
        width : Width
            Domain to validate n against.

        Raises
        ------
        PreconditionError
            If ``coverage`` does not prove n on this engine.
        """
        n = check_domain(n, width)
        verdict = base_prime_verdict(n, known)
        if verdict is not None:
            return verdict
        if n < 17 or not is_wheel_eligible(n):
            return False
        if coverage is None:
            self.ensure_coverage(n)
        else:
            self._check_proof(coverage, n)
        return self._store_for(n).test(n)

    def factor(self, n, coverage: Optional[Coverage] = None,
               width: Width = Width.U64) -> List[Factor]:
        """
        Prime factorization using sieved primes as trial divisors.

        Primes already in the sieve are tried first. If the cofactor still
        needs more, coverage doubles (never past sqrt of what is left) and
        the walk resumes from where it stopped.

        Parameters
        ----------
        n : int
            Integer in [1, 2**64 - 1].
        coverage : Coverage, optional
            Token proving sqrt(n) is covered. When given the sieve is never
            extended.
        width : Width
            Domain to validate n against; also sizes the factor buffer.

        Returns
        -------
        list of Factor
            (prime, exponent) pairs in increasing prime order; empty for 1.

        Raises
        ------
        InvalidInputError
            If n == 0.
        PreconditionError
            If ``coverage`` does not prove sqrt(n).
        """
        n = check_domain(n, width)
        if n == 0:
            raise InvalidInputError("cannot factor 0: every integer divides it")
        found, rest = strip_base_primes(n)
        if rest == 1:
            return found
        if coverage is not None:
            self._check_proof(coverage, math.isqrt(rest))

        primes = np.zeros(width.max_factors, dtype=np.uint64)
        exponents = np.zeros(width.max_factors, dtype=np.uint8)
        count = 0
        residues = wheel_table().residues

        store, b = self._primary, 0
        while True:
            # kernels return plain ints; rest must stay uint64 on every call
            rest, b, count, done = kernels.divide_out_sieved(
                np.uint64(rest), store.bits, store.origin, b, store.nbits,
                residues, primes, exponents, count,
            )
            if done:
                break
            root = math.isqrt(int(rest))
            # high_water is a multiple of 30030, so every prime <= root was tried
            if root <= store.high_water:
                break
            if store is self._primary and store.full:
                store, b = self._extended, 0
            if not store.covers(root):
                # geometric growth: smooth n finish long before sqrt(n)
                self.ensure_coverage(min(root, max(2 * self.coverage_bound, FACTOR_STEP)))

        return finish_factors(found, primes, exponents, int(count), int(rest))

    def count_primes_upto(self, n, width: Width = Width.U64) -> int:
        """Number of primes <= n."""
        n = check_domain(n, width)
        if n < 17:
            return SMALL_PRIME_COUNTS[n]
        self.ensure_coverage(n)
        return len(BASE_PRIMES) + sum(store.count_upto(n) for store in self._stores_upto(n))

    def primes_upto(self, n, width: Width = Width.U64) -> np.ndarray:
        """
        All primes <= n, in increasing order.

        Returns
        -------
        np.ndarray
            ``width.dtype`` array.
        """
        n = check_domain(n, width)
        if n < 17:
            return np.array([p for p in BASE_PRIMES if p <= n], dtype=width.dtype)
        self.ensure_coverage(n)

        out = self._allocate(prime_count_upper_bound(n), width.dtype, n)
        out[:len(BASE_PRIMES)] = BASE_PRIMES
        filled = len(BASE_PRIMES)
        for store in self._stores_upto(n):
            start, stop = 0, store.last_index_upto(n) + 1
            while start < stop:
                filled, start = store.collect(start, stop, out, filled)
                if start < stop:
                    out = self._enlarged(out, n)
        return out[:filled]

    def first_primes(self, k, width: Width = Width.U64) -> np.ndarray:
        """
        The first k primes.

        The sieve is extended to an upper bound on the k-th prime; should
        the walk still run out, coverage is doubled and the walk resumes.

        Raises
        ------
        InvalidInputError
            If k is negative, or beyond ``width.max_first_primes``.
        SieveMemoryError
            If the k-th prime lies beyond ``max_bound``, or the output
            buffer cannot be had within ``max_bytes``.
        """
        k = check_domain(k, name='k')
        ceiling = width.max_first_primes
        if ceiling is not None and k > ceiling:
            raise InvalidInputError(f"k={k:,} exceeds the {width.name} ceiling of {ceiling:,} primes")
        if k <= len(BASE_PRIMES):
            return np.array(BASE_PRIMES[:k], dtype=width.dtype)

        bound = nth_prime_upper_bound(k)
        if width is Width.U32:
            bound = min(bound, self.primary_limit - 1)
        if k > prime_count_upper_bound(self.max_bound):
            raise SieveMemoryError(
                bound, k * np.dtype(width.dtype).itemsize,
                f"the {k:,}th prime lies beyond max_bound={self.max_bound:,}",
            )
        bound = min(bound, self.max_bound)

        out = self._allocate(k, width.dtype, bound)
        out[:len(BASE_PRIMES)] = BASE_PRIMES
        filled = len(BASE_PRIMES)
        store, start = self._primary, 0
        while True:
            self.ensure_coverage(bound)
            filled, start = store.collect(start, store.nbits, out, filled)
            if filled == k:
                return out
            if store is self._primary and store.full:
                store, start = self._extended, 0
            else:
                bound *= 2

    def _allocate(self, count: int, dtype, bound: int) -> np.ndarray:
        """Output buffer for an enumeration, held to ``max_bytes`` like the stores."""
        nbytes = count * np.dtype(dtype).itemsize
        if self.max_bytes is not None and self.nbytes + nbytes > self.max_bytes:
            raise SieveMemoryError(
                bound, self.nbytes + nbytes, f"exceeds max_bytes={self.max_bytes:,}"
            )
        try:
            return np.empty(count, dtype=dtype)
        except (MemoryError, ValueError) as exc:
            raise SieveMemoryError(bound, nbytes, str(exc) or "allocation failed") from exc

    def _enlarged(self, out: np.ndarray, bound: int) -> np.ndarray:
        grown = self._allocate(2 * out.shape[0], out.dtype, bound)
        grown[:out.shape[0]] = out
        return grown
