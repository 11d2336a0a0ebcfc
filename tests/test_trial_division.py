"""
Tests for memory-free wheel trial division.
"""

import numpy as np
import pytest

from wheelsieve import PrimeSieve
from wheelsieve.contracts import PRIMARY_LIMIT, Known, Width
from wheelsieve.errors import InvalidInputError
from wheelsieve.factors import factor_product
from wheelsieve.trial_division import factor_wheel, is_prime_wheel
from wheelsieve.verify import reference_prime_flags


class TestIsPrimeWheel:

    def test_matches_reference(self):
        flags = reference_prime_flags(10000)
        for n in range(10001):
            assert is_prime_wheel(n) == flags[n], f"is_prime_wheel({n}) = {not flags[n]}"

    def test_large_primes(self):
        for p in [1000000007, 999999937, 4294967291, 1000000000039]:
            assert is_prime_wheel(p), f"{p} should be prime"

    def test_large_composites(self):
        # Fermat number F5
        assert not is_prime_wheel(4294967297)
        assert not is_prime_wheel(1000003 * 1000000007)
        assert not is_prime_wheel(65537**2)

    def test_squares_of_wheel_residues(self):
        """p*p is the first composite each wheel prime leaves behind."""
        for p in [17, 19, 23, 101, 30029, 30047]:
            assert not is_prime_wheel(p * p)

    def test_known_flags_skip_checks(self):
        everything = Known.NOT_DIV_ALL | Known.NOT_BASE_PRIME | Known.NOT_ONE
        assert is_prime_wheel(101, Known.NOT_DIV_ALL)
        assert not is_prime_wheel(17 * 19, everything)
        assert is_prime_wheel(30047, everything)
        assert not is_prime_wheel(15, Known.NOT_DIV_2)

    def test_u32_domain(self):
        assert not is_prime_wheel(PRIMARY_LIMIT, width=Width.U32)
        assert is_prime_wheel(65537, width=Width.U32)
        with pytest.raises(InvalidInputError):
            is_prime_wheel(2**32 - 5, width=Width.U32)

    def test_rejects_bad_input(self):
        for bad in [-1, 2**64, 3.0, '7']:
            with pytest.raises(InvalidInputError):
                is_prime_wheel(bad)


class TestFactorWheel:

    def test_known_factorizations(self):
        cases = {
            2**64 - 1: [(3, 1), (5, 1), (17, 1), (257, 1), (641, 1), (65537, 1), (6700417, 1)],
            2**63: [(2, 63)],
            600851475143: [(71, 1), (839, 1), (1471, 1), (6857, 1)],
            65537 * 4294967291: [(65537, 1), (4294967291, 1)],
            4294967297: [(641, 1), (6700417, 1)],
            360: [(2, 3), (3, 2), (5, 1)],
            289: [(17, 2)],
            13: [(13, 1)],
        }
        for n, expected in cases.items():
            assert factor_wheel(n) == expected, f"factor_wheel({n}) = {factor_wheel(n)}"

    def test_one_has_no_factors(self):
        assert factor_wheel(1) == []

    def test_zero_raises(self):
        with pytest.raises(InvalidInputError):
            factor_wheel(0)

    def test_fifteen_distinct_primes(self):
        """The product of the first 15 primes is the most distinct factors 64 bits hold."""
        primes = [2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47]
        n = 1
        for p in primes:
            n *= p
        assert factor_wheel(n) == [(p, 1) for p in primes]

    def test_nine_distinct_primes_in_u32(self):
        primes = [2, 3, 5, 7, 11, 13, 17, 19, 23]
        n = 223092870
        assert factor_wheel(n, width=Width.U32) == [(p, 1) for p in primes]

    def test_factors_are_prime_and_multiply_back(self):
        rng = np.random.default_rng(7)
        for n in rng.integers(10**12, 10**13, size=30):
            n = int(n)
            factors = factor_wheel(n)
            assert factor_product(factors) == n
            assert all(is_prime_wheel(p) for p, _ in factors)

    def test_agrees_with_sieve(self):
        sieve = PrimeSieve()
        for n in range(1, 3001):
            assert factor_wheel(n) == sieve.factor(n), f"disagreement at {n}"


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
