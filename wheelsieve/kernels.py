"""
Numba kernels for the wheel sieve.

Responsibility: hot loops only. No allocation policy, no validation.

Two arithmetic regimes:
- Store kernels (marking, counting, collecting) work in int64. Sieve bounds
  are capped at 2**62, so p * gap never overflows.
- Division kernels work in uint64 throughout. Mixing uint64 with int64 in
  numba promotes to float64, so every constant is built as np.uint64.

Packed bits: bit (i & 7) of byte (i >> 3), set means prime.
"""

import numpy as np
from numba import njit

_MODULUS = 30030
_SIZE = 5760

_CLEAR = np.array([0xFF ^ (1 << k) for k in range(8)], dtype=np.uint8)
POPCOUNT = np.array([bin(b).count('1') for b in range(256)], dtype=np.uint8)


@njit
def _bit(bits, i):
    return (bits[i >> 3] >> (i & 7)) & 1


@njit
def sieve_range(bits, origin, lo, hi, source, source_nbits, sqrt_hi,
                residues, positions, gaps):
    """
    Mark composites in [lo, hi) of a store starting at ``origin``.

    Sieving primes are read from ``source`` (a store with origin 0) in
    increasing order, starting at 17 (index 1). When ``source`` is the
    target itself, every prime p <= sqrt_hi is final before it is read,
    because all smaller primes have already been marked over [lo, hi).

    Only multiples p*m with m coprime to 30030 are visited: m walks the
    wheel by gaps, so each step lands on the next eligible multiple.
    """
    base = (origin // _MODULUS) * _SIZE
    b = 1
    while b < source_nbits:
        p = (b // _SIZE) * _MODULUS + residues[b % _SIZE]
        if p > sqrt_hi:
            break

        start = p * p
        if start < lo:
            start = lo
        m = (start + p - 1) // p
        while positions[m % _MODULUS] < 0:
            m += 1
        w = positions[m % _MODULUS]
        s = p * m
        while s < hi:
            i = (s // _MODULUS) * _SIZE + positions[s % _MODULUS] - base
            bits[i >> 3] &= _CLEAR[i & 7]
            s += p * gaps[w]
            w += 1
            if w == _SIZE:
                w = 0

        b += 1
        while b < source_nbits and _bit(source, b) == 0:
            b += 1


@njit
def count_set_bits(bits, start, stop, popcount):
    """Number of set bits with index in [start, stop)."""
    total = 0
    i = start
    while i < stop and (i & 7) != 0:
        total += _bit(bits, i)
        i += 1
    while i + 8 <= stop:
        total += popcount[bits[i >> 3]]
        i += 8
    while i < stop:
        total += _bit(bits, i)
        i += 1
    return total


@njit
def collect_primes(bits, origin, start, stop, residues, out, filled):
    """
    Write values of set bits in [start, stop) into out[filled:].

    Returns (filled, next_index). Stops early when ``out`` is full, so the
    caller can grow ``out`` or stop, and resume from ``next_index``.
    """
    capacity = out.shape[0]
    i = start
    while i < stop:
        if (i & 7) == 0 and bits[i >> 3] == 0 and i + 8 <= stop:
            i += 8
            continue
        if _bit(bits, i):
            if filled == capacity:
                return filled, i
            out[filled] = origin + (i // _SIZE) * _MODULUS + residues[i % _SIZE]
            filled += 1
        i += 1
    return filled, stop


@njit
def isqrt_u64(n):
    """Floor square root of a uint64, exact over the whole domain."""
    root_max = np.uint64(4294967295)
    one = np.uint64(1)
    r = np.uint64(np.sqrt(np.float64(n)))
    if r > root_max:
        r = root_max
    while r * r > n:
        r -= one
    while r < root_max and (r + one) * (r + one) <= n:
        r += one
    return r


@njit
def divide_out_sieved(n, bits, origin, start, stop, residues,
                      factors, exponents, count):
    """
    Divide every sieved prime from index ``start`` out of n.

    Returns (n, next_index, count, done). ``done`` is True once the next
    prime exceeds sqrt(n), meaning the remaining n is 1 or prime.
    """
    zero = np.uint64(0)
    limit = isqrt_u64(n)
    b = start
    while b < stop:
        if _bit(bits, b):
            p = np.uint64(origin + (b // _SIZE) * _MODULUS + residues[b % _SIZE])
            if p > limit:
                return n, b, count, True
            if n % p == zero:
                e = 0
                while n % p == zero:
                    n //= p
                    e += 1
                factors[count] = p
                exponents[count] = e
                count += 1
                limit = isqrt_u64(n)
        b += 1
    return n, b, count, False


@njit
def wheel_is_prime(n, gaps):
    """
    Trial division by 17 and every later integer coprime to 30030.

    n must be coprime to 30030 and greater than 1.
    """
    zero = np.uint64(0)
    limit = isqrt_u64(n)
    p = np.uint64(17)
    w = 1
    while p <= limit:
        if n % p == zero:
            return False
        p += gaps[w]
        w += 1
        if w == _SIZE:
            w = 0
    return True


@njit
def wheel_divide_out(n, gaps, factors, exponents, count):
    """
    Factor a cofactor coprime to 30030 by wheel trial division.

    Returns (n, count); n > 1 on return is a prime factor not yet recorded.
    """
    zero = np.uint64(0)
    limit = isqrt_u64(n)
    p = np.uint64(17)
    w = 1
    while p <= limit:
        if n % p == zero:
            e = 0
            while n % p == zero:
                n //= p
                e += 1
            factors[count] = p
            exponents[count] = e
            count += 1
            limit = isqrt_u64(n)
        p += gaps[w]
        w += 1
        if w == _SIZE:
            w = 0
    return n, count
