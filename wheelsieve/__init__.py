"""
Wheel-compressed segmented sieve for 64-bit primality, factorization and
prime enumeration.
"""

from .contracts import PRIMARY_LIMIT, Coverage, Known, Width
from .engine import MAX_SIEVE_BOUND, PrimeSieve
from .errors import InvalidInputError, PreconditionError, SieveMemoryError, WheelSieveError
from .factors import Factor
from .trial_division import factor_wheel, is_prime_wheel

__all__ = [
    'PrimeSieve', 'Coverage', 'Known', 'Width', 'Factor',
    'is_prime_wheel', 'factor_wheel',
    'WheelSieveError', 'InvalidInputError', 'PreconditionError', 'SieveMemoryError',
    'PRIMARY_LIMIT', 'MAX_SIEVE_BOUND',
]
