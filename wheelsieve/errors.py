"""
Exceptions raised by the sieve engine and trial division.
"""


class WheelSieveError(Exception):
    """Base class for all wheelsieve errors."""


class InvalidInputError(WheelSieveError, ValueError):
    """Input outside the unsigned domain, or a query with no defined answer."""


class PreconditionError(WheelSieveError, RuntimeError):
    """A no-extension query was given a coverage token that does not prove it."""


class SieveMemoryError(WheelSieveError, MemoryError):
    """
    Extension refused or failed for lack of memory or address space.

    The engine is left untouched and remains usable for smaller bounds.
    """

    def __init__(self, bound: int, nbytes: int, reason: str):
        self.bound = bound
        self.nbytes = nbytes
        super().__init__(
            f"cannot extend sieve to {bound:,} ({nbytes / 1e6:,.1f}MB): {reason}"
        )
