"""Errors raised by the Fortuna generator and its collaborators.

Callers can catch the base ``FortunaError`` to handle every condition
raised by this package, or the concrete subclasses for finer control.
Each concrete error also derives from the matching builtin so that code
written against ``ValueError`` / ``IndexError`` keeps working.
"""

from __future__ import annotations


class FortunaError(Exception):
    """Base class for all Fortuna errors."""


class InvalidArgumentError(FortunaError, ValueError):
    """Malformed call parameters: bad length, missing or read-only buffer,
    bad combiner block size.  Nothing has been modified when this is raised.
    """


class IndexOutOfRangeError(FortunaError, IndexError):
    """An offset lies outside its buffer, or a pool index outside 0..31."""


class NotSeededError(FortunaError, RuntimeError):
    """Random data was requested before the generator had a key.

    Recoverable: add entropy (or a seed) and retry once the generator
    can reseed.
    """

    def __init__(self, message: str = "generator has not been seeded") -> None:
        super().__init__(message)


class UnexpectedError(FortunaError, RuntimeError):
    """A collaborator failed in a way that indicates a broken environment."""


__all__ = [
    "FortunaError",
    "InvalidArgumentError",
    "IndexOutOfRangeError",
    "NotSeededError",
    "UnexpectedError",
]
