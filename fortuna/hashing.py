"""Double-hash primitives used to compress entropy and derive keys.

SHAd-256 is the construction from Ferguson & Schneier, *Practical
Cryptography*: ``SHA256(SHA256(0^b || m))`` where ``0^b`` is one zero-filled
SHA-256 input block.  The outer hash removes length-extension structure and
the zero block makes the first compression call data-independent.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod

from fortuna.buffers import byte_view, check_range


class DoubleHash(ABC):
    """Abstract double-hash with a fixed digest size.

    ``digest()`` finalises the accumulated input, returns the digest and
    restarts the context, so the same object can be reused immediately.
    """

    digest_size: int = 0

    @abstractmethod
    def reset(self) -> None:
        """Discard all accumulated input."""
        ...

    @abstractmethod
    def update(self, data, offset: int = 0, length: int | None = None) -> None:
        """Feed ``data[offset:offset + length]`` into the context."""
        ...

    @abstractmethod
    def digest(self, data=None) -> bytes:
        """Return the digest of everything fed so far (plus *data*) and restart."""
        ...

    def can_clone(self) -> bool:
        """Return True if :meth:`clone` yields an independent copy of the state."""
        return False

    def clone(self) -> "DoubleHash":
        raise NotImplementedError(f"{type(self).__name__} cannot be cloned")


class ShaD256(DoubleHash):
    """SHAd-256 over a streaming ``hashlib.sha256`` context."""

    digest_size = 32
    _ZERO_BLOCK = bytes(64)

    def __init__(self) -> None:
        self._inner = hashlib.sha256(self._ZERO_BLOCK)

    def reset(self) -> None:
        self._inner = hashlib.sha256(self._ZERO_BLOCK)

    def update(self, data, offset: int = 0, length: int | None = None) -> None:
        view = byte_view(data)
        length = check_range(view, offset, length)
        self._inner.update(view[offset:offset + length])

    def digest(self, data=None) -> bytes:
        if data is not None:
            self.update(data)
        result = hashlib.sha256(self._inner.digest()).digest()
        self.reset()
        return result

    def can_clone(self) -> bool:
        return True

    def clone(self) -> "ShaD256":
        copy = ShaD256.__new__(ShaD256)
        copy._inner = self._inner.copy()
        return copy

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


def shad256(data) -> bytes:
    """One-shot SHAd-256 of *data*."""
    return ShaD256().digest(data)


__all__ = ["DoubleHash", "ShaD256", "shad256"]
