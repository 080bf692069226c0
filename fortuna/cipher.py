"""Block ciphers in counter mode, as driven by the Fortuna generator.

The generator never touches a cipher directly; it only uses the
``CounterCipher`` operations below.  ``AesCounterCipher`` is the default
implementation: AES from ``cryptography`` encrypting a 128-bit
little-endian counter one block at a time.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from fortuna.errors import InvalidArgumentError, UnexpectedError


class CounterCipher(ABC):
    """Capability set of a block cipher running in counter mode."""

    key_size: int = 0
    block_size: int = 0

    @abstractmethod
    def init(self) -> None:
        """Prepare the cipher before its first key is set."""
        ...

    @abstractmethod
    def reset(self) -> None:
        """Forget the key and return the counter to its initial value."""
        ...

    @abstractmethod
    def set_key(self, key: bytes) -> None:
        ...

    @abstractmethod
    def increment_counter(self) -> None:
        ...

    @abstractmethod
    def encrypt_counter(self, buffer, offset: int) -> None:
        """Encrypt the counter into ``buffer[offset:offset + block_size]``."""
        ...

    @abstractmethod
    def clone(self) -> "CounterCipher":
        """Return a copy with the same key and counter and no shared state."""
        ...


class AesCounterCipher(CounterCipher):
    """AES in counter mode with a 128-bit little-endian counter.

    Parameters
    ----------
    key_size:
        16, 24 or 32 bytes (AES-128/192/256).  Fortuna uses AES-256.
    """

    block_size = 16
    _COUNTER_MODULUS = 1 << 128

    def __init__(self, key_size: int = 32) -> None:
        if key_size not in (16, 24, 32):
            raise InvalidArgumentError(f"AES key size must be 16, 24 or 32 bytes, not {key_size!r}")
        self.key_size = key_size
        self._key: bytes | None = None
        self._encryptor = None
        self._counter = 0

    def init(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._key = None
        self._encryptor = None
        self._counter = 0

    def set_key(self, key: bytes) -> None:
        key = bytes(key)
        if len(key) != self.key_size:
            raise InvalidArgumentError(f"expected a {self.key_size}-byte key, got {len(key)} bytes")
        self._key = key
        # ECB over explicit counter blocks: the counter is owned here, not by the mode.
        self._encryptor = Cipher(algorithms.AES(key), modes.ECB()).encryptor()

    def increment_counter(self) -> None:
        self._counter = (self._counter + 1) % self._COUNTER_MODULUS

    @property
    def counter(self) -> int:
        return self._counter

    def encrypt_counter(self, buffer, offset: int) -> None:
        if self._encryptor is None:
            raise UnexpectedError("cipher used before a key was set")
        block = self._encryptor.update(self._counter.to_bytes(self.block_size, "little"))
        buffer[offset:offset + self.block_size] = block

    def clone(self) -> "AesCounterCipher":
        copy = AesCounterCipher(self.key_size)
        if self._key is not None:
            copy.set_key(self._key)
        copy._counter = self._counter
        return copy

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} AES-{self.key_size * 8} keyed={self._key is not None}>"


__all__ = ["CounterCipher", "AesCounterCipher"]
