"""Fortuna pseudo-random number generator.

Architecture (Ferguson & Schneier, *Practical Cryptography*, ch. 10):

1. Entropy sources add raw bytes to 32 pools, round-robin
2. Before each request, if pool 0 holds enough entropy and the minimum
   interval has passed, the generator reseeds: the old key and the digests
   of pools 0..k (pool i is drained on every 2**i-th reseed) are hashed
   into the new key
3. A block cipher in counter mode fills the caller's buffer
4. A fresh key is generated immediately afterwards, so the key that
   produced an output cannot be recovered from later state

The generation path is not locked.  Pools lock themselves, so sources may
add entropy from other threads, but concurrent calls to
``get_random_bytes`` must be serialised by the caller.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from fortuna.buffers import byte_view, check_range
from fortuna.cipher import AesCounterCipher, CounterCipher
from fortuna.combiner import XorCombiner
from fortuna.config import FortunaConfig
from fortuna.constants import KEY_ENCODING, MAX_BLOCK_SIZE, NUM_ENTROPY_POOLS
from fortuna.consumer import EntropyConsumer
from fortuna.errors import (
    IndexOutOfRangeError,
    InvalidArgumentError,
    NotSeededError,
    UnexpectedError,
)
from fortuna.hashing import DoubleHash, ShaD256
from fortuna.pool import EntropyPool

logger = logging.getLogger(__name__)


def key_string_to_bytes(key: str) -> bytes:
    """Encode a seed string as UTF-8."""
    try:
        return key.encode(KEY_ENCODING)
    except UnicodeEncodeError as e:
        raise UnexpectedError(f"seed string cannot be encoded as {KEY_ENCODING}") from e


def _seed_bytes(seed) -> bytes:
    if isinstance(seed, str):
        return key_string_to_bytes(seed)
    return bytes(byte_view(seed))


class Fortuna(EntropyConsumer):
    """Reseedable counter-mode CSPRNG fed by 32 entropy pools.

    Usage::

        prng = Fortuna(seed="correct horse")
        prng.get_random_bytes(16)

        prng = Fortuna()                  # unseeded
        prng.add_random_bytes(os.urandom(64))
        ...                               # once can_reseed() is true
        prng.get_random_bytes(16)

    Parameters
    ----------
    cipher:
        Counter-mode cipher; ``None`` selects AES-256.
    seed:
        Bytes, or a string whose UTF-8 encoding is used.  ``None`` leaves
        the generator unseeded until the pools allow a reseed.
    hash_factory:
        Builds the double hash used for key derivation and for each pool.
    config:
        Reseed threshold and interval; defaults to 64 bytes and 100 ms.
    clock:
        Monotonic time source in seconds.
    """

    def __init__(
        self,
        cipher: CounterCipher | None = None,
        seed=None,
        *,
        hash_factory: Callable[[], DoubleHash] = ShaD256,
        config: FortunaConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cipher = cipher if cipher is not None else AesCounterCipher()
        self._config = config or FortunaConfig()
        self._clock = clock
        self._hash_factory = hash_factory
        self._hash = hash_factory()
        self._key_size = self._cipher.key_size
        if self._hash.digest_size < self._key_size:
            raise InvalidArgumentError(
                f"{self._hash.digest_size}-byte digest cannot key a {self._key_size}-byte cipher"
            )
        self._key: bytearray | None = None
        self._block_buffer = bytearray(self._cipher.block_size)
        self._entropy_pools = [EntropyPool(hash_factory) for _ in range(NUM_ENTROPY_POOLS)]
        self._entropy_pool_index = 0
        self._reseed_index = 0
        self._last_reseed_time = clock()

        self._cipher.init()
        if seed is not None:
            self._set_key(self._hash.digest(_seed_bytes(seed)))

    # ── properties ──

    @property
    def key_size(self) -> int:
        return self._key_size

    @property
    def block_size(self) -> int:
        return len(self._block_buffer)

    @property
    def reseed_index(self) -> int:
        """Number of reseeds since construction or the last ``init``."""
        return self._reseed_index

    @property
    def entropy_pool_index(self) -> int:
        """Pool that the next round-robin addition goes to."""
        return self._entropy_pool_index

    @property
    def config(self) -> FortunaConfig:
        return self._config

    def get_entropy_pool_lengths(self) -> list[int]:
        """Bytes accumulated in each of the 32 pools."""
        return [pool.length for pool in self._entropy_pools]

    # ── state ──

    def init(self, seed=None) -> None:
        """Reset all state; then key from *seed*, or leave unseeded."""
        seed_bytes = None if seed is None else _seed_bytes(seed)

        self._cipher.reset()
        self._hash.reset()
        for pool in self._entropy_pools:
            pool.reset()
        self._entropy_pool_index = 0
        self._reseed_index = 0
        self._last_reseed_time = self._clock()

        if seed_bytes is None:
            self._key = None
        else:
            self._set_key(self._hash.digest(seed_bytes))

    def can_generate(self) -> bool:
        return self._key is not None

    def can_reseed(self) -> bool:
        """True if pool 0 holds enough entropy and the reseed interval has passed."""
        return (
            self._entropy_pools[0].length >= self._config.reseed_entropy_threshold
            and self._clock() - self._last_reseed_time >= self._config.min_reseed_interval
        )

    # ── output ──

    def get_random_bytes(self, length: int) -> bytes:
        """Return *length* random bytes (0 to 2**20)."""
        if isinstance(length, bool) or not isinstance(length, int) or not (0 <= length <= MAX_BLOCK_SIZE):
            raise InvalidArgumentError(f"length must be between 0 and {MAX_BLOCK_SIZE}, not {length!r}")
        buffer = bytearray(length)
        self.get_random_bytes_into(buffer, 0, length)
        return bytes(buffer)

    def get_random_bytes_into(self, buffer, offset: int = 0, length: int | None = None) -> None:
        """Fill ``buffer[offset:offset + length]`` with random bytes.

        Raises ``NotSeededError`` if the generator has no key and cannot
        reseed.
        """
        view = byte_view(buffer, writable=True)
        length = check_range(view, offset, length)
        if length > MAX_BLOCK_SIZE:
            raise InvalidArgumentError(f"length must not exceed {MAX_BLOCK_SIZE}, not {length}")

        if self.can_reseed():
            self._reseed()

        if self._key is None:
            raise NotSeededError()

        self._generate_block(view, offset, length)

        # Key erasure
        self._generate_block(self._key, 0, self._key_size)
        self._set_key(self._key)

    def get_random_byte(self) -> int:
        return self.get_random_bytes(1)[0]

    def get_random_int(self) -> int:
        """Unsigned 32-bit integer, big-endian from four random bytes."""
        return int.from_bytes(self.get_random_bytes(4), "big")

    def get_random_long(self) -> int:
        """Unsigned 64-bit integer, big-endian from eight random bytes."""
        return int.from_bytes(self.get_random_bytes(8), "big")

    # ── entropy input ──

    def add_random_byte(self, b: int) -> None:
        if isinstance(b, bool) or not isinstance(b, int) or not (0 <= b <= 0xFF):
            raise InvalidArgumentError(f"expected a byte value 0..255, not {b!r}")
        self.add_random_bytes(bytes((b,)))

    def add_random_bytes(self, data, offset: int = 0, length: int | None = None) -> None:
        self._entropy_pools[self._entropy_pool_index].add(data, offset, length)
        self._entropy_pool_index = (self._entropy_pool_index + 1) % NUM_ENTROPY_POOLS

    def add_random_bytes_to_pool(
        self, index: int, data, offset: int = 0, length: int | None = None
    ) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidArgumentError(f"pool index must be an int, not {index!r}")
        if not (0 <= index < NUM_ENTROPY_POOLS):
            raise IndexOutOfRangeError(f"pool index {index} outside 0..{NUM_ENTROPY_POOLS - 1}")
        self._entropy_pools[index].add(data, offset, length)

    # ── helpers ──

    def create_combiner(self, block_size: int) -> XorCombiner:
        return XorCombiner(self, block_size)

    def clone(self) -> "Fortuna":
        """Return an independent copy in the same state.

        The copy shares no mutable state with this generator: cipher, key,
        block buffer and every pool are duplicated.
        """
        copy = type(self).__new__(type(self))
        copy._cipher = self._cipher.clone()
        copy._config = self._config
        copy._clock = self._clock
        copy._hash_factory = self._hash_factory
        copy._hash = self._hash_factory()
        copy._key_size = self._key_size
        copy._key = None if self._key is None else bytearray(self._key)
        copy._block_buffer = bytearray(self._block_buffer)
        copy._entropy_pools = [pool.clone() for pool in self._entropy_pools]
        copy._entropy_pool_index = self._entropy_pool_index
        copy._reseed_index = self._reseed_index
        copy._last_reseed_time = self._last_reseed_time
        return copy

    def __copy__(self) -> "Fortuna":
        return self.clone()

    def __deepcopy__(self, memo) -> "Fortuna":
        return self.clone()

    def _reseed(self) -> None:
        self._last_reseed_time = self._clock()
        if self._key is not None:
            self._hash.update(self._key)
        self._reseed_index += 1
        mask = 0
        drained = 0
        for pool in self._entropy_pools:
            if self._reseed_index & mask:
                break
            self._hash.update(pool.remove())
            drained += 1
            mask = (mask << 1) | 1
        self._set_key(self._hash.digest())
        logger.debug("reseed %d drained %d pool(s)", self._reseed_index, drained)

    def _set_key(self, key) -> None:
        self._key = bytearray(key[:self._key_size])
        self._cipher.set_key(bytes(self._key))
        self._cipher.increment_counter()

    def _generate_block(self, buffer, offset: int, length: int) -> None:
        block_size = len(self._block_buffer)
        end = offset + length
        while offset < end:
            n = min(end - offset, block_size)
            if n < block_size:
                self._cipher.encrypt_counter(self._block_buffer, 0)
                buffer[offset:offset + n] = self._block_buffer[:n]
            else:
                self._cipher.encrypt_counter(buffer, offset)
            self._cipher.increment_counter()
            offset += n

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} seeded={self.can_generate()} "
            f"reseeds={self._reseed_index} pool0={self._entropy_pools[0].length}>"
        )


__all__ = ["Fortuna", "key_string_to_bytes"]
