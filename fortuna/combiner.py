"""XOR combiner: stream-cipher arbitrary data with generator output."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from fortuna.buffers import byte_view, check_range
from fortuna.constants import MAX_BLOCK_SIZE, MIN_BLOCK_SIZE
from fortuna.errors import InvalidArgumentError

if TYPE_CHECKING:
    from fortuna.generator import Fortuna

logger = logging.getLogger(__name__)


class XorCombiner:
    """XOR data in place with keystream drawn from a Fortuna generator.

    Keystream is fetched in chunks whose size is the smallest power of two
    not less than *block_size*; a chunk is refilled only when the previous
    one is used up.  Applying a fresh combiner over a generator in the same
    state a second time restores the original data.

    Parameters
    ----------
    prng:
        The generator that supplies the keystream.
    block_size:
        Requested chunk size, 1 to 2**20 bytes.
    """

    def __init__(self, prng: Fortuna, block_size: int) -> None:
        if (
            isinstance(block_size, bool)
            or not isinstance(block_size, int)
            or not (MIN_BLOCK_SIZE <= block_size <= MAX_BLOCK_SIZE)
        ):
            raise InvalidArgumentError(
                f"block size must be between {MIN_BLOCK_SIZE} and {MAX_BLOCK_SIZE}, not {block_size!r}"
            )
        buffer_size = 1 << (block_size - 1).bit_length()
        self._prng = prng
        self._buffer = np.zeros(buffer_size, dtype=np.uint8)
        self._index = 0
        self._index_mask = buffer_size - 1

    @property
    def prng(self) -> Fortuna:
        return self._prng

    @property
    def buffer_size(self) -> int:
        return len(self._buffer)

    def combine(self, data, offset: int = 0, length: int | None = None) -> None:
        """XOR ``data[offset:offset + length]`` with keystream, in place."""
        view = byte_view(data, writable=True)
        length = check_range(view, offset, length)
        if length == 0:
            return
        target = np.frombuffer(view, dtype=np.uint8)

        pos = offset
        end = offset + length
        while pos < end:
            if self._index == 0:
                self._prng.get_random_bytes_into(self._buffer)
                logger.debug("combiner refilled %d keystream bytes", len(self._buffer))
            run = min(end - pos, len(self._buffer) - self._index)
            chunk = target[pos:pos + run]
            np.bitwise_xor(chunk, self._buffer[self._index:self._index + run], out=chunk)
            pos += run
            self._index = (self._index + run) & self._index_mask

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} buffer={len(self._buffer)} index={self._index}>"


__all__ = ["XorCombiner"]
