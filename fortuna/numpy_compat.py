"""NumPy-style random API backed directly by a Fortuna keystream.

Usage::

    from fortuna import Fortuna
    from fortuna.numpy_compat import FortunaRandom

    rng = FortunaRandom.from_generator(Fortuna(seed="demo"))
    rng.random(10)
    rng.integers(0, 256, size=100)

Unlike a seeded ``numpy.random.Generator``, every draw here comes straight
from the CSPRNG, so outputs are as unpredictable as the generator itself.
"""

from __future__ import annotations

import numpy as np

from fortuna.constants import MAX_BLOCK_SIZE
from fortuna.errors import InvalidArgumentError
from fortuna.generator import Fortuna

_UINT64_RANGE = 1 << 64


class FortunaBitGenerator:
    """Source of raw 64-bit words read from a ``Fortuna`` generator.

    Not a true numpy BitGenerator subclass (that requires C capsules).
    """

    def __init__(self, generator: Fortuna) -> None:
        self._generator = generator
        self._words_drawn = 0

    @property
    def generator(self) -> Fortuna:
        return self._generator

    def random_raw(self, n: int = 1) -> np.ndarray:
        out = np.empty(n, dtype=np.uint64)
        raw = out.view(np.uint8)
        for start in range(0, len(raw), MAX_BLOCK_SIZE):
            chunk = raw[start:start + MAX_BLOCK_SIZE]
            self._generator.get_random_bytes_into(chunk)
        self._words_drawn += n
        return out

    @property
    def state(self) -> dict:
        return {
            "bit_generator": "FortunaBitGenerator",
            "seeded": self._generator.can_generate(),
            "reseed_index": self._generator.reseed_index,
            "words_drawn": self._words_drawn,
        }


def _count(size) -> int:
    if size is None:
        return 1
    return int(np.prod(size))


def _shape(values: np.ndarray, size):
    if size is None:
        return values[0].item()
    return values.reshape(size)


class FortunaRandom:
    """Subset of the ``numpy.random.Generator`` interface."""

    def __init__(self, bit_generator: FortunaBitGenerator) -> None:
        self._bg = bit_generator

    @classmethod
    def from_generator(cls, generator: Fortuna) -> FortunaRandom:
        return cls(FortunaBitGenerator(generator))

    @property
    def bit_generator(self) -> FortunaBitGenerator:
        return self._bg

    def random(self, size=None):
        """Random floats in [0, 1) with 53 bits of precision."""
        raw = self._bg.random_raw(_count(size))
        values = (raw >> np.uint64(11)).astype(np.float64) * (1.0 / (1 << 53))
        return _shape(values, size)

    def integers(self, low, high=None, size=None):
        """Uniform integers in [low, high), by rejection sampling."""
        if high is None:
            low, high = 0, low
        low, high = int(low), int(high)
        span = high - low
        if span <= 0:
            raise InvalidArgumentError(f"high ({high}) must be greater than low ({low})")
        if span > 1 << 63:
            raise InvalidArgumentError("range must not exceed 2**63")

        count = _count(size)
        limit = (_UINT64_RANGE // span) * span
        out = np.empty(count, dtype=np.int64)
        filled = 0
        while filled < count:
            raw = self._bg.random_raw(count - filled)
            if limit < _UINT64_RANGE:
                raw = raw[raw < np.uint64(limit)]
            n = len(raw)
            out[filled:filled + n] = (raw % np.uint64(span)).astype(np.int64) + low
            filled += n
        return _shape(out, size)

    def bytes(self, length: int) -> bytes:
        """Random bytes directly from the generator."""
        out = bytearray(length)
        view = memoryview(out)
        for start in range(0, length, MAX_BLOCK_SIZE):
            self._bg.generator.get_random_bytes_into(view[start:start + MAX_BLOCK_SIZE])
        return bytes(out)

    def choice(self, a, size=None):
        """Uniform choice with replacement."""
        pool = np.arange(a) if isinstance(a, (int, np.integer)) else np.asarray(a)
        if len(pool) == 0:
            raise InvalidArgumentError("cannot choose from an empty sequence")
        idx = self.integers(0, len(pool), size=size)
        return pool[idx]

    def shuffle(self, x) -> None:
        """Fisher-Yates shuffle along the first axis, in place."""
        for i in range(len(x) - 1, 0, -1):
            j = self.integers(0, i + 1)
            if isinstance(x, np.ndarray):
                x[[i, j]] = x[[j, i]]
            else:
                x[i], x[j] = x[j], x[i]

    def permutation(self, x):
        """Shuffled copy of *x*, or of ``arange(x)`` for an int."""
        arr = np.arange(x) if isinstance(x, (int, np.integer)) else np.array(x)
        self.shuffle(arr)
        return arr


__all__ = ["FortunaBitGenerator", "FortunaRandom"]
