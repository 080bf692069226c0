"""
fortuna-prng: the Fortuna cryptographically secure pseudo-random number generator.

A block cipher in counter mode, rekeyed after every request, and reseeded
from 32 entropy pools that local entropy sources keep filling.
"""

__version__ = "0.1.0"
__author__ = "Amenti Labs"

from fortuna.accumulator import EntropyAccumulator
from fortuna.cipher import AesCounterCipher, CounterCipher
from fortuna.combiner import XorCombiner
from fortuna.config import FortunaConfig
from fortuna.consumer import EntropyConsumer
from fortuna.errors import (
    FortunaError,
    IndexOutOfRangeError,
    InvalidArgumentError,
    NotSeededError,
    UnexpectedError,
)
from fortuna.generator import Fortuna, key_string_to_bytes
from fortuna.hashing import DoubleHash, ShaD256
from fortuna.pool import EntropyPool, PoolMode
from fortuna.sources.base import EntropySource

__all__ = [
    "AesCounterCipher",
    "CounterCipher",
    "DoubleHash",
    "EntropyAccumulator",
    "EntropyConsumer",
    "EntropyPool",
    "EntropySource",
    "Fortuna",
    "FortunaConfig",
    "FortunaError",
    "FortunaRandom",
    "IndexOutOfRangeError",
    "InvalidArgumentError",
    "NotSeededError",
    "PoolMode",
    "ShaD256",
    "UnexpectedError",
    "XorCombiner",
    "key_string_to_bytes",
    "__version__",
]


def FortunaRandom(generator=None, **kwargs):
    """Create a Generator-like RNG that draws from a Fortuna keystream.

    Example::

        from fortuna import Fortuna, FortunaRandom
        rng = FortunaRandom(Fortuna(seed="demo"))
        rng.random(10)
        rng.integers(0, 100)
    """
    from fortuna.numpy_compat import FortunaRandom as _FR

    if generator is None:
        generator = Fortuna(**kwargs)
        EntropyAccumulator.auto(generator).prime(generator)
    return _FR.from_generator(generator)
