"""Operating-system CSPRNG as an entropy source."""

from __future__ import annotations

import os

import numpy as np

from fortuna.sources.base import EntropySource


class SystemRandomSource(EntropySource):
    """``os.urandom()``: always available, already uniform.

    Useful to get a generator going quickly; the pools treat it like any
    other source.
    """

    name = "system_random"
    description = "Operating system CSPRNG (os.urandom)"

    def is_available(self) -> bool:
        return True

    def collect(self, n_samples: int = 1000) -> np.ndarray:
        return np.frombuffer(os.urandom(n_samples), dtype=np.uint8).copy()
