"""Abstract base class for entropy sources that feed a Fortuna generator."""

from abc import ABC, abstractmethod

import numpy as np


class EntropySource(ABC):
    """A producer of raw, possibly biased, entropy samples.

    Sources make no claim about output quality: the generator's pools
    compress whatever they deliver.  A source only needs to be unpredictable
    to an observer, not uniform.
    """

    name: str = "unnamed"
    description: str = ""

    @abstractmethod
    def is_available(self) -> bool:
        """Return True if the source can operate on this machine."""
        ...

    @abstractmethod
    def collect(self, n_samples: int = 1000) -> np.ndarray:
        """Collect up to *n_samples* raw samples as a 1-D uint8 array."""
        ...

    def entropy_quality(self) -> dict:
        """Collect a sample and estimate its Shannon entropy."""
        data = self.collect()
        return {
            "name": self.name,
            "samples": len(data),
            "unique_values": int(len(np.unique(data))),
            "shannon_entropy": round(self._quick_shannon(data), 4),
        }

    @staticmethod
    def _quick_shannon(data: np.ndarray) -> float:
        """Shannon entropy in bits/byte for uint8 data."""
        if len(data) == 0:
            return 0.0
        counts = np.bincount(np.asarray(data, dtype=np.uint8), minlength=256)
        probs = counts[counts > 0] / len(data)
        return float(-np.sum(probs * np.log2(probs)))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
