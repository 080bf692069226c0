"""The interface through which entropy sources feed a generator."""

from __future__ import annotations

from abc import ABC, abstractmethod


class EntropyConsumer(ABC):
    """Anything that accepts raw entropy into numbered pools."""

    @abstractmethod
    def add_random_byte(self, b: int) -> None:
        ...

    @abstractmethod
    def add_random_bytes(self, data, offset: int = 0, length: int | None = None) -> None:
        """Add entropy to the next pool in round-robin order."""
        ...

    @abstractmethod
    def add_random_bytes_to_pool(
        self, index: int, data, offset: int = 0, length: int | None = None
    ) -> None:
        """Add entropy directly to pool *index*, bypassing round-robin."""
        ...


__all__ = ["EntropyConsumer"]
