"""Entropy source implementations."""

from __future__ import annotations

from fortuna.sources.base import EntropySource
from fortuna.sources.system import SystemRandomSource
from fortuna.sources.timing import ClockJitterSource, SleepJitterSource

ALL_SOURCES: list[type[EntropySource]] = [
    ClockJitterSource,
    SleepJitterSource,
    SystemRandomSource,
]


def detect_available_sources() -> list[EntropySource]:
    """Instantiate and return every source usable on this machine."""
    available: list[EntropySource] = []
    for cls in ALL_SOURCES:
        src = cls()
        if src.is_available():
            available.append(src)
    return available


__all__ = [
    "ALL_SOURCES",
    "ClockJitterSource",
    "EntropySource",
    "SleepJitterSource",
    "SystemRandomSource",
    "detect_available_sources",
]
