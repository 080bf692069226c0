"""Shared fixtures: a controllable clock and a non-cloneable hash."""

import pytest

from fortuna.hashing import ShaD256


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class OpaqueShaD256(ShaD256):
    """SHAd-256 that reports it cannot be cloned, forcing snapshot pools."""

    def can_clone(self) -> bool:
        return False


@pytest.fixture
def clock():
    return FakeClock()
