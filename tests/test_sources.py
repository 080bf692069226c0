"""Tests for entropy sources."""

import numpy as np
import pytest

from fortuna.sources import ALL_SOURCES, detect_available_sources
from fortuna.sources.base import EntropySource
from fortuna.sources.system import SystemRandomSource
from fortuna.sources.timing import ClockJitterSource, SleepJitterSource


@pytest.mark.parametrize("cls", ALL_SOURCES, ids=lambda c: c.name)
def test_collect_returns_uint8(cls):
    src = cls()
    assert src.is_available()
    data = src.collect(100)
    assert data.dtype == np.uint8
    assert data.ndim == 1
    assert len(data) == 100


def test_sleep_jitter_caps_samples():
    assert len(SleepJitterSource().collect(1000)) == 500


def test_unique_names():
    names = [cls.name for cls in ALL_SOURCES]
    assert len(names) == len(set(names))


def test_detect_available():
    found = detect_available_sources()
    assert {type(s) for s in found} == set(ALL_SOURCES)


def test_entropy_quality():
    q = SystemRandomSource().entropy_quality()
    assert q["name"] == "system_random"
    assert q["samples"] == 1000
    assert q["shannon_entropy"] > 7.0


def test_shannon_bounds():
    assert EntropySource._quick_shannon(np.zeros(100, dtype=np.uint8)) == 0.0
    assert EntropySource._quick_shannon(np.arange(256, dtype=np.uint8)) == pytest.approx(8.0)
    assert EntropySource._quick_shannon(np.array([], dtype=np.uint8)) == 0.0


def test_repr():
    assert "clock_jitter" in repr(ClockJitterSource())
