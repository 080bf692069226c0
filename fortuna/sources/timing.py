"""Timing-jitter entropy sources."""

from __future__ import annotations

import time

import numpy as np

from fortuna.sources.base import EntropySource


class ClockJitterSource(EntropySource):
    """Entropy from the drift between two clock domains.

    ``time.perf_counter_ns()`` and ``time.monotonic_ns()`` may be driven by
    different oscillators; the low bits of their difference wander with
    oscillator phase noise.
    """

    name = "clock_jitter"
    description = "Phase noise between perf_counter and monotonic clocks"

    def is_available(self) -> bool:
        return True

    def collect(self, n_samples: int = 1000) -> np.ndarray:
        diffs = np.empty(n_samples, dtype=np.int64)
        for i in range(n_samples):
            diffs[i] = time.perf_counter_ns() - time.monotonic_ns()
        return (diffs & 0xFF).astype(np.uint8)


class SleepJitterSource(EntropySource):
    """Entropy from scheduler latency on zero-length sleeps."""

    name = "sleep_jitter"
    description = "OS scheduling jitter from zero-length sleeps"

    def is_available(self) -> bool:
        return True

    def collect(self, n_samples: int = 1000) -> np.ndarray:
        # Each sample costs a context switch; keep rounds short.
        n_samples = min(n_samples, 500)
        jitters = np.empty(n_samples, dtype=np.int64)
        for i in range(n_samples):
            t0 = time.perf_counter_ns()
            time.sleep(0)
            jitters[i] = time.perf_counter_ns() - t0
        return (jitters & 0xFF).astype(np.uint8)
