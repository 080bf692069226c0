"""Entropy accumulator: collects from sources and spreads it over the pools.

Architecture:
1. Register sources (each gets a source id and its own pool cursor)
2. Collect raw samples from each source, serially or in parallel threads
3. Split samples into events of at most ``max_event_size`` bytes, each
   framed as ``source_id || length || data``
4. Hand successive events of one source to successive pools, so every
   source contributes evenly to pools 0..31
5. Track per-source health; a failing source is marked unhealthy, never
   allowed to break collection
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fortuna.config import FortunaConfig
from fortuna.constants import NUM_ENTROPY_POOLS
from fortuna.consumer import EntropyConsumer
from fortuna.errors import InvalidArgumentError
from fortuna.sources.base import EntropySource

if TYPE_CHECKING:
    from fortuna.generator import Fortuna

logger = logging.getLogger(__name__)

MAX_SOURCES = 256


@dataclass
class SourceState:
    """Runtime state for a registered source."""

    source: EntropySource
    source_id: int
    pool_cursor: int = 0
    total_bytes: int = 0
    events: int = 0
    failures: int = 0
    last_entropy: float = 0.0
    last_collect_time: float = 0.0
    healthy: bool = True


class EntropyAccumulator:
    """Feeds an ``EntropyConsumer`` (usually a ``Fortuna``) from sources.

    Usage::

        prng = Fortuna()
        acc = EntropyAccumulator.auto(prng)
        acc.prime(prng)          # collect until the first reseed
        prng.get_random_bytes(32)
    """

    def __init__(self, consumer: EntropyConsumer, config: FortunaConfig | None = None) -> None:
        self._consumer = consumer
        self._config = config or FortunaConfig()
        self._sources: list[SourceState] = []
        self._lock = threading.Lock()
        self._total_events = 0

    # ── source management ──

    def add_source(self, source: EntropySource) -> SourceState:
        if len(self._sources) >= MAX_SOURCES:
            raise InvalidArgumentError(f"at most {MAX_SOURCES} sources can be registered")
        state = SourceState(source=source, source_id=len(self._sources))
        self._sources.append(state)
        return state

    @classmethod
    def auto(cls, consumer: EntropyConsumer, config: FortunaConfig | None = None) -> EntropyAccumulator:
        """Create an accumulator with every source available on this machine."""
        from fortuna.sources import detect_available_sources

        acc = cls(consumer, config)
        for src in detect_available_sources():
            acc.add_source(src)
        return acc

    @property
    def sources(self) -> list[SourceState]:
        return list(self._sources)

    # ── collection ──

    def _sample(self, ss: SourceState):
        """Run one source; returns ``(data, elapsed, error)`` without touching state."""
        t0 = time.monotonic()
        try:
            data = ss.source.collect(self._config.collect_samples)
        except Exception as e:
            return None, time.monotonic() - t0, e
        return data, time.monotonic() - t0, None

    def _record(self, ss: SourceState, data, elapsed: float, error: Exception | None) -> int:
        """Update health for one sample and distribute it.  Returns bytes added."""
        if error is not None:
            ss.failures += 1
            ss.healthy = False
            logger.warning("entropy source %s failed", ss.source.name, exc_info=error)
            return 0

        ss.last_collect_time = elapsed
        if len(data) == 0:
            ss.failures += 1
            ss.healthy = False
            logger.warning("entropy source %s returned no data", ss.source.name)
            return 0

        ss.last_entropy = EntropySource._quick_shannon(data)
        ss.healthy = ss.last_entropy > 1.0
        raw = data.tobytes()
        self._distribute(ss, raw)
        ss.total_bytes += len(raw)
        return len(raw)

    def _collect_one(self, ss: SourceState) -> int:
        return self._record(ss, *self._sample(ss))

    def _distribute(self, ss: SourceState, raw: bytes) -> None:
        step = self._config.max_event_size
        for start in range(0, len(raw), step):
            chunk = raw[start:start + step]
            event = bytes((ss.source_id, len(chunk))) + chunk
            self._consumer.add_random_bytes_to_pool(ss.pool_cursor, event)
            ss.pool_cursor = (ss.pool_cursor + 1) % NUM_ENTROPY_POOLS
            ss.events += 1
            with self._lock:
                self._total_events += 1

    def collect_all(self, parallel: bool = False, timeout: float | None = None) -> int:
        """Collect from every registered source; return bytes added.

        Parameters
        ----------
        parallel:
            If True, collect from all sources concurrently using threads.
        timeout:
            Deadline in seconds for parallel collection; defaults to
            ``config.collect_timeout``.  Sources still running at the
            deadline are abandoned: their samples are discarded when they
            arrive, and neither the pools nor their ``SourceState`` change.
        """
        if not parallel:
            return sum(self._collect_one(ss) for ss in self._sources)

        timeout = self._config.collect_timeout if timeout is None else timeout
        totals: list[int] = []
        totals_lock = threading.Lock()
        expired = threading.Event()

        def _worker(ss: SourceState) -> None:
            sample = self._sample(ss)
            # Past the deadline: the sample is dropped and the source state left alone.
            with totals_lock:
                if expired.is_set():
                    logger.debug("dropping late sample from %s", ss.source.name)
                    return
                totals.append(self._record(ss, *sample))

        threads = []
        for ss in self._sources:
            t = threading.Thread(target=_worker, args=(ss,), daemon=True)
            t.start()
            threads.append(t)

        deadline = time.monotonic() + timeout
        for t in threads:
            t.join(timeout=max(0.1, deadline - time.monotonic()))

        with totals_lock:
            expired.set()
            return sum(totals)

    def prime(self, generator: Fortuna, rounds: int | None = None) -> bool:
        """Collect until *generator* can reseed, then reseed it.

        Returns True once the generator has a key.
        """
        rounds = self._config.prime_rounds if rounds is None else rounds
        for _ in range(rounds):
            if generator.can_reseed():
                generator.get_random_bytes(0)
                logger.debug("generator primed after reseed %d", generator.reseed_index)
                return True
            self.collect_all()
            if not generator.can_reseed():
                time.sleep(generator.config.min_reseed_interval / 2)
        return generator.can_generate()

    # ── health ──

    def health_report(self) -> dict:
        healthy = sum(1 for s in self._sources if s.healthy)
        return {
            "healthy": healthy,
            "total": len(self._sources),
            "raw_bytes": sum(s.total_bytes for s in self._sources),
            "events": self._total_events,
            "sources": [
                {
                    "name": s.source.name,
                    "id": s.source_id,
                    "healthy": s.healthy,
                    "bytes": s.total_bytes,
                    "events": s.events,
                    "entropy": round(s.last_entropy, 2),
                    "time": round(s.last_collect_time, 3),
                    "failures": s.failures,
                }
                for s in self._sources
            ],
        }


__all__ = ["EntropyAccumulator", "SourceState"]
