"""Tests for the entropy accumulator."""

import logging
import threading
import time

import numpy as np
import pytest

from fortuna import Fortuna, FortunaConfig
from fortuna.accumulator import MAX_SOURCES, EntropyAccumulator
from fortuna.consumer import EntropyConsumer
from fortuna.errors import InvalidArgumentError
from fortuna.sources.base import EntropySource

FAST = FortunaConfig(min_reseed_interval=0.0, collect_samples=1000, prime_rounds=5)


class RecordingConsumer(EntropyConsumer):
    def __init__(self):
        self.events = []

    def add_random_byte(self, b):
        self.events.append((None, bytes((b,))))

    def add_random_bytes(self, data, offset=0, length=None):
        self.events.append((None, bytes(data)))

    def add_random_bytes_to_pool(self, index, data, offset=0, length=None):
        self.events.append((index, bytes(data)))


class CountingSource(EntropySource):
    name = "counting"

    def is_available(self):
        return True

    def collect(self, n_samples=1000):
        return (np.arange(n_samples) % 256).astype(np.uint8)


class BrokenSource(EntropySource):
    name = "broken"

    def is_available(self):
        return True

    def collect(self, n_samples=1000):
        raise OSError("sensor unplugged")


class EmptySource(EntropySource):
    name = "empty"

    def is_available(self):
        return True

    def collect(self, n_samples=1000):
        return np.array([], dtype=np.uint8)


class ConstantSource(EntropySource):
    name = "constant"

    def is_available(self):
        return True

    def collect(self, n_samples=1000):
        return np.full(n_samples, 7, dtype=np.uint8)


class TestRegistration:
    def test_source_ids_sequential(self):
        acc = EntropyAccumulator(RecordingConsumer())
        a = acc.add_source(CountingSource())
        b = acc.add_source(CountingSource())
        assert (a.source_id, b.source_id) == (0, 1)
        assert [s.source_id for s in acc.sources] == [0, 1]

    def test_source_limit(self):
        acc = EntropyAccumulator(RecordingConsumer())
        for _ in range(MAX_SOURCES):
            acc.add_source(CountingSource())
        with pytest.raises(InvalidArgumentError):
            acc.add_source(CountingSource())

    def test_auto_registers_available_sources(self):
        acc = EntropyAccumulator.auto(RecordingConsumer())
        names = {s.source.name for s in acc.sources}
        assert "system_random" in names


class TestDistribution:
    def test_events_are_framed(self):
        consumer = RecordingConsumer()
        acc = EntropyAccumulator(consumer, FortunaConfig(collect_samples=40, max_event_size=32))
        acc.add_source(CountingSource())
        acc.add_source(CountingSource())
        assert acc.collect_all() == 80

        first, second = consumer.events[0][1], consumer.events[1][1]
        assert first[:2] == bytes((0, 32))
        assert first[2:] == bytes(range(32))
        assert second[:2] == bytes((0, 8))
        assert second[2:] == bytes(range(32, 40))
        assert consumer.events[2][1][:2] == bytes((1, 32))

    def test_pools_advance_per_source(self):
        consumer = RecordingConsumer()
        acc = EntropyAccumulator(consumer, FortunaConfig(collect_samples=10, max_event_size=1))
        acc.add_source(CountingSource())
        acc.collect_all()
        acc.collect_all()
        assert [idx for idx, _ in consumer.events] == list(range(20))

    def test_pool_cursor_wraps(self):
        consumer = RecordingConsumer()
        acc = EntropyAccumulator(consumer, FortunaConfig(collect_samples=40, max_event_size=1))
        acc.add_source(CountingSource())
        acc.collect_all()
        assert [idx for idx, _ in consumer.events][30:34] == [30, 31, 0, 1]

    def test_feeds_generator_pools(self):
        prng = Fortuna()
        acc = EntropyAccumulator(prng, FortunaConfig(collect_samples=64, max_event_size=32))
        acc.add_source(CountingSource())
        acc.collect_all()
        assert prng.get_entropy_pool_lengths()[:2] == [34, 34]

    def test_parallel_collection(self):
        consumer = RecordingConsumer()
        acc = EntropyAccumulator(consumer, FortunaConfig(collect_samples=50))
        for _ in range(4):
            acc.add_source(CountingSource())
        assert acc.collect_all(parallel=True) == 200
        assert acc.health_report()["raw_bytes"] == 200


class TestHealth:
    def test_failing_source_is_isolated(self, caplog):
        acc = EntropyAccumulator(RecordingConsumer(), FortunaConfig(collect_samples=50))
        acc.add_source(BrokenSource())
        acc.add_source(CountingSource())
        with caplog.at_level(logging.WARNING, logger="fortuna.accumulator"):
            assert acc.collect_all() == 50
        assert "broken" in caplog.text

        report = acc.health_report()
        assert report["healthy"] == 1
        assert report["total"] == 2
        broken = report["sources"][0]
        assert broken["healthy"] is False
        assert broken["failures"] == 1

    def test_empty_source_counts_as_failure(self):
        acc = EntropyAccumulator(RecordingConsumer())
        state = acc.add_source(EmptySource())
        assert acc.collect_all() == 0
        assert state.failures == 1
        assert not state.healthy

    def test_low_entropy_source_unhealthy(self):
        acc = EntropyAccumulator(RecordingConsumer(), FortunaConfig(collect_samples=50))
        state = acc.add_source(ConstantSource())
        acc.collect_all()
        assert state.total_bytes == 50
        assert not state.healthy

    def test_report_fields(self):
        acc = EntropyAccumulator(RecordingConsumer(), FortunaConfig(collect_samples=64))
        acc.add_source(CountingSource())
        acc.collect_all()
        report = acc.health_report()
        assert report["events"] == 2
        entry = report["sources"][0]
        assert entry["name"] == "counting"
        assert entry["bytes"] == 64
        assert entry["events"] == 2
        assert entry["entropy"] == 6.0
        assert entry["healthy"] is True


class TestPrime:
    def test_prime_seeds_generator(self):
        prng = Fortuna(config=FAST)
        acc = EntropyAccumulator(prng, FAST)
        acc.add_source(CountingSource())
        assert acc.prime(prng)
        assert prng.can_generate()
        assert prng.reseed_index == 1

    def test_prime_fails_without_sources(self):
        prng = Fortuna(config=FAST)
        acc = EntropyAccumulator(prng, FAST)
        acc.add_source(BrokenSource())
        assert not acc.prime(prng, rounds=2)
        assert not prng.can_generate()

    def test_prime_already_seeded(self):
        prng = Fortuna(seed="x", config=FAST)
        acc = EntropyAccumulator(prng, FAST)
        acc.add_source(BrokenSource())
        assert acc.prime(prng, rounds=1)


class StalledSource(EntropySource):
    """Blocks in ``collect`` until released."""

    name = "stalled"

    def __init__(self):
        self.release = threading.Event()

    def is_available(self):
        return True

    def collect(self, n_samples=1000):
        self.release.wait(5)
        return (np.arange(n_samples) % 256).astype(np.uint8)


class TestParallelDeadline:
    def test_late_samples_are_dropped(self, caplog):
        consumer = RecordingConsumer()
        acc = EntropyAccumulator(consumer, FortunaConfig(collect_samples=50))
        slow = StalledSource()
        state = acc.add_source(slow)
        acc.add_source(CountingSource())

        with caplog.at_level(logging.DEBUG, logger="fortuna.accumulator"):
            assert acc.collect_all(parallel=True, timeout=0.05) == 50
            slow.release.set()
            deadline = time.monotonic() + 5
            while "dropping late sample from stalled" not in caplog.text:
                assert time.monotonic() < deadline
                time.sleep(0.01)

        assert len(consumer.events) == 2
        assert state.total_bytes == 0
        assert state.events == 0
        assert state.last_collect_time == 0.0
        assert acc.health_report()["raw_bytes"] == 50
