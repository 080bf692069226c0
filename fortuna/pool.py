"""Entropy pools: accumulate raw entropy, hand it back as one digest.

A pool compresses everything added to it with a double hash.  How the
accumulated state is held depends on whether the hash can be cloned:

1. ``STREAM``: the hash context itself is the pool.  ``add`` streams data
   into it and ``remove`` finalises it.  Cloning the pool clones the context.
2. ``SNAPSHOT``: the hash state cannot be duplicated, so after every
   ``add`` the pool re-hashes ``previous digest || data`` and keeps only the
   resulting digest.  Slower, but the pool stays cloneable.

The mode is fixed when the pool is created.  ``remove`` restarts the
compression state in both modes: entropy that has been drained never
contributes to a later digest.

Every mutator holds the pool's lock, so several sources may feed the same
pool from different threads.
"""

from __future__ import annotations

import enum
import threading
from typing import Callable

from fortuna.buffers import byte_view, check_range
from fortuna.hashing import DoubleHash, ShaD256


class PoolMode(enum.Enum):
    STREAM = "stream"
    SNAPSHOT = "snapshot"


class EntropyPool:
    """One of the generator's 32 entropy pools.

    Usage::

        pool = EntropyPool()
        pool.add(b"timer jitter")
        pool.length        # 12
        digest = pool.remove()
    """

    def __init__(self, hash_factory: Callable[[], DoubleHash] = ShaD256) -> None:
        self._hash_factory = hash_factory
        self._lock = threading.Lock()
        self._hash = hash_factory()
        self._mode = PoolMode.STREAM if self._hash.can_clone() else PoolMode.SNAPSHOT
        self._length = 0
        self._snapshot: bytes | None = (
            self._hash.digest() if self._mode is PoolMode.SNAPSHOT else None
        )

    @property
    def mode(self) -> PoolMode:
        return self._mode

    @property
    def length(self) -> int:
        """Bytes added since the pool was last drained or reset."""
        return self._length

    def add(self, data, offset: int = 0, length: int | None = None) -> None:
        view = byte_view(data)
        length = check_range(view, offset, length)
        # The hash only ever sees a complete, validated chunk.
        chunk = bytes(view[offset:offset + length])
        with self._lock:
            if self._mode is PoolMode.SNAPSHOT:
                try:
                    self._hash.update(self._snapshot)
                    self._hash.update(chunk)
                except Exception:
                    self._hash.reset()
                    raise
                self._snapshot = self._hash.digest()
            else:
                self._hash.update(chunk)
            self._length += length

    def remove(self) -> bytes:
        """Drain the pool, returning the digest of its contents."""
        with self._lock:
            self._length = 0
            if self._mode is PoolMode.SNAPSHOT:
                digest = self._snapshot
                self._snapshot = self._hash.digest()
                return digest
            return self._hash.digest()

    def reset(self) -> None:
        with self._lock:
            self._length = 0
            self._hash.reset()
            if self._mode is PoolMode.SNAPSHOT:
                self._snapshot = self._hash.digest()

    def clone(self) -> "EntropyPool":
        """Return an independent copy holding the same accumulated entropy."""
        copy = EntropyPool.__new__(EntropyPool)
        copy._hash_factory = self._hash_factory
        copy._lock = threading.Lock()
        copy._mode = self._mode
        with self._lock:
            copy._length = self._length
            if self._mode is PoolMode.SNAPSHOT:
                copy._hash = self._hash_factory()
                copy._snapshot = self._snapshot
            else:
                copy._hash = self._hash.clone()
                copy._snapshot = None
        return copy

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} mode={self._mode.value} length={self._length}>"


__all__ = ["EntropyPool", "PoolMode"]
