"""
Generator and accumulator configuration.

``FortunaConfig`` is an immutable dataclass with validation.  It can be
built directly, or loaded from environment variables::

    FORTUNA_RESEED_ENTROPY_THRESHOLD=64
    FORTUNA_MIN_RESEED_INTERVAL=0.1
    FORTUNA_COLLECT_SAMPLES=1000

The defaults reproduce the fixed Fortuna parameters (64 bytes in pool 0,
100 ms between reseeds).
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional

from fortuna import constants
from fortuna.errors import InvalidArgumentError


@dataclass(frozen=True)
class FortunaConfig:
    """
    reseed_entropy_threshold: bytes pool 0 must hold before a reseed
    min_reseed_interval: seconds that must pass between reseeds
    max_event_size: largest chunk (bytes) the accumulator adds to a pool at once
    collect_samples: samples requested from each source per collection round
    collect_timeout: deadline in seconds for a parallel collection round
    prime_rounds: collection rounds attempted when seeding purely from sources
    """

    reseed_entropy_threshold: int = constants.RESEED_ENTROPY_THRESHOLD
    min_reseed_interval: float = constants.MIN_RESEED_INTERVAL
    max_event_size: int = constants.MAX_EVENT_SIZE
    collect_samples: int = 1000
    collect_timeout: float = 10.0
    prime_rounds: int = 50

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if self.reseed_entropy_threshold < 1:
            raise InvalidArgumentError("reseed_entropy_threshold must be >= 1")
        if self.min_reseed_interval < 0:
            raise InvalidArgumentError("min_reseed_interval must be >= 0")
        if not (1 <= self.max_event_size <= 255):
            raise InvalidArgumentError("max_event_size must be between 1 and 255")
        if self.collect_samples < 1:
            raise InvalidArgumentError("collect_samples must be >= 1")
        if self.collect_timeout <= 0:
            raise InvalidArgumentError("collect_timeout must be > 0")
        if self.prime_rounds < 1:
            raise InvalidArgumentError("prime_rounds must be >= 1")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_env(
        cls, prefix: str = "FORTUNA_", environ: Optional[Mapping[str, str]] = None
    ) -> "FortunaConfig":
        """Build a config from ``<prefix><FIELD_NAME>`` environment variables.

        Unset variables keep their defaults; unparsable values raise
        ``InvalidArgumentError``.
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(prefix + f.name.upper())
            if raw is None or raw.strip() == "":
                continue
            caster = float if f.type in ("float", float) else int
            try:
                values[f.name] = caster(raw)
            except ValueError as e:
                raise InvalidArgumentError(f"{prefix}{f.name.upper()}: cannot parse {raw!r}") from e
        return cls(**values)


__all__ = ["FortunaConfig"]
