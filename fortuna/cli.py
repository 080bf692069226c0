"""CLI for fortuna-prng."""

from __future__ import annotations

import base64
import sys
import time

import click

from fortuna import __version__
from fortuna.accumulator import EntropyAccumulator
from fortuna.config import FortunaConfig
from fortuna.constants import MAX_BLOCK_SIZE
from fortuna.errors import FortunaError
from fortuna.generator import Fortuna


@click.group()
@click.version_option(__version__)
def main() -> None:
    """fortuna: Fortuna CSPRNG fed by local entropy sources."""


# ────────────────────────────────────────────────────────────
# Discovery
# ────────────────────────────────────────────────────────────


@main.command()
def sources() -> None:
    """List entropy sources available on this machine."""
    from fortuna.sources import detect_available_sources

    found = detect_available_sources()
    click.echo(f"Found {len(found)} available entropy source(s):\n")
    for src in found:
        click.echo(f"  {src.name:<20} {src.description}")


# ────────────────────────────────────────────────────────────
# Output
# ────────────────────────────────────────────────────────────


@main.command()
@click.option("--seed", default=None, help="Seed string (deterministic output). Omit to seed from sources.")
@click.option("--bytes", "n_bytes", default=32, type=click.IntRange(min=0), help="Number of bytes.")
@click.option("--format", "fmt", type=click.Choice(["raw", "hex", "base64"]), default="hex",
              help="Output format.")
@click.option("--sources", "source_filter", default=None, help="Comma-separated source name filter.")
def generate(seed: str | None, n_bytes: int, fmt: str, source_filter: str | None) -> None:
    """Print a fixed number of random bytes.

    Examples:

        fortuna generate --seed test-seed --bytes 16

        fortuna generate --format base64 --bytes 48
    """
    prng, _ = _make_generator(seed, source_filter)
    data = bytearray()
    while len(data) < n_bytes:
        data.extend(prng.get_random_bytes(min(MAX_BLOCK_SIZE, n_bytes - len(data))))
    _write(bytes(data), fmt)
    if fmt != "raw":
        click.echo()


@main.command()
@click.option("--rate", default=0, type=int, help="Bytes/sec rate limit (0 = unlimited).")
@click.option("--format", "fmt", type=click.Choice(["raw", "hex", "base64"]), default="raw",
              help="Output format.")
@click.option("--seed", default=None, help="Seed string. Omit to seed (and keep feeding) from sources.")
@click.option("--sources", "source_filter", default=None, help="Comma-separated source name filter.")
@click.option("--bytes", "n_bytes", default=0, type=int, help="Total bytes (0 = infinite).")
def stream(rate: int, fmt: str, seed: str | None, source_filter: str | None, n_bytes: int) -> None:
    """Stream random bytes to stdout.

    Examples:

        fortuna stream --format raw | dd of=/tmp/random.bin bs=1024 count=100

        fortuna stream --format hex --bytes 256
    """
    prng, acc = _make_generator(seed, source_filter)
    chunk_size = min(rate, 4096) if rate > 0 else 4096
    total = 0

    try:
        while True:
            if 0 < n_bytes <= total:
                break
            want = chunk_size if n_bytes == 0 else min(chunk_size, n_bytes - total)
            if acc is not None:
                acc.collect_all()
            data = prng.get_random_bytes(want)
            _write(data, fmt)
            total += len(data)

            if rate > 0:
                time.sleep(len(data) / rate)
    except (BrokenPipeError, KeyboardInterrupt):
        pass


@main.command()
@click.argument("input_file", type=click.File("rb"))
@click.argument("output_file", type=click.File("wb"))
@click.option("--seed", required=True, help="Seed string shared by both sides.")
@click.option("--block-size", default=4096, type=int, help="Keystream chunk size in bytes.")
def xor(input_file, output_file, seed: str, block_size: int) -> None:
    """XOR a file with the keystream of a seeded generator.

    Running it again on the output with the same seed restores the input.

        fortuna xor --seed s3cret plain.bin cipher.bin

        fortuna xor --seed s3cret cipher.bin plain.bin
    """
    prng = Fortuna(seed=seed, config=FortunaConfig.from_env())
    try:
        combiner = prng.create_combiner(block_size)
    except FortunaError as e:
        raise click.BadParameter(str(e), param_hint="--block-size") from e

    total = 0
    while True:
        chunk = input_file.read(1 << 16)
        if not chunk:
            break
        data = bytearray(chunk)
        combiner.combine(data)
        output_file.write(data)
        total += len(data)
    click.echo(f"{total:,} bytes combined", err=True)


# ────────────────────────────────────────────────────────────
# Status & monitor
# ────────────────────────────────────────────────────────────


@main.command()
@click.option("--sources", "source_filter", default=None, help="Comma-separated source name filter.")
def status(source_filter: str | None) -> None:
    """Seed a generator from sources and show its pools."""
    from rich.console import Console

    from fortuna.monitor import render_health_table, render_pool_table

    prng, acc = _make_generator(None, source_filter)
    acc.collect_all()
    console = Console()
    console.print(render_pool_table(prng))
    console.print(render_health_table(acc.health_report()))


@main.command()
@click.option("--refresh", default=1.0, type=float, help="Refresh rate in seconds.")
@click.option("--sources", "source_filter", default=None, help="Comma-separated source name filter.")
@click.option("--iterations", default=None, type=int, help="Stop after N refreshes.")
def monitor(refresh: float, source_filter: str | None, iterations: int | None) -> None:
    """Live pool and source dashboard. Press Ctrl+C to stop."""
    from fortuna.monitor import PoolMonitor

    config = FortunaConfig.from_env()
    prng = Fortuna(config=config)
    acc = _make_accumulator(prng, source_filter, config)
    PoolMonitor(prng, acc, refresh_rate=refresh).run(iterations)


# ────────────────────────────────────────────────────────────
# Helpers
# ────────────────────────────────────────────────────────────


def _make_accumulator(prng: Fortuna, source_filter: str | None, config: FortunaConfig) -> EntropyAccumulator:
    """Build an accumulator, optionally filtering sources by name."""
    if source_filter is None:
        return EntropyAccumulator.auto(prng, config)

    from fortuna.sources import detect_available_sources

    names = {n.strip().lower() for n in source_filter.split(",")}
    acc = EntropyAccumulator(prng, config)
    for src in detect_available_sources():
        if any(n in src.name.lower() for n in names):
            acc.add_source(src)
    if not acc.sources:
        click.echo(f"Warning: no sources matched filter '{source_filter}'", err=True)
        return EntropyAccumulator.auto(prng, config)
    return acc


def _make_generator(seed: str | None, source_filter: str | None):
    """Return ``(generator, accumulator)``; the accumulator is None when seeded."""
    config = FortunaConfig.from_env()
    if seed is not None:
        return Fortuna(seed=seed, config=config), None

    prng = Fortuna(config=config)
    acc = _make_accumulator(prng, source_filter, config)
    if not acc.prime(prng):
        click.echo("Error: not enough entropy gathered to seed the generator.", err=True)
        sys.exit(1)
    return prng, acc


def _write(data: bytes, fmt: str) -> None:
    if fmt == "raw":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    elif fmt == "hex":
        sys.stdout.write(data.hex())
        sys.stdout.flush()
    elif fmt == "base64":
        sys.stdout.write(base64.b64encode(data).decode())
        sys.stdout.flush()
