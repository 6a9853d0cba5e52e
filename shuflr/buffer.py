"""Ring-buffer local shuffle.

A ring of ``buffer_size`` slots fills in insertion order; once full, each
new record evicts a uniformly random slot, whose occupant is emitted. At
end of input the ring is drained in random order. Every input record is
emitted exactly once, but the output is not a uniform permutation: records
move only a distance on the order of the buffer size.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Tuple

from .records import OnError, Source, Stats, iter_records

DEFAULT_BUFFER_SIZE = 100_000
DEFAULT_MAX_LINE = 16 * 1024 * 1024


@dataclass
class BufferConfig:
    """Settings for a buffer-shuffle run.

    ``partition`` is ``(rank, world_size)``; with ``world_size > 1`` only
    records at input positions ``idx % world_size == rank`` enter the ring.
    """

    buffer_size: int = DEFAULT_BUFFER_SIZE
    seed: int = 0
    max_line: int = DEFAULT_MAX_LINE
    on_error: OnError = OnError.SKIP
    sample: Optional[int] = None
    ensure_trailing_newline: bool = True
    partition: Optional[Tuple[int, int]] = None


class _Emitter:
    """Writes records to the sink and tracks the sample cap."""

    def __init__(self, sink: BinaryIO, stats: Stats, sample: Optional[int]) -> None:
        self._sink = sink
        self._stats = stats
        self._sample = sample

    def emit(self, record: bytes) -> bool:
        """Write ``record``; return True once the sample cap is reached."""
        self._sink.write(record)
        self._stats.bytes_out += len(record)
        self._stats.records_out += 1
        return self._sample is not None and self._stats.records_out >= self._sample


def run(source: Source, sink: BinaryIO, config: Optional[BufferConfig] = None) -> Stats:
    """Shuffle records from ``source`` through a ring buffer into ``sink``."""
    cfg = config if config is not None else BufferConfig()
    if cfg.buffer_size < 1:
        raise ValueError("buffer size must be positive")

    stats = Stats()
    rng = random.Random(cfg.seed)
    emitter = _Emitter(sink, stats, cfg.sample)
    ring: List[bytes] = []
    byte_offset = 0

    for line in iter_records(source):
        n = len(line)
        stats.records_in += 1
        stats.bytes_in += n
        offset = byte_offset
        byte_offset += n
        has_newline = line.endswith(b"\n")
        if not has_newline:
            stats.had_trailing_partial = True

        if n > cfg.max_line and not stats.apply_oversize_policy(
            cfg.on_error, offset, n, cfg.max_line
        ):
            continue

        if cfg.partition is not None:
            rank, world_size = cfg.partition
            if world_size > 1 and (stats.records_in - 1) % world_size != rank:
                continue

        record = line + b"\n" if not has_newline and cfg.ensure_trailing_newline else line

        if len(ring) < cfg.buffer_size:
            ring.append(record)
            continue
        idx = rng.getrandbits(64) % cfg.buffer_size
        evicted, ring[idx] = ring[idx], record
        if emitter.emit(evicted):
            sink.flush()
            return stats

    while ring:
        idx = rng.getrandbits(64) % len(ring)
        ring[idx], ring[-1] = ring[-1], ring[idx]
        if emitter.emit(ring.pop()):
            break

    sink.flush()
    return stats