"""Uniform random K-subset sampling (Vitter's Algorithm R).

Emits exactly ``k`` records (or all of them when the input is shorter),
each input record being chosen with probability ``k / N``. The reservoir
is shuffled before emission so the output order is random as well.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Tuple

from .records import OnError, Source, Stats, iter_records

DEFAULT_K = 10_000
DEFAULT_MAX_LINE = 16 * 1024 * 1024


@dataclass
class ReservoirConfig:
    """Settings for a reservoir-sampling run.

    ``partition`` is ``(rank, world_size)``; the partition filter is applied
    before the reservoir sees a record, so ranks sample disjoint subsets.
    """

    k: int = DEFAULT_K
    seed: int = 0
    max_line: int = DEFAULT_MAX_LINE
    on_error: OnError = OnError.SKIP
    ensure_trailing_newline: bool = True
    partition: Optional[Tuple[int, int]] = None


def run(
    source: Source, sink: BinaryIO, config: Optional[ReservoirConfig] = None
) -> Stats:
    """Write a shuffled uniform sample of ``k`` records from ``source`` to ``sink``."""
    cfg = config if config is not None else ReservoirConfig()
    if cfg.k < 1:
        raise ValueError("reservoir size must be >= 1")

    stats = Stats()
    rng = random.Random(cfg.seed)
    reservoir: List[bytes] = []
    seen = 0

    for line in iter_records(source):
        n = len(line)
        stats.records_in += 1
        stats.bytes_in += n
        has_newline = line.endswith(b"\n")
        if not has_newline:
            stats.had_trailing_partial = True

        if n > cfg.max_line and not stats.apply_oversize_policy(
            cfg.on_error, 0, n, cfg.max_line
        ):
            continue

        if cfg.partition is not None:
            rank, world_size = cfg.partition
            if world_size > 1 and (stats.records_in - 1) % world_size != rank:
                continue

        record = line + b"\n" if not has_newline and cfg.ensure_trailing_newline else line

        if len(reservoir) < cfg.k:
            reservoir.append(record)
        else:
            j = rng.randint(0, seen)
            if j < cfg.k:
                reservoir[j] = record
        seen += 1

    for pos in range(len(reservoir) - 1, 0, -1):
        other = rng.getrandbits(64) % (pos + 1)
        reservoir[pos], reservoir[other] = reservoir[other], reservoir[pos]

    for record in reservoir:
        sink.write(record)
        stats.bytes_out += len(record)
        stats.records_out += 1

    sink.flush()
    return stats