"""Serial scan and emit in file order, with no shuffling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Optional, Tuple

from .records import OnError, Source, Stats, iter_records

DEFAULT_MAX_LINE = 16 * 1024 * 1024


@dataclass
class PassthroughConfig:
    """Settings for a passthrough run.

    ``partition`` is ``(rank, world_size)``; with ``world_size > 1`` only
    records at input positions ``idx % world_size == rank`` are emitted.
    """

    max_line: int = DEFAULT_MAX_LINE
    on_error: OnError = OnError.SKIP
    sample: Optional[int] = None
    ensure_trailing_newline: bool = True
    partition: Optional[Tuple[int, int]] = None


def run(
    source: Source, sink: BinaryIO, config: Optional[PassthroughConfig] = None
) -> Stats:
    """Copy records from ``source`` to ``sink`` in order; return run statistics."""
    cfg = config if config is not None else PassthroughConfig()
    stats = Stats()
    rank, world_size = cfg.partition if cfg.partition is not None else (0, 1)
    byte_offset = 0

    for line in iter_records(source):
        n = len(line)
        stats.records_in += 1
        stats.bytes_in += n
        this_offset = byte_offset
        byte_offset += n
        has_newline = line.endswith(b"\n")
        if not has_newline:
            stats.had_trailing_partial = True

        if n > cfg.max_line and not stats.apply_oversize_policy(
            cfg.on_error, this_offset, n, cfg.max_line
        ):
            continue

        if world_size > 1 and (stats.records_in - 1) % world_size != rank:
            continue

        sink.write(line)
        stats.bytes_out += n
        if not has_newline and cfg.ensure_trailing_newline:
            sink.write(b"\n")
            stats.bytes_out += 1
        stats.records_out += 1

        if cfg.sample is not None and stats.records_out >= cfg.sample:
            break

    sink.flush()
    return stats