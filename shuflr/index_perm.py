"""Uniform random permutation of a plain record file through a byte-offset index.

The index records where every ``\\n``-terminated record starts and ends.
The record positions are shuffled with a key derived from the seed and
epoch, and each record is read back by seeking into the file. This is the
mode that yields a provably uniform permutation of the input.
"""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike
from typing import BinaryIO, List, Optional, Tuple, Union

from .records import ShuflrError, Source, Stats, iter_records, open_input
from .seed import Seed


class RecordIndex:
    """Byte ranges of every record in a file, in input order."""

    def __init__(self, boundaries: List[int]) -> None:
        if not boundaries or boundaries[0] != 0:
            raise ValueError("boundaries must start at offset 0")
        self._boundaries = list(boundaries)

    @classmethod
    def build(cls, data: Source) -> "RecordIndex":
        """Index the records of an in-memory buffer or readable binary stream."""
        boundaries = [0]
        for record in iter_records(data):
            boundaries.append(boundaries[-1] + len(record))
        return cls(boundaries)

    @classmethod
    def from_path(cls, path: Union[str, PathLike]) -> "RecordIndex":
        """Index the records of the file at ``path``."""
        with open_input(path) as handle:
            return cls.build(handle)

    @property
    def count(self) -> int:
        """Number of records indexed."""
        return len(self._boundaries) - 1

    def __len__(self) -> int:
        return self.count

    def record_range(self, index: int) -> Tuple[int, int]:
        """``(start, end)`` byte offsets of record ``index``, end exclusive."""
        if not 0 <= index < self.count:
            raise IndexError(f"record index {index} out of range for {self.count} records")
        return self._boundaries[index], self._boundaries[index + 1]

    def record_len(self, index: int) -> int:
        """Length in bytes of record ``index``, including its ``\\n``."""
        start, end = self.record_range(index)
        return end - start


@dataclass
class IndexPermConfig:
    """Settings for an index-permutation run.

    ``partition`` is ``(rank, world_size)``; rank R takes every W-th
    position of the shuffled permutation starting at R, so ranks are
    disjoint and together cover every record.
    """

    seed: int = 0
    epoch: int = 0
    sample: Optional[int] = None
    ensure_trailing_newline: bool = True
    partition: Optional[Tuple[int, int]] = None


def run(
    path: Union[str, PathLike],
    index: RecordIndex,
    sink: BinaryIO,
    config: Optional[IndexPermConfig] = None,
) -> Stats:
    """Emit the records of ``path`` in a seeded uniform random order."""
    cfg = config if config is not None else IndexPermConfig()
    stats = Stats()

    with open(path, "rb") as handle:
        if index.count == 0:
            sink.flush()
            return stats

        perm = list(range(index.count))
        Seed.rng_from(Seed(cfg.seed).perm(cfg.epoch)).shuffle(perm)

        rank, world_size = cfg.partition if cfg.partition is not None else (0, 1)
        mine = perm[rank::world_size] if world_size > 1 else perm

        for idx in mine:
            start, end = index.record_range(idx)
            length = end - start
            handle.seek(start)
            record = handle.read(length)
            if len(record) != length:
                raise ShuflrError(
                    f"unexpected end of file reading record {idx} at byte offset {start}"
                )
            stats.records_in += 1
            stats.bytes_in += length

            sink.write(record)
            stats.bytes_out += length
            if not record.endswith(b"\n") and cfg.ensure_trailing_newline:
                sink.write(b"\n")
                stats.bytes_out += 1
            stats.records_out += 1

            if cfg.sample is not None and stats.records_out >= cfg.sample:
                break

    sink.flush()
    return stats