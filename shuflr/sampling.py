"""Record-level sampling filters exposed as a readable byte stream.

Three composable gates are applied to each ``\\n``-terminated record:

* a Bernoulli filter that keeps each record with probability ``sample_rate``,
* an entropy gate that drops records whose byte-histogram Shannon entropy
  (in nats) lies outside ``[min_entropy_nats, max_entropy_nats]``,
* a head limit that reports end-of-stream after ``limit`` surviving records.

A final record without a trailing ``\\n`` is passed through unchanged.
"""

from __future__ import annotations

import io
import math
import random
from collections import Counter
from dataclasses import dataclass
from typing import Optional

from .records import Source, iter_records


@dataclass
class SamplingConfig:
    """Settings for a :class:`SamplingReader`."""

    sample_rate: Optional[float] = None
    limit: Optional[int] = None
    seed: int = 0
    min_entropy_nats: Optional[float] = None
    max_entropy_nats: Optional[float] = None


def shannon_entropy_nats(data: bytes) -> float:
    """Shannon entropy of a byte sequence in nats; 0 for empty input."""
    if not data:
        return 0.0
    n = len(data)
    h = 0.0
    for count in Counter(data).values():
        p = count / n
        h -= p * math.log(p)
    return h


class SamplingReader(io.RawIOBase):
    """Readable stream that yields only the records passing every gate."""

    def __init__(self, inner: Source, config: Optional[SamplingConfig] = None) -> None:
        super().__init__()
        self._cfg = config if config is not None else SamplingConfig()
        self._records = iter_records(inner)
        self._rng = (
            random.Random(self._cfg.seed) if self._cfg.sample_rate is not None else None
        )
        self._kept = 0
        self._dropped_low = 0
        self._dropped_high = 0
        self._pending = b""
        self._cursor = 0
        self._done = False

    def readable(self) -> bool:
        return True

    def records_kept(self) -> int:
        """Number of records accepted so far."""
        return self._kept

    def entropy_dropped_low(self) -> int:
        """Records dropped for entropy below the minimum."""
        return self._dropped_low

    def entropy_dropped_high(self) -> int:
        """Records dropped for entropy above the maximum."""
        return self._dropped_high

    def _passes_bernoulli(self) -> bool:
        if self._rng is None or self._cfg.sample_rate is None:
            return True
        rate = min(max(self._cfg.sample_rate, 0.0), 1.0)
        return self._rng.random() < rate

    def _passes_entropy(self, record: bytes) -> bool:
        lo = self._cfg.min_entropy_nats
        hi = self._cfg.max_entropy_nats
        if lo is None and hi is None:
            return True
        h = shannon_entropy_nats(record)
        if lo is not None and h < lo:
            self._dropped_low += 1
            return False
        if hi is not None and h > hi:
            self._dropped_high += 1
            return False
        return True

    def _fill(self) -> bool:
        """Load the next accepted record; return False at end of stream."""
        while not self._done:
            record = next(self._records, None)
            if record is None:
                self._done = True
                break
            if not self._passes_bernoulli() or not self._passes_entropy(record):
                continue
            limit = self._cfg.limit
            if limit is not None and self._kept >= limit:
                self._done = True
                break
            self._kept += 1
            self._pending = record
            self._cursor = 0
            return True
        return False

    def read(self, size: Optional[int] = -1) -> bytes:
        """Read up to ``size`` bytes of accepted records; all remaining if negative."""
        if size is None or size < 0:
            chunks = []
            while True:
                chunk = self.read(io.DEFAULT_BUFFER_SIZE)
                if not chunk:
                    return b"".join(chunks)
                chunks.append(chunk)
        if size == 0:
            return b""
        while self._cursor >= len(self._pending):
            if not self._fill():
                self._pending = b""
                self._cursor = 0
                return b""
        end = min(self._cursor + size, len(self._pending))
        out = self._pending[self._cursor:end]
        self._cursor = end
        return out

    def readinto(self, buffer) -> int:
        data = self.read(len(buffer))
        buffer[: len(data)] = data
        return len(data)