"""Record framing, run statistics and the oversize policy shared by pipelines."""

from __future__ import annotations

import enum
import io
from dataclasses import dataclass
from os import PathLike
from typing import BinaryIO, Iterator, Union

DEFAULT_READ_BUFFER = 2 * 1024 * 1024

Source = Union[BinaryIO, bytes, bytearray, memoryview]


class ShuflrError(Exception):
    """Base class for errors raised by the shuffling pipelines."""


class OversizedRecordError(ShuflrError):
    """A record exceeded the per-record byte cap under the ``fail`` policy."""

    def __init__(self, offset: int, length: int, max_line: int) -> None:
        super().__init__(
            f"record at byte offset {offset} is {length} bytes, "
            f"exceeding max-line of {max_line} bytes"
        )
        self.offset = offset
        self.length = length
        self.max_line = max_line


class OnError(enum.Enum):
    """What to do with a record longer than the configured cap."""

    SKIP = "skip"
    FAIL = "fail"
    PASSTHROUGH = "passthrough"


@dataclass
class Stats:
    """Counters aggregated over one pipeline run."""

    records_in: int = 0
    records_out: int = 0
    bytes_in: int = 0
    bytes_out: int = 0
    oversized_skipped: int = 0
    oversized_passthrough: int = 0
    had_trailing_partial: bool = False

    def apply_oversize_policy(
        self, on_error: OnError, offset: int, length: int, max_line: int
    ) -> bool:
        """Apply ``on_error`` to an oversized record; return True to keep it."""
        if on_error is OnError.SKIP:
            self.oversized_skipped += 1
            return False
        if on_error is OnError.PASSTHROUGH:
            self.oversized_passthrough += 1
            return True
        raise OversizedRecordError(offset, length, max_line)


def iter_records(source: Source) -> Iterator[bytes]:
    """Yield ``\\n``-terminated records; a final unterminated record is yielded as-is."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        source = io.BytesIO(bytes(source))
    yield from iter(source.readline, b"")


def open_input(path: Union[str, PathLike]) -> BinaryIO:
    """Open ``path`` for buffered binary reading."""
    return open(path, "rb", buffering=DEFAULT_READ_BUFFER)