"""Keyed derivation tree rooted at a master seed.

Every random choice derives its key from this tree, so any
sub-computation (frame ``c`` within epoch ``e``) is addressable
without replaying a random stream.
"""

from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass
from typing import Iterable

_U64_MAX = 2**64 - 1
_PREFIX = b"shuflr-v1\0"


def _u64(value: int, what: str) -> bytes:
    if not 0 <= value <= _U64_MAX:
        raise ValueError(f"{what} must fit in an unsigned 64-bit integer, got {value}")
    return value.to_bytes(8, "little")


@dataclass(frozen=True)
class Seed:
    """Root of the derivation tree: the user's master seed."""

    master: int

    def __post_init__(self) -> None:
        _u64(self.master, "master seed")

    def _derive(self, domain: bytes, indices: Iterable[int]) -> bytes:
        h = hashlib.blake2b(digest_size=32)
        h.update(_PREFIX)
        h.update(_u64(self.master, "master seed"))
        h.update(b"\0")
        h.update(domain)
        for idx in indices:
            h.update(b"\0")
            h.update(_u64(idx, "index"))
        return h.digest()

    def epoch(self, epoch: int) -> bytes:
        """Epoch-level key."""
        return self._derive(b"epoch", (epoch,))

    def perm(self, epoch: int) -> bytes:
        """Permutation key for the given epoch."""
        return self._derive(b"perm", (epoch,))

    def frame(self, epoch: int, frame_id: int) -> bytes:
        """Per-frame shuffle key."""
        return self._derive(b"frame", (epoch, frame_id))

    @staticmethod
    def rng_from(key: bytes) -> random.Random:
        """Deterministic generator seeded by a 32-byte derived key."""
        if len(key) != 32:
            raise ValueError(f"key must be 32 bytes, got {len(key)}")
        return random.Random(int.from_bytes(key, "little"))