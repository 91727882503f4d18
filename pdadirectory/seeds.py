"""Decoder for the packed seed list stored with each registry row.

Layout (little-endian, no padding)::

    u32 seed_count
    seed_count times:
        u32 length
        u8[length] payload

Decoded seeds are read-only ``memoryview`` slices of the stored blob rather
than copies. Callers must not hold on to them past the request that read the
row.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from pdadirectory.errors import FormatError

U32_SIZE = 4


class SeedReader:
    """Cursor over a seed blob that hands out views instead of copies."""

    def __init__(self, data: bytes | memoryview) -> None:
        self._data = memoryview(data).toreadonly()
        self._offset = 0

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def read_u32(self) -> int:
        if self._offset + U32_SIZE > len(self._data):
            raise FormatError(f"seeds: not enough data for u32 at offset {self._offset}")
        (v,) = struct.unpack_from("<I", self._data, self._offset)
        self._offset += U32_SIZE
        return v

    def read_view(self, n: int) -> memoryview:
        if self._offset + n > len(self._data):
            raise FormatError(
                f"seeds: not enough data for {n} bytes at offset {self._offset}"
            )
        v = self._data[self._offset : self._offset + n]
        self._offset += n
        return v


def decode_seeds(blob: bytes | memoryview) -> list[memoryview]:
    """Decode a seed blob into its ordered list of seed payloads."""
    if len(blob) < U32_SIZE:
        raise FormatError(f"seeds: blob too short: {len(blob)} bytes, need at least {U32_SIZE}")

    r = SeedReader(blob)
    declared = r.read_u32()
    seeds = []
    for _ in range(declared):
        length = r.read_u32()
        seeds.append(r.read_view(length))

    if r.remaining:
        raise FormatError(f"seeds: {r.remaining} trailing bytes after {declared} seeds")
    if len(seeds) != declared:
        raise FormatError(f"seeds: decoded {len(seeds)} seeds, header declares {declared}")
    return seeds


@dataclass(frozen=True)
class Seed:
    index: int
    raw: memoryview
    is_bump: bool

    @property
    def length(self) -> int:
        return len(self.raw)


def build_seeds(blob: bytes | memoryview) -> list[Seed]:
    """Decode a blob and flag the last seed as the bump.

    Ingest always appends the bump byte as the final seed; that is not
    re-checked here.
    """
    views = decode_seeds(blob)
    last = len(views) - 1
    return [Seed(i, v, i == last) for i, v in enumerate(views)]
