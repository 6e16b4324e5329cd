"""
Deterministic random streams for layout generation.

A generation run is fully determined by its integer seed. Every consumer asks
for a named stream; the stream's state is derived from ``(seed, name)`` alone:

    mix = (seed * 397) mod 2^32
    mix = mix xor crc32(name)
    stream = random.Random(mix)

CRC-32 is used instead of ``hash()`` because Python salts string hashes per
process (PYTHONHASHSEED), which would break cross-session replay.
"""

from __future__ import annotations

import zlib
from random import Random
from typing import Dict, Optional

# Default stream consumed by the whole layout build.
LAYOUT_STREAM = "layout"

_MASK_32 = 0xFFFFFFFF


def stream_hash(name: str) -> int:
    """Stable 32-bit hash of a stream name."""
    return zlib.crc32(name.encode("utf-8")) & _MASK_32


def derive_stream_seed(seed: int, name: str) -> int:
    """Mix a master seed with a stream name into a 32-bit generator seed.

    Args:
        seed: Master seed (any Python int, negative values wrap)
        name: Stream name, e.g. "layout"

    Returns:
        Non-negative 32-bit seed for ``random.Random``
    """
    mix = (seed * 397) & _MASK_32
    return mix ^ stream_hash(name)


def create_stream(seed: int, name: str = LAYOUT_STREAM) -> Random:
    """Create a fresh generator for ``(seed, name)``.

    Two calls with the same arguments return generators in identical states.
    """
    return Random(derive_stream_seed(seed, name))


class RNGProvider:
    """Hands out one cached stream per name for a single master seed.

    Streams are created lazily and kept for the lifetime of the provider, so
    repeated lookups of the same name continue the same sequence.
    """

    def __init__(self, seed: int):
        self._seed = seed
        self._streams: Dict[str, Random] = {}

    @property
    def seed(self) -> int:
        return self._seed

    def get(self, name: str = LAYOUT_STREAM) -> Random:
        """Get (creating on first use) the stream for ``name``."""
        stream = self._streams.get(name)
        if stream is None:
            stream = create_stream(self._seed, name)
            self._streams[name] = stream
        return stream

    def reset(self, seed: Optional[int] = None) -> None:
        """Drop every stream, optionally switching to a new master seed."""
        if seed is not None:
            self._seed = seed
        self._streams.clear()
