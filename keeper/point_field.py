"""Spherical point field seeded by the digest.

Each point reads a window of bytes starting at ``(index * 5) % 32``. Longitude
and latitude use byte pairs for 16 bit precision, and every successive point
is turned by the golden angle so no two points land on the same meridian.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .hashing import DigestLike, byte_at, require_digest, word_at

GOLDEN_ANGLE = 137.50776405003785
POINT_STRIDE = 5


@dataclass(frozen=True)
class Point:
    longitude: float
    latitude: float
    radius: float
    color_shift: float = 0.0
    size_variance: float = 0.0
    glow_strength: float = 0.0
    twist_factor: float = 0.0
    depth_bias: float = 0.0


def point_at(data: bytes, index: int) -> Point:
    base = (index * POINT_STRIDE) % 32
    longitude = word_at(data, base) / 65535.0 * 360.0
    longitude = (longitude + index * GOLDEN_ANGLE) % 360.0
    latitude = word_at(data, base + 2) / 65535.0 * 180.0 - 90.0
    radius = 0.5 + byte_at(data, base + 4) / 255.0 * 0.9
    return Point(
        longitude=longitude,
        latitude=latitude,
        radius=radius,
        color_shift=word_at(data, base + 6) / 65535.0,
        size_variance=word_at(data, base + 8) / 65535.0,
        glow_strength=word_at(data, base + 10) / 65535.0,
        twist_factor=word_at(data, base + 12) / 65535.0,
        depth_bias=byte_at(data, base + 14) / 255.0,
    )


def build_points(digest: DigestLike, count: int) -> List[Point]:
    """Ordered point field; the order drives the connector edges."""

    data = require_digest(digest)
    if count < 0:
        raise ValueError(f"Point count must be positive, got {count}")
    return [point_at(data, index) for index in range(int(count))]


__all__ = ["GOLDEN_ANGLE", "Point", "build_points", "point_at"]
