"""One generated pattern: digest, parameters and point field of an intention."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .errors import EmptyInputError
from .hashing import digest, digest_async, hex_digest
from .parameters import ParameterBundle, extract_params
from .point_field import Point, build_points


@dataclass(frozen=True)
class Pattern:
    text: str
    digest: bytes
    params: ParameterBundle
    points: List[Point] = field(default_factory=list)

    @property
    def hex(self) -> str:
        return hex_digest(self.digest)

    @property
    def values(self) -> List[int]:
        return list(self.digest)


def _require_text(text: str) -> str:
    if text is None or not str(text).strip():
        raise EmptyInputError()
    return str(text)


def pattern_from_digest(text: str, value: bytes) -> Pattern:
    params = extract_params(value)
    return Pattern(text=text, digest=bytes(value), params=params, points=build_points(value, params.point_count))


def generate_pattern(text: str) -> Pattern:
    """Hash, extract and build the point field, in that order.

    The text is hashed exactly as typed; only blank input is refused.
    """

    text = _require_text(text)
    return pattern_from_digest(text, digest(text))


async def generate_pattern_async(text: str) -> Pattern:
    text = _require_text(text)
    return pattern_from_digest(text, await digest_async(text))


__all__ = ["Pattern", "generate_pattern", "generate_pattern_async", "pattern_from_digest"]
