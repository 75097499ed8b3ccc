"""SHA-256 digest of an intention, exposed as 32 byte values."""

from __future__ import annotations

import asyncio
import hashlib
from typing import Iterable, List, Union

from .errors import InvalidDigestError

DIGEST_SIZE = 32

DigestLike = Union[bytes, bytearray, Iterable[int]]


def digest(text: str) -> bytes:
    """Hash ``text`` exactly as typed (UTF-8, no trimming, no case folding)."""

    return hashlib.sha256(text.encode("utf-8")).digest()


async def digest_async(text: str) -> bytes:
    """Same as :func:`digest`, computed in the default executor."""

    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, digest, text)


def require_digest(value: DigestLike) -> bytes:
    """Return ``value`` as ``bytes`` or raise :class:`InvalidDigestError`."""

    if isinstance(value, (bytes, bytearray)):
        data = bytes(value)
    else:
        try:
            items = list(value)
        except TypeError:
            raise InvalidDigestError(0, f"Expected a 32 byte digest, got {type(value).__name__}") from None
        if any(not isinstance(item, int) or not 0 <= item <= 255 for item in items):
            raise InvalidDigestError(len(items), "Digest values must be integers in 0..255")
        data = bytes(items)
    if len(data) != DIGEST_SIZE:
        raise InvalidDigestError(len(data))
    return data


def byte_at(data: bytes, offset: int) -> int:
    """Byte at ``offset``; offsets past the end wrap around."""

    return data[offset % DIGEST_SIZE]


def word_at(data: bytes, offset: int) -> int:
    """16 bit big-endian value read from two consecutive (wrapping) bytes."""

    return byte_at(data, offset) * 256 + byte_at(data, offset + 1)


def digest_values(data: DigestLike) -> List[int]:
    return list(require_digest(data))


def hex_digest(data: DigestLike) -> str:
    return require_digest(data).hex()


def digest_from_hex(value: str) -> bytes:
    try:
        data = bytes.fromhex(value.strip())
    except ValueError as exc:
        raise InvalidDigestError(len(value) // 2, f"Not a hex digest: {exc}") from exc
    return require_digest(data)


__all__ = [
    "DIGEST_SIZE",
    "byte_at",
    "digest",
    "digest_async",
    "digest_from_hex",
    "digest_values",
    "hex_digest",
    "require_digest",
    "word_at",
]
