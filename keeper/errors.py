"""Exceptions raised by the keeper package."""

from __future__ import annotations


class KeeperError(Exception):
    """Base class for every error raised on purpose by the package."""


class EmptyInputError(KeeperError, ValueError):
    """The intention is empty or only made of whitespace."""

    def __init__(self, message: str = "An intention is required before generating a pattern") -> None:
        super().__init__(message)


class InvalidDigestError(KeeperError, ValueError):
    """Something other than exactly 32 bytes was given where a digest is expected."""

    def __init__(self, length: int, message: str | None = None) -> None:
        self.length = length
        super().__init__(message or f"Expected a 32 byte digest, got {length} values")


class RenderSurfaceError(KeeperError, RuntimeError):
    """The drawing surface could not be allocated or resized."""


class PersistenceWriteError(KeeperError, OSError):
    """The intention history could not be written to disk."""


class ExportError(KeeperError, RuntimeError):
    """A PNG or GIF export failed."""


InvalidDigestLength = InvalidDigestError
RenderSurfaceUnavailable = RenderSurfaceError

__all__ = [
    "EmptyInputError",
    "ExportError",
    "InvalidDigestError",
    "InvalidDigestLength",
    "KeeperError",
    "PersistenceWriteError",
    "RenderSurfaceError",
    "RenderSurfaceUnavailable",
]
