"""Intention Keeper: a written intention turned into a breathing mandala.

The package is split the same way the application runs::

    text -> hashing -> parameters -> point_field -> projection -> renderer

``animation`` drives the renderer frame by frame, ``audio`` reads its own
bytes of the same digest, and ``session`` glues both to the history store
and the countdown timer used by the control window.
"""

from .errors import (
    EmptyInputError,
    ExportError,
    InvalidDigestError,
    KeeperError,
    PersistenceWriteError,
    RenderSurfaceError,
)
from .hashing import digest, hex_digest
from .parameters import EngineOptions, ParameterBundle, extract_params
from .pattern import Pattern, generate_pattern

__all__ = [
    "EmptyInputError",
    "EngineOptions",
    "ExportError",
    "InvalidDigestError",
    "KeeperError",
    "ParameterBundle",
    "Pattern",
    "PersistenceWriteError",
    "RenderSurfaceError",
    "digest",
    "extract_params",
    "generate_pattern",
    "hex_digest",
]

__version__ = "0.1.0"
