"""grpnice adjusts the niceness of a process's Linux autogroup."""

from __future__ import annotations

__version__ = "0.2.0"

from .autogroup import AdjustResult, AutogroupRecord, adjust, compute_niceness, read_autogroup
from .errors import (
    AdjustError,
    AutogroupMalformedError,
    AutogroupUnavailableError,
    UnavailableKind,
    UnsupportedPlatformError,
)

__all__ = [
    "AdjustError",
    "AdjustResult",
    "AutogroupMalformedError",
    "AutogroupRecord",
    "AutogroupUnavailableError",
    "UnavailableKind",
    "UnsupportedPlatformError",
    "adjust",
    "compute_niceness",
    "read_autogroup",
]
