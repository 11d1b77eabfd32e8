"""Error types raised while adjusting an autogroup."""

from __future__ import annotations

import errno
from enum import Enum
from pathlib import Path


class UnavailableKind(str, Enum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    OTHER = "other"

    @classmethod
    def from_os_error(cls, exc: OSError) -> "UnavailableKind":
        if isinstance(exc, FileNotFoundError) or exc.errno in (errno.ENOENT, errno.ESRCH):
            return cls.NOT_FOUND
        if isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EPERM):
            return cls.PERMISSION_DENIED
        return cls.OTHER


class AdjustError(RuntimeError):
    """Base error for autogroup adjustments."""


class AutogroupUnavailableError(AdjustError):
    """The autogroup pseudo-file could not be read or written."""

    def __init__(self, pid: int, path: Path, operation: str, cause: OSError) -> None:
        super().__init__(f"cannot {operation} {path}: {cause.strerror or cause}")
        self.pid = pid
        self.path = path
        self.operation = operation
        self.cause = cause
        self.kind = UnavailableKind.from_os_error(cause)


class AutogroupMalformedError(AdjustError):
    """The autogroup pseudo-file content did not parse."""

    def __init__(self, path: Path, content: str, reason: str) -> None:
        super().__init__(f"invalid value in {path}: {reason} (content: {content.strip()!r})")
        self.path = path
        self.content = content
        self.reason = reason


class UnsupportedPlatformError(AdjustError):
    """Autogroups are a Linux-only interface."""


class ConfigError(ValueError):
    """Invalid grpnice configuration."""
