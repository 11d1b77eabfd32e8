"""Read-modify-write of a process's autogroup niceness.

The kernel exposes each autogroup at ``/proc/<pid>/autogroup`` as a line such as
``/autogroup-123 nice 0``. The value can be read and written but there is no
atomic increment, so another writer may change it between our read and our
write. Callers that need exact results must serialize externally.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .errors import AutogroupMalformedError, AutogroupUnavailableError, UnsupportedPlatformError
from .logging_utils import get_logger

NICE_MIN = -20
NICE_MAX = 19
DEFAULT_ADJUSTMENT = 10
DEFAULT_PROC_ROOT = Path("/proc")

WriteFormat = Literal["record", "value"]

_INT_RE = re.compile(r"[+-]?\d+")

_log = get_logger("autogroup")


@dataclass(frozen=True, slots=True)
class AutogroupRecord:
    fields: tuple[str, ...]
    niceness: int

    @property
    def group_id(self) -> str:
        return self.fields[0]

    @classmethod
    def parse(cls, content: str, path: Path) -> "AutogroupRecord":
        fields = tuple(content.split())
        if len(fields) < 2:
            raise AutogroupMalformedError(path, content, "expected a group id and a niceness value")
        token = fields[-1]
        if not _INT_RE.fullmatch(token):
            raise AutogroupMalformedError(path, content, f"niceness {token!r} is not an integer")
        return cls(fields=fields[:-1], niceness=int(token))

    def with_niceness(self, niceness: int) -> "AutogroupRecord":
        return AutogroupRecord(fields=self.fields, niceness=niceness)

    def render(self) -> str:
        return " ".join((*self.fields, str(self.niceness))) + "\n"


@dataclass(frozen=True, slots=True)
class AdjustResult:
    pid: int
    path: Path
    group_id: str
    old_niceness: int
    new_niceness: int
    written: bool = True

    def as_dict(self) -> dict[str, object]:
        return {
            "pid": self.pid,
            "group": self.group_id,
            "old": self.old_niceness,
            "new": self.new_niceness,
        }


def compute_niceness(old: int, adjustment: int) -> int:
    """Add ``adjustment`` to ``old``, saturating at the bound it moves towards."""

    if adjustment >= 0:
        return min(old + adjustment, NICE_MAX)
    return max(old + adjustment, NICE_MIN)


def autogroup_path(pid: int, proc_root: Path | str = DEFAULT_PROC_ROOT) -> Path:
    if pid < 0:
        raise ValueError(f"pid must be non-negative, got {pid}")
    return Path(proc_root) / str(pid) / "autogroup"


def ensure_supported_platform(platform: str | None = None) -> None:
    platform = platform or sys.platform
    if not platform.startswith("linux"):
        raise UnsupportedPlatformError(
            f"process autogroups are only available on Linux (running on {platform})"
        )


def read_autogroup(pid: int, *, proc_root: Path | str = DEFAULT_PROC_ROOT) -> AutogroupRecord:
    path = autogroup_path(pid, proc_root)
    if Path(proc_root) == DEFAULT_PROC_ROOT:
        ensure_supported_platform()
    try:
        with path.open("rb") as handle:
            raw = handle.read()
    except OSError as exc:
        raise AutogroupUnavailableError(pid, path, "read", exc) from exc
    try:
        content = raw.decode("ascii")
    except UnicodeDecodeError as exc:
        shown = raw.decode("ascii", errors="backslashreplace")
        raise AutogroupMalformedError(path, shown, f"non-ASCII byte at offset {exc.start}") from exc
    record = AutogroupRecord.parse(content, path)
    _log.debug("Read {}: fields={} niceness={}", path, record.fields, record.niceness)
    return record


def _write_autogroup(pid: int, path: Path, payload: str) -> None:
    data = payload.encode("ascii")
    try:
        with path.open("wb") as handle:
            handle.write(data)
    except OSError as exc:
        raise AutogroupUnavailableError(pid, path, "write", exc) from exc


def adjust(
    pid: int,
    adjustment: int = DEFAULT_ADJUSTMENT,
    *,
    proc_root: Path | str = DEFAULT_PROC_ROOT,
    write_format: WriteFormat = "record",
    dry_run: bool = False,
) -> AdjustResult:
    """Adjust the niceness of ``pid``'s autogroup by ``adjustment``.

    The record is read fresh, the last field replaced by the clamped value and
    the result written back in a single write. Other fields are preserved
    verbatim; whitespace between them is normalized to single spaces.

    Raises AutogroupUnavailableError when the file cannot be read or written,
    AutogroupMalformedError when its content does not parse (nothing is written
    in that case) and UnsupportedPlatformError off Linux.
    """

    if write_format not in ("record", "value"):
        raise ValueError(f"unknown write format: {write_format!r}")
    path = autogroup_path(pid, proc_root)
    record = read_autogroup(pid, proc_root=proc_root)
    new_niceness = compute_niceness(record.niceness, adjustment)
    if new_niceness == record.niceness and adjustment != 0:
        _log.warning(
            "Autogroup {} niceness already at bound {}; adjustment {} has no effect",
            record.group_id,
            record.niceness,
            adjustment,
        )

    updated = record.with_niceness(new_niceness)
    payload = f"{new_niceness}\n" if write_format == "value" else updated.render()

    if dry_run:
        _log.info("Dry run: would write {!r} to {}", payload, path)
    else:
        _write_autogroup(pid, path, payload)
        _log.debug("Wrote {!r} to {}", payload, path)

    return AdjustResult(
        pid=pid,
        path=path,
        group_id=record.group_id,
        old_niceness=record.niceness,
        new_niceness=new_niceness,
        written=not dry_run,
    )
