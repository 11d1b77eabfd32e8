"""Command-line front end: parse arguments, dispatch, map errors to exit codes."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Union

import psutil

from . import __version__
from .autogroup import DEFAULT_PROC_ROOT, adjust, autogroup_path, read_autogroup
from .config import GrpniceConfig, load_config
from .errors import (
    AutogroupMalformedError,
    AutogroupUnavailableError,
    ConfigError,
    UnavailableKind,
    UnsupportedPlatformError,
)
from .logging_utils import configure_logging, get_logger

_EXIT_OK = 0
_EXIT_FAILURE = 1
_EXIT_USAGE = 2
_EXIT_UNAVAILABLE = 3
_EXIT_MALFORMED = 4
_EXIT_UNSUPPORTED = 5

VERSION_TEXT = (
    f"grpnice {__version__}\n"
    "Released and distributed under the terms of the MIT licence."
)

_log = get_logger("cli")


@dataclass(frozen=True, slots=True)
class ParsedArgs:
    pid: int
    adjustment: int | None = None
    dry_run: bool = False
    show: bool = False
    as_json: bool = False
    config: Path | None = None
    log_level: str | None = None


@dataclass(frozen=True, slots=True)
class HelpRequest:
    text: str


@dataclass(frozen=True, slots=True)
class VersionRequest:
    text: str = VERSION_TEXT


@dataclass(frozen=True, slots=True)
class UsageError:
    message: str
    usage: str


ParseOutcome = Union[ParsedArgs, HelpRequest, VersionRequest, UsageError]


class _ArgumentFailure(Exception):
    pass


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise _ArgumentFailure(message)


def _positive_int(raw: str) -> int:
    try:
        value = int(raw, 10)
    except ValueError:
        raise ValueError(f"invalid PID {raw!r}") from None
    if value <= 0:
        raise ValueError(f"PID must be positive, got {raw!r}")
    return value


def _signed_int(raw: str) -> int:
    try:
        return int(raw, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid adjustment {raw!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="grpnice",
        description="Adjusts niceness for the given PID's process group (autogroup).",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("pid", nargs="?", metavar="PID", help="PID to adjust.")
    parser.add_argument(
        "-n",
        dest="adjustment",
        type=_signed_int,
        default=None,
        metavar="ADJ",
        help=(
            "Added to the process group's niceness. Must be an integer. "
            "Defaults to 10 (see default_adjustment)."
        ),
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute the new niceness without writing it.",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Print the current niceness and exit without adjusting.",
    )
    parser.add_argument("--json", dest="as_json", action="store_true", help="Emit JSON output.")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yml.")
    parser.add_argument("--log-level", default=None)
    parser.add_argument("-h", "--help", action="store_true", help="Print this help message.")
    parser.add_argument("-v", "--version", action="store_true", help="Print version info.")
    return parser


def parse_args(argv: Sequence[str]) -> ParseOutcome:
    """Parse ``argv`` without exiting; the caller decides what to do with the outcome."""

    parser = build_parser()
    try:
        args = parser.parse_args(list(argv))
    except _ArgumentFailure as exc:
        return UsageError(message=str(exc), usage=parser.format_usage())
    if args.help:
        return HelpRequest(text=parser.format_help())
    if args.version:
        return VersionRequest()
    if args.pid is None:
        return UsageError(
            message="the following arguments are required: PID",
            usage=parser.format_usage(),
        )
    try:
        pid = _positive_int(args.pid)
    except ValueError as exc:
        return UsageError(message=f"argument PID: {exc}", usage=parser.format_usage())
    return ParsedArgs(
        pid=pid,
        adjustment=args.adjustment,
        dry_run=args.dry_run,
        show=args.show,
        as_json=args.as_json,
        config=args.config,
        log_level=args.log_level,
    )


def _stderr(message: str) -> None:
    sys.stderr.write(message + "\n")


def _process_exists(pid: int, proc_root: Path) -> bool:
    if proc_root == DEFAULT_PROC_ROOT:
        return psutil.pid_exists(pid)
    return (proc_root / str(pid)).is_dir()


def _describe_unavailable(exc: AutogroupUnavailableError, proc_root: Path) -> str:
    if exc.kind is UnavailableKind.NOT_FOUND:
        if not _process_exists(exc.pid, proc_root):
            return f"{exc.pid}: no such process"
        return (
            f"{exc.pid}: autogroup not available at {exc.path} "
            "(kernel built without CONFIG_SCHED_AUTOGROUP or booted with noautogroup)"
        )
    if exc.kind is UnavailableKind.PERMISSION_DENIED:
        return f"{exc.pid}: permission denied to {exc.operation} {exc.path}"
    return f"{exc.pid}: {exc}"


def _run(args: ParsedArgs, config: GrpniceConfig) -> int:
    if args.show:
        record = read_autogroup(args.pid, proc_root=config.proc_root)
        payload = {"pid": args.pid, "group": record.group_id, "niceness": record.niceness}
        if args.as_json:
            sys.stdout.write(json.dumps(payload, sort_keys=True) + "\n")
        else:
            sys.stdout.write(f"{args.pid} ({record.group_id}): priority {record.niceness}\n")
        return _EXIT_OK

    adjustment = config.default_adjustment if args.adjustment is None else args.adjustment
    result = adjust(
        args.pid,
        adjustment,
        proc_root=config.proc_root,
        write_format=config.write_format,
        dry_run=args.dry_run,
    )
    if args.as_json:
        sys.stdout.write(json.dumps(result.as_dict(), sort_keys=True) + "\n")
    else:
        sys.stdout.write(
            f"{result.pid} ({result.group_id}): "
            f"old priority {result.old_niceness}, new priority {result.new_niceness}\n"
        )
    return _EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    outcome = parse_args(sys.argv[1:] if argv is None else argv)
    if isinstance(outcome, HelpRequest):
        sys.stdout.write(outcome.text)
        return _EXIT_OK
    if isinstance(outcome, VersionRequest):
        sys.stdout.write(outcome.text + "\n")
        return _EXIT_OK
    if isinstance(outcome, UsageError):
        _stderr(f"Failed to parse arguments: {outcome.message}")
        sys.stderr.write(outcome.usage)
        return _EXIT_USAGE

    try:
        config = load_config(outcome.config, overrides={"log_level": outcome.log_level})
    except ConfigError as exc:
        _stderr(str(exc))
        return _EXIT_USAGE
    configure_logging(config.log_dir, config.log_level)
    _log.debug(
        "Adjusting {} with config {}",
        autogroup_path(outcome.pid, config.proc_root),
        config.model_dump(mode="json"),
    )

    try:
        return _run(outcome, config)
    except AutogroupUnavailableError as exc:
        _stderr(_describe_unavailable(exc, config.proc_root))
        return _EXIT_UNAVAILABLE
    except AutogroupMalformedError as exc:
        _stderr(str(exc))
        return _EXIT_MALFORMED
    except UnsupportedPlatformError as exc:
        _stderr(str(exc))
        return _EXIT_UNSUPPORTED
    except ValueError as exc:
        _stderr(str(exc))
        return _EXIT_FAILURE


def run() -> None:
    raise SystemExit(main())
