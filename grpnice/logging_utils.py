"""Structured logging configuration built on top of loguru."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger


def configure_logging(log_dir: Path | str | None = None, level: str = "WARNING") -> None:
    """Configure Loguru sinks for stderr and optional file output.

    stdout is reserved for the result line, so the console sink writes to stderr.
    """

    logger.remove()
    logger.configure(extra={"component": "grpnice"})

    log_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "pid={process} | "
        "<cyan>{extra[component]}</cyan> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )

    logger.add(
        sys.stderr,
        format=log_format,
        colorize=None,
        level=level.upper(),
    )

    if log_dir is not None:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        logger.add(
            path / "grpnice.log",
            rotation="1 week",
            retention="4 weeks",
            compression="gz",
            level=level.upper(),
            backtrace=False,
            diagnose=False,
            format=log_format,
        )


def get_logger(name: Optional[str] = None):
    """Return a child logger with contextualized name."""

    if name:
        return logger.bind(component=name)
    return logger
