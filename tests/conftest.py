from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def proc_root(tmp_path: Path) -> Path:
    root = tmp_path / "proc"
    root.mkdir()
    return root


@pytest.fixture
def make_autogroup(proc_root: Path) -> Callable[[int, str], Path]:
    def _factory(pid: int, content: str) -> Path:
        pid_dir = proc_root / str(pid)
        pid_dir.mkdir(exist_ok=True)
        path = pid_dir / "autogroup"
        path.write_text(content, encoding="ascii")
        return path

    return _factory


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in list(os.environ):
        if key.startswith("GRPNICE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture(autouse=True)
def _reset_loguru():
    from loguru import logger

    yield
    logger.remove()
