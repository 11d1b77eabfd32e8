from __future__ import annotations

from pathlib import Path

import pytest

from grpnice.config import GrpniceConfig, load_config
from grpnice.errors import ConfigError


def test_defaults_without_config_file() -> None:
    config = load_config(env={})

    assert config == GrpniceConfig()
    assert config.proc_root == Path("/proc")
    assert config.default_adjustment == 10
    assert config.write_format == "record"
    assert config.log_level == "WARNING"
    assert config.log_dir is None


def test_yaml_file_values(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    path.write_text(
        "proc_root: /host/proc\ndefault_adjustment: -4\nwrite_format: value\nlog_level: debug\n",
        encoding="utf-8",
    )

    config = load_config(path, env={})

    assert config.proc_root == Path("/host/proc")
    assert config.default_adjustment == -4
    assert config.write_format == "value"
    assert config.log_level == "DEBUG"


def test_env_overrides_file_and_overrides_win(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    path.write_text("default_adjustment: 2\nlog_level: info\n", encoding="utf-8")
    env = {
        "GRPNICE_CONFIG": str(path),
        "GRPNICE_DEFAULT_ADJUSTMENT": "7",
        "GRPNICE_LOG_LEVEL": "error",
    }

    config = load_config(env=env, overrides={"log_level": "trace", "log_dir": None})

    assert config.default_adjustment == 7
    assert config.log_level == "TRACE"
    assert config.log_dir is None


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    path.write_text("", encoding="utf-8")

    assert load_config(path, env={}) == GrpniceConfig()


@pytest.mark.parametrize(
    "content",
    ["write_format: json\n", "default_adjustment: lots\n", "log_level: chatty\n", "- 1\n- 2\n", "a: [\n"],
)
def test_invalid_file_raises_config_error(tmp_path: Path, content: str) -> None:
    path = tmp_path / "config.yml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path, env={})


def test_missing_explicit_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.yml", env={})
    with pytest.raises(ConfigError):
        load_config(env={"GRPNICE_CONFIG": str(tmp_path / "absent.yml")})
