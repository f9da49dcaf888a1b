"""
workplan-scheduler - unit tests for config loader

File: tests/unit/config/test_loader.py

Purpose
- Validate deterministic config loading from defaults, TOML, env overrides, and CLI overrides.

What this test file should cover
- Precedence: CLI > env > file > defaults.
- Env var path mapping and type coercion.
- Path normalization relative to the config file.
- Reference date resolution.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from workplan_scheduler.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
    resolve_today,
)


def _write_config(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_loader_precedence_default_file_env_cli(tmp_path: Path) -> None:
    config_path = tmp_path / "scheduler.toml"
    empty_path = tmp_path / "empty.toml"
    _write_config(empty_path, "")
    _write_config(
        config_path,
        """
[scheduling]
default_mode = "cascade"
""".strip(),
    )
    env = {
        "WORKPLAN_OBSERVABILITY_LOG_LEVEL": "DEBUG",
        "WORKPLAN_SCHEDULING_DEFAULT_MODE": "full",
    }

    default_loaded = load_config(empty_path, environ={})
    file_loaded = load_config(config_path, environ={})
    env_loaded = load_config(config_path, environ=env)
    cli_loaded = load_config(
        config_path,
        environ=env,
        cli_overrides={"observability.log_level": "ERROR"},
    )

    assert default_loaded["scheduling"]["default_mode"] == "full"
    assert file_loaded["scheduling"]["default_mode"] == "cascade"
    assert env_loaded["scheduling"]["default_mode"] == "full"
    assert env_loaded["observability"]["log_level"] == "DEBUG"
    assert cli_loaded["observability"]["log_level"] == "ERROR"


def test_env_booleans_are_coerced(tmp_path: Path) -> None:
    config_path = tmp_path / "scheduler.toml"
    _write_config(config_path, "")

    loaded = load_config(
        config_path,
        environ={
            "WORKPLAN_SCHEDULING_EXPAND_MILESTONES": "off",
            "WORKPLAN_OBSERVABILITY_LOG_TO_STDERR": "yes",
        },
    )

    assert loaded["scheduling"]["expand_milestones"] is False
    assert loaded["observability"]["log_to_stderr"] is True


def test_invalid_env_coercion_raises_actionable_error(tmp_path: Path) -> None:
    config_path = tmp_path / "scheduler.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigLoadError, match="WORKPLAN_SCHEDULING_EXPAND_MILESTONES"):
        load_config(config_path, environ={"WORKPLAN_SCHEDULING_EXPAND_MILESTONES": "maybe"})


def test_env_values_are_revalidated(tmp_path: Path) -> None:
    config_path = tmp_path / "scheduler.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigValidationError) as error:
        load_config(config_path, environ={"WORKPLAN_SCHEDULING_DEFAULT_MODE": "partial"})
    assert error.value.issues[0].path == "scheduling.default_mode"


def test_missing_explicit_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path / "absent.toml")


def test_missing_default_file_falls_back_to_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    loaded = load_config(environ={})

    assert loaded["scheduling"]["default_mode"] == "full"
    assert loaded["observability"]["log_dir"] == (tmp_path.resolve() / "logs").as_posix()


def test_invalid_toml_is_reported(tmp_path: Path) -> None:
    config_path = tmp_path / "scheduler.toml"
    _write_config(config_path, "[scheduling\n")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(config_path)


def test_path_normalization_is_relative_to_config_file(tmp_path: Path) -> None:
    config_path = tmp_path / "conf" / "scheduler.toml"
    _write_config(
        config_path,
        """
[observability]
log_dir = "../runtime/logs"
""".strip(),
    )

    loaded = load_config(config_path, environ={})

    assert loaded["observability"]["log_dir"] == (tmp_path.resolve() / "runtime/logs").as_posix()


def test_loader_is_deterministic_for_same_inputs(tmp_path: Path) -> None:
    config_path = tmp_path / "scheduler.toml"
    _write_config(config_path, '[scheduling]\ntoday = "2026-03-01"\n')

    first = dump_effective_config(load_config(config_path, environ={}))
    second = dump_effective_config(load_config(config_path, environ={}))

    assert first == second
    assert json.loads(first)["scheduling"]["today"] == "2026-03-01"


def test_resolve_today_prefers_config_then_fallback() -> None:
    pinned = {"scheduling": {"today": "2026-03-01"}}
    blank = {"scheduling": {"today": ""}}

    assert resolve_today(pinned) == date(2026, 3, 1)
    assert resolve_today(blank, fallback=date(2026, 1, 1)) == date(2026, 1, 1)
    assert isinstance(resolve_today({}), date)

    with pytest.raises(ConfigLoadError, match="scheduling.today"):
        resolve_today({"scheduling": {"today": "tomorrow"}})
