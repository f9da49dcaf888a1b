"""
workplan-scheduler - CLI subprocess smoke contracts

File: tests/integration/test_cli_smoke.py

Purpose
- Exercise `python -m workplan_scheduler` end to end in a scratch directory.
- Verify exit codes, command output, and the per-run JSON-lines log side effect.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"

_PLAN_YAML = """
today: 2026-01-01
workItems:
  - id: design
    durationDays: 10
  - id: permits
    durationDays: 1
  - id: build
    durationDays: 1
  - id: inspect
dependencies:
  - predecessorId: design
    successorId: build
  - predecessorId: permits
    successorId: build
  - predecessorId: build
    successorId: inspect
"""


def _run_cli(workdir: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    existing_pythonpath = env.get("PYTHONPATH")
    src_pythonpath = str(SRC_PATH)
    env["PYTHONPATH"] = (
        src_pythonpath if not existing_pythonpath else f"{src_pythonpath}:{existing_pythonpath}"
    )
    env["NO_COLOR"] = "1"
    for key in list(env):
        if key.startswith("WORKPLAN_"):
            del env[key]
    return subprocess.run(
        [sys.executable, "-m", "workplan_scheduler", *args],
        cwd=workdir,
        text=True,
        capture_output=True,
        check=False,
        env=env,
    )


def _write(path: Path, contents: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")


def test_schedule_yaml_plan_end_to_end(tmp_path: Path) -> None:
    _write(tmp_path / "plan.yaml", _PLAN_YAML)

    completed = _run_cli(tmp_path, "schedule", "plan.yaml", "--format", "json")

    assert completed.returncode == 0, completed.stderr
    output = json.loads(completed.stdout)
    result = output["result"]
    by_id = {item["workItemId"]: item for item in result["scheduledItems"]}
    assert by_id["build"]["scheduledStartDate"] == "2026-01-11"
    assert by_id["permits"]["totalFloat"] == 9
    assert result["criticalPath"] == ["design", "build", "inspect"]
    assert [(w["workItemId"], w["type"]) for w in result["warnings"]] == [
        ("inspect", "no_duration")
    ]

    log_files = list((tmp_path / "logs").glob("run-*/scheduler.jsonl"))
    assert len(log_files) == 1
    events = [json.loads(line) for line in log_files[0].read_text(encoding="utf-8").splitlines()]
    messages = [event["message"] for event in events]
    assert "schedule.start" in messages
    assert "schedule.complete" in messages


def test_schedule_table_output_and_cycle_exit_code(tmp_path: Path) -> None:
    _write(tmp_path / "plan.yaml", _PLAN_YAML)
    _write(
        tmp_path / "cycle.json",
        json.dumps(
            {
                "today": "2026-01-01",
                "workItems": [{"id": "A"}, {"id": "B"}],
                "dependencies": [
                    {"predecessorId": "A", "successorId": "B"},
                    {"predecessorId": "B", "successorId": "A"},
                ],
            }
        ),
    )

    table = _run_cli(tmp_path, "schedule", "plan.yaml")
    cycle = _run_cli(tmp_path, "schedule", "cycle.json")

    assert table.returncode == 0, table.stderr
    assert "design -> build -> inspect" in table.stdout
    assert cycle.returncode == 1
    assert "dependency cycle detected among: A, B" in cycle.stdout


def test_config_and_input_errors_map_to_exit_codes(tmp_path: Path) -> None:
    _write(tmp_path / "plan.yaml", _PLAN_YAML)
    _write(tmp_path / "bad.toml", "[scheduling]\ndefault_mode = 'sometimes'\n")

    bad_config = _run_cli(tmp_path, "schedule", "plan.yaml", "--config", "bad.toml")
    bad_payload = _run_cli(tmp_path, "schedule", "missing.yaml")
    bad_today = _run_cli(tmp_path, "schedule", "plan.yaml", "--today", "yesterday")

    assert bad_config.returncode == 2
    assert "scheduling.default_mode" in bad_config.stderr
    assert bad_payload.returncode == 3
    assert bad_today.returncode == 3
    assert "invalid --today" in bad_today.stderr


def test_check_dependency_and_config_commands(tmp_path: Path) -> None:
    _write(tmp_path / "plan.yaml", _PLAN_YAML)

    cycle = _run_cli(
        tmp_path,
        "check-dependency",
        "plan.yaml",
        "--predecessor",
        "inspect",
        "--successor",
        "design",
    )
    config = _run_cli(tmp_path, "config")

    assert cycle.returncode == 1
    assert "inspect -> design -> build -> inspect" in cycle.stdout
    assert config.returncode == 0
    assert json.loads(config.stdout)["scheduling"]["default_mode"] == "full"
