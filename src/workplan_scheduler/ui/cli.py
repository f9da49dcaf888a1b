"""Command-line interface router for workplan-scheduler."""

from __future__ import annotations

import argparse
import json
import sys
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any

from workplan_scheduler.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
    resolve_today,
)
from workplan_scheduler.domain.models import (
    ScheduleMode,
    ScheduleParams,
    ScheduleResult,
)
from workplan_scheduler.main import ExitCode
from workplan_scheduler.observability import (
    correlation_scope,
    setup_logging,
    shutdown_logging,
)
from workplan_scheduler.planning import TaskGraph
from workplan_scheduler.scheduling import (
    ScheduleValidationError,
    compute_date_range,
    expand_milestone_dependencies,
    schedule,
)
from workplan_scheduler.ui.payload import PayloadLoadError, SchedulePayload, load_payload
from workplan_scheduler.ui.render import CLIRenderer, create_renderer


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = int(ExitCode.INPUT_ERROR)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="workplan-scheduler",
        description=(
            "workplan-scheduler: critical-path scheduling for dependent work items.\n\n"
            "Common workflows:\n"
            "  workplan-scheduler schedule plan.yaml              Compute all dates\n"
            "  workplan-scheduler schedule plan.json --mode cascade --anchor WI-7\n"
            "  workplan-scheduler check-dependency plan.yaml --predecessor A --successor B\n"
            "  workplan-scheduler config                          Show effective config\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to scheduler TOML config (default: ./scheduler.toml if present).",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # schedule ------------------------------------------------------------
    schedule_parser = subparsers.add_parser(
        "schedule",
        parents=[common],
        help="Compute CPM dates for a JSON or YAML payload",
        description=(
            "Run the forward/backward pass over the payload's work items and dependencies.\n"
            "Exits with status 1 when the dependency graph contains a cycle.\n\n"
            "Examples:\n"
            "  workplan-scheduler schedule plan.yaml\n"
            "  workplan-scheduler schedule plan.json --today 2026-03-01 --format json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    schedule_parser.add_argument("payload", help="Payload file (.json, .yaml or .yml)")
    schedule_parser.add_argument(
        "--mode",
        choices=[mode.value for mode in ScheduleMode],
        default=None,
        help="Scheduling mode (default: payload, then scheduling.default_mode).",
    )
    schedule_parser.add_argument(
        "--anchor",
        dest="anchor_work_item_id",
        default=None,
        help="Anchor work item id for cascade mode.",
    )
    schedule_parser.add_argument(
        "--today",
        default=None,
        help="Reference date YYYY-MM-DD (default: payload, then config, then system date).",
    )
    schedule_parser.add_argument(
        "--format",
        dest="output_format",
        choices=("json", "table"),
        default="table",
        help="Output format (default: table).",
    )
    schedule_parser.set_defaults(handler=_cmd_schedule)

    # check-dependency ----------------------------------------------------
    check_parser = subparsers.add_parser(
        "check-dependency",
        parents=[common],
        help="Check whether a new dependency would create a cycle",
        description=(
            "Report the closing path when adding PREDECESSOR -> SUCCESSOR to the payload's\n"
            "dependencies would create a cycle (exit status 1).\n\n"
            "Examples:\n"
            "  workplan-scheduler check-dependency plan.yaml --predecessor C --successor A\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    check_parser.add_argument("payload", help="Payload file (.json, .yaml or .yml)")
    check_parser.add_argument("--predecessor", required=True, help="Predecessor work item id")
    check_parser.add_argument("--successor", required=True, help="Successor work item id")
    check_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    check_parser.set_defaults(handler=_cmd_check_dependency)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show effective configuration",
        description=(
            "Display the effective config after merging defaults, file, and env.\n\n"
            "Examples:\n"
            "  workplan-scheduler config\n"
            "  WORKPLAN_SCHEDULING_DEFAULT_MODE=cascade workplan-scheduler config\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return int(ExitCode.CONFIG_ERROR)

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_schedule(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    payload = _load_payload(args)
    scheduling = _section(config, "scheduling")

    mode = _resolve_mode(args, payload, scheduling)
    today = _resolve_today(args, payload, config)
    anchor = _optional_str(getattr(args, "anchor_work_item_id", None)) or (
        payload.anchor_work_item_id
    )

    dependencies = payload.dependencies
    if scheduling.get("expand_milestones", True):
        dependencies = (
            *dependencies,
            *expand_milestone_dependencies(
                payload.milestone_links,
                payload.milestone_dependencies,
                existing=dependencies,
            ),
        )

    try:
        params = ScheduleParams(
            mode=mode,
            work_items=payload.work_items,
            dependencies=dependencies,
            today=today,
            anchor_work_item_id=anchor,
        )
    except ValueError as exc:
        raise CLIError(f"invalid payload: {exc}") from exc

    setup_logging(_section(config, "observability"), run_id=_new_run_id())
    try:
        with correlation_scope(anchor_work_item_id=anchor):
            result = schedule(params)
    except ScheduleValidationError as exc:
        raise CLIError(str(exc)) from exc
    finally:
        shutdown_logging()

    exit_code = ExitCode.CYCLE_DETECTED if result.has_cycle else ExitCode.SUCCESS
    if getattr(args, "output_format", "table") == "json":
        date_range = compute_date_range(result.scheduled_items)
        _emit_json(
            {
                "command": "schedule",
                "mode": mode.value,
                "today": today.isoformat(),
                "anchor_work_item_id": anchor,
                "result": result.to_dict(),
                "date_range": None if date_range is None else date_range.to_dict(),
            }
        )
        return int(exit_code)

    _render_schedule(_get_renderer(args), result, mode=mode, today=today)
    return int(exit_code)


def _cmd_check_dependency(args: argparse.Namespace) -> int:
    payload = _load_payload(args)
    predecessor = _require_str(getattr(args, "predecessor", None), "predecessor")
    successor = _require_str(getattr(args, "successor", None), "successor")

    graph = TaskGraph(nodes=(item.id for item in payload.work_items))
    for dependency in payload.dependencies:
        if dependency.predecessor_id in graph and dependency.successor_id in graph:
            graph.add_edge(dependency.predecessor_id, dependency.successor_id)

    closing_path = graph.would_create_cycle(predecessor, successor)
    if _flag(args, "json"):
        _emit_json(
            {
                "command": "check-dependency",
                "predecessor": predecessor,
                "successor": successor,
                "creates_cycle": closing_path is not None,
                "cycle_path": None if closing_path is None else list(closing_path),
            }
        )
    else:
        renderer = _get_renderer(args)
        if closing_path is None:
            renderer.text(f"OK: {predecessor} -> {successor} keeps the graph acyclic")
        else:
            renderer.error(
                f"{predecessor} -> {successor} would create a cycle: {' -> '.join(closing_path)}"
            )

    return int(ExitCode.SUCCESS if closing_path is None else ExitCode.CYCLE_DETECTED)


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    _get_renderer(args).text(dump_effective_config(config))
    return int(ExitCode.SUCCESS)


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=_flag(args, "no_color"))


def _render_schedule(
    renderer: CLIRenderer,
    result: ScheduleResult,
    *,
    mode: ScheduleMode,
    today: date,
) -> None:
    renderer.heading("Schedule")
    renderer.kv("Mode", mode.value)
    renderer.kv("Today", today.isoformat())

    if result.cycle_nodes is not None:
        renderer.error(f"dependency cycle detected among: {', '.join(result.cycle_nodes)}")
        return

    if not result.scheduled_items:
        renderer.text("No work items in scope.")
        return

    date_range = compute_date_range(result.scheduled_items)
    if date_range is not None:
        renderer.kv("Range", f"{date_range.earliest} .. {date_range.latest}")

    rows = [
        (
            item.work_item_id,
            item.scheduled_start_date.isoformat(),
            item.scheduled_end_date.isoformat(),
            item.latest_start_date.isoformat(),
            item.latest_finish_date.isoformat(),
            str(item.total_float),
            "yes" if item.is_critical else "",
            "yes" if item.is_late else "",
        )
        for item in result.scheduled_items
    ]
    renderer.table(
        ("ID", "Start", "End", "Late start", "Late finish", "Float", "Critical", "Late"),
        rows,
        title="Work items:",
    )

    renderer.section("Critical path:")
    renderer.text(f"  {' -> '.join(result.critical_path) or '(none)'}")

    if result.warnings:
        renderer.section("Warnings:")
        for warning in result.warnings:
            renderer.warning(f"[{warning.work_item_id}] {warning.type.value}: {warning.message}")


# ---------------------------------------------------------------------------
# Helpers: config, payload, resolution
# ---------------------------------------------------------------------------


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    config_path = _optional_str(getattr(args, "config_path", None))
    try:
        return load_config(config_path)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=int(ExitCode.CONFIG_ERROR)) from exc


def _load_payload(args: argparse.Namespace) -> SchedulePayload:
    try:
        return load_payload(_require_str(getattr(args, "payload", None), "payload"))
    except PayloadLoadError as exc:
        raise CLIError(str(exc)) from exc


def _section(config: Mapping[str, object], name: str) -> dict[str, Any]:
    section = config.get(name)
    return dict(section) if isinstance(section, Mapping) else {}


def _resolve_mode(
    args: argparse.Namespace,
    payload: SchedulePayload,
    scheduling: Mapping[str, object],
) -> ScheduleMode:
    raw = _optional_str(getattr(args, "mode", None))
    if raw is not None:
        return ScheduleMode(raw)
    if payload.mode is not None:
        return payload.mode
    return ScheduleMode(str(scheduling.get("default_mode", ScheduleMode.FULL.value)))


def _resolve_today(
    args: argparse.Namespace,
    payload: SchedulePayload,
    config: Mapping[str, object],
) -> date:
    raw = _optional_str(getattr(args, "today", None))
    if raw is not None:
        try:
            return date.fromisoformat(raw)
        except ValueError as exc:
            raise CLIError(f"invalid --today {raw!r}: expected YYYY-MM-DD") from exc
    if payload.today is not None:
        return payload.today
    try:
        return resolve_today(config)
    except ConfigLoadError as exc:
        raise CLIError(str(exc), exit_code=int(ExitCode.CONFIG_ERROR)) from exc


def _new_run_id() -> str:
    stamp = datetime.now(tz=UTC).strftime("%Y%m%dT%H%M%SZ")
    return f"run-{stamp}-{uuid.uuid4().hex[:8]}"


# ---------------------------------------------------------------------------
# Helpers: argument parsing
# ---------------------------------------------------------------------------


def _require_str(value: object, name: str) -> str:
    if not isinstance(value, str):
        raise CLIError(f"invalid {name}: expected string")
    cleaned = value.strip()
    if not cleaned:
        raise CLIError(f"invalid {name}: value cannot be empty")
    return cleaned


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise CLIError("invalid optional string argument")
    cleaned = value.strip()
    return cleaned or None


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "run_cli"]
