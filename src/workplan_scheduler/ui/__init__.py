"""UI package exports for the CLI and its plain-text rendering."""

from workplan_scheduler.ui.cli import CLIError, build_parser, run_cli
from workplan_scheduler.ui.payload import PayloadLoadError, SchedulePayload, load_payload
from workplan_scheduler.ui.render import CLIRenderer, create_renderer

__all__ = [
    "CLIError",
    "CLIRenderer",
    "PayloadLoadError",
    "SchedulePayload",
    "build_parser",
    "create_renderer",
    "load_payload",
    "run_cli",
]
