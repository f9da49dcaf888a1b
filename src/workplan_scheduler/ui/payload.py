"""Load CLI scheduling payloads from JSON or YAML files.

A payload mirrors the engine's wire shape::

    workItems: [...]            # required
    dependencies: [...]
    milestoneLinks: [...]
    milestoneDependencies: [...]
    today: 2026-03-01           # optional; CLI flag or config otherwise
    mode: full | cascade        # optional
    anchorWorkItemId: ...       # optional

Keys are accepted in camelCase or snake_case.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Final, TypeVar

import yaml

from workplan_scheduler.domain.models import (
    CanonicalModel,
    Dependency,
    MilestoneDependency,
    MilestoneLink,
    ScheduleMode,
    WorkItemNode,
    python_name,
)

TModel = TypeVar("TModel", bound=CanonicalModel)

_YAML_SUFFIXES: Final[frozenset[str]] = frozenset({".yaml", ".yml"})
_ALLOWED_KEYS: Final[frozenset[str]] = frozenset(
    {
        "work_items",
        "dependencies",
        "milestone_links",
        "milestone_dependencies",
        "today",
        "mode",
        "anchor_work_item_id",
    }
)


class PayloadLoadError(ValueError):
    """Raised when a payload file is unreadable or malformed."""


@dataclass(frozen=True, slots=True)
class SchedulePayload:
    work_items: tuple[WorkItemNode, ...]
    dependencies: tuple[Dependency, ...] = ()
    milestone_links: tuple[MilestoneLink, ...] = ()
    milestone_dependencies: tuple[MilestoneDependency, ...] = ()
    today: date | None = None
    mode: ScheduleMode | None = None
    anchor_work_item_id: str | None = None


def load_payload(path: str | Path) -> SchedulePayload:
    """Read and validate a payload file; YAML is chosen by ``.yaml``/``.yml`` suffix."""

    payload_path = Path(path).expanduser()
    try:
        text = payload_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PayloadLoadError(f"unable to read payload {payload_path}: {exc}") from exc

    if payload_path.suffix.lower() in _YAML_SUFFIXES:
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise PayloadLoadError(f"invalid YAML in {payload_path}: {exc}") from exc
    else:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise PayloadLoadError(f"invalid JSON in {payload_path}: {exc}") from exc

    try:
        return parse_payload(raw)
    except PayloadLoadError as exc:
        raise PayloadLoadError(f"{payload_path}: {exc}") from exc


def parse_payload(raw: object) -> SchedulePayload:
    """Validate an already-decoded payload object."""

    if not isinstance(raw, Mapping):
        raise PayloadLoadError(f"payload root must be an object, got {type(raw).__name__}")

    fields: dict[str, object] = {}
    for key, value in raw.items():
        if not isinstance(key, str):
            raise PayloadLoadError("payload keys must be strings")
        fields[python_name(key)] = value

    unknown = sorted(set(fields) - _ALLOWED_KEYS)
    if unknown:
        raise PayloadLoadError(f"unexpected payload fields: {unknown}")
    if "work_items" not in fields:
        raise PayloadLoadError("payload requires 'workItems'")

    try:
        return SchedulePayload(
            work_items=_models(WorkItemNode, fields["work_items"], "workItems"),
            dependencies=_models(Dependency, fields.get("dependencies"), "dependencies"),
            milestone_links=_models(MilestoneLink, fields.get("milestone_links"), "milestoneLinks"),
            milestone_dependencies=_models(
                MilestoneDependency,
                fields.get("milestone_dependencies"),
                "milestoneDependencies",
            ),
            today=_optional_date(fields.get("today")),
            mode=None if fields.get("mode") is None else ScheduleMode(str(fields["mode"])),
            anchor_work_item_id=_optional_text(fields.get("anchor_work_item_id")),
        )
    except ValueError as exc:
        raise PayloadLoadError(str(exc)) from exc


def _models(model_type: type[TModel], raw: object, name: str) -> tuple[TModel, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        raise PayloadLoadError(f"'{name}' must be an array")
    parsed: list[TModel] = []
    for index, item in enumerate(raw):
        if not isinstance(item, Mapping):
            raise PayloadLoadError(f"'{name}[{index}]' must be an object")
        try:
            parsed.append(model_type.from_dict(item))
        except ValueError as exc:
            raise PayloadLoadError(f"{name}[{index}]: {exc}") from exc
    return tuple(parsed)


def _optional_date(raw: object) -> date | None:
    if raw is None:
        return None
    if isinstance(raw, date) and not isinstance(raw, datetime):
        return raw
    if isinstance(raw, str):
        try:
            return date.fromisoformat(raw.strip())
        except ValueError as exc:
            raise PayloadLoadError(f"'today' is not an ISO-8601 date: {raw!r}") from exc
    raise PayloadLoadError(f"'today' must be a date string, got {type(raw).__name__}")


def _optional_text(raw: object) -> str | None:
    if raw is None:
        return None
    if not isinstance(raw, str) or not raw.strip():
        raise PayloadLoadError("'anchorWorkItemId' must be a non-empty string")
    return raw.strip()


__all__ = ["PayloadLoadError", "SchedulePayload", "load_payload", "parse_payload"]
