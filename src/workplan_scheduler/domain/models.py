"""Dataclass domain models with strict validation and canonical serialization.

Models are frozen: the scheduling engine reads them from many threads and must
never rewrite caller data. Field names are snake_case in Python and camelCase
on the wire (``durationDays``, ``predecessorId``); ``from_dict`` accepts both.
Calendar values are ``datetime.date`` and serialize as ``YYYY-MM-DD``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, fields, is_dataclass
from datetime import date, datetime
from enum import Enum, StrEnum
from typing import NoReturn, TypeVar, cast

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

TModel = TypeVar("TModel", bound="CanonicalModel")
TEnum = TypeVar("TEnum", bound=Enum)

_MAX_ID_LEN = 256
_MAX_MESSAGE_LEN = 2048

_CAMEL_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


class WorkItemStatus(StrEnum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class DependencyType(StrEnum):
    FINISH_TO_START = "finish_to_start"
    START_TO_START = "start_to_start"
    FINISH_TO_FINISH = "finish_to_finish"
    START_TO_FINISH = "start_to_finish"


class ScheduleMode(StrEnum):
    FULL = "full"
    CASCADE = "cascade"


class WarningType(StrEnum):
    NO_DURATION = "no_duration"
    START_BEFORE_VIOLATED = "start_before_violated"
    ALREADY_COMPLETED = "already_completed"


class CanonicalModel:
    """Mixin for canonical dict/json serialization."""

    def to_dict(self) -> dict[str, JSONValue]:
        serialized = _serialize_value(self, self.__class__.__name__)
        if not isinstance(serialized, dict):
            _fail(self.__class__.__name__, "serialized model must be an object")
        return serialized

    def to_json(self) -> str:
        return _canonical_json(self.to_dict())

    @classmethod
    def from_json(cls: type[TModel], raw: str) -> TModel:
        if not isinstance(raw, str):
            _fail(cls.__name__, f"expected JSON string, got {type(raw).__name__}")
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            _fail(cls.__name__, f"invalid JSON: {exc}")
        if not isinstance(parsed, dict):
            _fail(cls.__name__, "JSON root must be an object")
        return cls.from_dict(parsed)

    @classmethod
    def from_dict(cls: type[TModel], data: Mapping[str, object]) -> TModel:
        _fail(cls.__name__, "from_dict is not implemented for this model type")


def wire_name(field_name: str) -> str:
    """Return the camelCase wire key for a snake_case field name."""

    head, *rest = field_name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def python_name(key: str) -> str:
    """Return the snake_case field name for a camelCase or snake_case wire key."""

    return _CAMEL_CASE_BOUNDARY.sub(r"\1_\2", key).lower()


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


def _set(instance: object, name: str, value: object) -> None:
    object.__setattr__(instance, name, value)


def _canonical_json(value: JSONValue) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _expect_object(
    value: object,
    path: str,
    *,
    required: set[str],
    optional: set[str] | None = None,
) -> dict[str, object]:
    if not isinstance(value, Mapping):
        _fail(path, f"expected object, got {type(value).__name__}")

    parsed: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            _fail(path, f"object keys must be strings, got {type(key).__name__}")
        name = python_name(key)
        if name in parsed:
            _fail(path, f"duplicate field {name!r} (given as both camelCase and snake_case)")
        parsed[name] = item

    allowed = required | (optional or set())
    unknown = sorted(key for key in parsed if key not in allowed)
    if unknown:
        _fail(path, f"unexpected fields: {unknown}")

    missing = sorted(key for key in required if key not in parsed)
    if missing:
        _fail(path, f"missing required fields: {missing}")

    return parsed


def _as_str(value: object, path: str, *, max_len: int = _MAX_ID_LEN) -> str:
    if not isinstance(value, str):
        _fail(path, f"expected string, got {type(value).__name__}")
    normalized = value.strip()
    if not normalized:
        _fail(path, "must not be empty")
    if len(normalized) > max_len:
        _fail(path, f"must be <= {max_len} characters")
    return normalized


def _as_optional_str(value: object, path: str) -> str | None:
    if value is None:
        return None
    return _as_str(value, path)


def _as_bool(value: object, path: str) -> bool:
    if isinstance(value, bool):
        return value
    _fail(path, f"expected boolean, got {type(value).__name__}")


def _as_int(value: object, path: str, *, minimum: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        _fail(path, f"expected integer, got {type(value).__name__}")
    if minimum is not None and value < minimum:
        _fail(path, f"must be >= {minimum}")
    return value


def _as_optional_int(value: object, path: str, *, minimum: int | None = None) -> int | None:
    if value is None:
        return None
    return _as_int(value, path, minimum=minimum)


def _as_date(value: object, path: str) -> date:
    if isinstance(value, datetime):
        _fail(path, "expected a calendar date without a time component")
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        _fail(path, f"expected date or ISO-8601 string, got {type(value).__name__}")
    text = value.strip()
    if len(text) != 10:
        _fail(path, f"invalid ISO-8601 date: {value!r} (expected YYYY-MM-DD)")
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        _fail(path, f"invalid ISO-8601 date: {value!r} ({exc})")


def _as_optional_date(value: object, path: str) -> date | None:
    if value is None:
        return None
    return _as_date(value, path)


def _as_enum(enum_type: type[TEnum], value: object, path: str) -> TEnum:
    if isinstance(value, enum_type):
        return value
    if not isinstance(value, str):
        _fail(path, f"expected string enum value, got {type(value).__name__}")
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(sorted(item.value for item in enum_type))
        _fail(path, f"invalid value {value!r}; expected one of: {allowed}")


def _as_status(value: object, path: str) -> WorkItemStatus | str:
    # Statuses outside the known set pass through; they get no today floor.
    if isinstance(value, WorkItemStatus):
        return value
    text = _as_str(value, path)
    try:
        return WorkItemStatus(text)
    except ValueError:
        return text


def _as_sequence(value: object, path: str) -> list[object]:
    if isinstance(value, (list, tuple)):
        return list(value)
    _fail(path, f"expected array, got {type(value).__name__}")


def _as_str_tuple(value: object, path: str) -> tuple[str, ...]:
    return tuple(
        _as_str(item, f"{path}[{index}]") for index, item in enumerate(_as_sequence(value, path))
    )


def _as_model_tuple(
    model_type: type[TModel],
    value: object,
    path: str,
) -> tuple[TModel, ...]:
    parsed: list[TModel] = []
    for index, item in enumerate(_as_sequence(value, path)):
        if isinstance(item, model_type):
            parsed.append(item)
        elif isinstance(item, Mapping):
            parsed.append(model_type.from_dict(item))
        else:
            _fail(f"{path}[{index}]", f"expected {model_type.__name__} or object")
    return tuple(parsed)


def _serialize_value(value: object, path: str) -> JSONValue:
    if value is None or isinstance(value, bool):
        return cast("JSONValue", value)
    if isinstance(value, (int, float, str)) and not isinstance(value, Enum):
        return value
    if isinstance(value, Enum):
        raw = value.value
        if not isinstance(raw, str):
            _fail(path, "enum value must be string")
        return raw
    if isinstance(value, date) and not isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (tuple, list)):
        return [_serialize_value(item, f"{path}[]") for item in value]
    if isinstance(value, Mapping):
        out: dict[str, JSONValue] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                _fail(path, "dict keys must be strings")
            out[key] = _serialize_value(item, f"{path}.{key}")
        return out
    if is_dataclass(value):
        out_obj: dict[str, JSONValue] = {}
        for dataclass_field in fields(value):
            out_obj[wire_name(dataclass_field.name)] = _serialize_value(
                getattr(value, dataclass_field.name),
                f"{path}.{dataclass_field.name}",
            )
        return out_obj

    _fail(path, f"cannot serialize value of type {type(value).__name__}")


@dataclass(frozen=True, slots=True)
class WorkItemNode(CanonicalModel):
    """A schedulable work item as seen by the engine."""

    id: str
    status: WorkItemStatus | str = WorkItemStatus.NOT_STARTED
    start_date: date | None = None
    end_date: date | None = None
    actual_start_date: date | None = None
    actual_end_date: date | None = None
    duration_days: int | None = None
    start_after: date | None = None
    start_before: date | None = None

    def __post_init__(self) -> None:
        _set(self, "id", _as_str(self.id, "WorkItemNode.id"))
        _set(self, "status", _as_status(self.status, "WorkItemNode.status"))
        for name in (
            "start_date",
            "end_date",
            "actual_start_date",
            "actual_end_date",
            "start_after",
            "start_before",
        ):
            _set(self, name, _as_optional_date(getattr(self, name), f"WorkItemNode.{name}"))
        _set(
            self,
            "duration_days",
            _as_optional_int(self.duration_days, "WorkItemNode.duration_days", minimum=0),
        )

    @property
    def duration(self) -> int:
        """Duration in days; items without an estimate are zero-duration milestones."""

        return self.duration_days if self.duration_days is not None else 0

    @property
    def has_actual_dates(self) -> bool:
        return self.actual_start_date is not None or self.actual_end_date is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> WorkItemNode:
        parsed = _expect_object(
            data,
            "WorkItemNode",
            required={"id"},
            optional={
                "status",
                "start_date",
                "end_date",
                "actual_start_date",
                "actual_end_date",
                "duration_days",
                "start_after",
                "start_before",
            },
        )
        return cls(
            id=_as_str(parsed["id"], "WorkItemNode.id"),
            status=_as_status(
                parsed.get("status", WorkItemStatus.NOT_STARTED), "WorkItemNode.status"
            ),
            start_date=_as_optional_date(parsed.get("start_date"), "WorkItemNode.start_date"),
            end_date=_as_optional_date(parsed.get("end_date"), "WorkItemNode.end_date"),
            actual_start_date=_as_optional_date(
                parsed.get("actual_start_date"), "WorkItemNode.actual_start_date"
            ),
            actual_end_date=_as_optional_date(
                parsed.get("actual_end_date"), "WorkItemNode.actual_end_date"
            ),
            duration_days=_as_optional_int(
                parsed.get("duration_days"), "WorkItemNode.duration_days", minimum=0
            ),
            start_after=_as_optional_date(parsed.get("start_after"), "WorkItemNode.start_after"),
            start_before=_as_optional_date(
                parsed.get("start_before"), "WorkItemNode.start_before"
            ),
        )


@dataclass(frozen=True, slots=True)
class Dependency(CanonicalModel):
    """Precedence edge ``predecessor -> successor`` with a signed lead/lag."""

    predecessor_id: str
    successor_id: str
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    lead_lag_days: int = 0

    def __post_init__(self) -> None:
        _set(self, "predecessor_id", _as_str(self.predecessor_id, "Dependency.predecessor_id"))
        _set(self, "successor_id", _as_str(self.successor_id, "Dependency.successor_id"))
        _set(
            self,
            "dependency_type",
            _as_enum(DependencyType, self.dependency_type, "Dependency.dependency_type"),
        )
        _set(self, "lead_lag_days", _as_int(self.lead_lag_days, "Dependency.lead_lag_days"))

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Dependency:
        parsed = _expect_object(
            data,
            "Dependency",
            required={"predecessor_id", "successor_id"},
            optional={"dependency_type", "lead_lag_days"},
        )
        return cls(
            predecessor_id=_as_str(parsed["predecessor_id"], "Dependency.predecessor_id"),
            successor_id=_as_str(parsed["successor_id"], "Dependency.successor_id"),
            dependency_type=_as_enum(
                DependencyType,
                parsed.get("dependency_type", DependencyType.FINISH_TO_START),
                "Dependency.dependency_type",
            ),
            lead_lag_days=_as_int(parsed.get("lead_lag_days", 0), "Dependency.lead_lag_days"),
        )


@dataclass(frozen=True, slots=True)
class ScheduleParams(CanonicalModel):
    """Engine input: a snapshot of work items and dependency edges."""

    mode: ScheduleMode
    work_items: tuple[WorkItemNode, ...]
    dependencies: tuple[Dependency, ...]
    today: date
    anchor_work_item_id: str | None = None

    def __post_init__(self) -> None:
        _set(self, "mode", _as_enum(ScheduleMode, self.mode, "ScheduleParams.mode"))
        work_items = _as_model_tuple(WorkItemNode, self.work_items, "ScheduleParams.work_items")
        seen: set[str] = set()
        for index, item in enumerate(work_items):
            if item.id in seen:
                _fail(f"ScheduleParams.work_items[{index}].id", f"duplicate id {item.id!r}")
            seen.add(item.id)
        _set(self, "work_items", work_items)
        _set(
            self,
            "dependencies",
            _as_model_tuple(Dependency, self.dependencies, "ScheduleParams.dependencies"),
        )
        _set(self, "today", _as_date(self.today, "ScheduleParams.today"))
        _set(
            self,
            "anchor_work_item_id",
            _as_optional_str(self.anchor_work_item_id, "ScheduleParams.anchor_work_item_id"),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ScheduleParams:
        parsed = _expect_object(
            data,
            "ScheduleParams",
            required={"work_items", "today"},
            optional={"mode", "dependencies", "anchor_work_item_id"},
        )
        return cls(
            mode=_as_enum(
                ScheduleMode, parsed.get("mode", ScheduleMode.FULL), "ScheduleParams.mode"
            ),
            work_items=_as_model_tuple(
                WorkItemNode, parsed["work_items"], "ScheduleParams.work_items"
            ),
            dependencies=_as_model_tuple(
                Dependency, parsed.get("dependencies", ()), "ScheduleParams.dependencies"
            ),
            today=_as_date(parsed["today"], "ScheduleParams.today"),
            anchor_work_item_id=_as_optional_str(
                parsed.get("anchor_work_item_id"), "ScheduleParams.anchor_work_item_id"
            ),
        )


@dataclass(frozen=True, slots=True)
class ScheduledItem(CanonicalModel):
    """Per-item CPM output: earliest/latest dates, float and lateness."""

    work_item_id: str
    previous_start_date: date | None
    previous_end_date: date | None
    scheduled_start_date: date
    scheduled_end_date: date
    latest_start_date: date
    latest_finish_date: date
    total_float: int
    is_critical: bool
    is_late: bool = False

    def __post_init__(self) -> None:
        _set(self, "work_item_id", _as_str(self.work_item_id, "ScheduledItem.work_item_id"))
        for name in ("previous_start_date", "previous_end_date"):
            _set(self, name, _as_optional_date(getattr(self, name), f"ScheduledItem.{name}"))
        for name in (
            "scheduled_start_date",
            "scheduled_end_date",
            "latest_start_date",
            "latest_finish_date",
        ):
            _set(self, name, _as_date(getattr(self, name), f"ScheduledItem.{name}"))
        _set(
            self,
            "total_float",
            _as_int(self.total_float, "ScheduledItem.total_float", minimum=0),
        )
        _set(self, "is_critical", _as_bool(self.is_critical, "ScheduledItem.is_critical"))
        _set(self, "is_late", _as_bool(self.is_late, "ScheduledItem.is_late"))

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ScheduledItem:
        parsed = _expect_object(
            data,
            "ScheduledItem",
            required={
                "work_item_id",
                "scheduled_start_date",
                "scheduled_end_date",
                "latest_start_date",
                "latest_finish_date",
                "total_float",
                "is_critical",
            },
            optional={"previous_start_date", "previous_end_date", "is_late"},
        )
        return cls(
            work_item_id=_as_str(parsed["work_item_id"], "ScheduledItem.work_item_id"),
            previous_start_date=_as_optional_date(
                parsed.get("previous_start_date"), "ScheduledItem.previous_start_date"
            ),
            previous_end_date=_as_optional_date(
                parsed.get("previous_end_date"), "ScheduledItem.previous_end_date"
            ),
            scheduled_start_date=_as_date(
                parsed["scheduled_start_date"], "ScheduledItem.scheduled_start_date"
            ),
            scheduled_end_date=_as_date(
                parsed["scheduled_end_date"], "ScheduledItem.scheduled_end_date"
            ),
            latest_start_date=_as_date(
                parsed["latest_start_date"], "ScheduledItem.latest_start_date"
            ),
            latest_finish_date=_as_date(
                parsed["latest_finish_date"], "ScheduledItem.latest_finish_date"
            ),
            total_float=_as_int(parsed["total_float"], "ScheduledItem.total_float", minimum=0),
            is_critical=_as_bool(parsed["is_critical"], "ScheduledItem.is_critical"),
            is_late=_as_bool(parsed.get("is_late", False), "ScheduledItem.is_late"),
        )


@dataclass(frozen=True, slots=True)
class ScheduleWarning(CanonicalModel):
    """Advisory diagnostic; never changes the computed schedule."""

    work_item_id: str
    type: WarningType
    message: str

    def __post_init__(self) -> None:
        _set(self, "work_item_id", _as_str(self.work_item_id, "ScheduleWarning.work_item_id"))
        _set(self, "type", _as_enum(WarningType, self.type, "ScheduleWarning.type"))
        _set(
            self,
            "message",
            _as_str(self.message, "ScheduleWarning.message", max_len=_MAX_MESSAGE_LEN),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ScheduleWarning:
        parsed = _expect_object(
            data,
            "ScheduleWarning",
            required={"work_item_id", "type", "message"},
        )
        return cls(
            work_item_id=_as_str(parsed["work_item_id"], "ScheduleWarning.work_item_id"),
            type=_as_enum(WarningType, parsed["type"], "ScheduleWarning.type"),
            message=_as_str(
                parsed["message"], "ScheduleWarning.message", max_len=_MAX_MESSAGE_LEN
            ),
        )


@dataclass(frozen=True, slots=True)
class ScheduleResult(CanonicalModel):
    """Engine output. ``cycle_nodes`` is set only when the graph is not a DAG."""

    scheduled_items: tuple[ScheduledItem, ...] = ()
    critical_path: tuple[str, ...] = ()
    warnings: tuple[ScheduleWarning, ...] = ()
    cycle_nodes: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        _set(
            self,
            "scheduled_items",
            _as_model_tuple(ScheduledItem, self.scheduled_items, "ScheduleResult.scheduled_items"),
        )
        _set(
            self,
            "critical_path",
            _as_str_tuple(self.critical_path, "ScheduleResult.critical_path"),
        )
        _set(
            self,
            "warnings",
            _as_model_tuple(ScheduleWarning, self.warnings, "ScheduleResult.warnings"),
        )
        if self.cycle_nodes is not None:
            cycle_nodes = _as_str_tuple(self.cycle_nodes, "ScheduleResult.cycle_nodes")
            if not cycle_nodes:
                _fail("ScheduleResult.cycle_nodes", "must not be empty when present")
            if self.scheduled_items or self.critical_path or self.warnings:
                _fail(
                    "ScheduleResult.cycle_nodes",
                    "a cyclic result must not carry scheduled items, critical path or warnings",
                )
            _set(self, "cycle_nodes", cycle_nodes)

    @property
    def has_cycle(self) -> bool:
        return self.cycle_nodes is not None

    def items_by_id(self) -> dict[str, ScheduledItem]:
        return {item.work_item_id: item for item in self.scheduled_items}

    def to_dict(self) -> dict[str, JSONValue]:
        payload = CanonicalModel.to_dict(self)
        if self.cycle_nodes is None:
            payload.pop("cycleNodes", None)
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ScheduleResult:
        parsed = _expect_object(
            data,
            "ScheduleResult",
            required={"scheduled_items", "critical_path", "warnings"},
            optional={"cycle_nodes"},
        )
        raw_cycle = parsed.get("cycle_nodes")
        return cls(
            scheduled_items=_as_model_tuple(
                ScheduledItem, parsed["scheduled_items"], "ScheduleResult.scheduled_items"
            ),
            critical_path=_as_str_tuple(parsed["critical_path"], "ScheduleResult.critical_path"),
            warnings=_as_model_tuple(
                ScheduleWarning, parsed["warnings"], "ScheduleResult.warnings"
            ),
            cycle_nodes=(
                None
                if raw_cycle is None
                else _as_str_tuple(raw_cycle, "ScheduleResult.cycle_nodes")
            ),
        )


@dataclass(frozen=True, slots=True)
class MilestoneLink(CanonicalModel):
    """``work_item_id`` contributes to ``milestone_id``."""

    milestone_id: str
    work_item_id: str

    def __post_init__(self) -> None:
        _set(
            self,
            "milestone_id",
            _as_milestone_id(self.milestone_id, "MilestoneLink.milestone_id"),
        )
        _set(self, "work_item_id", _as_str(self.work_item_id, "MilestoneLink.work_item_id"))

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> MilestoneLink:
        parsed = _expect_object(data, "MilestoneLink", required={"milestone_id", "work_item_id"})
        return cls(
            milestone_id=_as_milestone_id(parsed["milestone_id"], "MilestoneLink.milestone_id"),
            work_item_id=_as_str(parsed["work_item_id"], "MilestoneLink.work_item_id"),
        )


@dataclass(frozen=True, slots=True)
class MilestoneDependency(CanonicalModel):
    """``work_item_id`` cannot start until every contributor of ``milestone_id`` finishes."""

    work_item_id: str
    milestone_id: str

    def __post_init__(self) -> None:
        _set(self, "work_item_id", _as_str(self.work_item_id, "MilestoneDependency.work_item_id"))
        _set(
            self,
            "milestone_id",
            _as_milestone_id(self.milestone_id, "MilestoneDependency.milestone_id"),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> MilestoneDependency:
        parsed = _expect_object(
            data, "MilestoneDependency", required={"work_item_id", "milestone_id"}
        )
        return cls(
            work_item_id=_as_str(parsed["work_item_id"], "MilestoneDependency.work_item_id"),
            milestone_id=_as_milestone_id(
                parsed["milestone_id"], "MilestoneDependency.milestone_id"
            ),
        )


def _as_milestone_id(value: object, path: str) -> str:
    # Milestones are commonly keyed by integer row ids.
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return _as_str(value, path)


__all__ = [
    "CanonicalModel",
    "Dependency",
    "DependencyType",
    "JSONScalar",
    "JSONValue",
    "MilestoneDependency",
    "MilestoneLink",
    "ScheduleMode",
    "ScheduleParams",
    "ScheduleResult",
    "ScheduleWarning",
    "ScheduledItem",
    "WarningType",
    "WorkItemNode",
    "WorkItemStatus",
    "python_name",
    "wire_name",
]
