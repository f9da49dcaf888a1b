"""Advisory diagnostics gathered while the forward pass runs."""

from __future__ import annotations

from datetime import date

from workplan_scheduler.domain.models import ScheduleWarning, WarningType

NO_DURATION_MESSAGE = "Work item has no duration set; scheduled as zero-duration"
ALREADY_COMPLETED_MESSAGE = (
    "Work item is already completed; dates cannot be changed by the scheduler"
)


class WarningCollector:
    """Accumulates warnings in emission order; never alters computed dates."""

    __slots__ = ("_warnings",)

    def __init__(self) -> None:
        self._warnings: list[ScheduleWarning] = []

    def __len__(self) -> int:
        return len(self._warnings)

    @property
    def warnings(self) -> tuple[ScheduleWarning, ...]:
        return tuple(self._warnings)

    def no_duration(self, work_item_id: str) -> None:
        self._emit(work_item_id, WarningType.NO_DURATION, NO_DURATION_MESSAGE)

    def start_before_violated(
        self,
        work_item_id: str,
        *,
        scheduled_start: date,
        start_before: date,
    ) -> None:
        self._emit(
            work_item_id,
            WarningType.START_BEFORE_VIOLATED,
            f"Scheduled start date ({scheduled_start.isoformat()}) exceeds "
            f"start-before constraint ({start_before.isoformat()})",
        )

    def already_completed(self, work_item_id: str) -> None:
        self._emit(work_item_id, WarningType.ALREADY_COMPLETED, ALREADY_COMPLETED_MESSAGE)

    def _emit(self, work_item_id: str, warning_type: WarningType, message: str) -> None:
        self._warnings.append(
            ScheduleWarning(work_item_id=work_item_id, type=warning_type, message=message)
        )


__all__ = ["ALREADY_COMPLETED_MESSAGE", "NO_DURATION_MESSAGE", "WarningCollector"]
