"""Unit tests for schedule date-range helpers."""

from __future__ import annotations

from datetime import date

from workplan_scheduler.domain.models import ScheduledItem
from workplan_scheduler.scheduling.timeline import DateRange, compute_bounds, compute_date_range


def _scheduled(work_item_id: str, start: date, end: date) -> ScheduledItem:
    return ScheduledItem(
        work_item_id=work_item_id,
        previous_start_date=None,
        previous_end_date=None,
        scheduled_start_date=start,
        scheduled_end_date=end,
        latest_start_date=start,
        latest_finish_date=end,
        total_float=0,
        is_critical=True,
    )


def test_date_range_spans_all_items() -> None:
    items = [
        _scheduled("A", date(2026, 1, 5), date(2026, 1, 9)),
        _scheduled("B", date(2026, 1, 1), date(2026, 1, 3)),
        _scheduled("C", date(2026, 1, 7), date(2026, 2, 1)),
    ]

    assert compute_date_range(items) == DateRange(
        earliest=date(2026, 1, 1), latest=date(2026, 2, 1)
    )


def test_date_range_of_nothing_is_none() -> None:
    assert compute_date_range([]) is None
    assert compute_bounds([(None, None)]) is None


def test_one_sided_bounds_reuse_the_present_side() -> None:
    only_ends = compute_bounds([(None, date(2026, 3, 1)), (None, date(2026, 4, 1))])
    only_starts = compute_bounds([(date(2026, 3, 1), None), (date(2026, 2, 1), None)])

    assert only_ends == DateRange(earliest=date(2026, 4, 1), latest=date(2026, 4, 1))
    assert only_starts == DateRange(earliest=date(2026, 2, 1), latest=date(2026, 2, 1))
    assert only_starts is not None
    assert only_starts.to_dict() == {"earliest": "2026-02-01", "latest": "2026-02-01"}
