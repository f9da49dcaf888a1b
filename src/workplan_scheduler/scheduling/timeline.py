"""Overall date range of a computed schedule."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from workplan_scheduler.domain.models import CanonicalModel, ScheduledItem


@dataclass(frozen=True, slots=True)
class DateRange(CanonicalModel):
    earliest: date
    latest: date


def compute_date_range(items: Iterable[ScheduledItem]) -> DateRange | None:
    """Return the earliest start and latest end across ``items``, or ``None`` when empty."""

    return compute_bounds((item.scheduled_start_date, item.scheduled_end_date) for item in items)


def compute_bounds(spans: Iterable[tuple[date | None, date | None]]) -> DateRange | None:
    """
    Return the bounding range of ``(start, end)`` pairs where either side may be missing.

    When only starts or only ends are present, that side supplies both bounds.
    """

    starts: list[date] = []
    ends: list[date] = []
    for start, end in spans:
        if start is not None:
            starts.append(start)
        if end is not None:
            ends.append(end)

    if not starts and not ends:
        return None
    earliest = min(starts) if starts else max(ends)
    latest = max(ends) if ends else min(starts)
    return DateRange(earliest=earliest, latest=latest)


__all__ = ["DateRange", "compute_bounds", "compute_date_range"]
