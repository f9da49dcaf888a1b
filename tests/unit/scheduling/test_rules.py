"""Unit tests for dependency-type date formulas."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from workplan_scheduler.domain.models import DependencyType
from workplan_scheduler.scheduling.rules import backward_finish, forward_start

_START = date(2026, 1, 1)
_FINISH = date(2026, 1, 6)


@pytest.mark.parametrize(
    ("dependency_type", "expected"),
    [
        (DependencyType.FINISH_TO_START, date(2026, 1, 8)),
        (DependencyType.START_TO_START, date(2026, 1, 3)),
        (DependencyType.FINISH_TO_FINISH, date(2026, 1, 5)),
        (DependencyType.START_TO_FINISH, date(2025, 12, 31)),
    ],
)
def test_forward_start(dependency_type: DependencyType, expected: date) -> None:
    assert (
        forward_start(
            dependency_type,
            predecessor_start=_START,
            predecessor_finish=_FINISH,
            lag_days=2,
            successor_duration=3,
        )
        == expected
    )


@pytest.mark.parametrize(
    ("dependency_type", "expected"),
    [
        (DependencyType.FINISH_TO_START, date(2026, 1, 8)),
        (DependencyType.START_TO_START, date(2026, 1, 12)),
        (DependencyType.FINISH_TO_FINISH, date(2026, 1, 18)),
        (DependencyType.START_TO_FINISH, date(2026, 1, 22)),
    ],
)
def test_backward_finish(dependency_type: DependencyType, expected: date) -> None:
    assert (
        backward_finish(
            dependency_type,
            successor_latest_start=date(2026, 1, 10),
            successor_latest_finish=date(2026, 1, 20),
            lag_days=2,
            predecessor_duration=4,
        )
        == expected
    )


def test_unsupported_type_is_rejected() -> None:
    with pytest.raises(ValueError, match="unsupported dependency type"):
        forward_start(
            "lag",  # type: ignore[arg-type]
            predecessor_start=_START,
            predecessor_finish=_FINISH,
            lag_days=0,
            successor_duration=1,
        )


@settings(max_examples=200, deadline=None)
@given(
    dependency_type=st.sampled_from(list(DependencyType)),
    offset=st.integers(min_value=0, max_value=400),
    predecessor_duration=st.integers(min_value=0, max_value=60),
    successor_duration=st.integers(min_value=0, max_value=60),
    lag=st.integers(min_value=-30, max_value=30),
)
def test_backward_formula_mirrors_forward(
    dependency_type: DependencyType,
    offset: int,
    predecessor_duration: int,
    successor_duration: int,
    lag: int,
) -> None:
    predecessor_start = _START + timedelta(days=offset)
    predecessor_finish = predecessor_start + timedelta(days=predecessor_duration)
    successor_start = forward_start(
        dependency_type,
        predecessor_start=predecessor_start,
        predecessor_finish=predecessor_finish,
        lag_days=lag,
        successor_duration=successor_duration,
    )
    successor_finish = successor_start + timedelta(days=successor_duration)

    # A successor sitting exactly on its forward bound leaves the predecessor no slack.
    assert (
        backward_finish(
            dependency_type,
            successor_latest_start=successor_start,
            successor_latest_finish=successor_finish,
            lag_days=lag,
            predecessor_duration=predecessor_duration,
        )
        == predecessor_finish
    )
