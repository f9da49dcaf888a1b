"""
workplan-scheduler - unit tests for observability logging

File: tests/unit/observability/test_logging.py

Purpose
- Validate structured JSON logging, correlation metadata, and structlog routing.

What this test file should cover
- JSON line validity and correlation field propagation.
- structlog events landing in the same per-run file.
- Text format rendering.
- Multi-threaded logging stability and shutdown behavior.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import date
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest
import structlog

from workplan_scheduler.observability.logging import (
    LoggingConfig,
    correlation_scope,
    get_active_logging_handle,
    get_correlation_context,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _cleanup_logging() -> Iterator[None]:
    yield
    shutdown_logging()
    structlog.reset_defaults()


def _logger_name() -> str:
    return f"workplan_scheduler.tests.logging.{uuid4().hex}"


def _read_json_lines(path: Path) -> list[dict[str, object]]:
    lines = path.read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines]


def test_json_logging_preserves_correlation_fields(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(
            run_id="run-logging-correlation",
            base_log_dir=tmp_path,
            logger_name=logger_name,
        )
    )
    logger = logging.getLogger(logger_name)

    with correlation_scope(anchor_work_item_id="WI-7", request="r-1"):
        logger.info("scheduling", extra={"nested": {"count": 3}})

    shutdown_logging(handle)

    parsed = _read_json_lines(handle.log_path)
    assert len(parsed) == 1
    first = parsed[0]
    assert first["run_id"] == "run-logging-correlation"
    assert first["anchor_work_item_id"] == "WI-7"
    assert first["request"] == "r-1"
    assert first["message"] == "scheduling"
    assert first["level"] == "INFO"
    assert first["fields"] == {"nested": {"count": 3}}
    assert str(first["timestamp"]).endswith("Z")
    assert handle.log_path == tmp_path / "run-logging-correlation" / "scheduler.jsonl"


def test_correlation_scope_restores_previous_context() -> None:
    with correlation_scope(work_item_id="A"):
        with correlation_scope(work_item_id=None, run_id="r"):
            assert get_correlation_context() == {"run_id": "r"}
        assert get_correlation_context() == {"work_item_id": "A"}
    assert get_correlation_context() == {}


def test_structlog_events_are_routed_to_the_run_file(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(run_id="run-structlog", base_log_dir=tmp_path, logger_name=logger_name)
    )

    log = structlog.get_logger(logger_name)
    log.info("schedule.complete", scheduled_count=2, project_finish=date(2026, 3, 6))
    log.debug("schedule.dangling_dependency_dropped", predecessor_id="ghost")

    shutdown_logging(handle)

    parsed = _read_json_lines(handle.log_path)
    assert [entry["message"] for entry in parsed] == ["schedule.complete"]
    assert parsed[0]["fields"] == {"scheduled_count": 2, "project_finish": "2026-03-06"}
    assert parsed[0]["logger"] == logger_name


def test_setup_logging_wrapper_uses_observability_config(tmp_path: Path) -> None:
    logger_name = _logger_name()
    logger = setup_logging(
        {
            "log_level": "DEBUG",
            "log_format": "text",
            "log_dir": str(tmp_path),
        },
        run_id="run-wrapper",
        logger_name=logger_name,
    )

    logger.debug("checked", extra={"work_items": 4})
    shutdown_logging()

    content = (tmp_path / "run-wrapper" / "scheduler.jsonl").read_text(encoding="utf-8")
    assert " DEBUG " in content
    assert "checked work_items=4" in content


def test_setup_replaces_previous_active_handle(tmp_path: Path) -> None:
    first = setup_structured_logging(
        LoggingConfig(run_id="run-a", base_log_dir=tmp_path, logger_name=_logger_name())
    )
    second = setup_structured_logging(
        LoggingConfig(run_id="run-b", base_log_dir=tmp_path, logger_name=_logger_name())
    )

    assert first.is_shutdown is True
    assert get_active_logging_handle() is second

    shutdown_logging()
    assert get_active_logging_handle() is None


@pytest.mark.parametrize(
    "config",
    [
        LoggingConfig(run_id=" "),
        LoggingConfig(run_id="r", queue_size=0),
        LoggingConfig(run_id="r", log_filename="nested/file.jsonl"),
        LoggingConfig(run_id="r", level="LOUD"),
    ],
)
def test_invalid_config_is_rejected(config: LoggingConfig) -> None:
    with pytest.raises(ValueError):
        setup_structured_logging(config)


def test_multithreaded_logging_produces_valid_json_lines(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(run_id="run-threads", base_log_dir=tmp_path, logger_name=logger_name)
    )
    logger = logging.getLogger(logger_name)

    def worker(index: int) -> None:
        with correlation_scope(work_item_id=f"wi-{index}"):
            for step in range(25):
                logger.info("step", extra={"step": step})

    threads = [threading.Thread(target=worker, args=(index,)) for index in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    shutdown_logging(handle)

    parsed = _read_json_lines(handle.log_path)
    assert len(parsed) + handle.dropped_records == 100
    assert {entry["work_item_id"] for entry in parsed} <= {f"wi-{index}" for index in range(4)}
