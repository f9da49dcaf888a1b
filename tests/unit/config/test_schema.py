"""Unit tests for scheduler config schema validation and merging."""

from __future__ import annotations

import pytest

from workplan_scheduler.config.schema import (
    ConfigValidationError,
    assert_valid_config,
    default_config,
    merge_config,
    migration_guidance,
    validate_config,
)


def _issue_map(config: object) -> dict[str, str]:
    result = validate_config(config)
    return {issue.path: issue.message for issue in result.issues}


def test_defaults_validate_successfully() -> None:
    result = validate_config(default_config())

    assert result.is_valid
    assert result.config is not None
    assert result.config["scheduling"]["default_mode"] == "full"
    assert result.config["observability"]["log_format"] == "json"


def test_default_config_is_a_deep_copy() -> None:
    first = default_config()
    first["scheduling"]["default_mode"] = "cascade"

    assert default_config()["scheduling"]["default_mode"] == "full"


def test_unknown_key_rejection_is_explicit() -> None:
    config = merge_config(default_config(), {"scheduling": {"holidays": []}, "extra": 1})

    issues = _issue_map(config)
    assert issues["scheduling.holidays"] == "unknown field"
    assert issues["extra"] == "unknown field"


def test_type_validation_reports_structured_paths() -> None:
    config = merge_config(
        default_config(),
        {
            "scheduling": {"expand_milestones": "yes", "today": "01/03/2026"},
            "observability": {"log_level": "TRACE", "log_dir": "  "},
        },
    )

    issues = _issue_map(config)
    assert issues["scheduling.expand_milestones"] == "expected boolean, got str"
    assert "invalid ISO-8601 date" in issues["scheduling.today"]
    assert "expected one of: DEBUG, ERROR, INFO, WARNING" in issues["observability.log_level"]
    assert issues["observability.log_dir"] == "must not be empty"


def test_missing_sections_and_fields_are_reported() -> None:
    issues = _issue_map({"meta": {"schema_version": 1}, "scheduling": {"today": ""}})

    assert issues["observability"] == "missing required field"
    assert issues["scheduling.default_mode"] == "missing required field"


def test_schema_version_mismatch_includes_guidance() -> None:
    config = merge_config(default_config(), {"meta": {"schema_version": 2}})

    with pytest.raises(ConfigValidationError) as error:
        assert_valid_config(config)

    assert "upgrade the workplan-scheduler runtime" in str(error.value)
    assert migration_guidance(1) == "schema version is current"


def test_today_is_normalized() -> None:
    config = merge_config(default_config(), {"scheduling": {"today": " 2026-03-01 "}})

    assert assert_valid_config(config)["scheduling"]["today"] == "2026-03-01"


def test_merge_is_deep_and_leaves_inputs_untouched() -> None:
    base = default_config()
    overlay = {"observability": {"log_format": "text"}}

    merged = merge_config(base, overlay)

    assert merged["observability"]["log_format"] == "text"
    assert merged["observability"]["log_level"] == "INFO"
    assert base["observability"]["log_format"] == "json"
