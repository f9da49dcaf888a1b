"""Stable constants shared across scheduler layers."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Final

# Schema versions for persisted contracts.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Config file discovery and environment override prefix.
DEFAULT_CONFIG_FILENAME: Final[str] = "scheduler.toml"
CONFIG_ENV_PREFIX: Final[str] = "WORKPLAN_"

# Default runtime paths (relative to the config file unless overridden).
LOG_DIR: Final[PurePosixPath] = PurePosixPath("logs")

# Cascade mode error surfaced verbatim to API callers.
CASCADE_ANCHOR_REQUIRED_MESSAGE: Final[str] = "anchorWorkItemId is required for cascade mode"

__all__ = [
    "CASCADE_ANCHOR_REQUIRED_MESSAGE",
    "CONFIG_ENV_PREFIX",
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_CONFIG_FILENAME",
    "LOG_DIR",
]
