"""Module entrypoint for ``python -m workplan_scheduler``."""

from __future__ import annotations

from workplan_scheduler.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
