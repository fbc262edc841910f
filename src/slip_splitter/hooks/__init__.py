"""Logging setup and per-run tracking."""

from slip_splitter.hooks.logging_config import setup_logging
from slip_splitter.hooks.run_tracker import end_run, get_current_run, start_run, track_stage

__all__ = [
    "setup_logging",
    "start_run",
    "end_run",
    "get_current_run",
    "track_stage",
]
