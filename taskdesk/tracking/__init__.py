from __future__ import annotations

from .time_tracker import TICK_INTERVAL_S, TimeTracker, parse_minutes, with_added_time

__all__ = ["TICK_INTERVAL_S", "TimeTracker", "parse_minutes", "with_added_time"]
