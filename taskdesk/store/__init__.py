from __future__ import annotations

from .task_store import Clock, TaskStore
from .team_store import TeamTaskStore

__all__ = ["Clock", "TaskStore", "TeamTaskStore"]
