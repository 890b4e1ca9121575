from .database import Database
from .models import (
    AppState, DistractionEvent, Note, PomodoroSession, Task, TimerSettings,
    UserStats, WeeklyReview,
)
from .repository import Repository
from .migration import SnapshotError

__all__ = [
    "Database", "Repository", "SnapshotError", "AppState", "DistractionEvent", "Note",
    "PomodoroSession", "Task", "TimerSettings", "UserStats", "WeeklyReview",
]
