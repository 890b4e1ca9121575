"""
Intents — the complete set of requests the presentation layer may make.

Intents that create records or need a timestamp carry their own ``now`` and
``new_id``, stamped when the intent is constructed. The reducer only reads
them, which keeps it a pure function of (state, intent).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from focusforge.data.models import AppState, Note, TimerSettings, WeeklyReview
from focusforge.engine.timeutils import generate_id, now_ms


class Intent:
    """Base class for every intent."""

    @property
    def tag(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class InitState(Intent):
    snapshot: AppState


@dataclass(frozen=True)
class Tick(Intent):
    pass


@dataclass(frozen=True)
class ToggleTimer(Intent):
    pass


@dataclass(frozen=True)
class ResetTimer(Intent):
    pass


@dataclass(frozen=True)
class SetMode(Intent):
    mode: str


@dataclass(frozen=True)
class UpdateSettings(Intent):
    settings: TimerSettings


@dataclass(frozen=True)
class AddTask(Intent):
    title: str
    priority: str
    new_id: str = field(default_factory=generate_id)
    now: int = field(default_factory=now_ms)


@dataclass(frozen=True)
class ToggleTask(Intent):
    task_id: str


@dataclass(frozen=True)
class DeleteTask(Intent):
    task_id: str


@dataclass(frozen=True)
class SetTaskPriorityFilter(Intent):
    priority_filter: str


@dataclass(frozen=True)
class AddNote(Intent):
    title: str
    content: str = ""
    new_id: str = field(default_factory=generate_id)
    now: int = field(default_factory=now_ms)


@dataclass(frozen=True)
class UpdateNote(Intent):
    note: Note
    now: int = field(default_factory=now_ms)


@dataclass(frozen=True)
class DeleteNote(Intent):
    note_id: str


@dataclass(frozen=True)
class LogDistraction(Intent):
    category: str
    note: Optional[str] = None
    new_id: str = field(default_factory=generate_id)
    now: int = field(default_factory=now_ms)


@dataclass(frozen=True)
class SaveReview(Intent):
    review: WeeklyReview


@dataclass(frozen=True)
class CompleteSession(Intent):
    """A timer phase ran out. ``duration`` is the configured minutes of ``mode``."""
    mode: str
    duration: int
    new_id: str = field(default_factory=generate_id)
    now: int = field(default_factory=now_ms)


@dataclass(frozen=True)
class ToggleTheme(Intent):
    pass
