"""
Data models for FocusForge.

Frozen dataclasses describing the single application snapshot. The engine
never mutates them in place; every transition builds new values with
dataclasses.replace, so a snapshot handed to a listener stays valid.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from focusforge.engine.leveling import DEFAULT_LEVEL


class TimerMode:
    """The three timer phases. Exactly one is active at a time."""
    FOCUS = "focus"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    ALL = (FOCUS, SHORT_BREAK, LONG_BREAK)


class Priority:
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    ALL = (HIGH, MEDIUM, LOW)
    ORDER = {HIGH: 0, MEDIUM: 1, LOW: 2}


class PriorityFilter:
    ALL_TASKS = "all"

    ALL = (ALL_TASKS,) + Priority.ALL


class Theme:
    LIGHT = "light"
    DARK = "dark"

    ALL = (LIGHT, DARK)


class BackgroundMusic:
    NONE = "none"
    RAINFALL = "rainfall"
    AMBIENT = "ambient"
    DEEP_FOCUS = "deepfocus"
    CHILL = "chill"
    LOFI = "lofi"

    ALL = (NONE, RAINFALL, AMBIENT, DEEP_FOCUS, CHILL, LOFI)
    LABELS = {
        NONE: "None",
        RAINFALL: "Rainfall",
        AMBIENT: "Forest",
        DEEP_FOCUS: "Deep Focus",
        CHILL: "Chill Vibes",
        LOFI: "Lofi Study",
    }


class Severity:
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"


# Valid ranges enforced at the input boundary (see clamp_settings)
FOCUS_RANGE = (1, 120)
SHORT_BREAK_RANGE = (1, 30)
LONG_BREAK_RANGE = (1, 60)
VOLUME_RANGE = (0, 100)


@dataclass(frozen=True)
class TimerSettings:
    """Durations are whole minutes; volume is a 0–100 percentage."""
    focus_duration: int = 25
    short_break_duration: int = 5
    long_break_duration: int = 15
    background_music: str = BackgroundMusic.NONE
    music_volume: int = 50

    def duration_for(self, mode: str) -> int:
        """Configured minutes for a timer mode."""
        if mode == TimerMode.SHORT_BREAK:
            return self.short_break_duration
        if mode == TimerMode.LONG_BREAK:
            return self.long_break_duration
        return self.focus_duration


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    priority: str = Priority.MEDIUM
    is_completed: bool = False
    created_at: int = 0


@dataclass(frozen=True)
class Note:
    id: str
    title: str
    content: str = ""
    created_at: int = 0
    updated_at: int = 0


@dataclass(frozen=True)
class PomodoroSession:
    """One completed timer phase. Sessions are only ever appended."""
    id: str
    type: str
    start_time: int
    end_time: int
    duration_minutes: int


@dataclass(frozen=True)
class DistractionEvent:
    id: str
    timestamp: int
    category: str
    note: Optional[str] = None


@dataclass(frozen=True)
class WeeklyReview:
    """Reflection for one calendar week, keyed by its Sunday day key."""
    id: str
    week_start_date: str
    wins: str = ""
    distractions: str = ""
    what_worked: str = ""
    improvement_plan: str = ""
    created_at: int = 0


@dataclass(frozen=True)
class UserStats:
    """Derived cache over the session log — never authoritative."""
    total_focus_minutes_today: int = 0
    total_focus_minutes_this_week: int = 0
    streak_days: int = 0
    last_study_date: Optional[str] = None
    current_level: str = DEFAULT_LEVEL
    xp: int = 0


@dataclass(frozen=True)
class AppState:
    timer_mode: str = TimerMode.FOCUS
    is_running: bool = False
    remaining_seconds: int = 25 * 60
    settings: TimerSettings = field(default_factory=TimerSettings)
    tasks: Tuple[Task, ...] = ()
    notes: Tuple[Note, ...] = ()
    sessions: Tuple[PomodoroSession, ...] = ()
    distractions: Tuple[DistractionEvent, ...] = ()
    reviews: Tuple[WeeklyReview, ...] = ()
    stats: UserStats = field(default_factory=UserStats)
    theme: str = Theme.LIGHT
    task_priority_filter: str = PriorityFilter.ALL_TASKS


def default_state(theme: str = Theme.LIGHT) -> AppState:
    """Fresh snapshot for a first launch."""
    settings = TimerSettings()
    return AppState(
        remaining_seconds=settings.focus_duration * 60,
        settings=settings,
        theme=theme if theme in Theme.ALL else Theme.LIGHT,
    )


def _clamp(value, bounds: Tuple[int, int]) -> int:
    low, high = bounds
    return max(low, min(int(value), high))


def clamp_settings(
    focus_duration,
    short_break_duration,
    long_break_duration,
    background_music: str = BackgroundMusic.NONE,
    music_volume=50,
) -> TimerSettings:
    """Build settings from raw user input, clamping every field into range."""
    music = background_music if background_music in BackgroundMusic.ALL else BackgroundMusic.NONE
    return TimerSettings(
        focus_duration=_clamp(focus_duration, FOCUS_RANGE),
        short_break_duration=_clamp(short_break_duration, SHORT_BREAK_RANGE),
        long_break_duration=_clamp(long_break_duration, LONG_BREAK_RANGE),
        background_music=music,
        music_volume=_clamp(music_volume, VOLUME_RANGE),
    )


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Defines the "shape" of the whole app: one AppState snapshot holding the
#   timer, settings, tasks, notes, the session log, distractions, weekly
#   reviews and cached stats.
#
# Key points:
#   - Frozen dataclasses + tuples: a snapshot can't be changed after it's
#     built, so the reducer has to return a new one. That's what makes
#     "same (state, intent) -> same next state" actually hold.
#   - Enum-like constant classes (TimerMode, Priority...) keep the persisted
#     JSON as plain strings, the same values the UI shows.
#   - UserStats is a cache. The session log is the source of truth and the
#     reconciler rebuilds today/week totals from it on every launch.
#
# Interviewer-friendly talking points:
#   1. clamp_settings lives at the input boundary: bad numbers are fixed
#      before an intent exists, so the reducer never has to reject anything.
#   2. Durations are clamped to at least one minute, which keeps the
#      "session durations are positive" invariant true by construction.
