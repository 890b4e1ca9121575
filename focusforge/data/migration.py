"""
Snapshot serialization and migration.

The persisted snapshot is a JSON object using the camelCase field names of
the first storage format, plus a ``version`` number. Loading maps every
field explicitly onto the current dataclasses: missing fields take their
default, unknown keys are ignored, and anything present with the wrong shape
raises SnapshotError so the caller can fall back to a fresh state.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from .models import (
    AppState, BackgroundMusic, DistractionEvent, Note, PomodoroSession, Priority,
    PriorityFilter, Task, Theme, TimerMode, TimerSettings, UserStats, WeeklyReview,
    clamp_settings,
)

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

_MISSING = object()


class SnapshotError(ValueError):
    """The persisted snapshot can't be mapped onto the current model."""


# ── Field parsers ───────────────────────────────────────────────────────────

def _as_int(value: Any, where: str) -> int:
    if isinstance(value, bool):
        raise SnapshotError(f"{where}: expected a number, got a boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise SnapshotError(f"{where}: expected an integer, got {value!r}")


def _as_count(value: Any, where: str) -> int:
    number = _as_int(value, where)
    if number < 0:
        raise SnapshotError(f"{where}: must not be negative, got {number}")
    return number


def _as_positive(value: Any, where: str) -> int:
    number = _as_int(value, where)
    if number < 1:
        raise SnapshotError(f"{where}: must be at least 1, got {number}")
    return number


def _as_str(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise SnapshotError(f"{where}: expected a string, got {value!r}")
    return value


def _as_optional_str(value: Any, where: str) -> Optional[str]:
    return None if value is None else _as_str(value, where)


def _as_bool(value: Any, where: str) -> bool:
    if not isinstance(value, bool):
        raise SnapshotError(f"{where}: expected a boolean, got {value!r}")
    return value


def _one_of(allowed: Tuple[str, ...]) -> Callable[[Any, str], str]:
    def parse(value: Any, where: str) -> str:
        if value not in allowed:
            raise SnapshotError(f"{where}: {value!r} is not one of {allowed}")
        return value
    return parse


def _as_object(value: Any, where: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise SnapshotError(f"{where}: expected an object, got {type(value).__name__}")
    return value


def _as_list(value: Any, where: str) -> list:
    if not isinstance(value, list):
        raise SnapshotError(f"{where}: expected a list, got {type(value).__name__}")
    return value


# (json key, attribute, parser, required)
FieldSpec = Tuple[str, str, Callable[[Any, str], Any], bool]

_TASK_FIELDS: List[FieldSpec] = [
    ("id", "id", _as_str, True),
    ("title", "title", _as_str, True),
    ("priority", "priority", _one_of(Priority.ALL), False),
    ("isCompleted", "is_completed", _as_bool, False),
    ("createdAt", "created_at", _as_int, False),
]

_NOTE_FIELDS: List[FieldSpec] = [
    ("id", "id", _as_str, True),
    ("title", "title", _as_str, True),
    ("content", "content", _as_str, False),
    ("createdAt", "created_at", _as_int, False),
    ("updatedAt", "updated_at", _as_int, False),
]

_SESSION_FIELDS: List[FieldSpec] = [
    ("id", "id", _as_str, True),
    ("type", "type", _one_of(TimerMode.ALL), True),
    ("startTime", "start_time", _as_int, True),
    ("endTime", "end_time", _as_int, True),
    ("durationMinutes", "duration_minutes", _as_positive, True),
]

_DISTRACTION_FIELDS: List[FieldSpec] = [
    ("id", "id", _as_str, True),
    ("timestamp", "timestamp", _as_int, True),
    ("category", "category", _as_str, True),
    ("note", "note", _as_optional_str, False),
]

_REVIEW_FIELDS: List[FieldSpec] = [
    ("id", "id", _as_str, True),
    ("weekStartDate", "week_start_date", _as_str, True),
    ("wins", "wins", _as_str, False),
    ("distractions", "distractions", _as_str, False),
    ("whatWorked", "what_worked", _as_str, False),
    ("improvementPlan", "improvement_plan", _as_str, False),
    ("createdAt", "created_at", _as_int, False),
]

_STATS_FIELDS: List[FieldSpec] = [
    ("totalFocusMinutesToday", "total_focus_minutes_today", _as_count, False),
    ("totalFocusMinutesThisWeek", "total_focus_minutes_this_week", _as_count, False),
    ("streakDays", "streak_days", _as_count, False),
    ("lastStudyDate", "last_study_date", _as_optional_str, False),
    ("currentLevel", "current_level", _as_str, False),
    ("xp", "xp", _as_int, False),
]

_SETTINGS_FIELDS: List[FieldSpec] = [
    ("focusDuration", "focus_duration", _as_int, False),
    ("shortBreakDuration", "short_break_duration", _as_int, False),
    ("longBreakDuration", "long_break_duration", _as_int, False),
    ("backgroundMusic", "background_music", _as_str, False),
    ("musicVolume", "music_volume", _as_int, False),
]


def _parse_fields(raw: Any, fields: List[FieldSpec], where: str) -> Dict[str, Any]:
    obj = _as_object(raw, where)
    values: Dict[str, Any] = {}
    for key, attr, parse, required in fields:
        value = obj.get(key, _MISSING)
        if value is _MISSING:
            if required:
                raise SnapshotError(f"{where}: missing field {key!r}")
            continue
        values[attr] = parse(value, f"{where}.{key}")
    return values


def _parse_records(raw: Any, cls, fields: List[FieldSpec], where: str) -> tuple:
    items = _as_list(raw, where)
    return tuple(
        cls(**_parse_fields(item, fields, f"{where}[{i}]"))
        for i, item in enumerate(items)
    )


def _parse_settings(raw: Any, default: TimerSettings) -> TimerSettings:
    parsed = replace(default, **_parse_fields(raw, _SETTINGS_FIELDS, "settings"))
    clamped = clamp_settings(
        parsed.focus_duration,
        parsed.short_break_duration,
        parsed.long_break_duration,
        parsed.background_music,
        parsed.music_volume,
    )
    if clamped != parsed:
        logger.warning("Persisted settings out of range; clamped to %s", clamped)
    return clamped


# ── Versioned upgrades ──────────────────────────────────────────────────────

def _upgrade_v0(data: Dict[str, Any]) -> Dict[str, Any]:
    """Unversioned snapshots stored an empty theme as a falsy value."""
    data = dict(data)
    if not data.get("theme"):
        data.pop("theme", None)
    data["version"] = 1
    return data


_UPGRADES: Dict[int, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    0: _upgrade_v0,
}


def _upgrade(data: Dict[str, Any]) -> Dict[str, Any]:
    version = data.get("version", 0)
    if isinstance(version, bool) or not isinstance(version, int):
        raise SnapshotError(f"version: expected an integer, got {version!r}")
    if version > SNAPSHOT_VERSION:
        raise SnapshotError(
            f"snapshot version {version} is newer than supported {SNAPSHOT_VERSION}"
        )
    while version < SNAPSHOT_VERSION:
        logger.info("Migrating snapshot from version %d", version)
        data = _UPGRADES[version](data)
        version = data["version"]
    return data


# ── Public API ──────────────────────────────────────────────────────────────

_KNOWN_KEYS = {
    "version", "timerMode", "isRunning", "remainingSeconds", "settings", "tasks",
    "notes", "sessions", "distractions", "reviews", "stats", "theme",
    "taskPriorityFilter",
}


def state_from_dict(data: Any, defaults: AppState) -> AppState:
    """Map a decoded snapshot onto AppState, field by field."""
    data = _upgrade(_as_object(data, "snapshot"))

    unknown = set(data) - _KNOWN_KEYS
    if unknown:
        logger.debug("Ignoring unknown snapshot keys: %s", sorted(unknown))

    values: Dict[str, Any] = {}
    if "timerMode" in data:
        values["timer_mode"] = _one_of(TimerMode.ALL)(data["timerMode"], "timerMode")
    if "isRunning" in data:
        values["is_running"] = _as_bool(data["isRunning"], "isRunning")
    if "remainingSeconds" in data:
        values["remaining_seconds"] = _as_count(data["remainingSeconds"], "remainingSeconds")
    if "settings" in data:
        values["settings"] = _parse_settings(data["settings"], defaults.settings)
    if "tasks" in data:
        values["tasks"] = _parse_records(data["tasks"], Task, _TASK_FIELDS, "tasks")
    if "notes" in data:
        values["notes"] = _parse_records(data["notes"], Note, _NOTE_FIELDS, "notes")
    if "sessions" in data:
        values["sessions"] = _parse_records(
            data["sessions"], PomodoroSession, _SESSION_FIELDS, "sessions")
    if "distractions" in data:
        values["distractions"] = _parse_records(
            data["distractions"], DistractionEvent, _DISTRACTION_FIELDS, "distractions")
    if "reviews" in data:
        values["reviews"] = _parse_records(
            data["reviews"], WeeklyReview, _REVIEW_FIELDS, "reviews")
    if "stats" in data:
        values["stats"] = replace(
            defaults.stats, **_parse_fields(data["stats"], _STATS_FIELDS, "stats"))
    if "theme" in data:
        values["theme"] = _one_of(Theme.ALL)(data["theme"], "theme")
    if "taskPriorityFilter" in data:
        values["task_priority_filter"] = _one_of(PriorityFilter.ALL)(
            data["taskPriorityFilter"], "taskPriorityFilter")

    return replace(defaults, **values)


def _dump_fields(obj: Any, fields: List[FieldSpec]) -> Dict[str, Any]:
    return {key: getattr(obj, attr) for key, attr, _, _ in fields}


def state_to_dict(state: AppState) -> Dict[str, Any]:
    """JSON-ready dict of the whole snapshot."""
    return {
        "version": SNAPSHOT_VERSION,
        "timerMode": state.timer_mode,
        "isRunning": state.is_running,
        "remainingSeconds": state.remaining_seconds,
        "settings": _dump_fields(state.settings, _SETTINGS_FIELDS),
        "tasks": [_dump_fields(t, _TASK_FIELDS) for t in state.tasks],
        "notes": [_dump_fields(n, _NOTE_FIELDS) for n in state.notes],
        "sessions": [_dump_fields(s, _SESSION_FIELDS) for s in state.sessions],
        "distractions": [_dump_fields(d, _DISTRACTION_FIELDS) for d in state.distractions],
        "reviews": [_dump_fields(r, _REVIEW_FIELDS) for r in state.reviews],
        "stats": _dump_fields(state.stats, _STATS_FIELDS),
        "theme": state.theme,
        "taskPriorityFilter": state.task_priority_filter,
    }


def dumps(state: AppState) -> str:
    return json.dumps(state_to_dict(state), ensure_ascii=False)


def loads(text: str, defaults: AppState) -> AppState:
    try:
        data = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise SnapshotError(f"snapshot is not valid JSON: {e}") from e
    return state_from_dict(data, defaults)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Converts AppState <-> JSON, and upgrades older snapshots to the current
#   shape before reading them.
#
# Key design decisions:
#   - Explicit field tables (json key, attribute, parser, required) instead
#     of `{**defaults, **parsed}`. A stray key can't sneak into the model,
#     and a wrong type is caught at load time rather than crashing the UI
#     three screens later.
#   - Fail closed: SnapshotError bubbles up to the reconciler, which logs
#     it and starts from defaults. The process never dies on bad data.
#   - Versioned upgrades: _UPGRADES[n] turns a version-n dict into n+1.
#     Version 0 is the unversioned format the app started with.
#
# Interviewer-friendly talking points:
#   1. bool is a subclass of int in Python, so _as_int rejects it
#      explicitly; otherwise `"remainingSeconds": true` would load as 1.
#   2. Settings are clamped on load the same way the UI clamps them, so a
#      hand-edited DB can't smuggle a 0-minute break into the timer.
