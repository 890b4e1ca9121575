"""
Analytics — read-only views derived from the snapshot.

Nothing here is stored. Every figure is recomputed from the session log,
tasks, distractions and reviews against a reference ``now``, so the
dashboard can never disagree with the data it summarizes.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from focusforge.data.models import (
    AppState, DistractionEvent, PomodoroSession, Priority, PriorityFilter, Task,
    TimerMode, WeeklyReview,
)
from focusforge.engine.leveling import LevelProgress, level_progress
from focusforge.engine.timeutils import day_key, last_n_day_keys, week_start_key

DISTRACTION_CATEGORIES = ["Phone", "Social Media", "Noise", "Hunger", "Daydreaming", "Other"]


@dataclass(frozen=True)
class DayTotal:
    date_key: str
    label: str      # short weekday name, e.g. "Mon"
    minutes: int


@dataclass(frozen=True)
class AnalyticsSummary:
    weekly: List[DayTotal]
    most_productive: DayTotal
    average_focus_minutes: int
    completion_rate: int
    pending_tasks: int
    distraction_total: int
    distractions_by_category: List[Tuple[str, int]]
    level: LevelProgress


def _focus_arrays(sessions: Iterable[PomodoroSession]) -> Tuple[np.ndarray, np.ndarray]:
    """Day keys and minutes of focus sessions as parallel arrays."""
    focus = [s for s in sessions if s.type == TimerMode.FOCUS]
    keys = np.array([day_key(s.end_time) for s in focus], dtype=object)
    minutes = np.array([s.duration_minutes for s in focus], dtype=np.int64)
    return keys, minutes


def weekly_focus_breakdown(sessions: Sequence[PomodoroSession], now: int) -> List[DayTotal]:
    """Focus minutes for each of the last 7 calendar days, oldest first."""
    keys, minutes = _focus_arrays(sessions)
    result = []
    for key in last_n_day_keys(now, 7):
        total = int(minutes[keys == key].sum()) if len(minutes) else 0
        label = date.fromisoformat(key).strftime("%a")
        result.append(DayTotal(key, label, total))
    return result


def most_productive_day(weekly: Sequence[DayTotal]) -> DayTotal:
    """Day with the most focus; the earliest wins a tie, blank when all zero."""
    best = DayTotal("", "", 0)
    for day in weekly:
        if day.minutes > best.minutes:
            best = day
    return best


def average_focus_duration(sessions: Sequence[PomodoroSession]) -> int:
    _, minutes = _focus_arrays(sessions)
    if not len(minutes):
        return 0
    return int(round(float(np.mean(minutes))))


def task_completion_rate(tasks: Sequence[Task]) -> int:
    """Percentage of completed tasks, 0 when there are none."""
    if not tasks:
        return 0
    done = np.fromiter((t.is_completed for t in tasks), dtype=bool, count=len(tasks))
    return int(round(100.0 * done.mean()))


def pending_task_count(tasks: Sequence[Task]) -> int:
    return sum(1 for t in tasks if not t.is_completed)


def visible_tasks(tasks: Sequence[Task], priority_filter: str = PriorityFilter.ALL_TASKS) -> List[Task]:
    """
    Tasks as the task list shows them: filtered by priority, incomplete
    first, then high → medium → low. Ties keep insertion order.
    """
    if priority_filter != PriorityFilter.ALL_TASKS:
        tasks = [t for t in tasks if t.priority == priority_filter]
    return sorted(
        tasks,
        key=lambda t: (t.is_completed, Priority.ORDER.get(t.priority, len(Priority.ORDER))),
    )


def distraction_counts(distractions: Sequence[DistractionEvent]) -> List[Tuple[str, int]]:
    """(category, count) pairs, most frequent first."""
    return Counter(d.category for d in distractions).most_common()


def current_week_start(now: int) -> str:
    return week_start_key(now)


def available_review_weeks(reviews: Sequence[WeeklyReview], now: int) -> List[str]:
    """Week keys with a review plus the current week, newest first."""
    weeks = {current_week_start(now)} | {r.week_start_date for r in reviews}
    return sorted(weeks, reverse=True)


def find_review(reviews: Sequence[WeeklyReview], week_key: str) -> Optional[WeeklyReview]:
    for review in reviews:
        if review.week_start_date == week_key:
            return review
    return None


def summarize(state: AppState, now: int) -> AnalyticsSummary:
    weekly = weekly_focus_breakdown(state.sessions, now)
    return AnalyticsSummary(
        weekly=weekly,
        most_productive=most_productive_day(weekly),
        average_focus_minutes=average_focus_duration(state.sessions),
        completion_rate=task_completion_rate(state.tasks),
        pending_tasks=pending_task_count(state.tasks),
        distraction_total=len(state.distractions),
        distractions_by_category=distraction_counts(state.distractions),
        level=level_progress(state.stats.total_focus_minutes_this_week),
    )
