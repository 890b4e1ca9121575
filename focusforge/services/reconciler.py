"""
Persistence Reconciler — loads the saved snapshot on start and writes it
back after every transition.

Cached stats are never trusted on load: time has passed since the last save,
possibly across a day or week boundary, so today's and this week's totals
are rebuilt from the session log against the current clock.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import replace
from typing import Callable, Iterable, Optional

from focusforge.data import migration
from focusforge.data.migration import SnapshotError
from focusforge.data.models import AppState, PomodoroSession, Theme, TimerMode, default_state
from focusforge.data.repository import Repository
from focusforge.engine.intents import InitState
from focusforge.engine.leveling import level_for
from focusforge.engine.store import Store, Transition
from focusforge.engine.timeutils import MS_PER_DAY, day_key, now_ms

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_KEY = "focusforge-data"
CORRUPT_SUFFIX = ".corrupt"
WEEK_WINDOW_MS = 7 * MS_PER_DAY


def focus_minutes_on_day(sessions: Iterable[PomodoroSession], now: int) -> int:
    """Focus minutes of sessions that ended on the calendar day of ``now``."""
    today = day_key(now)
    return sum(
        s.duration_minutes for s in sessions
        if s.type == TimerMode.FOCUS and day_key(s.end_time) == today
    )


def focus_minutes_in_window(sessions: Iterable[PomodoroSession], now: int,
                            window_ms: int = WEEK_WINDOW_MS) -> int:
    """Focus minutes of sessions that ended within the trailing window."""
    cutoff = now - window_ms
    return sum(
        s.duration_minutes for s in sessions
        if s.type == TimerMode.FOCUS and s.end_time > cutoff
    )


def reconcile(state: AppState, now: int) -> AppState:
    """Rebuild the time-dependent stats from the log and force the timer paused."""
    week = focus_minutes_in_window(state.sessions, now)
    stats = replace(
        state.stats,
        total_focus_minutes_today=focus_minutes_on_day(state.sessions, now),
        total_focus_minutes_this_week=week,
        current_level=level_for(week),
    )
    return replace(state, is_running=False, stats=stats)


class Reconciler:
    """Bridges the Store and the Repository."""

    def __init__(
        self,
        repo: Repository,
        store: Store,
        key: str = DEFAULT_SNAPSHOT_KEY,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.repo = repo
        self.store = store
        self.key = key
        self.clock = clock
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ── Startup ─────────────────────────────────────────────────────────────

    def load(self, prefers_dark: bool = False) -> AppState:
        """Build the startup snapshot and hand it to the store via InitState."""
        preferred_theme = Theme.DARK if prefers_dark else Theme.LIGHT
        defaults = default_state(theme=preferred_theme)
        snapshot = self._read_snapshot(defaults)

        if snapshot is None:
            logger.info("No saved state; starting fresh (theme=%s).", preferred_theme)
            state = defaults
        else:
            state = reconcile(snapshot, self.clock())
            logger.info(
                "Loaded %d sessions, %d tasks, %d notes; today=%d min, week=%d min (%s).",
                len(state.sessions), len(state.tasks), len(state.notes),
                state.stats.total_focus_minutes_today,
                state.stats.total_focus_minutes_this_week,
                state.stats.current_level,
            )

        self.store.dispatch(InitState(snapshot=state))
        return self.store.state

    def _read_snapshot(self, defaults: AppState) -> Optional[AppState]:
        try:
            raw = self.repo.load_snapshot(self.key)
        except sqlite3.Error as e:
            logger.warning("Could not read saved state (%s); using defaults.", e)
            return None
        if raw is None:
            return None
        try:
            return migration.loads(raw, defaults)
        except SnapshotError as e:
            logger.warning("Saved state is malformed (%s); using defaults.", e)
            self._keep_corrupt_copy(raw)
            return None

    def _keep_corrupt_copy(self, raw: str) -> None:
        # autosave replaces the stored blob on the next transition
        backup_key = f"{self.key}{CORRUPT_SUFFIX}"
        try:
            self.repo.save_snapshot(backup_key, raw)
        except sqlite3.Error as e:
            logger.warning("Could not keep the malformed state (%s); it will be overwritten.", e)
            return
        logger.warning("Malformed state copied to %r; %r will be overwritten.", backup_key, self.key)

    # ── Autosave ────────────────────────────────────────────────────────────

    def start_autosave(self) -> None:
        """Write the full snapshot after every transition."""
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self._on_transition)

    def stop_autosave(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def save(self, state: Optional[AppState] = None) -> None:
        state = state if state is not None else self.store.state
        try:
            self.repo.save_snapshot(self.key, migration.dumps(state))
        except sqlite3.Error as e:
            logger.warning("Could not save state: %s", e)

    def _on_transition(self, transition: Transition) -> None:
        if transition.changed:
            self.save(transition.current)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Startup: read JSON from SQLite -> migrate/validate -> recompute
#   today/week totals from the raw session log -> pause the timer ->
#   dispatch InitState. Runtime: save the whole snapshot after each change.
#
# Key design decisions:
#   - Stats are a cache. If the app was closed on Sunday and reopened on
#     Tuesday, "today" must be 0, whatever the saved number says.
#   - "This week" is a trailing 7x24h window, not a calendar week. Weekly
#     reviews use Sunday-start weeks; the two definitions differ on purpose
#     and are documented in DESIGN.md.
#   - A paused timer is never resumed across a restart.
#
# Interviewer-friendly talking points:
#   1. The clock is injected (clock=now_ms), so the reconciliation tests
#      pin "now" and never depend on the real date.
#   2. Whole-snapshot writes: no diffing, last writer wins. With one writer
#      and a tiny snapshot that's the simplest correct thing.
