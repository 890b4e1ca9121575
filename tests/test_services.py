"""Unit tests for the service layer (reconciler, scheduler, analytics, config)."""

import json
import logging
import sqlite3
import pytest
from dataclasses import replace
from datetime import datetime
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from focusforge import config as app_config
from focusforge.data import migration
from focusforge.data.database import Database
from focusforge.data.models import (
    DistractionEvent, PomodoroSession, Priority, PriorityFilter, Task, Theme,
    TimerMode, TimerSettings, UserStats, WeeklyReview, default_state,
)
from focusforge.data.repository import Repository
from focusforge.engine.intents import (
    InitState, SetMode, ToggleTimer, UpdateSettings,
)
from focusforge.engine.store import Store
from focusforge.engine.timeutils import MS_PER_DAY, MS_PER_MINUTE, to_ms
from focusforge.services import analytics
from focusforge.services.reconciler import (
    CORRUPT_SUFFIX, Reconciler, focus_minutes_in_window, focus_minutes_on_day, reconcile,
)
from focusforge.services.scheduler import TimerScheduler

KEY = "focusforge-data"

# Tuesday 12 March 2024, 10:00 local time
NOW = to_ms(datetime(2024, 3, 12, 10, 0))


def at(day: int, hour: int = 9) -> int:
    return to_ms(datetime(2024, 3, day, hour, 0))


def focus(sid: str, end: int, minutes: int = 25) -> PomodoroSession:
    return PomodoroSession(sid, TimerMode.FOCUS, end - minutes * MS_PER_MINUTE, end, minutes)


@pytest.fixture
def repo():
    db = Database(db_path=Path(":memory:"))
    db.connect()
    yield Repository(db.conn)
    db.close()


# ── Reconciler ──────────────────────────────────────────────────────────────

class TestReconcile:
    def test_focus_minutes_on_day(self):
        sessions = [
            focus("a", at(11)), focus("b", at(12)),
            PomodoroSession("c", TimerMode.SHORT_BREAK, at(12), at(12) + 1, 5),
        ]
        assert focus_minutes_on_day(sessions, NOW) == 25

    def test_trailing_window_excludes_old_sessions(self):
        sessions = [focus("a", NOW - 7 * MS_PER_DAY), focus("b", NOW - 7 * MS_PER_DAY + 1)]
        assert focus_minutes_in_window(sessions, NOW) == 25

    def test_reconcile_scenario(self):
        persisted = replace(
            default_state(),
            is_running=True,
            sessions=(focus("y", at(11)), focus("t", at(12))),
            stats=UserStats(999, 999, 4, "2024-03-12", "Master", 3),
        )
        state = reconcile(persisted, NOW)
        assert state.stats.total_focus_minutes_today == 25
        assert state.stats.total_focus_minutes_this_week == 50
        assert state.stats.current_level == "Bronze"
        assert state.is_running is False
        # streak, last study date and xp pass through
        assert state.stats.streak_days == 4
        assert state.stats.last_study_date == "2024-03-12"
        assert state.stats.xp == 3

    def test_reconcile_after_a_gap_zeroes_today(self):
        persisted = replace(default_state(), sessions=(focus("old", at(1)),),
                            stats=UserStats(25, 25))
        state = reconcile(persisted, NOW)
        assert state.stats.total_focus_minutes_today == 0
        assert state.stats.total_focus_minutes_this_week == 0


class TestReconciler:
    def test_load_without_snapshot_uses_preferred_theme(self, repo):
        store = Store()
        state = Reconciler(repo, store, clock=lambda: NOW).load(prefers_dark=True)
        assert state.theme == Theme.DARK
        assert store.state.sessions == ()

    def test_load_reconciles_saved_snapshot(self, repo):
        saved = replace(
            default_state(theme=Theme.LIGHT),
            is_running=True,
            sessions=(focus("y", at(11)), focus("t", at(12))),
        )
        repo.save_snapshot(KEY, migration.dumps(saved))
        store = Store()
        Reconciler(repo, store, clock=lambda: NOW).load(prefers_dark=True)
        s = store.state
        assert s.stats.total_focus_minutes_today == 25
        assert s.stats.total_focus_minutes_this_week == 50
        assert s.is_running is False
        # the persisted theme wins over the system preference
        assert s.theme == Theme.LIGHT

    def test_malformed_snapshot_falls_back_to_defaults(self, repo, caplog):
        repo.save_snapshot(KEY, json.dumps({"version": 1, "isRunning": "maybe"}))
        store = Store()
        with caplog.at_level(logging.WARNING):
            state = Reconciler(repo, store, clock=lambda: NOW).load()
        assert state == default_state()
        assert "malformed" in caplog.text

    def test_malformed_snapshot_is_kept_before_autosave(self, repo, caplog):
        raw = json.dumps({"version": 1, "sessions": [
            {"id": "s", "type": "focus", "startTime": 0, "endTime": 1, "durationMinutes": 0}]})
        repo.save_snapshot(KEY, raw)
        store = Store()
        reconciler = Reconciler(repo, store, clock=lambda: NOW)
        with caplog.at_level(logging.WARNING):
            reconciler.load()
        reconciler.start_autosave()
        store.dispatch(ToggleTimer())

        assert repo.load_snapshot(KEY + CORRUPT_SUFFIX) == raw
        assert repo.load_snapshot(KEY) != raw
        assert "will be overwritten" in caplog.text

    def test_unreadable_database_falls_back_to_defaults(self):
        conn = sqlite3.connect(":memory:")  # no kv_store table
        store = Store()
        state = Reconciler(Repository(conn), store, clock=lambda: NOW).load()
        assert state == default_state()

    def test_autosave_writes_after_each_change(self, repo):
        store = Store()
        reconciler = Reconciler(repo, store, clock=lambda: NOW)
        reconciler.load()
        reconciler.start_autosave()
        store.dispatch(SetMode(TimerMode.LONG_BREAK))
        saved = migration.loads(repo.load_snapshot(KEY), default_state())
        assert saved.timer_mode == TimerMode.LONG_BREAK

        reconciler.stop_autosave()
        store.dispatch(SetMode(TimerMode.FOCUS))
        saved = migration.loads(repo.load_snapshot(KEY), default_state())
        assert saved.timer_mode == TimerMode.LONG_BREAK

    def test_unchanged_transition_is_not_saved(self):
        class CountingRepo:
            def __init__(self):
                self.saves = 0

            def load_snapshot(self, key):
                return None

            def save_snapshot(self, key, payload):
                self.saves += 1

        fake = CountingRepo()
        store = Store()
        reconciler = Reconciler(fake, store, clock=lambda: NOW)
        reconciler.load()
        reconciler.start_autosave()
        store.dispatch(InitState(store.state))
        assert fake.saves == 0
        store.dispatch(ToggleTimer())
        assert fake.saves == 1

    def test_save_failure_is_logged(self, caplog):
        conn = sqlite3.connect(":memory:")
        conn.close()
        reconciler = Reconciler(Repository(conn), Store(), clock=lambda: NOW)
        with caplog.at_level(logging.WARNING):
            reconciler.save()
        assert "Could not save" in caplog.text


# ── Scheduler ───────────────────────────────────────────────────────────────

class TestTimerScheduler:
    def test_idle_store_leaves_timer_stopped(self, qapp):
        store = Store()
        scheduler = TimerScheduler(store)
        scheduler.attach()
        assert scheduler.is_active is False

    def test_start_and_pause(self, qapp):
        store = Store()
        scheduler = TimerScheduler(store)
        scheduler.attach()
        store.dispatch(ToggleTimer())
        assert scheduler.is_active is True
        store.dispatch(ToggleTimer())
        assert scheduler.is_active is False

    def test_timeout_dispatches_tick(self, qapp):
        store = Store()
        scheduler = TimerScheduler(store)
        scheduler.attach()
        store.dispatch(ToggleTimer())
        scheduler._on_timeout()
        scheduler._on_timeout()
        assert store.state.remaining_seconds == 1500 - 2
        scheduler.detach()

    def test_timeout_while_paused_does_nothing(self, qapp):
        store = Store()
        scheduler = TimerScheduler(store)
        scheduler.attach()
        scheduler._on_timeout()
        assert store.state.remaining_seconds == 1500
        assert scheduler.is_active is False

    def test_reaching_zero_completes_session_with_configured_duration(self, qapp):
        settings = TimerSettings(focus_duration=30, short_break_duration=7)
        store = Store(replace(default_state(), settings=settings,
                              remaining_seconds=1, is_running=True))
        scheduler = TimerScheduler(store)
        scheduler.attach()
        assert scheduler.is_active is True

        scheduler._on_timeout()
        s = store.state
        assert len(s.sessions) == 1
        assert s.sessions[0].type == TimerMode.FOCUS
        assert s.sessions[0].duration_minutes == 30
        assert s.timer_mode == TimerMode.SHORT_BREAK
        assert s.remaining_seconds == 7 * 60
        assert s.is_running is True
        # next phase auto-starts, so the timer is armed again
        assert scheduler.is_active is True
        scheduler.detach()

    def test_settings_change_while_running_keeps_timer_armed(self, qapp):
        store = Store()
        scheduler = TimerScheduler(store)
        scheduler.attach()
        store.dispatch(ToggleTimer())
        store.dispatch(UpdateSettings(TimerSettings(focus_duration=45)))
        assert scheduler.is_active is True
        assert store.state.remaining_seconds == 1500
        scheduler.detach()

    def test_mode_change_stops_timer(self, qapp):
        store = Store()
        scheduler = TimerScheduler(store)
        scheduler.attach()
        store.dispatch(ToggleTimer())
        store.dispatch(SetMode(TimerMode.LONG_BREAK))
        assert scheduler.is_active is False

    def test_detach_stops_following_store(self, qapp):
        store = Store()
        scheduler = TimerScheduler(store)
        scheduler.attach()
        scheduler.detach()
        store.dispatch(ToggleTimer())
        assert scheduler.is_active is False


# ── Analytics ───────────────────────────────────────────────────────────────

class TestAnalytics:
    def test_weekly_breakdown(self):
        sessions = [focus("a", at(12)), focus("b", at(12, 14), 50), focus("c", at(6)),
                    focus("old", at(5)),
                    PomodoroSession("br", TimerMode.LONG_BREAK, at(11), at(11), 15)]
        weekly = analytics.weekly_focus_breakdown(sessions, NOW)
        assert [d.date_key for d in weekly] == [
            "2024-03-06", "2024-03-07", "2024-03-08", "2024-03-09",
            "2024-03-10", "2024-03-11", "2024-03-12",
        ]
        assert [d.minutes for d in weekly] == [25, 0, 0, 0, 0, 0, 75]
        assert weekly[-1].label == "Tue"

    def test_weekly_breakdown_empty(self):
        weekly = analytics.weekly_focus_breakdown([], NOW)
        assert len(weekly) == 7
        assert all(d.minutes == 0 for d in weekly)

    def test_most_productive_day(self):
        weekly = analytics.weekly_focus_breakdown(
            [focus("a", at(7)), focus("b", at(9)), focus("c", at(9, 12)), focus("d", at(10)),
             focus("e", at(10, 12))], NOW)
        best = analytics.most_productive_day(weekly)
        # tie between the 9th and 10th: the earlier day wins
        assert best.date_key == "2024-03-09"
        assert best.minutes == 50

    def test_most_productive_day_all_zero(self):
        best = analytics.most_productive_day(analytics.weekly_focus_breakdown([], NOW))
        assert best.label == ""
        assert best.minutes == 0

    def test_average_focus_duration(self):
        assert analytics.average_focus_duration([]) == 0
        sessions = [focus("a", at(12), 25), focus("b", at(12), 50), focus("c", at(12), 26)]
        assert analytics.average_focus_duration(sessions) == 34

    def test_task_completion(self):
        tasks = [Task("1", "a", is_completed=True), Task("2", "b"), Task("3", "c")]
        assert analytics.task_completion_rate([]) == 0
        assert analytics.task_completion_rate(tasks) == 33
        assert analytics.pending_task_count(tasks) == 2

    def test_visible_tasks_sort_and_filter(self):
        tasks = [
            Task("1", "low", Priority.LOW),
            Task("2", "done-high", Priority.HIGH, is_completed=True),
            Task("3", "high", Priority.HIGH),
            Task("4", "medium", Priority.MEDIUM),
            Task("5", "high-2", Priority.HIGH),
        ]
        ordered = analytics.visible_tasks(tasks)
        assert [t.id for t in ordered] == ["3", "5", "4", "1", "2"]
        high = analytics.visible_tasks(tasks, Priority.HIGH)
        assert [t.id for t in high] == ["3", "5", "2"]
        assert analytics.visible_tasks(tasks, PriorityFilter.ALL_TASKS) == ordered

    def test_distraction_counts(self):
        events = [DistractionEvent(str(i), NOW, c) for i, c in
                  enumerate(["Phone", "Noise", "Phone", "Phone", "Noise", "Hunger"])]
        assert analytics.distraction_counts(events) == [("Phone", 3), ("Noise", 2), ("Hunger", 1)]

    def test_review_weeks(self):
        reviews = [WeeklyReview("r1", "2024-02-25"), WeeklyReview("r2", "2024-03-03")]
        assert analytics.current_week_start(NOW) == "2024-03-10"
        assert analytics.available_review_weeks(reviews, NOW) == [
            "2024-03-10", "2024-03-03", "2024-02-25"]
        assert analytics.available_review_weeks([], NOW) == ["2024-03-10"]
        assert analytics.find_review(reviews, "2024-03-03").id == "r2"
        assert analytics.find_review(reviews, "2024-03-10") is None

    def test_summarize(self):
        state = replace(
            default_state(),
            sessions=(focus("a", at(12)),),
            tasks=(Task("1", "a", is_completed=True), Task("2", "b")),
            distractions=(DistractionEvent("d", NOW, "Phone"),),
            stats=UserStats(total_focus_minutes_this_week=600),
        )
        summary = analytics.summarize(state, NOW)
        assert summary.weekly[-1].minutes == 25
        assert summary.most_productive.date_key == "2024-03-12"
        assert summary.average_focus_minutes == 25
        assert summary.completion_rate == 50
        assert summary.pending_tasks == 1
        assert summary.distraction_total == 1
        assert summary.distractions_by_category == [("Phone", 1)]
        assert summary.level.current_level == "Silver"


# ── Config ──────────────────────────────────────────────────────────────────

class TestConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert app_config.load_config(tmp_path / "nope.json") == app_config.DEFAULT_CONFIG

    def test_file_overrides_known_keys_only(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({"tick_interval_ms": 250, "bogus": 1}), encoding="utf-8")
        cfg = app_config.load_config(path)
        assert cfg["tick_interval_ms"] == 250
        assert "bogus" not in cfg
        assert cfg["snapshot_key"] == KEY

    def test_bad_json_gives_defaults(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text("{oops", encoding="utf-8")
        assert app_config.load_config(path) == app_config.DEFAULT_CONFIG

    def test_env_override(self, tmp_path, monkeypatch):
        path = tmp_path / "env.json"
        monkeypatch.setenv("FOCUSFORGE_CONFIG", str(path))
        assert app_config.config_path() == path

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "sub" / "cfg.json"
        cfg = dict(app_config.DEFAULT_CONFIG, log_level="DEBUG")
        app_config.save_config(cfg, path)
        assert app_config.load_config(path)["log_level"] == "DEBUG"
