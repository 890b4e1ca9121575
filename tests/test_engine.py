"""Unit tests for the engine (reducer, store, leveling, time helpers)."""

from dataclasses import replace
from datetime import datetime

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from focusforge.data.models import (
    Note, Priority, Theme, TimerMode, TimerSettings, UserStats, WeeklyReview, default_state,
)
from focusforge.engine.intents import (
    AddNote, AddTask, CompleteSession, DeleteNote, DeleteTask, InitState, Intent,
    LogDistraction, ResetTimer, SaveReview, SetMode, SetTaskPriorityFilter, Tick,
    ToggleTask, ToggleTheme, ToggleTimer, UpdateNote, UpdateSettings,
)
from focusforge.engine.leveling import LEVEL_NAMES, level_for, level_progress
from focusforge.engine.reducer import record_focus, reduce
from focusforge.engine.store import Store
from focusforge.engine.timeutils import (
    MS_PER_DAY, MS_PER_MINUTE, day_key, days_between, format_minutes, format_time,
    last_n_day_keys, to_ms, week_start_key,
)

# Tuesday 12 March 2024, 10:00 local time
NOW = to_ms(datetime(2024, 3, 12, 10, 0))


def at(day: int, hour: int = 10) -> int:
    return to_ms(datetime(2024, 3, day, hour, 0))


@pytest.fixture
def state():
    return default_state()


def complete_focus(state, now, duration=25):
    return reduce(state, CompleteSession(mode=TimerMode.FOCUS, duration=duration, now=now))


class TestTimeUtils:
    def test_format_time(self):
        assert format_time(1500) == "25:00"
        assert format_time(61) == "01:01"
        assert format_time(0) == "00:00"
        assert format_time(-4) == "00:00"
        assert format_time(120 * 60) == "120:00"

    def test_format_minutes(self):
        assert format_minutes(0) == "0h 0m"
        assert format_minutes(135) == "2h 15m"

    def test_day_key_is_local_date(self):
        assert day_key(at(12, 0)) == "2024-03-12"
        assert day_key(at(12, 23)) == "2024-03-12"

    def test_days_between(self):
        assert days_between("2024-03-11", "2024-03-12") == 1
        assert days_between("2024-03-12", "2024-03-11") == 1
        assert days_between("2024-02-28", "2024-03-01") == 2  # leap year

    def test_week_start_is_sunday(self):
        assert week_start_key(NOW) == "2024-03-10"
        assert week_start_key(at(10)) == "2024-03-10"
        assert week_start_key(at(16)) == "2024-03-10"
        assert week_start_key(at(17)) == "2024-03-17"

    def test_last_n_day_keys(self):
        keys = last_n_day_keys(NOW, 7)
        assert keys[0] == "2024-03-06"
        assert keys[-1] == "2024-03-12"
        assert len(keys) == 7


class TestLeveling:
    @pytest.mark.parametrize("minutes,level", [
        (0, "Bronze"), (479, "Bronze"), (480, "Silver"), (900, "Gold"),
        (1500, "Platinum"), (2400, "Diamond"), (3599, "Diamond"), (3600, "Master"),
        (10_000, "Master"),
    ])
    def test_level_for(self, minutes, level):
        assert level_for(minutes) == level

    def test_level_is_monotonic(self):
        previous = 0
        for minutes in range(0, 5000, 37):
            rank = LEVEL_NAMES.index(level_for(minutes))
            assert rank >= previous
            previous = rank

    def test_level_progress(self):
        p = level_progress(690)
        assert p.current_level == "Silver"
        assert p.next_level == "Gold"
        assert p.percent == 50

    def test_level_progress_top(self):
        p = level_progress(4000)
        assert p.next_level is None
        assert p.percent == 100


class TestTimer:
    def test_tick_decrements(self, state):
        assert reduce(state, Tick()).remaining_seconds == 1499

    def test_tick_floors_at_zero(self, state):
        s = replace(state, remaining_seconds=0, is_running=True)
        assert reduce(s, Tick()).remaining_seconds == 0

    def test_toggle(self, state):
        s = reduce(state, ToggleTimer())
        assert s.is_running is True
        assert reduce(s, ToggleTimer()).is_running is False

    def test_reset_is_idempotent(self, state):
        s = replace(state, remaining_seconds=12, is_running=True)
        once = reduce(s, ResetTimer())
        assert once.remaining_seconds == 1500
        assert once.is_running is False
        assert reduce(once, ResetTimer()) == once

    def test_set_mode_is_idempotent(self, state):
        once = reduce(state, SetMode(TimerMode.LONG_BREAK))
        assert once.timer_mode == TimerMode.LONG_BREAK
        assert once.remaining_seconds == 15 * 60
        assert once.is_running is False
        assert reduce(once, SetMode(TimerMode.LONG_BREAK)) == once

    def test_update_settings_keeps_remaining(self, state):
        s = replace(state, remaining_seconds=600, is_running=True)
        s = reduce(s, UpdateSettings(TimerSettings(focus_duration=50)))
        assert s.settings.focus_duration == 50
        assert s.remaining_seconds == 600
        assert s.is_running is True

    def test_reset_uses_new_settings(self, state):
        s = reduce(state, UpdateSettings(TimerSettings(focus_duration=50)))
        assert reduce(s, ResetTimer()).remaining_seconds == 3000


class TestCompleteSession:
    def test_focus_completion_moves_to_short_break(self, state):
        s = complete_focus(state, NOW)
        assert s.timer_mode == TimerMode.SHORT_BREAK
        assert s.remaining_seconds == 5 * 60
        assert s.is_running is True

    def test_break_completion_returns_to_focus(self, state):
        s = replace(state, timer_mode=TimerMode.LONG_BREAK)
        s = reduce(s, CompleteSession(mode=TimerMode.LONG_BREAK, duration=15, now=NOW))
        assert s.timer_mode == TimerMode.FOCUS
        assert s.remaining_seconds == 25 * 60
        assert s.is_running is True
        assert s.stats == state.stats

    def test_session_log_is_append_only(self, state):
        s = complete_focus(state, NOW)
        s = reduce(s, CompleteSession(mode=TimerMode.SHORT_BREAK, duration=5, now=NOW + 5 * MS_PER_MINUTE))
        assert [x.type for x in s.sessions] == [TimerMode.FOCUS, TimerMode.SHORT_BREAK]
        first = s.sessions[0]
        assert first.duration_minutes == 25
        assert first.end_time == NOW
        assert first.start_time == NOW - 25 * MS_PER_MINUTE

    def test_logged_duration_is_the_configured_one(self, state):
        s = reduce(state, UpdateSettings(TimerSettings(focus_duration=40)))
        s = complete_focus(s, NOW, duration=40)
        assert s.sessions[-1].duration_minutes == 40
        assert s.stats.total_focus_minutes_today == 40

    def test_focus_updates_totals_and_level(self, state):
        s = replace(state, stats=UserStats(total_focus_minutes_this_week=470))
        s = complete_focus(s, NOW)
        assert s.stats.total_focus_minutes_today == 25
        assert s.stats.total_focus_minutes_this_week == 495
        assert s.stats.current_level == "Silver"


class TestStreak:
    def test_first_session_starts_streak(self, state):
        assert complete_focus(state, NOW).stats.streak_days == 1

    def test_same_day_does_not_double_count(self, state):
        s = complete_focus(state, at(12, 9))
        s = complete_focus(s, at(12, 15))
        assert s.stats.streak_days == 1
        assert s.stats.last_study_date == "2024-03-12"

    def test_next_day_increments(self, state):
        s = complete_focus(state, at(11, 22))
        s = complete_focus(s, at(12, 7))
        assert s.stats.streak_days == 2

    def test_gap_resets(self, state):
        s = complete_focus(state, at(9))
        s = complete_focus(s, at(10))
        s = complete_focus(s, at(12))
        assert s.stats.streak_days == 1

    def test_record_focus_directly(self):
        stats = UserStats(streak_days=6, last_study_date="2024-03-11")
        updated = record_focus(stats, 25, "2024-03-12")
        assert updated.streak_days == 7
        assert updated.last_study_date == "2024-03-12"

    def test_xp_passes_through(self):
        assert record_focus(UserStats(xp=12), 25, "2024-03-12").xp == 12


class TestTasks:
    def test_add_toggle_delete(self, state):
        s = reduce(state, AddTask(title="Read", priority=Priority.HIGH, new_id="t1", now=NOW))
        task = s.tasks[0]
        assert (task.id, task.title, task.priority, task.is_completed, task.created_at) == \
            ("t1", "Read", Priority.HIGH, False, NOW)
        s = reduce(s, ToggleTask("t1"))
        assert s.tasks[0].is_completed is True
        s = reduce(s, DeleteTask("t1"))
        assert s.tasks == ()

    def test_tasks_keep_insertion_order(self, state):
        s = reduce(state, AddTask(title="a", priority=Priority.LOW, new_id="a"))
        s = reduce(s, AddTask(title="b", priority=Priority.HIGH, new_id="b"))
        assert [t.id for t in s.tasks] == ["a", "b"]

    def test_missing_ids_are_no_ops(self, state):
        s = reduce(state, AddTask(title="a", priority=Priority.LOW, new_id="a"))
        assert reduce(s, ToggleTask("zzz")) == s
        assert reduce(s, DeleteTask("zzz")) == s
        assert reduce(s, DeleteNote("zzz")) == s

    def test_priority_filter(self, state):
        s = reduce(state, SetTaskPriorityFilter(Priority.LOW))
        assert s.task_priority_filter == Priority.LOW


class TestNotes:
    def test_add_note_prepends(self, state):
        s = reduce(state, AddNote(title="one", new_id="n1", now=NOW))
        s = reduce(s, AddNote(title="two", new_id="n2", now=NOW + 1))
        assert [n.id for n in s.notes] == ["n2", "n1"]
        assert s.notes[0].created_at == s.notes[0].updated_at == NOW + 1

    def test_update_moves_note_to_front(self, state):
        s = reduce(state, AddNote(title="old", new_id="n1", now=NOW))
        s = reduce(s, AddNote(title="new", new_id="n2", now=NOW + 1000))
        edited = replace(s.notes[1], content="edited")
        s = reduce(s, UpdateNote(note=edited, now=NOW + 5000))
        assert [n.id for n in s.notes] == ["n1", "n2"]
        assert s.notes[0].content == "edited"
        assert s.notes[0].updated_at == NOW + 5000
        assert s.notes[0].created_at == NOW

    def test_update_unknown_note_is_no_op(self, state):
        s = reduce(state, AddNote(title="a", new_id="n1", now=NOW))
        ghost = Note("ghost", "x", "", 0, 0)
        assert reduce(s, UpdateNote(note=ghost, now=NOW + 1)).notes == s.notes

    def test_update_unknown_note_keeps_unsorted_order(self, state):
        # oldest edit first: a re-sort would swap these
        notes = (Note("n1", "a", "", 0, NOW), Note("n2", "b", "", 0, NOW + 1000))
        s = replace(state, notes=notes)
        ghost = Note("ghost", "x", "", 0, 0)
        assert reduce(s, UpdateNote(note=ghost, now=NOW + 5000)) is s

    def test_delete_note(self, state):
        s = reduce(state, AddNote(title="a", new_id="n1", now=NOW))
        assert reduce(s, DeleteNote("n1")).notes == ()


class TestReviewsAndMisc:
    def test_save_review_upserts_by_week(self, state):
        first = WeeklyReview("r1", "2024-03-10", wins="a")
        second = WeeklyReview("r2", "2024-03-10", wins="b")
        other = WeeklyReview("r3", "2024-03-03", wins="c")
        s = reduce(state, SaveReview(first))
        s = reduce(s, SaveReview(other))
        s = reduce(s, SaveReview(second))
        assert len(s.reviews) == 2
        assert s.reviews[0].wins == "b"
        assert s.reviews[1].week_start_date == "2024-03-03"

    def test_log_distraction(self, state):
        s = reduce(state, LogDistraction(category="Phone", note="texts", new_id="d1", now=NOW))
        event = s.distractions[0]
        assert (event.id, event.category, event.note, event.timestamp) == ("d1", "Phone", "texts", NOW)

    def test_toggle_theme(self, state):
        s = reduce(state, ToggleTheme())
        assert s.theme == Theme.DARK
        assert reduce(s, ToggleTheme()).theme == Theme.LIGHT

    def test_init_state_replaces_everything(self, state):
        snapshot = replace(default_state(), remaining_seconds=7, theme=Theme.DARK)
        assert reduce(state, InitState(snapshot)) is snapshot

    def test_unknown_intent_is_ignored(self, state):
        class Bogus(Intent):
            pass
        assert reduce(state, Bogus()) is state

    def test_reducer_never_mutates_input(self, state):
        before = replace(state)
        reduce(state, AddTask(title="x", priority=Priority.LOW))
        complete_focus(state, NOW)
        assert state == before

    def test_intents_stamp_id_and_time(self):
        a = AddTask(title="x", priority=Priority.LOW)
        b = AddTask(title="x", priority=Priority.LOW)
        assert a.new_id != b.new_id
        assert a.now > 0


class TestStore:
    def test_dispatch_updates_state(self):
        store = Store()
        store.dispatch(ToggleTimer())
        assert store.state.is_running is True

    def test_listener_gets_transition(self):
        store = Store()
        seen = []
        store.subscribe(seen.append)
        store.dispatch(SetMode(TimerMode.SHORT_BREAK))
        t = seen[0]
        assert t.previous.timer_mode == TimerMode.FOCUS
        assert t.current.timer_mode == TimerMode.SHORT_BREAK
        assert t.changed and t.mode_changed
        assert isinstance(t.intent, SetMode)

    def test_unsubscribe(self):
        store = Store()
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        store.dispatch(Tick())
        assert seen == []

    def test_dispatch_from_listener_is_queued(self):
        store = Store()
        order = []

        def listener(t):
            order.append(t.intent.tag)
            if isinstance(t.intent, ToggleTimer):
                store.dispatch(Tick())
                # the queued Tick hasn't run yet
                assert store.state.remaining_seconds == 1500

        store.subscribe(listener)
        store.dispatch(ToggleTimer())
        assert order == ["ToggleTimer", "Tick"]
        assert store.state.remaining_seconds == 1499

    def test_failing_listener_does_not_block_others(self, caplog):
        store = Store()
        seen = []

        def broken(t):
            raise RuntimeError("boom")

        store.subscribe(broken)
        store.subscribe(seen.append)
        store.dispatch(ToggleTimer())
        assert len(seen) == 1
        assert store.state.is_running is True
        assert "boom" in caplog.text

    def test_reinit_with_same_snapshot_is_unchanged(self):
        store = Store()
        seen = []
        store.subscribe(seen.append)
        store.dispatch(Tick())
        store.dispatch(InitState(store.state))
        assert seen[-1].changed is False


class TestEndToEnd:
    def test_completed_high_priority_task_sorts_after_open_tasks(self):
        from focusforge.services.analytics import visible_tasks

        store = Store()
        store.dispatch(AddTask(title="low", priority=Priority.LOW, new_id="low"))
        store.dispatch(AddTask(title="urgent", priority=Priority.HIGH, new_id="urgent"))
        store.dispatch(AddTask(title="medium", priority=Priority.MEDIUM, new_id="med"))
        assert [t.id for t in visible_tasks(store.state.tasks)] == ["urgent", "med", "low"]

        store.dispatch(ToggleTask("urgent"))
        ordered = visible_tasks(store.state.tasks)
        assert [t.id for t in ordered] == ["med", "low", "urgent"]
        assert ordered[-1].is_completed is True

    def test_full_pomodoro_cycle(self):
        store = Store()
        store.dispatch(ToggleTimer())
        store.dispatch(CompleteSession(mode=TimerMode.FOCUS, duration=25, now=NOW))
        store.dispatch(CompleteSession(mode=TimerMode.SHORT_BREAK, duration=5,
                                       now=NOW + 5 * MS_PER_MINUTE))
        s = store.state
        assert s.timer_mode == TimerMode.FOCUS
        assert s.is_running is True
        assert len(s.sessions) == 2
        assert s.stats.streak_days == 1
        store.dispatch(CompleteSession(mode=TimerMode.FOCUS, duration=25, now=NOW + MS_PER_DAY))
        assert store.state.stats.streak_days == 2
