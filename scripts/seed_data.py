"""
Seed Data Generator — creates a realistic 30-day snapshot for development.

The history is produced by replaying intents through the real store, so
streaks, levels and the session log are exactly what the app would have
recorded.

Run: python scripts/seed_data.py [--days 30] [--db path/to/focusforge.db]
"""

import argparse
import logging
import random
import sys
from datetime import datetime, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from focusforge.config import load_config
from focusforge.data import migration
from focusforge.data.database import Database
from focusforge.data.models import Priority, TimerMode, WeeklyReview
from focusforge.data.repository import Repository
from focusforge.engine.intents import (
    AddNote, AddTask, CompleteSession, LogDistraction, SaveReview, ToggleTask,
)
from focusforge.engine.store import Store
from focusforge.engine.timeutils import MS_PER_MINUTE, generate_id, to_ms, week_start_key
from focusforge.services.analytics import DISTRACTION_CATEGORIES
from focusforge.services.reconciler import reconcile

logger = logging.getLogger(__name__)

TASKS = [
    ("Finish linear algebra problem set", Priority.HIGH),
    ("Review pull requests", Priority.MEDIUM),
    ("Draft blog post outline", Priority.LOW),
    ("Read chapter 4 of the textbook", Priority.MEDIUM),
    ("Fix flaky login test", Priority.HIGH),
    ("Clean up notes folder", Priority.LOW),
]

NOTES = [
    ("Lecture 12 recap", "Eigenvalues: det(A - λI) = 0. Practice 5.3 #4-10."),
    ("Ideas", "Pomodoro + spaced repetition for flashcards?"),
]


def build_store(days: int, rng: random.Random) -> Store:
    store = Store()
    start_day = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=days)

    for title, priority in TASKS:
        store.dispatch(AddTask(title=title, priority=priority, now=to_ms(start_day)))
    for task in store.state.tasks[: len(TASKS) // 2]:
        store.dispatch(ToggleTask(task.id))
    for title, content in NOTES:
        store.dispatch(AddNote(title=title, content=content, now=to_ms(start_day)))

    for offset in range(days):
        day = start_day + timedelta(days=offset)
        # skip roughly one day in five to break the streak now and then
        if rng.random() < 0.2:
            continue
        cursor = day + timedelta(hours=rng.randint(8, 14), minutes=rng.randint(0, 59))
        for _ in range(rng.randint(1, 6)):
            cursor += timedelta(minutes=25)
            store.dispatch(CompleteSession(mode=TimerMode.FOCUS, duration=25, now=to_ms(cursor)))
            cursor += timedelta(minutes=5)
            store.dispatch(CompleteSession(mode=TimerMode.SHORT_BREAK, duration=5, now=to_ms(cursor)))
            if rng.random() < 0.3:
                store.dispatch(LogDistraction(
                    category=rng.choice(DISTRACTION_CATEGORIES),
                    now=to_ms(cursor) - 10 * MS_PER_MINUTE,
                ))

    last_week = to_ms(datetime.now() - timedelta(days=7))
    store.dispatch(SaveReview(WeeklyReview(
        id=generate_id(),
        week_start_date=week_start_key(last_week),
        wins="Kept a 4-day streak and finished the problem set early.",
        distractions="Phone notifications during afternoon sessions.",
        what_worked="Morning sessions before checking messages.",
        improvement_plan="Phone in another room for the first two sessions.",
        created_at=last_week,
    )))
    return store


def seed(days: int = 30, db_path: Path = None, seed_value: int = 42) -> None:
    config = load_config()
    db = Database(db_path or Path(config["db_path"]))
    db.connect()
    repo = Repository(db.conn)

    store = build_store(days, random.Random(seed_value))
    state = reconcile(store.state, to_ms(datetime.now()))
    repo.save_snapshot(config["snapshot_key"], migration.dumps(state))

    print(f"Seeded {len(state.sessions)} sessions, {len(state.tasks)} tasks, "
          f"{len(state.distractions)} distractions over {days} days.")
    print(f"Streak: {state.stats.streak_days} days, level: {state.stats.current_level}")
    db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Write a development snapshot.")
    parser.add_argument("--days", type=int, default=30)
    parser.add_argument("--db", type=Path, default=None)
    args = parser.parse_args()
    logging.basicConfig(level=logging.WARNING)
    seed(days=args.days, db_path=args.db)
