"""
Time and formatting helpers shared by the engine, services and UI.

Every timestamp in FocusForge is an integer count of milliseconds since the
epoch. Calendar-day keys are ISO dates (``YYYY-MM-DD``) in local time.
"""

from __future__ import annotations

import time
import uuid
from datetime import date, datetime, timedelta

MS_PER_MINUTE = 60 * 1000
MS_PER_DAY = 24 * 60 * MS_PER_MINUTE


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def generate_id() -> str:
    return uuid.uuid4().hex[:12]


def format_time(seconds: int) -> str:
    """Render a countdown as ``MM:SS`` (minutes are not wrapped at 60)."""
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def format_minutes(minutes: int) -> str:
    """Render a minute total as ``Xh Ym``."""
    hours, mins = divmod(max(0, int(minutes)), 60)
    return f"{hours}h {mins}m"


def to_datetime(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000)


def to_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def day_key(ms: int) -> str:
    """Calendar-day key for an epoch-ms timestamp."""
    return to_datetime(ms).date().isoformat()


def days_between(first_key: str, second_key: str) -> int:
    """Whole calendar days separating two day keys, ignoring order."""
    first = date.fromisoformat(first_key)
    second = date.fromisoformat(second_key)
    return abs((second - first).days)


def week_start_key(ms: int) -> str:
    """Day key of the Sunday that starts the calendar week containing ``ms``."""
    day = to_datetime(ms).date()
    # date.weekday(): Monday == 0 ... Sunday == 6
    return (day - timedelta(days=(day.weekday() + 1) % 7)).isoformat()


def last_n_day_keys(ms: int, n: int) -> list:
    """The ``n`` calendar-day keys ending on the day of ``ms``, oldest first."""
    today = to_datetime(ms).date()
    return [(today - timedelta(days=offset)).isoformat() for offset in range(n - 1, -1, -1)]
