"""
Leveling table — weekly focus minutes mapped to a tier name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

# (level name, minutes of focus per week needed), ascending
LEVELS: List[Tuple[str, int]] = [
    ("Bronze", 0),
    ("Silver", 480),      # 8 hours
    ("Gold", 900),        # 15 hours
    ("Platinum", 1500),   # 25 hours
    ("Diamond", 2400),    # 40 hours
    ("Master", 3600),     # 60 hours
]

LEVEL_NAMES = [name for name, _ in LEVELS]
DEFAULT_LEVEL = LEVELS[0][0]


@dataclass(frozen=True)
class LevelProgress:
    current_level: str
    current_threshold: int
    next_level: Optional[str]
    next_threshold: Optional[int]
    percent: int  # progress toward next_level, 100 at the top tier


def level_for(minutes_this_week: int) -> str:
    """Highest tier whose threshold does not exceed the weekly total."""
    current = DEFAULT_LEVEL
    for name, threshold in LEVELS:
        if minutes_this_week >= threshold:
            current = name
    return current


def level_progress(minutes_this_week: int) -> LevelProgress:
    index = LEVEL_NAMES.index(level_for(minutes_this_week))
    name, threshold = LEVELS[index]
    if index == len(LEVELS) - 1:
        return LevelProgress(name, threshold, None, None, 100)

    next_name, next_threshold = LEVELS[index + 1]
    span = next_threshold - threshold
    done = max(0, minutes_this_week - threshold)
    return LevelProgress(name, threshold, next_name, next_threshold, int(done * 100 // span))
