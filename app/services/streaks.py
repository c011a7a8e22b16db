"""
Streak / consistency engine.

Pure functions over a habit's completion history. Nothing here touches the
database or reads the clock: callers pass `today` explicitly.

Definitions
-----------
  streak        consecutive calendar days, ending at the most recent entry,
                whose entries are all completed and exactly 1 day apart.
  consistency   completed entries in the trailing 30 days (today inclusive)
                as a percentage of a frequency-specific target, capped at 100.

Known simplification: the "broken streak" check only looks at the daily gap
between the most recent entry and today, regardless of habit frequency. A
weekly habit missed for two days therefore reports streak 0.

Public API
----------
compute_current_streak(history, today)          -> int
compute_all_streaks(history)                    -> list[int]
longest_streak(history)                         -> int
compute_consistency(history, frequency, today)  -> int   (0–100)
completion_rate(history)                        -> float (0–100, 2 dp)
completions_by_day_of_week(history)             -> dict[str, int]
completions_by_time_of_day(history)             -> dict[str, int]
recompute(history, previous_longest, today)     -> StreakSummary
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from app.services.completion_history import CompletionEntry


CONSISTENCY_WINDOW_DAYS = 30

_TARGET_COMPLETIONS = {
    "daily": 30,
    "weekly": 4,
    "monthly": 1,
}

WEEKDAYS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

# (bucket, first hour, last hour exclusive); night wraps midnight
_TIME_BUCKETS = (
    ("morning", 5, 12),
    ("afternoon", 12, 17),
    ("evening", 17, 21),
)


@dataclass
class StreakSummary:
    current: int
    longest: int


def _oldest_first(history: Iterable[CompletionEntry]) -> list[CompletionEntry]:
    return sorted(history, key=lambda e: e.when)


def _round_half_up(value: Decimal, places: str = "1") -> Decimal:
    return value.quantize(Decimal(places), rounding=ROUND_HALF_UP)


def _frequency_key(frequency) -> str:
    return frequency.value if hasattr(frequency, "value") else str(frequency)


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------

def compute_current_streak(history: Iterable[CompletionEntry], today: date) -> int:
    entries = _oldest_first(history)
    if not entries:
        return 0

    most_recent = entries[-1]
    gap_days = (today - most_recent.day).days
    if gap_days > 1 or (gap_days == 1 and not most_recent.completed):
        return 0

    streak = 0
    for i in range(len(entries) - 1, -1, -1):
        entry = entries[i]
        if not entry.completed:
            break
        if i < len(entries) - 1 and (entries[i + 1].day - entry.day).days != 1:
            break
        streak += 1
    return streak


def compute_all_streaks(history: Iterable[CompletionEntry]) -> list[int]:
    """Lengths of every run of consecutive completed days, oldest run first."""
    entries = _oldest_first(history)
    if not entries:
        return [0]

    streaks: list[int] = []
    running = 0
    for i, entry in enumerate(entries):
        if not entry.completed:
            running = 0
            continue
        running += 1
        is_last = i == len(entries) - 1
        if is_last:
            streaks.append(running)
            break
        nxt = entries[i + 1]
        if not nxt.completed or (nxt.day - entry.day).days != 1:
            streaks.append(running)
            running = 0
    return streaks


def longest_streak(history: Iterable[CompletionEntry]) -> int:
    return max(compute_all_streaks(history), default=0)


def recompute(
    history: Iterable[CompletionEntry],
    previous_longest: int,
    today: date,
) -> StreakSummary:
    """Derived streak fields after a history mutation. `longest` never decreases."""
    current = compute_current_streak(history, today)
    return StreakSummary(current=current, longest=max(previous_longest or 0, current))


# ---------------------------------------------------------------------------
# Rates
# ---------------------------------------------------------------------------

def compute_consistency(
    history: Iterable[CompletionEntry],
    frequency,
    today: date,
) -> int:
    window_start = today - timedelta(days=CONSISTENCY_WINDOW_DAYS - 1)
    completed = sum(
        1 for e in history if e.completed and window_start <= e.day <= today
    )
    target = _TARGET_COMPLETIONS.get(_frequency_key(frequency), _TARGET_COMPLETIONS["daily"])
    pct = min(Decimal(100), Decimal(completed) * 100 / Decimal(target))
    return int(_round_half_up(pct))


def completion_rate(history: Iterable[CompletionEntry]) -> float:
    entries = list(history)
    if not entries:
        return 0.0
    completed = sum(1 for e in entries if e.completed)
    pct = Decimal(completed) * 100 / Decimal(len(entries))
    return float(_round_half_up(pct, "0.01"))


# ---------------------------------------------------------------------------
# Breakdowns
# ---------------------------------------------------------------------------

def completions_by_day_of_week(history: Iterable[CompletionEntry]) -> dict[str, int]:
    counts = {name: 0 for name in WEEKDAYS}
    for e in history:
        if e.completed:
            # date.weekday(): Monday == 0
            counts[WEEKDAYS[(e.when.weekday() + 1) % 7]] += 1
    return counts


def _time_bucket(hour: int) -> str:
    for name, start, end in _TIME_BUCKETS:
        if start <= hour < end:
            return name
    return "night"


def completions_by_time_of_day(history: Iterable[CompletionEntry]) -> dict[str, int]:
    counts = {"morning": 0, "afternoon": 0, "evening": 0, "night": 0}
    for e in history:
        if e.completed:
            counts[_time_bucket(e.when.hour)] += 1
    return counts
