"""
Completion history — the per-day record list stored on a Habit.

The JSON column holds a list of plain dicts; this module converts it to
CompletionEntry objects keyed by calendar day and back.

Public API
----------
CompletionEntry                      one day's record
CompletionHistory.from_json(raw)     -> CompletionHistory
CompletionHistory.upsert(...)        -> UpsertResult
CompletionHistory.to_json()          -> list[dict]   (most-recent-first)
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterator, Optional


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class CompletionEntry:
    when: datetime               # UTC; time part only matters for time-of-day stats
    completed: bool
    notes: Optional[str] = None

    @property
    def day(self) -> date:
        return self.when.date()

    @classmethod
    def from_dict(cls, raw: dict) -> "CompletionEntry":
        when = raw["date"]
        if isinstance(when, str):
            when = datetime.fromisoformat(when)
        elif isinstance(when, date) and not isinstance(when, datetime):
            when = datetime(when.year, when.month, when.day)
        return cls(
            when=as_utc(when),
            completed=bool(raw.get("completed", False)),
            notes=raw.get("notes"),
        )

    def to_dict(self) -> dict:
        out = {"date": self.when.isoformat(), "completed": self.completed}
        if self.notes is not None:
            out["notes"] = self.notes
        return out


@dataclass
class UpsertResult:
    entry: CompletionEntry
    created: bool
    previously_completed: Optional[bool]   # None when created

    @property
    def completed_delta(self) -> int:
        """Change in the number of completed entries caused by the upsert."""
        if self.created:
            return 1 if self.entry.completed else 0
        if self.previously_completed == self.entry.completed:
            return 0
        return 1 if self.entry.completed else -1


class CompletionHistory:
    """Mapping of calendar day -> CompletionEntry; one entry per day."""

    def __init__(self, entries: Optional[list[CompletionEntry]] = None):
        self._by_day: dict[date, CompletionEntry] = {}
        for entry in entries or []:
            self._by_day[entry.day] = entry

    @classmethod
    def from_json(cls, raw: Optional[list]) -> "CompletionHistory":
        return cls([CompletionEntry.from_dict(item) for item in raw or []])

    def __len__(self) -> int:
        return len(self._by_day)

    def __iter__(self) -> Iterator[CompletionEntry]:
        return iter(self.newest_first())

    def get(self, day: date) -> Optional[CompletionEntry]:
        return self._by_day.get(day)

    def newest_first(self) -> list[CompletionEntry]:
        return sorted(self._by_day.values(), key=lambda e: e.when, reverse=True)

    def upsert(
        self,
        when: datetime,
        completed: bool,
        notes: Optional[str] = None,
    ) -> UpsertResult:
        """
        Record `completed` for the calendar day of `when`.
        An existing entry for that day is amended in place (its notes are
        kept when `notes` is None); otherwise a new entry is added.
        An amend that turns a miss into a completion takes the new timestamp,
        so time-of-day stats reflect when the habit was actually done.
        """
        when = as_utc(when)
        existing = self._by_day.get(when.date())
        if existing is not None:
            previous = existing.completed
            if completed and not previous:
                existing.when = when
            existing.completed = completed
            if notes is not None:
                existing.notes = notes
            return UpsertResult(entry=existing, created=False, previously_completed=previous)

        entry = CompletionEntry(when=when, completed=completed, notes=notes)
        self._by_day[entry.day] = entry
        return UpsertResult(entry=entry, created=True, previously_completed=None)

    def to_json(self) -> list[dict]:
        return [e.to_dict() for e in self.newest_first()]
