"""
Tests for the date-keyed completion history.
"""
from datetime import date, datetime, timedelta, timezone

from app.services.completion_history import CompletionEntry, CompletionHistory
from app.services.streaks import completions_by_time_of_day


def _ts(y, m, d, h=9):
    return datetime(y, m, d, h, 0, tzinfo=timezone.utc)


class TestUpsert:
    def test_new_day_appends(self):
        h = CompletionHistory()
        r = h.upsert(_ts(2026, 10, 18), True, "done")
        assert r.created is True
        assert r.completed_delta == 1
        assert len(h) == 1

    def test_new_incomplete_day_has_no_delta(self):
        r = CompletionHistory().upsert(_ts(2026, 10, 18), False)
        assert r.created is True
        assert r.completed_delta == 0

    def test_same_day_amends_not_appends(self):
        h = CompletionHistory()
        h.upsert(_ts(2026, 10, 18, 7), False)
        r = h.upsert(_ts(2026, 10, 18, 22), True)
        assert r.created is False
        assert r.previously_completed is False
        assert r.completed_delta == 1
        assert len(h) == 1
        assert h.get(date(2026, 10, 18)).completed is True

    def test_true_to_false_is_negative_delta(self):
        h = CompletionHistory()
        h.upsert(_ts(2026, 10, 18), True)
        assert h.upsert(_ts(2026, 10, 18), False).completed_delta == -1

    def test_unchanged_flag_has_no_delta(self):
        h = CompletionHistory()
        h.upsert(_ts(2026, 10, 18), True)
        assert h.upsert(_ts(2026, 10, 18), True).completed_delta == 0

    def test_amend_keeps_notes_when_omitted(self):
        h = CompletionHistory()
        h.upsert(_ts(2026, 10, 18), True, "first")
        h.upsert(_ts(2026, 10, 18), False)
        assert h.get(date(2026, 10, 18)).notes == "first"

    def test_amend_replaces_notes_when_given(self):
        h = CompletionHistory()
        h.upsert(_ts(2026, 10, 18), True, "first")
        h.upsert(_ts(2026, 10, 18), False, "second")
        assert h.get(date(2026, 10, 18)).notes == "second"

    def test_miss_then_completion_takes_completion_time(self):
        h = CompletionHistory()
        h.upsert(_ts(2026, 10, 18, 7), False)
        h.upsert(_ts(2026, 10, 18, 22), True)
        assert h.get(date(2026, 10, 18)).when == _ts(2026, 10, 18, 22)
        assert completions_by_time_of_day(h) == {
            "morning": 0, "afternoon": 0, "evening": 0, "night": 1,
        }

    def test_repeat_completion_keeps_first_time(self):
        h = CompletionHistory()
        h.upsert(_ts(2026, 10, 18, 7), True)
        h.upsert(_ts(2026, 10, 18, 22), True)
        assert h.get(date(2026, 10, 18)).when == _ts(2026, 10, 18, 7)

    def test_naive_timestamp_treated_as_utc(self):
        h = CompletionHistory()
        r = h.upsert(datetime(2026, 10, 18, 23, 30), True)
        assert r.entry.when.tzinfo == timezone.utc
        assert r.entry.day == date(2026, 10, 18)

    def test_offset_timestamp_converted_to_utc_day(self):
        # 01:00 at +02:00 is 23:00 UTC the previous day
        when = datetime(2026, 10, 19, 1, 0, tzinfo=timezone(timedelta(hours=2)))
        r = CompletionHistory().upsert(when, True)
        assert r.entry.day == date(2026, 10, 18)


class TestJson:
    def test_to_json_is_most_recent_first(self):
        h = CompletionHistory()
        h.upsert(_ts(2026, 10, 10), True)
        h.upsert(_ts(2026, 10, 18), False)
        h.upsert(_ts(2026, 10, 14), True, "mid")
        days = [item["date"][:10] for item in h.to_json()]
        assert days == ["2026-10-18", "2026-10-14", "2026-10-10"]

    def test_notes_omitted_when_absent(self):
        h = CompletionHistory()
        h.upsert(_ts(2026, 10, 10), True)
        assert "notes" not in h.to_json()[0]

    def test_from_json_reads_stored_shape(self):
        raw = [
            {"date": "2026-10-18T09:00:00+00:00", "completed": True, "notes": "ok"},
            {"date": "2026-10-17T09:00:00+00:00", "completed": False},
        ]
        h = CompletionHistory.from_json(raw)
        assert len(h) == 2
        assert h.get(date(2026, 10, 18)).notes == "ok"
        assert h.get(date(2026, 10, 17)).completed is False

    def test_from_json_none(self):
        assert len(CompletionHistory.from_json(None)) == 0

    def test_duplicate_days_in_stored_data_collapse(self):
        raw = [
            {"date": "2026-10-18T08:00:00+00:00", "completed": False},
            {"date": "2026-10-18T20:00:00+00:00", "completed": True},
        ]
        assert len(CompletionHistory.from_json(raw)) == 1

    def test_entry_from_plain_date(self):
        e = CompletionEntry.from_dict({"date": date(2026, 10, 18), "completed": True})
        assert e.day == date(2026, 10, 18)
        assert e.when.tzinfo == timezone.utc
