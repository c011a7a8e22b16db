"""
Tests for the productivity metrics endpoints and service.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

import pytest

from app.models.productivity import ProductivityMetrics
from app.services import productivity
from app.services.productivity import adjust_habits_completed, get_daily_metrics


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


class TestDailyMetrics:
    def test_missing_day_returns_zeroed_placeholder(self, client, user_id):
        r = client.get("/productivity/2024-03-01")
        assert r.status_code == 200
        body = r.json()
        assert body["id"] is None
        assert body["user_id"] == user_id
        assert body["day"] == "2024-03-01"
        assert body["habits_completed"] == 0
        assert body["focus_time"] == 0
        assert body["day_rating"] is None

    def test_invalid_day_format(self, client):
        r = client.get("/productivity/not-a-date")
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"


class TestFocusTime:
    def test_focus_time_accumulates_and_rounds(self, client):
        r1 = client.post("/productivity/focus", json={"minutes": 25, "date": "2024-03-02"})
        assert r1.status_code == 200
        assert r1.json()["focus_time"] == 25
        r2 = client.post("/productivity/focus", json={"minutes": 14.6, "date": "2024-03-02"})
        assert r2.json()["focus_time"] == 40
        assert r2.json()["id"] == r1.json()["id"]

    def test_focus_defaults_to_today(self, client):
        r = client.post("/productivity/focus", json={"minutes": 10})
        assert r.json()["day"] == str(_today())

    @pytest.mark.parametrize("minutes", [0, -5, "ten"])
    def test_invalid_minutes_rejected(self, client, minutes):
        r = client.post("/productivity/focus", json={"minutes": minutes})
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"


class TestDayRating:
    def test_rating_set_and_overwritten(self, client):
        client.post("/productivity/rating", json={"rating": 2, "date": "2024-03-03"})
        r = client.post("/productivity/rating", json={"rating": 4.6, "date": "2024-03-03"})
        assert r.status_code == 200
        assert r.json()["day_rating"] == 5

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rating_out_of_range(self, client, rating):
        r = client.post("/productivity/rating", json={"rating": rating})
        assert r.status_code == 422


class TestRange:
    def test_range_sorted_ascending(self, client):
        for d in ("2024-04-03", "2024-04-01", "2024-04-02"):
            client.post("/productivity/focus", json={"minutes": 5, "date": d})
        r = client.get("/productivity?start_date=2024-04-01&end_date=2024-04-02")
        assert r.status_code == 200
        assert [m["day"] for m in r.json()] == ["2024-04-01", "2024-04-02"]

    def test_range_defaults_to_last_week(self, client):
        client.post("/productivity/focus", json={"minutes": 5})
        client.post(
            "/productivity/focus",
            json={"minutes": 5, "date": str(_today() - timedelta(days=30))},
        )
        days = [m["day"] for m in client.get("/productivity").json()]
        assert days == [str(_today())]

    def test_inverted_range_rejected(self, client):
        r = client.get("/productivity?start_date=2024-04-05&end_date=2024-04-01")
        assert r.status_code == 422
        assert r.json()["code"] == "INVALID_DATE_RANGE"

    def test_rows_are_per_user(self, client):
        client.post("/productivity/focus", json={"minutes": 5, "date": "2024-05-01"})
        other = client.get(
            "/productivity?start_date=2024-05-01&end_date=2024-05-01",
            headers={"X-User-Id": "another-user"},
        )
        assert other.json() == []


class TestGenerate:
    def _habit(self, client, title: str) -> int:
        return client.post("/habits", json={"title": title}).json()["id"]

    def test_generate_habit_rate_and_score(self, client):
        a = self._habit(client, "A")
        self._habit(client, "B")
        midnight = datetime.combine(_today(), time(0, 0), tzinfo=timezone.utc).isoformat()
        client.post(f"/habits/{a}/track", json={"date": midnight, "completed": True})

        r = client.post("/productivity/generate", json={})
        assert r.status_code == 200
        body = r.json()
        assert body["habit_completion_rate"] == 50.0
        assert body["productivity_score"] == 25.0
        assert body["habits_completed"] == 1

    def test_generate_without_habits(self, client):
        body = client.post("/productivity/generate", json={"date": "2024-06-01"}).json()
        assert body["habit_completion_rate"] == 0.0
        assert body["productivity_score"] == 0.0

    def test_habits_not_yet_started_are_excluded(self, client):
        client.post("/habits", json={"title": "Later", "start_date": "2030-01-01"})
        body = client.post("/productivity/generate", json={}).json()
        assert body["habit_completion_rate"] == 0.0


class TestCounterService:
    def test_decrement_floors_at_zero(self, db, user_id):
        day = date(2024, 7, 1)
        adjust_habits_completed(db, user_id, day, -1)
        db.commit()
        assert get_daily_metrics(db, user_id, day).habits_completed == 0

    def test_zero_delta_creates_nothing(self, db, user_id):
        adjust_habits_completed(db, user_id, date(2024, 7, 2), 0)
        db.commit()
        count = (
            db.query(ProductivityMetrics)
            .filter(ProductivityMetrics.user_id == user_id)
            .count()
        )
        assert count == 0

    def test_increments_accumulate(self, db, user_id):
        day = date(2024, 7, 3)
        adjust_habits_completed(db, user_id, day, 1)
        adjust_habits_completed(db, user_id, day, 1)
        db.commit()
        assert get_daily_metrics(db, user_id, day).habits_completed == 2

    def test_row_created_concurrently_is_reused(self, db, user_id, session_factory, monkeypatch):
        """
        Another request inserts the day's row after our lookup missed it.
        The insert must not fail on the unique constraint and the increment
        must land on the existing row.
        """
        day = date(2024, 7, 4)
        other = session_factory()
        try:
            adjust_habits_completed(other, user_id, day, 1)
            other.commit()
        finally:
            other.close()

        real_get = productivity._get
        calls = []

        def stale_first_lookup(session, uid, d):
            calls.append(d)
            if len(calls) == 1:
                return None
            return real_get(session, uid, d)

        monkeypatch.setattr(productivity, "_get", stale_first_lookup)
        adjust_habits_completed(db, user_id, day, 1)
        db.commit()
        monkeypatch.undo()

        rows = (
            db.query(ProductivityMetrics)
            .filter(ProductivityMetrics.user_id == user_id, ProductivityMetrics.day == day)
            .all()
        )
        assert len(rows) == 1
        assert rows[0].habits_completed == 2
