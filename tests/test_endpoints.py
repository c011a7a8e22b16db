"""
Smoke tests for app wiring using the SQLite test DB.
"""


class TestHealth:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"


class TestOpenApi:
    def test_routes_registered(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        for path in (
            "/habits",
            "/habits/{habit_id}",
            "/habits/{habit_id}/track",
            "/habits/{habit_id}/stats",
            "/habits/{habit_id}/streak",
            "/productivity",
            "/productivity/{day}",
            "/productivity/focus",
            "/productivity/rating",
            "/productivity/generate",
        ):
            assert path in paths
