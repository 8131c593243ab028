"""Nexus API integration tests (TestClient + in-memory SQLite)"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from src.config import settings
from src.core.calendar import CalendarWindow
from src.core.world.definitions import COMPANIONS
from src.db.models import PlayerModel

BASE = "/nexus/players"


def _register(client: TestClient, player_id: str = "p1", **body) -> dict:
    resp = client.post(BASE, json={"player_id": player_id, **body})
    assert resp.status_code == 201
    return resp.json()


def _quest(client: TestClient, title: str = "Run 5k", **body) -> dict:
    resp = client.post(f"{BASE}/p1/quests", json={"title": title, **body})
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture()
def registered(client: TestClient) -> TestClient:
    _register(client, name="Ada", nexus_name="Ada's Nexus")
    return client


class TestPlayers:
    def test_register(self, client):
        data = _register(client, name="Ada", nexus_name="Ada's Nexus")
        assert data["player"]["name"] == "Ada"
        assert data["player"]["level"] == 1
        assert data["player"]["level_title"] == "Initiate"
        assert data["quests"] == []
        world = data["world"]
        assert world["nexus_name"] == "Ada's Nexus"
        assert world["era"] == 1
        assert world["world_title"] == "Uncharted Territory"
        assert set(world["district_narratives"]) == {"forge", "archive"}
        assert "sanctum" in world["locked_hints"]

    def test_register_twice_keeps_player(self, registered):
        data = _register(registered, name="Other")
        assert data["player"]["name"] == "Ada"

    def test_get_state(self, registered):
        resp = registered.get(f"{BASE}/p1")
        assert resp.status_code == 200
        assert resp.json()["world"]["state"]["nexus_name"] == "Ada's Nexus"

    def test_unknown_player_404(self, client):
        resp = client.get(f"{BASE}/ghost")
        assert resp.status_code == 404
        assert "ghost" in resp.json()["detail"]

    def test_invalid_body_422(self, client):
        assert client.post(BASE, json={"player_id": ""}).status_code == 422


class TestSession:
    def test_first_session(self, registered):
        resp = registered.post(f"{BASE}/p1/session")
        assert resp.status_code == 200
        data = resp.json()
        assert data["penalty"] == 0
        assert data["decay_days"] == 0
        assert data["day_rating"] == "neutral"
        assert data["world"]["state"]["last_decay_on"] is not None

    def test_repeat_session_same_day(self, registered):
        registered.post(f"{BASE}/p1/session")
        data = registered.post(f"{BASE}/p1/session").json()
        assert data["decay_days"] == 0
        assert data["reset_quest_ids"] == []

    def test_session_unknown_player(self, client):
        assert client.post(f"{BASE}/ghost/session").status_code == 404


class TestQuests:
    def test_create_uses_ai_rewards(self, registered):
        quest = _quest(registered, cadence="DAILY", difficulty="HARD")
        assert quest["title"] == "Protocol: Mock Objective"
        assert quest["xp_reward"] == 120
        assert quest["status"] == "PENDING"
        assert quest["difficulty"] == "HARD"

    def test_linked_stat(self, registered):
        quest = _quest(registered, linked_stat="physical")
        assert quest["linked_stat"] == "physical"

    def test_invalid_cadence_422(self, registered):
        resp = registered.post(f"{BASE}/p1/quests", json={"title": "x", "cadence": "HOURLY"})
        assert resp.status_code == 422

    def test_list(self, registered):
        _quest(registered)
        _quest(registered)
        assert len(registered.get(f"{BASE}/p1/quests").json()) == 2

    def test_toggle_round_trip(self, registered):
        quest_id = _quest(registered)["quest_id"]

        done = registered.post(f"{BASE}/p1/quests/{quest_id}/toggle").json()
        assert done["completed"] is True
        assert done["xp_delta"] == 120
        assert done["credit_delta"] == 36
        assert done["player"]["current_xp"] == 120
        assert done["quest"]["status"] == "COMPLETED"

        undone = registered.post(f"{BASE}/p1/quests/{quest_id}/toggle").json()
        assert undone["completed"] is False
        assert undone["player"]["current_xp"] == 0
        assert undone["player"]["credits"] == 0

    def test_toggle_unknown_quest(self, registered):
        assert registered.post(f"{BASE}/p1/quests/nope/toggle").status_code == 404

    def test_delete(self, registered):
        quest_id = _quest(registered)["quest_id"]
        assert registered.delete(f"{BASE}/p1/quests/{quest_id}").status_code == 204
        assert registered.delete(f"{BASE}/p1/quests/{quest_id}").status_code == 404
        assert registered.get(f"{BASE}/p1/quests").json() == []


class TestWorld:
    def _earn_credits(self, client, quests=3):
        for i in range(quests):
            quest_id = _quest(client, title=f"task {i}")["quest_id"]
            client.post(f"{BASE}/p1/quests/{quest_id}/toggle")

    def test_build_without_credits(self, registered):
        resp = registered.post(
            f"{BASE}/p1/world/build", json={"district_id": "forge", "structure_id": "forge-t1"}
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Not enough credits. Need 100, have 0."

    def test_build(self, registered):
        self._earn_credits(registered)

        resp = registered.post(
            f"{BASE}/p1/world/build", json={"district_id": "forge", "structure_id": "forge-t1"}
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["credits_cost"] == 100
        assert data["player"]["credits"] == 8
        assert data["world"]["world_title"] == "Fledgling Settlement"
        titles = [e["title"] for e in data["world_events"]]
        assert "Training Grounds Constructed" in titles

    def test_build_notices(self, registered):
        registered.get(f"{BASE}/p1/notices")
        self._earn_credits(registered)
        registered.post(
            f"{BASE}/p1/world/build", json={"district_id": "forge", "structure_id": "forge-t1"}
        )

        notices = registered.get(f"{BASE}/p1/notices").json()

        assert {"kind": "world", "title": "Training Grounds Constructed", "body": ""} in notices
        assert registered.get(f"{BASE}/p1/notices").json() == []

    def test_repair_unbuilt(self, registered):
        resp = registered.post(
            f"{BASE}/p1/world/repair", json={"district_id": "forge", "structure_id": "forge-t1"}
        )
        assert resp.status_code == 400

    def test_expedition_locked(self, registered):
        resp = registered.post(f"{BASE}/p1/world/expedition", json={"expedition_id": "exp-signal"})
        assert resp.status_code == 400

    def test_mark_event_read(self, registered):
        state = registered.get(f"{BASE}/p1").json()["world"]["state"]
        event_id = state["events"][0]["event_id"]

        resp = registered.post(f"{BASE}/p1/world/events/{event_id}/read")

        assert resp.status_code == 200
        assert resp.json()["state"]["events"][0]["is_read"] is True

    def test_companions(self, registered):
        companions = registered.get(f"{BASE}/p1/world/companions").json()
        assert len(companions) == len(COMPANIONS)
        present = [c for c in companions if c["is_present"]]
        assert {c["district_id"] for c in present} == {"forge", "archive"}
        assert all(c["line"] for c in companions)


class TestChronicle:
    def test_window_with_absent_days(self, registered):
        registered.post(f"{BASE}/p1/session")
        today = CalendarWindow.now(settings.SYNC_TIMEZONE).today
        start = today - timedelta(days=6)

        resp = registered.get(
            f"{BASE}/p1/chronicle",
            params={"start": start.isoformat(), "end": today.isoformat()},
        )

        assert resp.status_code == 200
        logs = resp.json()["logs"]
        assert len(logs) == 7
        assert [log["day_rating"] for log in logs[:6]] == ["absent"] * 6
        assert logs[-1]["day_rating"] == "neutral"
        assert logs[-1]["log_date"] == today.isoformat()

    def test_default_window(self, registered):
        logs = registered.get(f"{BASE}/p1/chronicle").json()["logs"]
        assert len(logs) == 30

    def test_bad_ranges(self, registered):
        assert registered.get(
            f"{BASE}/p1/chronicle", params={"start": "2024-02-01", "end": "2024-01-01"}
        ).status_code == 400
        assert registered.get(
            f"{BASE}/p1/chronicle", params={"start": "2022-01-01", "end": "2024-01-01"}
        ).status_code == 400

    def test_unknown_player(self, client):
        assert client.get(f"{BASE}/ghost/chronicle").status_code == 404


class TestMisc:
    def test_commentary(self, registered):
        resp = registered.post(f"{BASE}/p1/commentary", json={"message": "status?"})
        assert resp.status_code == 200
        assert "[Mock]" in resp.json()["commentary"]

    def test_reminders(self, registered):
        _quest(registered, cadence="DAILY")
        resp = registered.get(f"{BASE}/p1/reminders", params={"at": "2024-01-03T21:00:00"})
        assert resp.status_code == 200
        assert [r["tag"] for r in resp.json()] == ["daily-reminder"]

    def test_database_down_503(self, registered):
        down = OperationalError("SELECT", {}, Exception("database is locked"))
        with patch("sqlalchemy.orm.Session.get", side_effect=down):
            resp = registered.get(f"{BASE}/p1")
        assert resp.status_code == 503
        assert resp.json()["detail"] == "Persistence unavailable"


class TestMemoryBackend:
    def test_memory_backend_skips_database(self, monkeypatch, db_session):
        monkeypatch.setattr(settings, "PERSISTENCE_BACKEND", "memory")
        from src.main import app

        with TestClient(app) as client:
            _register(client)
            _quest(client)
            assert client.post(f"{BASE}/p1/session").status_code == 200
            assert len(client.get(f"{BASE}/p1/quests").json()) == 1
            assert client.get("/health").json()["persistence"] == "memory"

        assert db_session.query(PlayerModel).count() == 0
