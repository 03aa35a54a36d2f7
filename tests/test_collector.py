from datetime import datetime, timedelta, timezone

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.domain.game.handlers_reset import new_game_state
from app.store.models import GameSession
from app.transport.admin import router as admin_router
from app.transport.collector import router as collector_router

TS = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeRepo:
    def __init__(self):
        self.results = {}
        self.states = {}
        self.sessions = {}
        self.cleared = []

    async def save_result(self, session):
        self.results[session.id] = session

    async def list_results(self, limit=None):
        out = sorted(self.results.values(), key=lambda s: s.completed_at, reverse=True)
        return out if limit is None else out[:limit]

    async def count_results(self):
        return len(self.results)

    async def list_client_ids(self):
        return sorted(self.states)

    async def load_game_state(self, client_id):
        return self.states.get(client_id)

    async def list_cached_sessions(self, client_id):
        return list(self.sessions.get(client_id, []))

    async def clear_client(self, client_id):
        self.cleared.append(client_id)
        self.states.pop(client_id, None)
        self.sessions.pop(client_id, None)


def _client(repo):
    app = FastAPI()
    app.state.repo = repo
    app.include_router(collector_router)
    app.include_router(admin_router)
    return TestClient(app)


def _session_json(session_id="s1", phase="complete", completed_at=None):
    state = new_game_state(total_rounds=5, colors_per_round=6, ts=TS)
    state.game_phase = phase
    if phase == "complete":
        state.final_top3 = state.all_rounds[0][:3]
    session = GameSession(id=session_id, game_state=state, user_agent="UA/1", completed_at=completed_at)
    return session.model_dump(mode="json")


def test_complete_session_is_stored():
    repo = FakeRepo()
    client = _client(repo)
    resp = client.post("/api/game-results", json=_session_json())
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["session_id"] == "s1"
    assert repo.results["s1"].completed_at is not None


def test_incomplete_session_is_rejected():
    repo = FakeRepo()
    client = _client(repo)
    resp = client.post("/api/game-results", json=_session_json(phase="finale"))
    assert resp.status_code == 400
    assert repo.results == {}


def test_missing_fields_are_rejected():
    repo = FakeRepo()
    client = _client(repo)
    payload = _session_json()
    del payload["id"]
    assert client.post("/api/game-results", json=payload).status_code == 400

    payload = _session_json()
    payload["game_state"]["start_time"] = "not-a-date"
    assert client.post("/api/game-results", json=payload).status_code == 400

    assert client.post("/api/game-results", json={"id": "x"}).status_code == 400
    assert repo.results == {}


def test_listing_is_most_recent_first():
    repo = FakeRepo()
    client = _client(repo)
    for i in range(3):
        client.post("/api/game-results", json=_session_json(f"s{i}", completed_at=TS + timedelta(minutes=i)))

    resp = client.get("/api/game-results", params={"limit": 2})
    body = resp.json()
    assert body["total"] == 3
    assert [r["id"] for r in body["results"]] == ["s2", "s1"]
    assert len(body["results"][0]["final_top3"]) == 3
    assert body["results"][0]["round_count"] == 5
    assert "analytics" not in body

    body = client.get("/api/game-results", params={"include_analytics": "true"}).json()
    assert body["analytics"]["total_sessions"] == 3


def test_analytics_endpoint():
    repo = FakeRepo()
    client = _client(repo)
    client.post("/api/game-results", json=_session_json())
    body = client.get("/api/analytics").json()
    assert body["success"] is True
    assert body["data"]["total_sessions"] == 1
    assert body["data"]["total_colors"] == 3
    assert body["generated_at"]


def test_admin_lists_and_clears_clients():
    repo = FakeRepo()
    repo.states["c1"] = new_game_state(total_rounds=5, colors_per_round=6, ts=TS)
    client = _client(repo)

    clients = client.get("/admin/clients").json()["clients"]
    assert [c["client_id"] for c in clients] == ["c1"]
    assert clients[0]["phase"] == "selection"

    assert client.get("/admin/clients/c1/sessions").json()["sessions"] == []
    assert client.post("/admin/clients/c1/clear").json() == {"ok": True, "client_id": "c1"}
    assert repo.cleared == ["c1"]
    assert client.post("/admin/clients/c1/clear").status_code == 404
