"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from clone_lab.api.main import app
from clone_lab.orchestrator import clear_cancellation, is_cancelled, runner

from tests.conftest import CHAT_TEXT, DOCUMENT_TEXT


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def scenario_payload(**extra):
    payload = {
        "sources": [
            {"id": "chat-1", "source_type": "chat", "content": CHAT_TEXT},
            {"id": "chat-2", "source_type": "chat", "content": CHAT_TEXT},
            {"id": "doc-1", "source_type": "document", "content": DOCUMENT_TEXT},
        ],
        "reference_time": "2026-01-01T00:00:00Z",
    }
    payload.update(extra)
    return payload


class TestServiceEndpoints:
    def test_root(self, client):
        body = client.get("/").json()
        assert body["service"] == "Clone Lab API"
        assert body["endpoints"]["pipeline"] == "/v1/pipeline/run"

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["minds_loaded"] == 3


class TestMindRoutes:
    def test_list(self, client):
        response = client.get("/v1/minds")
        assert response.status_code == 200
        assert [m["mind_id"] for m in response.json()] == ["tim", "victoria", "quinn"]

    def test_plan(self, client):
        waves = client.get("/v1/minds/plan").json()["waves"]
        assert [w["mind_ids"] for w in waves] == [["tim"], ["victoria"], ["quinn"]]

    def test_detail(self, client):
        body = client.get("/v1/minds/tim").json()
        assert body["summary"]["name"] == "Tim"
        assert body["health"]["healthy"]
        assert body["options"]["min_quality_score"] == 30

    def test_unknown_mind(self, client):
        assert client.get("/v1/minds/zed").status_code == 404

    def test_known_but_unregistered_mind(self, client):
        assert client.get("/v1/minds/daniel").status_code == 404


class TestPipelineRoutes:
    def test_run(self, client):
        response = client.post("/v1/pipeline/run", json=scenario_payload(session_id="api-run"))
        assert response.status_code == 200
        body = response.json()
        assert body["success"]
        assert body["session_id"] == "api-run"
        assert list(body["results"]) == ["tim", "victoria", "quinn"]
        assert body["results"]["tim"]["metadata"]["prioritized_sources"] == ["doc-1", "chat-1"]
        assert body["validations"]["tim"]["valid"]

    def test_empty_sources(self, client):
        response = client.post("/v1/pipeline/run", json={"sources": []})
        assert response.status_code == 422
        assert "No extracted data" in response.json()["detail"]

    def test_invalid_options(self, client):
        payload = scenario_payload(options={"tim": {"min_quality_score": "lots"}})
        assert client.post("/v1/pipeline/run", json=payload).status_code == 422

    def test_malformed_source(self, client):
        response = client.post("/v1/pipeline/run", json={"sources": [{"content": "no id"}]})
        assert response.status_code == 422

    def test_generator_option_without_generator(self, client):
        payload = scenario_payload(options={"victoria": {"use_generator": True}})
        response = client.post("/v1/pipeline/run", json=payload)
        assert response.status_code == 422
        assert "no content generator" in response.json()["detail"]

    def test_cancel_running_session(self, client, monkeypatch):
        monkeypatch.setattr(runner, "_active_sessions", {"api-cancel"})
        body = client.post("/v1/pipeline/api-cancel/cancel").json()
        assert body == {"session_id": "api-cancel", "cancellation_requested": True}
        assert is_cancelled("api-cancel")
        clear_cancellation("api-cancel")

    def test_cancel_unknown_session(self, client):
        body = client.post("/v1/pipeline/api-idle/cancel").json()
        assert body == {"session_id": "api-idle", "cancellation_requested": False}
        assert not is_cancelled("api-idle")

    def test_cancel_after_run_leaves_session_reusable(self, client):
        assert client.post("/v1/pipeline/run", json=scenario_payload(session_id="api-again")).json()["success"]
        body = client.post("/v1/pipeline/api-again/cancel").json()
        assert not body["cancellation_requested"]

        rerun = client.post("/v1/pipeline/run", json=scenario_payload(session_id="api-again")).json()
        assert rerun["success"]
        assert not rerun["cancelled"]
