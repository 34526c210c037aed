"""HTTP tests for the FastAPI app."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from best_model_service.app import create_app
from best_model_service.store import StorageError


@pytest.fixture
def client(config):
    return TestClient(create_app(config))


def test_current_model_starts_at_default(client):
    r = client.get("/api/current-model")
    assert r.status_code == 200
    assert r.json() == {"name": "default", "score": 0, "data": None}


def test_startup_loads_best_saved_model(config, tmp_path):
    data = tmp_path / "data"
    data.mkdir()
    (data / "a.json").write_text(json.dumps({"name": "a", "score": 5, "data": None}))
    (data / "b.json").write_text(json.dumps({"name": "b", "score": 9, "data": {"w": 1}}))
    (data / "c.json").write_text(json.dumps({"name": "c", "score": 9, "data": None}))
    (data / "bad.json").write_text("oops")

    client = TestClient(create_app(config))
    assert client.get("/api/current-model").json() == {"name": "b", "score": 9, "data": {"w": 1}}


def test_save_model_accepts_higher_score(client):
    body = {"score": 12.5, "data": {"inputLayer": [1, 2], "outputLayer": [3]}}
    r = client.post("/api/save-model", json=body)
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.json()["message"] == "Model saved successfully"

    cur = client.get("/api/current-model").json()
    assert cur["score"] == 12.5
    assert cur["data"] == body["data"]

    models = client.get("/api/models").json()
    assert models == [{"name": "default", "score": 12.5, "data": body["data"]}]


def test_save_model_rejects_equal_score(client):
    client.post("/api/save-model", json={"score": 3, "data": "first"})
    r = client.post("/api/save-model", json={"score": 3, "data": "second"})
    assert r.status_code == 200
    out = r.json()
    assert out["success"] is False
    assert out["message"] == "New score not higher than current best"
    assert out["current"]["data"] == "first"


def test_save_model_write_failure_returns_500(client):
    registry = client.app.state.registry
    with patch.object(registry.store, "write", side_effect=StorageError("read-only fs")):
        r = client.post("/api/save-model", json={"score": 50, "data": None})
    assert r.status_code == 500
    assert r.json() == {"success": False, "message": "Error saving model"}
    assert client.get("/api/current-model").json()["score"] == 0


def test_save_model_named_record(client):
    r = client.post("/api/save-model", json={"score": 1, "data": "x", "name": "snake"})
    assert r.json()["success"] is True
    assert client.get("/api/current-model", params={"name": "snake"}).json()["data"] == "x"
    assert client.get("/api/current-model").json()["name"] == "default"


def test_save_model_invalid_name_is_400(client):
    r = client.post("/api/save-model", json={"score": 1, "name": "../../etc/passwd"})
    assert r.status_code == 400


def test_save_model_requires_numeric_score(client):
    r = client.post("/api/save-model", json={"data": {}})
    assert r.status_code == 422
    r = client.post("/api/save-model", json={"score": "lots"})
    assert r.status_code == 422


def test_models_listing_failure_is_500(client):
    registry = client.app.state.registry
    with patch.object(registry.store, "list_all", side_effect=StorageError("gone")):
        r = client.get("/api/models")
    assert r.status_code == 500


def test_index_served_at_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert "trainer" in r.text


def test_missing_static_file_is_404(client):
    r = client.get("/nope.js")
    assert r.status_code == 404
    assert r.text == "File not found"


def test_cors_headers(client):
    r = client.options(
        "/api/save-model",
        headers={"Origin": "http://example.com", "Access-Control-Request-Method": "POST"},
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] in ("*", "http://example.com")


def test_injected_registry_is_used(config, registry):
    registry.submit(7, "injected")
    client = TestClient(create_app(config, registry=registry))
    assert client.get("/api/current-model").json()["data"] == "injected"


@pytest.mark.parametrize("score", [True, False, "7", "7.5", None, [1]])
def test_save_model_rejects_non_numeric_scores(client, score):
    r = client.post("/api/save-model", json={"score": score, "data": None})
    assert r.status_code == 422
    assert client.get("/api/current-model").json()["score"] == 0


def test_save_model_rejects_score_too_large_for_a_float(client):
    r = client.post("/api/save-model", content='{"score": ' + "9" * 400 + "}",
                    headers={"Content-Type": "application/json"})
    assert r.status_code == 422


def test_save_model_keeps_integer_score(client, config):
    client.post("/api/save-model", json={"score": 7, "data": None})
    raw = json.loads((Path(config.data_dir) / "default.json").read_text())
    assert raw["score"] == 7
    assert isinstance(raw["score"], int)


def test_save_model_success_body_has_only_success_and_message(client):
    r = client.post("/api/save-model", json={"score": 1, "data": {}})
    assert r.json() == {"success": True, "message": "Model saved successfully"}


def test_save_model_rejection_reports_current_best(client):
    r = client.post("/api/save-model", json={"score": 0, "data": "x"})
    assert r.json() == {
        "success": False,
        "message": "New score not higher than current best",
        "current": {"name": "default", "score": 0, "data": None},
    }
