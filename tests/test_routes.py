"""HTTP surface: /health, /normalize, /report, /synonyms."""

import pytest
from fastapi.testclient import TestClient

from app.compat.handler import response_handler
from app.compat.validator import ApiResponseValidator
from app.main import app


@pytest.fixture
def client():
    response_handler.validator = ApiResponseValidator()
    response_handler.reset()
    return TestClient(app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_normalize_maps_synonyms(client):
    resp = client.post("/normalize", json={"response": {"text": "hi", "model_name": "m2"}})
    assert resp.status_code == 200
    body = resp.json()
    assert body["content"] == "hi"
    assert body["model"] == "m2"
    assert body["_original"] == {"text": "hi", "model_name": "m2"}
    assert body["_validation"]["issues"] == []


def test_normalize_invalid_payload_returns_fallback(client):
    resp = client.post("/normalize", json={"response": 123})
    assert resp.status_code == 200
    body = resp.json()
    assert body["model"] == "fallback-model"
    assert body["error"]


def test_normalize_without_fallback_reports_500(client):
    response_handler.validator.field_mappings["content"] = [7]
    resp = client.post(
        "/normalize",
        json={"response": {"content": "x"}, "options": {"enableFallback": False}},
    )
    assert resp.status_code == 500
    assert resp.json()["detail"] == "normalization_error"


def test_report_tracks_errors(client):
    client.post("/normalize", json={"response": {}, "options": {"enableLogging": False}})
    report = client.get("/report").json()
    assert report["error_count"] == 1
    assert report["status"] == "normal"
    assert len(report["recommendations"]) == 2


def test_register_and_use_synonym(client):
    resp = client.post("/synonyms", json={"field": "content", "path": "data.message"})
    assert resp.status_code == 200
    assert resp.json()[-1] == "data.message"
    assert "data.message" in client.get("/synonyms").json()["content"]

    body = client.post("/normalize", json={"response": {"data": {"message": "nested"}}}).json()
    assert body["content"] == "nested"


def test_register_invalid_synonym(client):
    resp = client.post("/synonyms", json={"field": "content", "path": "a..b"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "invalid_synonym"


def test_normalize_rejects_reserved_required_field(client):
    resp = client.post(
        "/normalize",
        json={"response": {"content": "x"}, "options": {"requiredFields": ["content", "validation"]}},
    )
    assert resp.status_code == 422
