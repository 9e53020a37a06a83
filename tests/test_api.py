"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from prereview.api.dependencies import get_assistant, get_config, get_git
from prereview.config import ReviewConfig
from prereview.main import app

from conftest import FakeAssistant, FakeGit, make_change, make_record, make_reply


@pytest.fixture
def state(tmp_path):
    (tmp_path / "app.py").write_text("x = 1\n", encoding="utf-8")
    git = FakeGit(
        changes=[make_change("app.py", content="x = 1\n"), make_change("vendor/lib.js", content="var a;\n")],
        root=str(tmp_path),
    )
    assistant = FakeAssistant({
        "app.py": make_reply(make_record(LINE=1, SEVERITY="warning", TITLE="rename", ORIGINAL="x = 1", FIX="X = 1")),
    })
    return {"git": git, "assistant": assistant, "config": ReviewConfig(ignore_patterns=["vendor/*"])}


@pytest.fixture
def client(state):
    app.dependency_overrides[get_config] = lambda: state["config"]
    app.dependency_overrides[get_git] = lambda: state["git"]
    app.dependency_overrides[get_assistant] = lambda: state["assistant"]
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["message"] == "PreReview API"


def test_review_returns_suggestions(client, state):
    response = client.post("/api/review", json={})

    assert response.status_code == 200
    body = response.json()
    assert body["files"] == ["app.py"]
    assert [s["title"] for s in body["suggestions"]] == ["rename"]
    assert body["suggestions"][0]["severity"] == "warning"
    assert body["errors"] == []
    assert body["review_id"]
    assert body["created_at"]


def test_review_path_restriction(client, state):
    response = client.post("/api/review", json={"paths": ["other.py"]})

    assert response.status_code == 200
    assert response.json()["files"] == []
    assert state["assistant"].calls == []


def test_review_tolerance_override(client, state):
    client.post("/api/review", json={"tolerance": "strict"})
    assert "TOLERANCE: STRICT" in state["assistant"].calls[0][1]


def test_review_outside_repository(client, state):
    state["git"].is_repo = False
    response = client.post("/api/review", json={})
    assert response.status_code == 400


def test_feedback_skip(client):
    response = client.post("/api/feedback", json={"suggestion": {"file_path": "app.py", "title": "t"}, "action": "skip"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Suggestion skipped", "warning": None}


def test_feedback_fix(client, state, tmp_path):
    suggestion = {"file_path": "app.py", "title": "t", "original_code": "x = 1", "suggested_fix": "X = 1"}

    response = client.post("/api/feedback", json={"suggestion": suggestion, "action": "fix"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert (tmp_path / "app.py").read_text(encoding="utf-8") == "X = 1\n"
    assert state["git"].staged == ["app.py"]


def test_feedback_fix_not_applicable(client, tmp_path):
    suggestion = {"file_path": "app.py", "title": "t", "original_code": "missing", "suggested_fix": "X"}

    body = client.post("/api/feedback", json={"suggestion": suggestion, "action": "fix"}).json()

    assert body["success"] is False
    assert body["message"].startswith("Could not apply fix automatically")
    assert (tmp_path / "app.py").read_text(encoding="utf-8") == "x = 1\n"


def test_feedback_invalid_action(client):
    response = client.post("/api/feedback", json={"suggestion": {"file_path": "a.py", "title": "t"}, "action": "ignore"})
    assert response.status_code == 400


@pytest.fixture
def secret(tmp_path_factory):
    path = tmp_path_factory.mktemp("elsewhere") / "secret.txt"
    path.write_text("token=abc\n", encoding="utf-8")
    return path


@pytest.mark.parametrize("kind", ["absolute", "relative"])
def test_feedback_fix_outside_repository_is_rejected(client, state, tmp_path, secret, kind):
    file_path = str(secret) if kind == "absolute" else f"../{secret.parent.name}/secret.txt"
    suggestion = {"file_path": file_path, "title": "t", "original_code": "token=abc", "suggested_fix": "token=pwned"}

    response = client.post("/api/feedback", json={"suggestion": suggestion, "action": "fix"})

    assert response.status_code == 400
    assert secret.read_text(encoding="utf-8") == "token=abc\n"
    assert state["git"].staged == []


def test_feedback_fix_requires_staged_file(client, state, tmp_path):
    (tmp_path / "other.py").write_text("x = 1\n", encoding="utf-8")
    suggestion = {"file_path": "other.py", "title": "t", "original_code": "x = 1", "suggested_fix": "X = 1"}

    response = client.post("/api/feedback", json={"suggestion": suggestion, "action": "fix"})

    assert response.status_code == 400
    assert response.json()["detail"] == "File is not part of the staged changes"
    assert (tmp_path / "other.py").read_text(encoding="utf-8") == "x = 1\n"


def test_cors_allows_only_local_origins(client):
    headers = {"Access-Control-Request-Method": "POST"}

    local = client.options("/api/review", headers={**headers, "Origin": "http://localhost:5173"})
    foreign = client.options("/api/review", headers={**headers, "Origin": "https://evil.example"})
    lookalike = client.options("/api/review", headers={**headers, "Origin": "http://localhost.evil.example"})

    assert local.headers.get("access-control-allow-origin") == "http://localhost:5173"
    assert "access-control-allow-origin" not in foreign.headers
    assert "access-control-allow-origin" not in lookalike.headers
