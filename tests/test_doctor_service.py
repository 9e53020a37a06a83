"""Tests for the environment checks behind `prereview doctor`."""

import httpx
import pytest

from prereview.config import ReviewConfig
from prereview.exceptions import GitError
from prereview.services.doctor_service import DoctorService

from conftest import FakeGit


def _ollama(models=None, status=200, body=None):
    seen = []

    def handler(request):
        seen.append(str(request.url))
        if body is not None:
            return httpx.Response(status, text=body)
        return httpx.Response(status, json={"models": [{"name": m} for m in (models or [])]})

    return httpx.Client(transport=httpx.MockTransport(handler)), seen


def _doctor(client, config=None, git=None, which=lambda name: "/usr/bin/git"):
    return DoctorService(config or ReviewConfig(model="llama3.1:8b"), git=git or FakeGit(), client=client, which=which)


def test_everything_ready():
    client, seen = _ollama(["llama3.1:8b", "codellama:latest"])

    results = _doctor(client).run()

    assert [r.name for r in results] == ["Git", "Git repository", "Ollama server", "Model llama3.1:8b"]
    assert all(r.ok for r in results)
    assert results[0].message == "git version 2.43.0 (/usr/bin/git)"
    assert seen == ["http://localhost:11434/api/tags"]


def test_base_url_trailing_slash():
    client, seen = _ollama(["llama3.1:8b"])
    _doctor(client, config=ReviewConfig(ollama_base_url="http://gpu-box:11434/")).run()
    assert seen == ["http://gpu-box:11434/api/tags"]


def test_missing_git_fails_with_install_help():
    client, _ = _ollama(["llama3.1:8b"])

    check = _doctor(client, which=lambda name: None).check_git()

    assert not check.ok
    assert "brew install git" in check.help


def test_broken_git_fails():
    class BrokenGit(FakeGit):
        def version(self):
            raise GitError("boom")

    client, _ = _ollama()
    assert not _doctor(client, git=BrokenGit()).check_git().ok


def test_outside_repository_is_informational():
    client, _ = _ollama()
    check = _doctor(client, git=FakeGit(is_repo=False)).check_repository()
    assert check.ok
    assert "not in a git repository" in check.message


def test_unreachable_server_skips_model_check():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.Client(transport=httpx.MockTransport(handler))

    results = _doctor(client).run()

    assert [r.name for r in results] == ["Git", "Git repository", "Ollama server"]
    server = results[-1]
    assert not server.ok
    assert "ollama serve" in server.help


@pytest.mark.parametrize("status, body", [(500, None), (200, "<html>not ollama</html>"), (200, "[]")])
def test_unexpected_server_answers_fail(status, body):
    client, _ = _ollama(status=status, body=body)
    server, models = _doctor(client).check_ollama_server()
    assert not server.ok
    assert models == []


def test_missing_model_suggests_pull():
    client, _ = _ollama(["codellama:latest"])

    results = _doctor(client).run()

    model = results[-1]
    assert not model.ok
    assert "ollama pull llama3.1:8b" in model.help


@pytest.mark.parametrize("installed, ok", [(["mistral:latest"], True), (["mistral"], True), (["mistral:7b"], False)])
def test_untagged_model_matches_latest(installed, ok):
    client, _ = _ollama(installed)
    assert _doctor(client, config=ReviewConfig(model="mistral")).run()[-1].ok is ok
