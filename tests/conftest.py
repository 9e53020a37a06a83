"""Shared fakes for the git and assistant collaborators."""

from typing import Dict, List, Optional

import pytest

from prereview.config import ENV_OVERRIDES
from prereview.exceptions import GitError
from prereview.services.git_service import FileChange


class FakeGit:
    """In-memory stand-in for GitService."""

    def __init__(self, changes=None, diffs=None, root=".", is_repo=True, stage_error=None):
        self.changes: List[FileChange] = list(changes or [])
        self.diffs: Dict[str, str] = dict(diffs or {})
        self.root = root
        self.is_repo = is_repo
        self.stage_error = stage_error
        self.staged: List[str] = []

    def is_repository(self) -> bool:
        return self.is_repo

    def repo_root(self) -> str:
        return self.root

    def version(self) -> str:
        return "git version 2.43.0"

    def get_staged_changes(self) -> List[FileChange]:
        return list(self.changes)

    def staged_diff(self, path: str, color: bool = False) -> str:
        if path not in self.diffs:
            raise GitError(f"no diff for {path}")
        return self.diffs[path]

    def stage_file(self, path: str) -> None:
        if self.stage_error:
            raise GitError(self.stage_error)
        self.staged.append(path)


class FakeAssistant:
    """Returns canned replies keyed by the file named in the prompt."""

    def __init__(self, replies: Optional[Dict[str, object]] = None, default: str = "NO_ISSUES"):
        self.replies = dict(replies or {})
        self.default = default
        self.calls = []

    def chat(self, model: str, prompt: str) -> str:
        self.calls.append((model, prompt))
        for path, reply in self.replies.items():
            if f"\nFile: {path}\n" in prompt:
                if isinstance(reply, Exception):
                    raise reply
                return reply
        return self.default


def make_change(path, content="print('hi')\n", diff=None, is_binary=False, status="M"):
    if diff is None:
        diff = (
            f"diff --git a/{path} b/{path}\n"
            f"--- a/{path}\n"
            f"+++ b/{path}\n"
            "@@ -0,0 +1 @@\n"
            f"+{content.splitlines()[0] if content else ''}\n"
        )
    return FileChange(path=path, status=status, diff=diff, content=content, is_binary=is_binary)


def make_record(**fields) -> str:
    lines = ["---"]
    for name in ("LINE", "END_LINE", "SEVERITY", "CONFIDENCE", "CATEGORY", "TITLE", "DESCRIPTION"):
        if name in fields:
            lines.append(f"{name}: {fields[name]}")
    for name in ("ORIGINAL", "FIX"):
        if name in fields:
            value = fields[name]
            if value is None:
                lines.append(f"{name}: N/A")
            else:
                lines.extend([f"{name}:", "<<<", value, ">>>"])
    return "\n".join(lines)


def make_reply(*records: str) -> str:
    return "\n".join(records) + "\n---\n"


class ScriptedInput:
    """Feeds prepared answers to the session; None once exhausted."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.prompts = []

    def __call__(self, prompt: str) -> Optional[str]:
        self.prompts.append(prompt)
        if not self.answers:
            return None
        return self.answers.pop(0)


@pytest.fixture
def fake_git():
    return FakeGit()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate config loading from the developer's environment."""
    for env_name, _ in ENV_OVERRIDES:
        monkeypatch.delenv(env_name, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work
