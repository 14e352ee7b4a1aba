"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from quickalias.adapters.mock import MockAdapter
from quickalias.adapters.registry import AdapterRegistry
from quickalias.core.data.providers import PROVIDERS
from quickalias.core.engine.workflow import WorkflowIO
from quickalias.core.models.action import Receipt
from quickalias.core.models.profile import ProfileLocation


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty home directory, with bash as the login shell."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("SHELL", "/bin/bash")
    monkeypatch.delenv("QUICKALIAS_CONFIG", raising=False)
    monkeypatch.delenv("QUICKALIAS_LOG_FILE", raising=False)
    return home_dir


@pytest.fixture
def bashrc(home: Path) -> ProfileLocation:
    """Location of ``~/.bashrc`` (file not created)."""
    return ProfileLocation(shell_kind="bash", path=home / ".bashrc")


@pytest.fixture
def claude():
    return PROVIDERS["claude"]


# ── Workflow doubles ─────────────────────────────────────────────


def git_ok(action_id: str, output: str = "", **kwargs) -> Receipt:
    return Receipt.success(adapter="git", action_id=action_id, output=output, exit_code=0, **kwargs)


def git_failed(action_id: str, error: str, stderr: str = "", exit_code: int = 1) -> Receipt:
    return Receipt.failure(
        adapter="git", action_id=action_id, error=error, stderr=stderr, exit_code=exit_code
    )


@pytest.fixture
def git_mock() -> MockAdapter:
    """A clean-branch repository with unstaged work and an origin remote."""
    mock = MockAdapter("git")
    mock.set_response("git:is_repo", git_ok("git:is_repo", "true"))
    mock.set_response("git:unmerged", git_ok("git:unmerged", metadata={"has_conflicts": False}))
    mock.set_response("git:branch", git_ok("git:branch", "main", metadata={"detached": False}))
    mock.set_response("git:changes", git_ok("git:changes", metadata={
        "has_staged": True,
        "has_unstaged": True,
        "has_untracked": False,
    }))
    mock.set_response("git:unpushed", git_ok("git:unpushed", metadata={"count": 0, "has_upstream": True}))
    mock.set_response("git:remote", git_ok("git:remote", "git@example.com:me/repo.git"))
    mock.set_response("git:diff", git_ok("git:diff", "diff --git a/app.py b/app.py\n+print('hi')"))
    mock.set_response("git:untracked", git_ok("git:untracked", ""))
    mock.set_response("git:add_all", git_ok("git:add_all"))
    mock.set_response("git:commit", git_ok("git:commit", "[main abc1234] feat: greet"))
    mock.set_response("git:push", git_ok("git:push", "", stderr="To example.com:me/repo.git"))
    return mock


@pytest.fixture
def shell_mock() -> MockAdapter:
    """Provider CLI double that answers with a commit message."""
    mock = MockAdapter("shell")
    mock.set_response(
        "shell:generate",
        Receipt.success(
            adapter="shell",
            action_id="shell:generate",
            output="feat(app): greet users\n\n- print a greeting on start\n",
            exit_code=0,
        ),
    )
    return mock


@pytest.fixture
def registry(git_mock: MockAdapter, shell_mock: MockAdapter) -> AdapterRegistry:
    return AdapterRegistry([git_mock, shell_mock])


class ScriptedIO(WorkflowIO):
    """WorkflowIO that answers from queues and records what it was told."""

    def __init__(self, confirms=(), reviews=(), edits=()):
        super().__init__()
        self.confirms = list(confirms)
        self.reviews = list(reviews)
        self.edits = list(edits)
        self.messages: list[str] = []
        self.errors: list[str] = []
        self.questions: list[str] = []
        self.edited: list[str] = []

    def info(self, message: str) -> None:
        self.messages.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    def confirm(self, question: str) -> bool:
        self.questions.append(question)
        return self.confirms.pop(0)

    def review(self, message: str) -> str:
        return self.reviews.pop(0)

    def edit(self, text: str) -> str | None:
        self.edited.append(text)
        return self.edits.pop(0)


@pytest.fixture
def io() -> ScriptedIO:
    return ScriptedIO()


@pytest.fixture
def make_io():
    """Factory for ScriptedIO with queued answers."""
    return ScriptedIO
