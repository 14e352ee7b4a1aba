"""
Tests for CLI commands — global options, profile, config, git, reload,
providers and run.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from quickalias.core.data.providers import PROVIDERS
from quickalias.core.engine.workflow import WorkflowRun
from quickalias.main import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def only_claude(monkeypatch):
    """Pretend Claude Code is the only installed provider CLI."""
    monkeypatch.setattr(
        "quickalias.core.services.providers.detect_providers",
        lambda env=None, home=None: [PROVIDERS["claude"]],
    )


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "AI-powered git aliases" in result.output
        for name in ("git", "reload", "providers", "run", "profile", "config"):
            assert name in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_bad_config_exits_1(self, runner, home: Path):
        bad = home / "config.yml"
        bad.write_text("colour: blue\n")
        result = runner.invoke(cli, ["--config", str(bad), "profile"])
        assert result.exit_code == 1
        assert "❌" in result.output


class TestProfileCommand:
    def test_json(self, runner, home: Path):
        (home / ".bashrc").write_text("gp() {\n  :\n}\n")
        result = runner.invoke(cli, ["profile", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["shell"] == "bash"
        assert data["path"] == str(home / ".bashrc")
        assert data["lines"] == 3
        assert data["aliases"] == {"gp": True, "gc": False, "rl": False}

    def test_detects_both_definition_forms(self, runner, home: Path):
        (home / ".bashrc").write_text("gc()\n{\n  :\n}\nalias rl='exec bash'\n")
        result = runner.invoke(cli, ["profile", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["aliases"] == {"gp": False, "gc": True, "rl": True}

    def test_unreadable_profile(self, runner, home: Path):
        (home / ".bashrc").mkdir()
        result = runner.invoke(cli, ["profile"])
        assert result.exit_code == 1
        assert "Cannot read" in result.output

    def test_zsh(self, runner, home: Path, monkeypatch):
        monkeypatch.setenv("SHELL", "/usr/bin/zsh")
        result = runner.invoke(cli, ["profile"])
        assert result.exit_code == 0
        assert "zsh" in result.output
        assert "will be created" in result.output


class TestConfigShow:
    def test_defaults(self, runner, home: Path):
        result = runner.invoke(cli, ["config", "show", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["push_alias"] == "gp"

    def test_from_file(self, runner, home: Path):
        path = home / "config.yml"
        path.write_text("push_alias: ship\n")
        result = runner.invoke(cli, ["-c", str(path), "config", "show"])
        assert result.exit_code == 0
        assert "push_alias: ship" in result.output


# ── git ──────────────────────────────────────────────────────────────


class TestGitShow:
    def test_prints_function(self, runner, home: Path):
        result = runner.invoke(cli, ["git", "show", "claude", "--model", "haiku"])
        assert result.exit_code == 0
        assert result.output.startswith("# Git Push with AI Commit Message (gp alias)")
        assert "--model haiku" in result.output

    def test_commit_kind_and_name(self, runner, home: Path):
        result = runner.invoke(cli, ["git", "show", "gemini", "--kind", "commit", "--name", "save"])
        assert result.exit_code == 0
        assert "save() {" in result.output

    def test_unknown_provider(self, runner, home: Path):
        result = runner.invoke(cli, ["git", "show", "cursor"])
        assert result.exit_code == 1
        assert "Unknown provider" in result.output


class TestGitInstall:
    ARGS = ["git", "install", "--provider", "claude", "--model", "haiku", "--skip-test", "--yes"]

    def test_install(self, runner, home: Path, only_claude):
        result = runner.invoke(cli, self.ARGS)
        assert result.exit_code == 0, result.output
        assert "Installed gp and gc" in result.output
        text = (home / ".bashrc").read_text()
        assert "gp() {" in text
        assert "--model haiku" in text

    def test_no_provider_installed(self, runner, home: Path, monkeypatch):
        monkeypatch.setattr(
            "quickalias.core.services.providers.detect_providers",
            lambda env=None, home=None: [],
        )
        result = runner.invoke(cli, self.ARGS)
        assert result.exit_code == 1
        assert "No supported AI CLI found" in result.output

    def test_requested_provider_not_installed(self, runner, home: Path, only_claude):
        result = runner.invoke(cli, ["git", "install", "--provider", "aider", "--skip-test", "--yes"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_conflict_with_yes_is_an_error(self, runner, home: Path, only_claude):
        (home / ".bashrc").write_text("gp() {\n  :\n}\n")
        result = runner.invoke(cli, self.ARGS)
        assert result.exit_code == 1
        assert "Already defined: gp" in result.output
        assert (home / ".bashrc").read_text() == "gp() {\n  :\n}\n"

    def test_conflict_overwrite_flag(self, runner, home: Path, only_claude):
        (home / ".bashrc").write_text("gp() {\n  :\n}\n")
        result = runner.invoke(cli, [*self.ARGS, "--overwrite"])
        assert result.exit_code == 0
        assert "Replaced: gp" in result.output

    def test_conflict_rename(self, runner, home: Path, only_claude):
        (home / ".bashrc").write_text("gp() {\n  :\n}\n")
        args = ["git", "install", "--provider", "claude", "--model", "haiku", "--skip-test"]
        result = runner.invoke(cli, args, input="2\n\n")
        assert result.exit_code == 0, result.output
        assert "Installed gpa and gc" in result.output
        assert "gpa() {" in (home / ".bashrc").read_text()

    def test_conflict_cancel(self, runner, home: Path, only_claude):
        (home / ".bashrc").write_text("gc() {\n  :\n}\n")
        args = ["git", "install", "--provider", "claude", "--model", "haiku", "--skip-test"]
        result = runner.invoke(cli, args, input="3\n")
        assert result.exit_code == 0
        assert "Cancelled." in result.output
        assert (home / ".bashrc").read_text() == "gc() {\n  :\n}\n"

    def test_failed_headless_test_aborts(self, runner, home: Path, only_claude, monkeypatch):
        from quickalias.core.services.headless_tester import HeadlessResult

        monkeypatch.setattr(
            "quickalias.core.services.headless_tester.run_headless_test",
            lambda provider, model, **kw: HeadlessResult(success=False, error="auth required"),
        )
        result = runner.invoke(cli, ["git", "install", "--provider", "claude", "--model", "haiku", "--yes"])
        assert result.exit_code == 1
        assert "auth required" in result.output
        assert not (home / ".bashrc").exists()


class TestGitRemove:
    def test_remove(self, runner, home: Path, only_claude):
        runner.invoke(cli, TestGitInstall.ARGS)
        result = runner.invoke(cli, ["git", "remove", "gp", "gc", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["removed_names"] == ["gp", "gc"]
        assert "gp()" not in (home / ".bashrc").read_text()

    def test_nothing_to_remove(self, runner, home: Path):
        result = runner.invoke(cli, ["git", "remove", "gp"])
        assert result.exit_code == 0
        assert "Nothing to remove" in result.output


# ── reload ───────────────────────────────────────────────────────────


class TestReloadInstall:
    def test_default_name(self, runner, home: Path):
        result = runner.invoke(cli, ["reload", "install"])
        assert result.exit_code == 0
        assert f'alias rl="source {home / ".bashrc"}"' in (home / ".bashrc").read_text()

    def test_conflict_override(self, runner, home: Path):
        (home / ".bashrc").write_text("alias rl='exec bash'\n")
        result = runner.invoke(cli, ["reload", "install"], input="1\n")
        assert result.exit_code == 0
        assert "exec bash" not in (home / ".bashrc").read_text()

    def test_invalid_name(self, runner, home: Path):
        result = runner.invoke(cli, ["reload", "install", "bad name"])
        assert result.exit_code == 1
        assert "Invalid alias name" in result.output


# ── providers ────────────────────────────────────────────────────────


class TestProviders:
    def test_list_json(self, runner, home: Path):
        result = runner.invoke(cli, ["providers", "list", "--json"])
        assert result.exit_code == 0
        ids = [row["id"] for row in json.loads(result.output)]
        assert ids == ["claude", "gemini", "copilot", "opencode", "aider"]

    def test_models_static(self, runner, home: Path):
        result = runner.invoke(cli, ["providers", "models", "claude", "--json"])
        assert result.exit_code == 0
        assert [m["value"] for m in json.loads(result.output)] == ["haiku", "sonnet", "opus"]

    def test_models_none(self, runner, home: Path):
        result = runner.invoke(cli, ["providers", "models", "copilot"])
        assert result.exit_code == 0
        assert "takes no model" in result.output

    def test_unknown(self, runner, home: Path):
        result = runner.invoke(cli, ["providers", "models", "cursor"])
        assert result.exit_code == 1


# ── run ──────────────────────────────────────────────────────────────


class TestRun:
    @pytest.fixture
    def calls(self, monkeypatch):
        seen = []

        def fake_run_workflow(kind, args, *, provider, model=None, settings=None, **kw):
            seen.append((kind, tuple(args), provider.id, model))
            run = WorkflowRun(kind=kind)
            run.exit_code = 1 if "fail" in args else 0
            return run

        monkeypatch.setattr("quickalias.core.engine.workflow.run_workflow", fake_run_workflow)
        return seen

    def test_arguments_passed_through(self, runner, home: Path, calls):
        result = runner.invoke(cli, ["run", "push", "--provider", "claude", "--model", "opus", "-r", "fix", "it"])
        assert result.exit_code == 0
        assert calls == [("push", ("-r", "fix", "it"), "claude", "opus")]

    def test_model_dropped_for_copilot(self, runner, home: Path, calls):
        runner.invoke(cli, ["run", "commit", "--provider", "copilot", "--model", "x"])
        assert calls[0][3] is None

    def test_exit_code_propagated(self, runner, home: Path, calls):
        result = runner.invoke(cli, ["run", "commit", "--provider", "claude", "fail"])
        assert result.exit_code == 1

    def test_unknown_kind(self, runner, home: Path, calls):
        result = runner.invoke(cli, ["run", "amend"])
        assert result.exit_code == 2
        assert calls == []
