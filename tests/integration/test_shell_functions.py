"""
Integration: source the generated gp/gc functions into bash and run them.

The provider CLI is a fake ``claude`` script placed first on PATH.
"""

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from quickalias.core.data.providers import PROVIDERS
from quickalias.core.services.workflow_emitter import render_install_block

pytestmark = pytest.mark.skipif(
    shutil.which("bash") is None or shutil.which("git") is None,
    reason="bash and git are required",
)

GENERATED = "feat(app): add greeting"

REAL_GIT = shutil.which("git")


@pytest.fixture
def sandbox(tmp_path: Path) -> dict:
    home = tmp_path / "home"
    home.mkdir()
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    repo = tmp_path / "repo"
    repo.mkdir()

    env = {
        "HOME": str(home),
        "PATH": os.pathsep.join([str(bin_dir), os.environ.get("PATH", "")]),
        "GIT_AUTHOR_NAME": "Dev",
        "GIT_AUTHOR_EMAIL": "dev@example.com",
        "GIT_COMMITTER_NAME": "Dev",
        "GIT_COMMITTER_EMAIL": "dev@example.com",
        "GIT_CONFIG_NOSYSTEM": "1",
        "LANG": "C.UTF-8",
    }

    def git(*args: str) -> str:
        return subprocess.run(
            ["git", *args], cwd=repo, env=env, check=True, capture_output=True, text=True
        ).stdout.strip()

    git("init", "-q", "-b", "main")
    (repo / "README.md").write_text("hello\n")
    git("add", "README.md")
    git("commit", "-q", "-m", "init")

    functions = tmp_path / "functions.sh"
    functions.write_text(render_install_block("gp", "gc", PROVIDERS["claude"], "haiku"))

    return {"env": env, "repo": repo, "bin": bin_dir, "functions": functions, "git": git}


def fake_provider(sandbox: dict, body: str) -> None:
    script = sandbox["bin"] / "claude"
    script.write_text("#!/bin/sh\n" + body)
    script.chmod(0o755)


SHELLS = {
    "bash": ["bash", "--noprofile", "--norc", "-c"],
    "zsh": ["zsh", "-f", "-c"],
}


def fake_editor(sandbox: dict, message: str) -> None:
    script = sandbox["bin"] / "fake-editor"
    script.write_text(f"#!/bin/sh\nprintf '%s\\n' '{message}' > \"$1\"\n")
    script.chmod(0o755)
    sandbox["env"]["EDITOR"] = str(script)


def fake_git_push(sandbox: dict, on_push: str) -> Path:
    """Wrap git so that ``git push`` runs ``on_push`` first; calls are logged."""
    log = sandbox["bin"].parent / "push.log"
    script = sandbox["bin"] / "git"
    script.write_text(
        "#!/bin/sh\n"
        'if [ "$1" = "push" ]; then\n'
        f'    echo "$*" >> "{log}"\n'
        f"{on_push}"
        "fi\n"
        f'exec "{REAL_GIT}" "$@"\n'
    )
    script.chmod(0o755)
    return log


def add_origin(sandbox: dict, remote: Path) -> None:
    subprocess.run(["git", "init", "-q", "--bare", str(remote)], check=True, env=sandbox["env"])
    sandbox["git"]("remote", "add", "origin", str(remote))


def remote_head(sandbox: dict, remote: Path) -> str:
    return subprocess.run(
        ["git", "--git-dir", str(remote), "log", "-1", "--format=%s", "main"],
        env=sandbox["env"], capture_output=True, text=True, check=True,
    ).stdout.strip()


def call(
    sandbox: dict, line: str, stdin: str = "", shell: str = "bash"
) -> subprocess.CompletedProcess:
    script = f'source "{sandbox["functions"]}"\ncd "{sandbox["repo"]}"\n{line}\n'
    return subprocess.run(
        [*SHELLS[shell], script],
        env=sandbox["env"],
        input=stdin,
        capture_output=True,
        text=True,
        timeout=60,
    )


class TestCommitFunction:
    def test_commits_staged_with_given_message(self, sandbox):
        (sandbox["repo"] / "app.py").write_text("print('hi')\n")
        sandbox["git"]("add", "app.py")
        (sandbox["repo"] / "notes.txt").write_text("not staged\n")

        result = call(sandbox, 'gc "fix: manual message"')

        assert result.returncode == 0, result.stderr
        assert sandbox["git"]("log", "-1", "--format=%s") == "fix: manual message"
        assert sandbox["git"]("ls-files", "--others", "--exclude-standard") == "notes.txt"

    def test_requires_staged_changes(self, sandbox):
        (sandbox["repo"] / "README.md").write_text("changed\n")
        result = call(sandbox, 'gc "fix: nothing staged"')
        assert result.returncode == 1
        assert "No staged changes" in result.stderr

    def test_generated_message(self, sandbox):
        fake_provider(sandbox, f'echo "{GENERATED}"\n')
        (sandbox["repo"] / "app.py").write_text("print('hi')\n")
        sandbox["git"]("add", "app.py")

        result = call(sandbox, "gc")

        assert result.returncode == 0, result.stderr
        assert sandbox["git"]("log", "-1", "--format=%s") == GENERATED

    def test_user_message_skips_review(self, sandbox):
        (sandbox["repo"] / "app.py").write_text("print('hi')\n")
        sandbox["git"]("add", "app.py")

        result = call(sandbox, 'gc -r "fix: typed"')

        assert result.returncode == 0, result.stderr
        assert "Proceed with this commit message" not in result.stdout
        assert sandbox["git"]("log", "-1", "--format=%s") == "fix: typed"

    def test_review_reject(self, sandbox):
        fake_provider(sandbox, f'echo "{GENERATED}"\n')
        (sandbox["repo"] / "app.py").write_text("print('hi')\n")
        sandbox["git"]("add", "app.py")

        result = call(sandbox, "gc -r", stdin="n\n")

        assert result.returncode == 0
        assert "Aborted." in result.stdout
        assert sandbox["git"]("log", "-1", "--format=%s") == "init"

    def test_review_edit(self, sandbox):
        fake_provider(sandbox, f'echo "{GENERATED}"\n')
        fake_editor(sandbox, "fix: edited by hand")
        (sandbox["repo"] / "app.py").write_text("print('hi')\n")
        sandbox["git"]("add", "app.py")

        result = call(sandbox, "gc -r", stdin="e\n")

        assert result.returncode == 0, result.stderr
        assert sandbox["git"]("log", "-1", "--format=%s") == "fix: edited by hand"

    @pytest.mark.skipif(shutil.which("zsh") is None, reason="zsh is not installed")
    def test_runs_under_zsh(self, sandbox):
        (sandbox["repo"] / "app.py").write_text("print('hi')\n")
        sandbox["git"]("add", "app.py")

        result = call(sandbox, 'gc "fix: from zsh"', shell="zsh")

        assert result.returncode == 0, result.stderr
        assert sandbox["git"]("log", "-1", "--format=%s") == "fix: from zsh"


class TestPushFunction:
    def test_clean_tree_is_a_no_op(self, sandbox):
        result = call(sandbox, "gp")
        assert result.returncode == 0
        assert "Nothing to commit" in result.stdout

    def test_no_remote_commits_without_push(self, sandbox):
        fake_provider(sandbox, f'echo "{GENERATED}"\n')
        (sandbox["repo"] / "app.py").write_text("print('hi')\n")

        result = call(sandbox, "gp")

        assert result.returncode == 0, result.stderr
        assert "Skipping push" in result.stdout
        assert sandbox["git"]("log", "-1", "--format=%s") == GENERATED

    def test_pushes_to_origin(self, sandbox, tmp_path):
        remote = tmp_path / "remote.git"
        add_origin(sandbox, remote)
        (sandbox["repo"] / "app.py").write_text("print('hi')\n")

        result = call(sandbox, 'gp "feat: ship it"')

        assert result.returncode == 0, result.stderr
        assert remote_head(sandbox, remote) == "feat: ship it"

    def test_provider_failure(self, sandbox):
        fake_provider(sandbox, 'echo "rate limited" >&2\nexit 3\n')
        (sandbox["repo"] / "app.py").write_text("print('hi')\n")

        result = call(sandbox, "gp")

        assert result.returncode == 1
        assert "Failed to generate commit message" in result.stderr
        assert "rate limited" in result.stderr
        assert sandbox["git"]("log", "-1", "--format=%s") == "init"


class TestUnpushedCommits:
    @pytest.fixture
    def ahead(self, sandbox, tmp_path):
        remote = tmp_path / "remote.git"
        add_origin(sandbox, remote)
        sandbox["git"]("push", "-q", "-u", "origin", "main")
        (sandbox["repo"] / "app.py").write_text("print('hi')\n")
        sandbox["git"]("add", "app.py")
        sandbox["git"]("commit", "-q", "-m", "feat: local only")
        return remote

    def test_accept_pushes_existing_commits(self, sandbox, ahead):
        result = call(sandbox, "gp", stdin="\n")

        assert result.returncode == 0, result.stderr
        assert "You have 1 unpushed commit(s)" in result.stdout
        assert remote_head(sandbox, ahead) == "feat: local only"

    def test_decline_leaves_remote_untouched(self, sandbox, ahead):
        result = call(sandbox, "gp", stdin="n\n")

        assert result.returncode == 0, result.stderr
        assert "You have 1 unpushed commit(s)" in result.stdout
        assert remote_head(sandbox, ahead) == "init"


class TestPushFailures:
    @pytest.fixture
    def remote(self, sandbox, tmp_path):
        remote = tmp_path / "remote.git"
        add_origin(sandbox, remote)
        (sandbox["repo"] / "app.py").write_text("print('hi')\n")
        return remote

    def test_no_upstream_retries_once_with_set_upstream(self, sandbox, remote):
        log = fake_git_push(
            sandbox,
            '    case "$*" in\n'
            "        *--set-upstream*) ;;\n"
            '        *) echo "fatal: The current branch main has no upstream branch." >&2; exit 128 ;;\n'
            "    esac\n",
        )

        result = call(sandbox, 'gp "feat: first push"')

        assert result.returncode == 0, result.stderr
        pushes = log.read_text().splitlines()
        assert len(pushes) == 2
        assert "--set-upstream" not in pushes[0]
        assert "--set-upstream" in pushes[1]
        assert remote_head(sandbox, remote) == "feat: first push"

    def test_other_push_failure_is_shown_verbatim(self, sandbox, remote):
        log = fake_git_push(
            sandbox,
            '    echo "remote: Permission to dev/app.git denied to dev." >&2\n'
            "    exit 1\n",
        )

        result = call(sandbox, 'gp "feat: denied"')

        assert result.returncode == 1
        assert "remote: Permission to dev/app.git denied to dev." in result.stderr
        assert len(log.read_text().splitlines()) == 1
        assert sandbox["git"]("log", "-1", "--format=%s") == "feat: denied"
