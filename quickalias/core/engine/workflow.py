"""
Workflow engine — the AI commit/push state machine, run in-process.

This is the same workflow the generated shell functions implement, but
driven through the adapter registry so every git and provider call is a
Receipt (and scriptable with MockAdapter in tests).

States:
    INIT → PRECONDITIONS → NO_OP_CHECK → REMOTE_CHECK → MESSAGE_SOURCE
         → REVIEW → STAGE_AND_COMMIT → PUSH → DONE

The commit variant goes PRECONDITIONS → MESSAGE_SOURCE → REVIEW →
STAGE_AND_COMMIT → DONE and commits the index as it is.

Exit codes: 0 for success, for "nothing to do" and for a declined
review; 1 for every fatal condition.  Fatal conditions are raised
inside the steps as ``QuickAliasError`` and recorded on the run with
their taxonomy label.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

import click

from quickalias.adapters.registry import AdapterRegistry, default_registry
from quickalias.core.errors import (
    EnvironmentMissing,
    ProviderTimeout,
    QuickAliasError,
    TransientGitState,
)
from quickalias.core.models.action import Action, Receipt
from quickalias.core.models.provider import ProviderConfig
from quickalias.core.models.settings import Settings
from quickalias.core.services.commit_prompt import build_prompt
from quickalias.core.services.providers import augmented_env, build_command, detect_installed

logger = logging.getLogger(__name__)

KINDS = ("push", "commit")
REVIEW_FLAG = "-r"

_URL = re.compile(r"https?://\S+")
_MR_HINT = re.compile(r"merge|pull", re.IGNORECASE)


class WorkflowState(StrEnum):
    INIT = "init"
    PRECONDITIONS = "preconditions"
    NO_OP_CHECK = "no_op_check"
    REMOTE_CHECK = "remote_check"
    MESSAGE_SOURCE = "message_source"
    REVIEW = "review"
    STAGE_AND_COMMIT = "stage_and_commit"
    PUSH = "push"
    DONE = "done"


@dataclass
class WorkflowRun:
    """Everything one workflow invocation decided and did."""

    kind: str
    review: bool = False
    user_message: str | None = None
    branch: str = ""
    message: str = ""
    skip_push: bool = False
    committed: bool = False
    pushed: bool = False
    merge_request_url: str | None = None
    state: WorkflowState = WorkflowState.INIT
    visited: list[WorkflowState] = field(default_factory=list)
    notices: list[str] = field(default_factory=list)
    exit_code: int = 0
    error: str | None = None
    error_kind: str | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> dict:
        result = {
            "kind": self.kind,
            "state": str(self.state),
            "exit_code": self.exit_code,
            "branch": self.branch,
            "committed": self.committed,
            "pushed": self.pushed,
            "visited": [str(s) for s in self.visited],
        }
        if self.message:
            result["message"] = self.message
        if self.merge_request_url:
            result["merge_request_url"] = self.merge_request_url
        if self.error:
            result["error"] = self.error
            result["error_kind"] = self.error_kind
        return result


# ── Arguments ───────────────────────────────────────────────────


def parse_arguments(args: Sequence[str]) -> tuple[bool, str | None]:
    """Split ``[-r] [message words...]`` into (review, message).

    Only a leading ``-r`` is a flag; everything after it is joined with
    single spaces.  An empty remainder means "generate a message".
    """
    args = list(args)
    review = bool(args) and args[0] == REVIEW_FLAG
    if review:
        args = args[1:]
    message = " ".join(args).strip()
    return review, message or None


def find_merge_request_url(output: str) -> str | None:
    """First URL in push output that looks like a merge/pull request link."""
    for url in _URL.findall(output):
        if _MR_HINT.search(url):
            return url
    return None


# ── Terminal I/O ────────────────────────────────────────────────


class WorkflowIO:
    """Terminal interaction used by the workflow (click-backed)."""

    def __init__(self, editor_fallback: str = "vim"):
        self.editor_fallback = editor_fallback

    def info(self, message: str) -> None:
        click.echo(message)

    def error(self, message: str) -> None:
        click.secho(f"❌ {message}", fg="red", err=True)

    def confirm(self, question: str) -> bool:
        return click.confirm(question, default=True)

    def review(self, message: str) -> str:
        """Ask what to do with ``message``: "yes", "no" or "edit"."""
        answer = click.prompt(
            "Proceed with this commit message? [Y/n/e(dit)]",
            default="y",
            show_default=False,
        )
        first = answer.strip().lower()[:1]
        return {"n": "no", "e": "edit"}.get(first, "yes")

    def edit(self, text: str) -> str | None:
        editor = os.environ.get("EDITOR") or self.editor_fallback
        return click.edit(text, editor=editor, require_save=False)


# ── Runner ──────────────────────────────────────────────────────


class WorkflowRunner:
    """Drive one workflow run through its states."""

    def __init__(
        self,
        kind: str,
        run: WorkflowRun,
        *,
        provider: ProviderConfig,
        model: str | None,
        registry: AdapterRegistry,
        io: WorkflowIO,
        cwd: str,
        settings: Settings,
        is_installed: Callable[[ProviderConfig], bool],
    ):
        self.kind = kind
        self.run = run
        self.provider = provider
        self.model = model
        self.registry = registry
        self.io = io
        self.cwd = cwd
        self.settings = settings
        self.is_installed = is_installed
        self._steps: dict[WorkflowState, Callable[[], WorkflowState]] = {
            WorkflowState.INIT: lambda: WorkflowState.PRECONDITIONS,
            WorkflowState.PRECONDITIONS: self._preconditions,
            WorkflowState.NO_OP_CHECK: self._no_op_check,
            WorkflowState.REMOTE_CHECK: self._remote_check,
            WorkflowState.MESSAGE_SOURCE: self._message_source,
            WorkflowState.REVIEW: self._review,
            WorkflowState.STAGE_AND_COMMIT: self._stage_and_commit,
            WorkflowState.PUSH: self._push,
        }

    def execute(self) -> WorkflowRun:
        run = self.run
        try:
            while run.state != WorkflowState.DONE:
                run.visited.append(run.state)
                next_state = self._steps[run.state]()
                logger.debug("workflow %s: %s → %s", self.kind, run.state, next_state)
                run.state = next_state
        except QuickAliasError as e:
            run.exit_code = 1
            run.error = e.message
            run.error_kind = e.kind
            self.io.error(e.message)
            logger.info("workflow %s failed in %s: %s", self.kind, run.state, e.message)
            return run
        run.visited.append(WorkflowState.DONE)
        return run

    # ── Helpers ─────────────────────────────────────────────────

    def _git(self, operation: str, **params) -> Receipt:
        return self.registry.execute_action(
            Action(id=f"git:{operation}", adapter="git", params={"operation": operation, **params}),
            cwd=self.cwd,
        )

    def _notice(self, message: str) -> None:
        self.run.notices.append(message)
        self.io.info(message)

    # ── States ──────────────────────────────────────────────────

    def _preconditions(self) -> WorkflowState:
        if not self.registry.is_available("git"):
            raise EnvironmentMissing("git is not installed")
        if not self._git("is_repo").ok:
            raise TransientGitState("Not a git repository")
        if self._git("unmerged").metadata.get("has_conflicts"):
            raise TransientGitState("Unresolved merge conflicts; resolve them first")

        branch = self._git("branch")
        if branch.metadata.get("detached") or not branch.output:
            raise TransientGitState("Detached HEAD; check out a branch first")
        self.run.branch = branch.output

        if self.kind == "commit":
            if not self._git("changes").metadata.get("has_staged"):
                raise TransientGitState("No staged changes; stage files with 'git add' first")
            return WorkflowState.MESSAGE_SOURCE
        return WorkflowState.NO_OP_CHECK

    def _no_op_check(self) -> WorkflowState:
        changes = self._git("changes").metadata
        if changes.get("has_staged") or changes.get("has_unstaged") or changes.get("has_untracked"):
            return WorkflowState.REMOTE_CHECK

        self._notice("Nothing to commit - working tree clean")
        count = self._git("unpushed").metadata.get("count", 0)
        if count and self.io.confirm(f"You have {count} unpushed commit(s). Push existing commits?"):
            receipt = self._git("push", branch=self.run.branch)
            if not receipt.ok:
                raise QuickAliasError(f"Push failed: {receipt.combined_output.strip() or receipt.error}")
            self.run.pushed = True
            self._notice(f"✓ Pushed to origin/{self.run.branch}")
        return WorkflowState.DONE

    def _remote_check(self) -> WorkflowState:
        if not self._git("remote").ok:
            self.run.skip_push = True
            self._notice("Warning: No remote 'origin' configured; will commit without pushing")
        return WorkflowState.MESSAGE_SOURCE

    def _message_source(self) -> WorkflowState:
        if self.run.user_message:
            self.run.message = self.run.user_message
            self._notice("✓ Using provided commit message")
        else:
            self.run.message = self._generate()
            self.io.info(f"Generated Commit Message:\n{self.run.message}")
        # only generated messages are offered for review
        if self.run.review and not self.run.user_message:
            return WorkflowState.REVIEW
        return WorkflowState.STAGE_AND_COMMIT

    def _generate(self) -> str:
        provider = self.provider
        if not self.is_installed(provider):
            raise EnvironmentMissing(
                f"{provider.display_name} CLI ({provider.binary_name}) is not installed"
            )

        limit = self.settings.diff_line_limit
        staged = self._git("diff", cached=True, limit=limit).output
        if self.kind == "push":
            prompt = build_prompt(
                "push",
                staged,
                self._git("diff", limit=limit).output,
                self._git("untracked", limit=self.settings.untracked_line_limit).output,
            )
        else:
            prompt = build_prompt("commit", staged)

        self.io.info(f"🤖 Generating commit message with {provider.display_name}...")
        receipt = self.registry.execute_action(
            Action(
                id="shell:generate",
                adapter="shell",
                name=f"generate commit message ({provider.id})",
                params={
                    "command": build_command(provider, self.model, "prompt"),
                    "executable": "/bin/sh",
                    "timeout": self.settings.generation_timeout,
                    "env": {"prompt": prompt, **augmented_env()},
                },
            ),
            cwd=self.cwd,
        )
        if receipt.timed_out:
            raise ProviderTimeout(
                f"{provider.display_name} timed out after {self.settings.generation_timeout} seconds"
            )
        if not receipt.ok:
            raise QuickAliasError(f"Failed to generate commit message: {receipt.error}")
        message = receipt.output.strip()
        if not message:
            raise QuickAliasError("Failed to generate commit message: empty response")
        return message

    def _review(self) -> WorkflowState:
        choice = self.io.review(self.run.message)
        if choice == "no":
            self._notice("Aborted.")
            return WorkflowState.DONE
        if choice == "edit":
            edited = (self.io.edit(self.run.message) or "").strip()
            if not edited:
                self._notice("Empty commit message; aborted.")
                return WorkflowState.DONE
            self.run.message = edited
        return WorkflowState.STAGE_AND_COMMIT

    def _stage_and_commit(self) -> WorkflowState:
        if self.kind == "push":
            added = self._git("add_all")
            if not added.ok:
                raise QuickAliasError(f"git add failed: {added.stderr.strip() or added.error}")
            if not self._git("changes").metadata.get("has_staged"):
                self._notice("Nothing to commit")
                return WorkflowState.DONE

        commit = self._git("commit", message=self.run.message)
        if not commit.ok:
            raise QuickAliasError(
                f"git commit failed: {commit.combined_output.strip() or commit.error}"
            )
        self.run.committed = True
        self._notice("✓ Changes committed")

        if self.kind == "commit":
            return WorkflowState.DONE
        if self.run.skip_push:
            self._notice("Skipping push - no remote configured")
            return WorkflowState.DONE
        return WorkflowState.PUSH

    def _push(self) -> WorkflowState:
        branch = self.run.branch
        receipt = self._git("push", branch=branch)
        if not receipt.ok and "no upstream" in receipt.combined_output.lower():
            self._notice("No upstream branch; retrying with --set-upstream")
            receipt = self._git("push", branch=branch, set_upstream=True)
        if not receipt.ok:
            raise QuickAliasError(
                f"git push failed: {receipt.combined_output.strip() or receipt.error}"
            )

        self.run.pushed = True
        self._notice(f"✓ Pushed to origin/{branch}")
        self.run.merge_request_url = find_merge_request_url(receipt.combined_output)
        if self.run.merge_request_url:
            self._notice(f"📎 Create Merge Request: {self.run.merge_request_url}")
        return WorkflowState.DONE


def run_workflow(
    kind: str,
    args: Sequence[str],
    *,
    provider: ProviderConfig,
    model: str | None = None,
    registry: AdapterRegistry | None = None,
    io: WorkflowIO | None = None,
    cwd: str = ".",
    settings: Settings | None = None,
    is_installed: Callable[[ProviderConfig], bool] = detect_installed,
) -> WorkflowRun:
    """Run the ``kind`` workflow ("push" or "commit") with CLI-style ``args``."""
    if kind not in KINDS:
        raise ValueError(f"Unknown workflow kind '{kind}' (expected one of {', '.join(KINDS)})")
    settings = settings or Settings()
    review, message = parse_arguments(args)
    run = WorkflowRun(kind=kind, review=review, user_message=message)

    runner = WorkflowRunner(
        kind,
        run,
        provider=provider,
        model=model,
        registry=registry or default_registry(),
        io=io or WorkflowIO(settings.editor_fallback),
        cwd=cwd,
        settings=settings,
        is_installed=is_installed,
    )
    return runner.execute()
