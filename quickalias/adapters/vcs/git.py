"""
Git adapter — the repository probes and mutations the commit workflow needs.

Each operation maps onto one git invocation (or a small fixed set) and
reports its findings in the receipt's ``output`` and ``metadata``.
Uses the git CLI — never a library binding.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

from quickalias.adapters.base import Adapter, ExecutionContext
from quickalias.core.models.action import Receipt

logger = logging.getLogger(__name__)

_OPERATIONS = {
    "is_repo",
    "unmerged",
    "branch",
    "changes",
    "unpushed",
    "remote",
    "diff",
    "untracked",
    "add_all",
    "commit",
    "push",
}


def truncate_lines(text: str, limit: int) -> str:
    """Keep at most ``limit`` lines of ``text`` (``head -n`` semantics)."""
    lines = text.splitlines()
    if len(lines) <= limit:
        return text.rstrip("\n")
    return "\n".join(lines[:limit])


class GitAdapter(Adapter):
    """Git operations used by the commit/push workflow.

    Action params:
        operation (str): One of the names in ``_OPERATIONS``.
        message (str): Commit message (for 'commit').
        branch (str): Branch to push (for 'push').
        set_upstream (bool): Push with --set-upstream (for 'push').
        cached (bool): Diff the index instead of the worktree (for 'diff').
        limit (int): Max lines kept (for 'diff' / 'untracked').
        timeout (int): Timeout in seconds (default: 30, push: 120).
    """

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.params.get("operation", "")
        if not operation:
            return False, "Missing required param: 'operation'"
        if operation not in _OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(_OPERATIONS))}"
        if operation == "commit" and not context.params.get("message"):
            return False, "Missing required param: 'message' for commit operation"
        if operation == "push" and not context.params.get("branch"):
            return False, "Missing required param: 'branch' for push operation"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.params["operation"]
        start = time.monotonic()
        try:
            receipt = getattr(self, f"_{operation}")(context)
        except subprocess.TimeoutExpired as e:
            receipt = self._failure(
                context, f"git {operation} timed out after {e.timeout}s", timed_out=True
            )
        except Exception as e:
            receipt = self._failure(context, f"Git error: {e}")
        receipt.duration_ms = int((time.monotonic() - start) * 1000)
        return receipt

    # ── Probes ──────────────────────────────────────────────────

    def _is_repo(self, ctx: ExecutionContext) -> Receipt:
        r = self._git(["rev-parse", "--is-inside-work-tree"], ctx)
        if r.returncode != 0:
            return self._fail(ctx, r, "Not a git repository")
        return self._ok(ctx, r.stdout.strip())

    def _unmerged(self, ctx: ExecutionContext) -> Receipt:
        r = self._git(["ls-files", "-u"], ctx)
        if r.returncode != 0:
            return self._fail(ctx, r, "Cannot read index")
        return self._ok(ctx, r.stdout, metadata={"has_conflicts": bool(r.stdout.strip())})

    def _branch(self, ctx: ExecutionContext) -> Receipt:
        r = self._git(["branch", "--show-current"], ctx)
        branch = r.stdout.strip() if r.returncode == 0 else ""
        return self._ok(ctx, branch, metadata={"detached": not branch})

    def _changes(self, ctx: ExecutionContext) -> Receipt:
        staged = self._git(["diff", "--cached", "--quiet"], ctx).returncode != 0
        unstaged = self._git(["diff", "--quiet"], ctx).returncode != 0
        untracked = bool(
            self._git(["ls-files", "--others", "--exclude-standard"], ctx).stdout.strip()
        )
        return self._ok(
            ctx,
            f"staged={staged}, unstaged={unstaged}, untracked={untracked}",
            metadata={
                "has_staged": staged,
                "has_unstaged": unstaged,
                "has_untracked": untracked,
            },
        )

    def _unpushed(self, ctx: ExecutionContext) -> Receipt:
        r = self._git(["log", "@{u}..", "--oneline"], ctx)
        if r.returncode != 0:
            # No upstream configured — nothing can be "unpushed" relative to it.
            return self._ok(ctx, "", metadata={"count": 0, "has_upstream": False})
        count = len([ln for ln in r.stdout.splitlines() if ln.strip()])
        return self._ok(ctx, r.stdout, metadata={"count": count, "has_upstream": True})

    def _remote(self, ctx: ExecutionContext) -> Receipt:
        r = self._git(["remote", "get-url", "origin"], ctx)
        if r.returncode != 0:
            return self._fail(ctx, r, "No remote 'origin' configured")
        return self._ok(ctx, r.stdout.strip())

    def _diff(self, ctx: ExecutionContext) -> Receipt:
        args = ["diff", "--cached"] if ctx.params.get("cached") else ["diff"]
        r = self._git(args, ctx)
        limit = ctx.params.get("limit", 500)
        return self._ok(ctx, truncate_lines(r.stdout, limit) if r.returncode == 0 else "")

    def _untracked(self, ctx: ExecutionContext) -> Receipt:
        r = self._git(["ls-files", "--others", "--exclude-standard"], ctx)
        limit = ctx.params.get("limit", 50)
        return self._ok(ctx, truncate_lines(r.stdout, limit) if r.returncode == 0 else "")

    # ── Mutations ───────────────────────────────────────────────

    def _add_all(self, ctx: ExecutionContext) -> Receipt:
        r = self._git(["add", "-A"], ctx)
        if r.returncode != 0:
            return self._fail(ctx, r, "git add failed")
        return self._ok(ctx, r.stdout)

    def _commit(self, ctx: ExecutionContext) -> Receipt:
        r = self._git(["commit", "-m", ctx.params["message"]], ctx)
        if r.returncode != 0:
            return self._fail(ctx, r, "Failed to commit")
        return self._ok(ctx, r.stdout, stderr=r.stderr)

    def _push(self, ctx: ExecutionContext) -> Receipt:
        args = ["push"]
        if ctx.params.get("set_upstream"):
            args.append("--set-upstream")
        args += ["origin", ctx.params["branch"]]
        r = self._git(args, ctx, timeout=ctx.params.get("timeout", 120))
        if r.returncode != 0:
            return self._fail(ctx, r, "Push failed")
        # git reports progress and remote hints (PR links) on stderr
        return self._ok(ctx, r.stdout, stderr=r.stderr)

    # ── Helpers ─────────────────────────────────────────────────

    def _git(
        self,
        args: list[str],
        ctx: ExecutionContext,
        timeout: int | None = None,
    ) -> subprocess.CompletedProcess[str]:
        """Run a git command; never raises on non-zero exit."""
        logger.debug("git %s (cwd=%s)", " ".join(args), ctx.working_dir)
        return subprocess.run(
            ["git", *args],
            cwd=ctx.working_dir,
            capture_output=True,
            text=True,
            timeout=timeout or ctx.params.get("timeout", 30),
        )

    def _ok(self, ctx: ExecutionContext, output: str, **kwargs) -> Receipt:
        return self._success(ctx, output, exit_code=0, **kwargs)

    def _fail(
        self,
        ctx: ExecutionContext,
        result: subprocess.CompletedProcess[str],
        message: str,
    ) -> Receipt:
        return self._failure(
            ctx,
            message,
            output=result.stdout,
            stderr=result.stderr,
            exit_code=result.returncode,
        )
