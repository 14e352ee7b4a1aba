"""
Commit prompt — the Conventional Commits instruction sent to the AI.

One template serves both renditions of the workflow: the Python runner
fills it with captured diffs, the shell emitter fills it with parameter
expansions (``${staged_diff:-(none)}``) so the diffs are read when the
alias runs.  The fixed text therefore must stay free of characters that
are special inside a double-quoted shell word (``"``, ``$``, backtick,
backslash).
"""

from __future__ import annotations

from collections.abc import Callable

EMPTY_SECTION = "(none)"

_INTRO = {
    "push": (
        "Analyze the following git changes and generate a commit message "
        "following the Conventional Commits specification with bullet-point "
        "changelog style."
    ),
    "commit": (
        "Analyze the following staged git changes and generate a commit message "
        "following the Conventional Commits specification with bullet-point "
        "changelog style."
    ),
}

_FORMAT = """## Commit Message Format:
<type>(<scope>): <short summary>

- <bullet point describing a specific change>
- <bullet point describing another change>

## Types: feat, fix, docs, style, refactor, perf, test, build, ci, chore, revert

## Rules:
1. Subject line: max 50 chars, imperative mood, no period
2. Body uses bullet points (- ) to list specific changes
3. Each bullet should be concise and actionable"""

_OUTRO = "OUTPUT ONLY THE COMMIT MESSAGE, nothing else."

# (heading, variable) per section; variable names double as shell locals.
SECTIONS: dict[str, tuple[tuple[str, str], ...]] = {
    "push": (
        ("### Staged Changes:", "staged_diff"),
        ("### Unstaged Changes:", "unstaged_diff"),
        ("### Untracked Files:", "untracked_files"),
    ),
    "commit": (
        ("## Staged Changes:", "staged_diff"),
    ),
}


def render_prompt(kind: str, fill: Callable[[str], str]) -> str:
    """Assemble the prompt, asking ``fill`` for each section body."""
    parts = [_INTRO[kind], "", _FORMAT, ""]
    if kind == "push":
        parts += ["## Git Changes:", ""]
    for heading, variable in SECTIONS[kind]:
        parts += [heading, fill(variable), ""]
    parts.append(_OUTRO)
    return "\n".join(parts)


def build_prompt(kind: str, staged: str = "", unstaged: str = "", untracked: str = "") -> str:
    """Prompt with captured diffs inlined (empty sections read "(none)")."""
    values = {"staged_diff": staged, "unstaged_diff": unstaged, "untracked_files": untracked}
    return render_prompt(kind, lambda var: values[var].strip() or EMPTY_SECTION)


def shell_prompt(kind: str) -> str:
    """Prompt body for a double-quoted shell assignment."""
    return render_prompt(kind, lambda var: f"${{{var}:-{EMPTY_SECTION}}}")
