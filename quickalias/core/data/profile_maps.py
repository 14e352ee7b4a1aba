"""
Shell profile mappings and install-location hints.

Maps shell kinds to the startup files they source, and lists the
directories AI CLIs commonly land in when they are not on the PATH a
non-interactive process inherits.
"""

from __future__ import annotations

_PROFILE_MAP: dict[str, dict[str, list[str] | str]] = {
    # zsh users are assumed to own ~/.zshrc; existence is not checked.
    "zsh": {"rc_file": "~/.zshrc", "candidates": ["~/.zshrc"]},
    # bash: first existing candidate wins, rc_file is the fallback target.
    "bash": {"rc_file": "~/.bashrc", "candidates": ["~/.bashrc", "~/.bash_profile"]},
}

# Probed in addition to $PATH (version managers, per-user installers).
_COMMON_BIN_DIRS: tuple[str, ...] = (
    "~/.local/bin",
    "~/.npm-global/bin",
    "~/.bun/bin",
    "~/.cargo/bin",
    "~/.opencode/bin",
    "~/.volta/bin",
    "/usr/local/bin",
    "/opt/homebrew/bin",
    "/usr/bin",
    "/bin",
)
