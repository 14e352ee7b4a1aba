"""
Profile models — the shell startup file and the blocks managed in it.

The profile is treated as an ordered sequence of opaque lines.  A
managed block is a half-open line range ``[start, end)`` located by a
header match plus a brace-depth scan; nothing else in the file is
interpreted.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel

ShellKind = Literal["zsh", "bash"]
OwnerKind = Literal["workflow", "reload"]


class ProfileLocation(BaseModel):
    """Which shell the user runs and which file it sources."""

    shell_kind: ShellKind
    path: Path


class ShellProfile(BaseModel):
    """A resolved profile with its current content."""

    shell_kind: ShellKind
    path: Path
    raw_text: str = ""

    @property
    def lines(self) -> list[str]:
        return self.raw_text.splitlines(keepends=True)


class AliasBlock(BaseModel):
    """One named region of the profile."""

    name: str
    owner_kind: OwnerKind
    start: int          # first line (0-based, inclusive)
    end: int            # one past the last line
    text: str = ""

    @property
    def line_count(self) -> int:
        return self.end - self.start


class Backup(BaseModel):
    """A copy of the profile taken before a mutating install."""

    source_path: Path
    backup_path: Path
