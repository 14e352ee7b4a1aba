"""
InstallResult — outcome of one provisioning attempt.

Tagged by ``status``:

    success   alias text appended; ``shell`` and ``profile_path`` set
    conflict  names already defined; ``existing_names`` lists them
    failure   nothing usable was written; ``reason`` explains why

The interactive layer loops on ``conflict`` (override / rename /
cancel) and stops on the other two.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from quickalias.core.errors import UserInputConflict


class InstallResult(BaseModel):
    """Result of installing (or removing) managed aliases."""

    status: Literal["success", "conflict", "failure"]
    shell: str | None = None
    profile_path: Path | None = None
    existing_names: list[str] = Field(default_factory=list)
    removed_names: list[str] = Field(default_factory=list)
    backup_path: Path | None = None
    reason: str | None = None
    kind: str | None = None          # error taxonomy label on failure

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @property
    def conflict(self) -> bool:
        return self.status == "conflict"

    @classmethod
    def success(cls, shell: str, profile_path: Path, **kwargs: Any) -> InstallResult:
        return cls(status="success", shell=shell, profile_path=profile_path, **kwargs)

    @classmethod
    def conflicted(cls, existing_names: list[str], profile_path: Path) -> InstallResult:
        return cls(
            status="conflict",
            existing_names=list(existing_names),
            profile_path=profile_path,
            kind=UserInputConflict.kind,
        )

    @classmethod
    def failure(cls, reason: str, kind: str = "io", **kwargs: Any) -> InstallResult:
        return cls(status="failure", reason=reason, kind=kind, **kwargs)

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return self.model_dump(mode="json", exclude_none=True)
