"""
Settings model — user defaults read from config.yml.

Every field has a default, so an absent config file means "use the
built-in behaviour".
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Settings(BaseModel):
    """Effective quick-alias configuration."""

    model_config = ConfigDict(extra="forbid")

    # ── Alias names ──────────────────────────────────────────────
    push_alias: str = "gp"
    commit_alias: str = "gc"
    reload_alias: str = "rl"

    # ── Provider defaults ────────────────────────────────────────
    provider: str | None = None
    model: str | None = None

    # ── Timeouts (seconds) ───────────────────────────────────────
    test_timeout: int = Field(default=60, gt=0)
    discovery_timeout: int = Field(default=10, gt=0, le=10)
    generation_timeout: int = Field(default=120, gt=0)

    # ── Workflow ─────────────────────────────────────────────────
    editor_fallback: str = "vim"
    diff_line_limit: int = Field(default=500, gt=0)
    untracked_line_limit: int = Field(default=50, gt=0)
