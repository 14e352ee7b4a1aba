"""
Action and Receipt models — the adapter I/O contract.

The workflow engine and the headless tester never touch subprocesses
directly: they send Actions to adapters and get Receipts back.  Adapters
never raise; every failure (non-zero exit, timeout, missing binary) is
captured in the Receipt.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "failed"]


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Action(BaseModel):
    """A requested operation, addressed to one adapter.

    ``id`` is conventionally ``"<adapter>:<operation>"`` (e.g.
    ``"git:push"``), which lets the mock adapter script responses per
    operation.
    """

    id: str
    adapter: str                    # which adapter handles this
    name: str = ""                  # human-readable label
    params: dict[str, Any] = Field(default_factory=dict)


class Receipt(BaseModel):
    """Result of an adapter execution."""

    adapter: str
    action_id: str
    status: ReceiptStatus = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""                # stdout (or the operation's value)
    stderr: str = ""
    error: str | None = None
    exit_code: int | None = None
    timed_out: bool = False

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the action succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the action failed."""
        return self.status == "failed"

    @property
    def combined_output(self) -> str:
        """stdout followed by stderr, as a user would see it on a tty."""
        if self.output and self.stderr:
            return f"{self.output}\n{self.stderr}"
        return self.output or self.stderr

    @classmethod
    def _build(cls, status: ReceiptStatus, adapter: str, action_id: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status=status, **kwargs)

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls._build("ok", adapter, action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls._build("failed", adapter, action_id, error=error, **kwargs)
