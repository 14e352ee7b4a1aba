"""
Adapter base — the protocol contract between callers and external tools.

The workflow engine, model discovery and the headless tester only talk
to git and to the AI CLIs through this protocol, never by spawning
processes themselves.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from quickalias.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """One action plus where to run it.

    ``params`` is the action's parameter dict; a ``cwd`` param overrides
    the caller's working directory.
    """

    action: Action
    cwd: str = "."
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def working_dir(self) -> str:
        return self.params.get("cwd") or self.cwd


class Adapter(ABC):
    """Abstract base class for the shell and git adapters.

    Adapters perform external side effects and return receipts.
    They NEVER raise exceptions — failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier ('shell' or 'git')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying binary is on PATH. Fast, never raises."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check the action's params before anything is spawned.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Execute the action and return a receipt. MUST never raise."""

    # ── Receipt helpers ─────────────────────────────────────────

    def _success(self, context: ExecutionContext, output: str = "", **kwargs: Any) -> Receipt:
        return Receipt.success(
            adapter=self.name, action_id=context.action.id, output=output, **kwargs
        )

    def _failure(self, context: ExecutionContext, error: str, **kwargs: Any) -> Receipt:
        return Receipt.failure(
            adapter=self.name, action_id=context.action.id, error=error, **kwargs
        )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
