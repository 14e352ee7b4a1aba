"""
Adapter registry — central dispatch for adapter operations.

Callers build an Action and hand it to the registry; the registry picks
the adapter, validates, executes and always returns a Receipt.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from quickalias.adapters.base import Adapter, ExecutionContext
from quickalias.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Central registry and dispatcher for adapters."""

    def __init__(self, adapters: list[Adapter] | None = None):
        self._adapters: dict[str, Adapter] = {}
        for adapter in adapters or []:
            self.register(adapter)

    def register(self, adapter: Adapter) -> None:
        """Register an adapter under its name."""
        name = adapter.name
        if name in self._adapters:
            logger.warning("Overwriting existing adapter: %s", name)
        self._adapters[name] = adapter
        logger.debug("Registered adapter: %s", name)

    def unregister(self, name: str) -> None:
        self._adapters.pop(name, None)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters.keys())

    def is_available(self, name: str) -> bool:
        """Whether the named adapter exists and its tool is installed."""
        adapter = self._adapters.get(name)
        if adapter is None:
            return False
        try:
            return adapter.is_available()
        except Exception:
            return False

    def adapter_status(self) -> dict[str, dict[str, Any]]:
        """Availability of all registered adapters."""
        return {
            name: {
                "name": name,
                "available": self.is_available(name),
                "type": adapter.__class__.__name__,
            }
            for name, adapter in self._adapters.items()
        }

    def execute_action(
        self,
        action: Action,
        cwd: str = ".",
    ) -> Receipt:
        """Execute an action through its adapter. Never raises."""
        start_time = time.monotonic()

        context = ExecutionContext(
            action=action,
            cwd=cwd,
            params=action.params,
        )

        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        try:
            is_valid, error_msg = adapter.validate(context)
        except Exception as e:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Validation error: {e}",
            )
        if not is_valid:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Validation failed: {error_msg}",
            )

        try:
            receipt = adapter.execute(context)
        except Exception as e:
            # Adapters must not raise; a bug in one still yields a receipt
            logger.error("Adapter %s raised during execution: %s", action.adapter, e)
            receipt = Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Unexpected error: {e}",
            )

        if not receipt.duration_ms:
            receipt.duration_ms = int((time.monotonic() - start_time) * 1000)
        return receipt


def default_registry() -> AdapterRegistry:
    """Registry wired with the real shell and git adapters."""
    from quickalias.adapters.shell.command import ShellCommandAdapter
    from quickalias.adapters.vcs.git import GitAdapter

    return AdapterRegistry([ShellCommandAdapter(), GitAdapter()])
