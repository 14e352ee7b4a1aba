"""
Mock adapter — scripted test double for any adapter.

Responses are keyed by action id (``"git:push"``, ``"shell:generate"``).
A key can hold a single receipt (returned every time) or a sequence
(consumed in order; the last one repeats).  Unscripted actions succeed.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from quickalias.adapters.base import Adapter, ExecutionContext
from quickalias.core.models.action import Receipt

Responder = Callable[[ExecutionContext], Receipt]


class MockAdapter(Adapter):
    """Universal mock adapter for testing."""

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._responses: dict[str, list[Receipt | Responder]] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def calls(self, action_id: str) -> list[ExecutionContext]:
        """Contexts received for one action id, in call order."""
        return [c for c in self._call_log if c.action.id == action_id]

    def is_available(self) -> bool:
        return self._available

    def set_response(
        self,
        action_id: str,
        response: Receipt | Responder | Sequence[Receipt | Responder],
    ) -> None:
        """Script the response(s) for an action id."""
        if isinstance(response, (list, tuple)):
            self._responses[action_id] = list(response)
        else:
            self._responses[action_id] = [response]

    def set_success(self, action_id: str, output: str = "", **kwargs) -> None:
        self.set_response(
            action_id,
            Receipt.success(adapter=self._name, action_id=action_id, output=output, **kwargs),
        )

    def set_failure(self, action_id: str, error: str = "Mock failure", **kwargs) -> None:
        self.set_response(
            action_id,
            Receipt.failure(adapter=self._name, action_id=action_id, error=error, **kwargs),
        )

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)

        queue = self._responses.get(context.action.id)
        if queue:
            response = queue.pop(0) if len(queue) > 1 else queue[0]
            if callable(response):
                return response(context)
            return response.model_copy()

        return Receipt.success(
            adapter=self._name,
            action_id=context.action.id,
            output=self._default_output,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Clear call log and scripted responses."""
        self._call_log.clear()
        self._responses.clear()
