"""
Headless tester — prove a provider/model pair answers before installing it.

Runs the provider once with a trivial prompt under a hard wall-clock
deadline.  CLIs differ in whether they print anything for such a
prompt, so the verdict is lenient:

    1. any stdout/stderr text       → success
    2. no text but exit code 0      → success ("CLI responded successfully")
    3. otherwise                    → failure (stderr or exit-code message)

Timeouts are reported as failures and never retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from quickalias.adapters.registry import AdapterRegistry, default_registry
from quickalias.core.models.action import Action
from quickalias.core.models.provider import ProviderConfig
from quickalias.core.services.providers import augmented_env, build_literal_command

logger = logging.getLogger(__name__)

TEST_PROMPT = "Say OK"
TEST_TIMEOUT = 60


@dataclass
class HeadlessResult:
    """Outcome of a headless test."""

    success: bool
    output: str | None = None
    error: str | None = None
    timed_out: bool = False

    def to_dict(self) -> dict:
        result: dict = {"success": self.success}
        if self.output is not None:
            result["output"] = self.output
        if self.error is not None:
            result["error"] = self.error
        if self.timed_out:
            result["timed_out"] = True
        return result


def run_headless_test(
    provider: ProviderConfig,
    model: str | None,
    *,
    registry: AdapterRegistry | None = None,
    timeout: int = TEST_TIMEOUT,
) -> HeadlessResult:
    """Run ``provider`` once with ``TEST_PROMPT`` and judge the answer."""
    registry = registry or default_registry()
    command = build_literal_command(provider, model, TEST_PROMPT)
    logger.info("Testing %s (%s): %s", provider.display_name, model or "default model", command)

    receipt = registry.execute_action(
        Action(
            id="shell:headless_test",
            adapter="shell",
            name=f"headless test {provider.id}",
            params={
                "command": command,
                "timeout": timeout,
                "inherit_stdin": True,
                "env": {"TERM": "dumb", **augmented_env()},
            },
        )
    )

    if receipt.timed_out:
        return HeadlessResult(success=False, error=receipt.error, timed_out=True)

    if receipt.exit_code is None:
        # Never started (missing shell/binary, spawn error)
        return HeadlessResult(success=False, error=receipt.error or "CLI could not be started")

    if (receipt.output + receipt.stderr).strip():
        return HeadlessResult(success=True, output=receipt.output or receipt.stderr)

    if receipt.exit_code == 0:
        return HeadlessResult(success=True, output="CLI responded successfully")

    return HeadlessResult(
        success=False,
        error=receipt.stderr or f"CLI exited with code {receipt.exit_code}",
    )

