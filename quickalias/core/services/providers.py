"""
Provider services — lookup, command construction, detection, model lists.

Command construction is pure string rendering.  Two renderings exist:

    build_command          references a shell variable for the prompt;
                           embedded in generated aliases, where the prompt
                           only exists at run time
    build_literal_command  inlines an escaped prompt; used for one-off
                           invocations such as the headless test

Detection never spawns a process: it probes ``$PATH`` plus the common
per-user install directories that version managers and npm/bun/cargo
installers use.
"""

from __future__ import annotations

import glob
import logging
import os
import shutil
from collections.abc import Iterable, Mapping
from pathlib import Path

from quickalias.adapters.registry import AdapterRegistry, default_registry
from quickalias.core.data.profile_maps import _COMMON_BIN_DIRS
from quickalias.core.data.providers import (
    DEFAULT_NAMESPACE,
    MODEL_PRIORITY,
    MODEL_TAGS,
    PROVIDERS,
)
from quickalias.core.errors import UnknownProvider
from quickalias.core.models.action import Action
from quickalias.core.models.provider import ModelOption, ProviderConfig

logger = logging.getLogger(__name__)

DISCOVERY_TIMEOUT = 10


# ── Lookup ──────────────────────────────────────────────────────


def get_provider(provider_id: str) -> ProviderConfig:
    """Catalogue entry by id.

    Raises:
        UnknownProvider: If the id is not in the catalogue.
    """
    try:
        return PROVIDERS[provider_id]
    except KeyError:
        raise UnknownProvider(
            f"Unknown provider '{provider_id}'. Known: {', '.join(PROVIDERS)}"
        ) from None


def all_providers() -> list[ProviderConfig]:
    return list(PROVIDERS.values())


# ── Command construction ────────────────────────────────────────


def escape_double_quoted(text: str) -> str:
    """Escape ``text`` for interpolation inside a double-quoted shell word."""
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("$", "\\$")
        .replace("`", "\\`")
    )


def _render(provider: ProviderConfig, model: str | None, prompt_word: str) -> str:
    parts = [provider.binary_name, provider.headless_flag, prompt_word]
    if provider.model_flag and model:
        parts += [provider.model_flag, model]
    if provider.extra_flags:
        parts.append(provider.extra_flags)
    return " ".join(parts)


def build_command(
    provider: ProviderConfig,
    model: str | None,
    prompt_var: str = "prompt",
) -> str:
    """One-line invocation reading the prompt from ``$prompt_var``.

    Shape: ``<binary> <headless> "$var" [<modelFlag> <model>] [<extra>]``.
    The model segment is omitted entirely when the provider has no
    model flag (or no model was chosen).
    """
    return _render(provider, model, f'"${prompt_var}"')


def build_literal_command(provider: ProviderConfig, model: str | None, prompt: str) -> str:
    """One-line invocation with ``prompt`` inlined (double quotes escaped)."""
    return _render(provider, model, f'"{escape_double_quoted(prompt)}"')


# ── Detection ───────────────────────────────────────────────────


def search_path(
    env: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> list[str]:
    """Directories probed for provider binaries, in priority order."""
    env = os.environ if env is None else env
    home = home or Path.home()

    dirs: list[str] = [d for d in env.get("PATH", "").split(os.pathsep) if d]
    if env.get("NVM_BIN"):
        dirs.append(env["NVM_BIN"])
    for entry in _COMMON_BIN_DIRS:
        dirs.append(str(home / entry[2:]) if entry.startswith("~/") else entry)
    # nvm installs without an active shell session
    dirs.extend(sorted(glob.glob(str(home / ".nvm/versions/node/*/bin")), reverse=True))

    seen: set[str] = set()
    unique = []
    for d in dirs:
        if d not in seen:
            seen.add(d)
            unique.append(d)
    return unique


def resolve_binary(
    provider: ProviderConfig,
    env: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> str | None:
    """Absolute path of the provider's binary, or None."""
    return shutil.which(provider.binary_name, path=os.pathsep.join(search_path(env, home)))


def augmented_env(
    env: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> dict[str, str]:
    """Environment overrides that let a spawned shell find provider binaries."""
    return {"PATH": os.pathsep.join(search_path(env, home))}


def detect_installed(
    provider: ProviderConfig,
    env: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> bool:
    """Whether the provider's CLI is installed."""
    found = resolve_binary(provider, env, home)
    logger.debug("detect %s → %s", provider.id, found or "not found")
    return found is not None


def detect_providers(
    env: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> list[ProviderConfig]:
    """Installed providers, in catalogue order."""
    return [p for p in PROVIDERS.values() if detect_installed(p, env, home)]


# ── Models ──────────────────────────────────────────────────────


def _model_part(model_id: str) -> str:
    return model_id.split("/", 1)[1] if "/" in model_id else model_id


def sort_models(ids: Iterable[str], priority: tuple[str, ...] = MODEL_PRIORITY) -> list[str]:
    """Order model ids by the first priority substring they contain.

    Ids matching no priority entry go last.  The sort is stable: ties
    keep their input order.
    """
    def rank(model_id: str) -> int:
        lowered = _model_part(model_id).lower()
        for idx, needle in enumerate(priority):
            if needle in lowered:
                return idx
        return len(priority)

    return sorted(ids, key=rank)


def describe_model(model_id: str, index: int) -> str:
    """Short human tag for a discovered model id."""
    namespace = model_id.split("/", 1)[0] if "/" in model_id else DEFAULT_NAMESPACE
    model = _model_part(model_id)
    desc = namespace
    for needle, tag in MODEL_TAGS:
        if needle in model:
            desc += f", {tag}"
    if index == 0:
        desc += " - recommended"
    return desc


def parse_model_listing(stdout: str) -> list[str]:
    """One model id per non-empty line; lines with spaces are not ids."""
    ids = []
    for line in stdout.splitlines():
        line = line.strip()
        if line and " " not in line:
            ids.append(line)
    return ids


def try_dynamic(
    provider: ProviderConfig,
    registry: AdapterRegistry | None = None,
    timeout: int = DISCOVERY_TIMEOUT,
) -> list[ModelOption] | None:
    """Ask the CLI for its models. None on any failure or empty answer."""
    if not provider.list_models_args:
        return None
    registry = registry or default_registry()
    command = " ".join([provider.binary_name, *provider.list_models_args])
    receipt = registry.execute_action(
        Action(
            id="shell:list_models",
            adapter="shell",
            params={
                "command": command,
                "timeout": min(timeout, DISCOVERY_TIMEOUT),
                "env": augmented_env(),
            },
        )
    )
    if not receipt.ok:
        logger.info("Model discovery for %s failed: %s", provider.id, receipt.error)
        return None

    ids = sort_models(parse_model_listing(receipt.output))
    if not ids:
        return None
    return [
        ModelOption(name=model_id, value=model_id, description=describe_model(model_id, idx))
        for idx, model_id in enumerate(ids)
    ]


def static_fallback(provider: ProviderConfig) -> list[ModelOption]:
    """Built-in model list (never empty for discovering providers)."""
    return list(provider.fallback_models)


def list_models(
    provider: ProviderConfig,
    registry: AdapterRegistry | None = None,
    timeout: int = DISCOVERY_TIMEOUT,
) -> list[ModelOption]:
    """Models to offer for ``provider``.

    Static catalogue entries are returned as-is.  Discovering providers
    try the CLI first and fall back to the built-in list.  An empty list
    means the provider takes no model argument at all.
    """
    if provider.models is not None:
        return list(provider.models)
    if provider.dynamic_models:
        return try_dynamic(provider, registry, timeout) or static_fallback(provider)
    return []
