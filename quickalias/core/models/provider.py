"""
Provider models — static description of an AI CLI.

A provider is immutable configuration: which binary to call, how to put
it in headless mode, how to pass a model, and which models to offer.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelOption(BaseModel):
    """One selectable model for a provider."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    description: str = ""


class ProviderConfig(BaseModel):
    """Catalogue entry for one AI CLI.

    ``models`` is ``None`` when the list must be discovered at runtime
    by running ``binary_name`` with ``list_models_args``; in that case
    ``fallback_models`` is offered whenever discovery fails.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    binary_name: str
    headless_flag: str
    model_flag: str | None = None
    extra_flags: str | None = None
    models: tuple[ModelOption, ...] | None = None

    # ── Dynamic discovery ────────────────────────────────────────
    list_models_args: tuple[str, ...] | None = None
    fallback_models: tuple[ModelOption, ...] = Field(default_factory=tuple)

    install_hint: str = ""

    @property
    def dynamic_models(self) -> bool:
        """Whether models are discovered by invoking the binary."""
        return self.models is None and self.list_models_args is not None

    @property
    def accepts_model(self) -> bool:
        """Whether the CLI takes a model argument at all."""
        return self.model_flag is not None
