"""
Static catalogue of supported AI CLIs.

Loaded once at import time and never mutated.  Order matters: it is
the order providers are probed and presented in.
"""

from __future__ import annotations

from quickalias.core.models.provider import ModelOption, ProviderConfig

PROVIDERS: dict[str, ProviderConfig] = {
    "claude": ProviderConfig(
        id="claude",
        display_name="Claude Code",
        binary_name="claude",
        headless_flag="--print",
        model_flag="--model",
        extra_flags="--dangerously-skip-permissions",
        models=(
            ModelOption(name="haiku", value="haiku", description="fast, cheap"),
            ModelOption(name="sonnet", value="sonnet", description="balanced"),
            ModelOption(name="opus", value="opus", description="most capable"),
        ),
        install_hint="npm install -g @anthropic-ai/claude-code",
    ),
    "gemini": ProviderConfig(
        id="gemini",
        display_name="Gemini CLI",
        binary_name="gemini",
        headless_flag="--prompt",
        model_flag="--model",
        models=(
            ModelOption(name="gemini-3-flash", value="gemini-3-flash", description="fast, efficient"),
            ModelOption(name="gemini-3-pro", value="gemini-3-pro", description="advanced reasoning"),
        ),
        install_hint="npm install -g @google/gemini-cli",
    ),
    "copilot": ProviderConfig(
        id="copilot",
        display_name="GitHub Copilot CLI",
        binary_name="copilot",
        headless_flag="--prompt",
        model_flag=None,
        models=None,
        install_hint="npm install -g @github/copilot",
    ),
    "opencode": ProviderConfig(
        id="opencode",
        display_name="OpenCode",
        binary_name="opencode",
        headless_flag="run",
        model_flag="--model",
        models=None,
        list_models_args=("models",),
        fallback_models=(
            ModelOption(name="opencode/big-pickle", value="opencode/big-pickle", description="stable, recommended"),
            ModelOption(name="opencode/glm-4.7-free", value="opencode/glm-4.7-free", description="free tier"),
            ModelOption(name="opencode/gpt-5-nano", value="opencode/gpt-5-nano", description="lightweight"),
            ModelOption(name="opencode/grok-code", value="opencode/grok-code", description="coding focused"),
        ),
        install_hint="npm install -g opencode-ai",
    ),
    "aider": ProviderConfig(
        id="aider",
        display_name="Aider",
        binary_name="aider",
        headless_flag="--message",
        model_flag="--model",
        extra_flags="--yes-always --no-auto-commits",
        models=(
            ModelOption(name="claude-sonnet-4", value="claude-sonnet-4", description="balanced"),
            ModelOption(name="gpt-5", value="gpt-5", description="advanced"),
            ModelOption(name="claude-haiku-4", value="claude-haiku-4", description="fast, cheap"),
        ),
        install_hint="pip install aider-chat",
    ),
}

# Substrings of discovered model ids, most preferred first.
# big-pickle is the stable default; the rest follow in this order.
MODEL_PRIORITY: tuple[str, ...] = ("big-pickle", "glm", "gpt", "grok", "minimax")

# Substring → tag appended to a discovered model's description.
MODEL_TAGS: tuple[tuple[str, str], ...] = (
    ("free", "free tier"),
    ("flash", "fast"),
    ("nano", "lightweight"),
)

# Namespace used when a discovered id has no ``provider/`` prefix.
DEFAULT_NAMESPACE = "opencode"
