"""
CLI commands for the AI git workflow aliases.

Thin wrappers over ``quickalias.core.use_cases.install`` and the
workflow emitter.
"""

from __future__ import annotations

import json
import sys

import click

from quickalias.core.models.provider import ProviderConfig
from quickalias.core.models.settings import Settings
from quickalias.ui.cli.interactive import ask_new_name, choose_conflict_action, choose_index


@click.group()
def git() -> None:
    """AI git aliases — install, remove, preview."""


# ── Selection helpers ───────────────────────────────────────────


def _fail(message: str) -> None:
    click.secho(f"❌ {message}", fg="red", err=True)
    sys.exit(1)


def _pick_provider(
    requested: str | None,
    installed: list[ProviderConfig],
    assume_yes: bool,
) -> ProviderConfig:
    from quickalias.core.errors import UnknownProvider
    from quickalias.core.services.providers import get_provider

    if requested:
        try:
            provider = get_provider(requested)
        except UnknownProvider as e:
            _fail(e.message)
        if provider not in installed:
            _fail(
                f"{provider.display_name} CLI ({provider.binary_name}) not found. "
                f"Install it with: {provider.install_hint}"
            )
        return provider

    if len(installed) == 1 or assume_yes:
        click.echo(f"🤖 Using {installed[0].display_name}")
        return installed[0]

    idx = choose_index("Select AI provider:", [p.display_name for p in installed])
    return installed[idx]


def _pick_model(
    provider: ProviderConfig,
    requested: str | None,
    settings: Settings,
    assume_yes: bool,
) -> str | None:
    from quickalias.core.services.providers import list_models

    if not provider.accepts_model:
        if requested:
            click.secho(f"⚠️  {provider.display_name} takes no model; ignoring '{requested}'", fg="yellow")
        return None
    if requested:
        return requested

    models = list_models(provider, timeout=settings.discovery_timeout)
    if not models:
        return None
    if assume_yes:
        return models[0].value

    labels = [f"{m.name} ({m.description})" if m.description else m.name for m in models]
    return models[choose_index(f"Select {provider.display_name} model:", labels)].value


# ── Commands ────────────────────────────────────────────────────


@git.command("install")
@click.option("--push-alias", default=None, help="Name for the commit-and-push function (default: gp).")
@click.option("--commit-alias", default=None, help="Name for the commit-only function (default: gc).")
@click.option("--provider", "provider_id", default=None, help="Provider id (claude, gemini, copilot, opencode, aider).")
@click.option("--model", default=None, help="Model id passed to the provider.")
@click.option("--overwrite", is_flag=True, help="Replace existing definitions without asking.")
@click.option("--skip-test", is_flag=True, help="Do not run the provider once before installing.")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Accept defaults; never prompt.")
@click.pass_context
def install(
    ctx: click.Context,
    push_alias: str | None,
    commit_alias: str | None,
    provider_id: str | None,
    model: str | None,
    overwrite: bool,
    skip_test: bool,
    assume_yes: bool,
) -> None:
    """Install the AI commit/push functions into your shell profile."""
    from quickalias.core.services.headless_tester import run_headless_test
    from quickalias.core.services.providers import all_providers, detect_providers
    from quickalias.core.use_cases.install import InstallRequest, install_aliases

    settings: Settings = ctx.obj["settings"]

    installed = detect_providers()
    if not installed:
        click.secho("❌ No supported AI CLI found. Install one of:", fg="red", err=True)
        for p in all_providers():
            click.echo(f"   • {p.display_name}: {p.install_hint}", err=True)
        sys.exit(1)

    provider = _pick_provider(provider_id or settings.provider, installed, assume_yes)
    chosen_model = _pick_model(provider, model or settings.model, settings, assume_yes)

    if not skip_test:
        click.echo(f"🧪 Testing {provider.display_name} ({chosen_model or 'default model'})...")
        test = run_headless_test(provider, chosen_model, timeout=settings.test_timeout)
        if not test.success:
            click.secho(f"❌ Headless test failed: {test.error}", fg="red", err=True)
            click.echo("   Use --skip-test to install anyway.", err=True)
            sys.exit(1)
        click.secho("✅ Provider responded", fg="green")

    request = InstallRequest(
        gp_alias=push_alias or settings.push_alias,
        gc_alias=commit_alias or settings.commit_alias,
        provider_id=provider.id,
        model=chosen_model,
        overwrite=overwrite,
    )

    while True:
        result = install_aliases(request, settings=settings)
        if not result.conflict:
            break
        if assume_yes:
            _fail(
                f"Already defined: {', '.join(result.existing_names)}. "
                "Re-run with --overwrite or choose other names."
            )
        action = choose_conflict_action(result.existing_names, result.profile_path)
        if action == "cancel":
            click.echo("Cancelled.")
            return
        if action == "override":
            request.overwrite = True
            continue
        for name in result.existing_names:
            new_name = ask_new_name(name)
            if name == request.gp_alias:
                request.gp_alias = new_name
            else:
                request.gc_alias = new_name

    if not result.ok:
        _fail(result.reason or "Install failed")

    click.secho(f"✅ Installed {request.gp_alias} and {request.gc_alias}", fg="green", bold=True)
    click.echo(f"   Profile: {result.profile_path}")
    if result.removed_names:
        click.echo(f"   Replaced: {', '.join(result.removed_names)}")
    if result.backup_path:
        click.echo(f"   💾 Backup: {result.backup_path}")
    click.echo()
    click.echo(f"   {request.gp_alias} [-r] [message]   stage all, commit with an AI message, push")
    click.echo(f"   {request.gc_alias} [-r] [message]   commit staged changes with an AI message")
    click.echo()
    click.secho(f"   Run 'source {result.profile_path}' or open a new terminal.", fg="cyan")


@git.command("remove")
@click.argument("names", nargs=-1, required=True)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def remove(names: tuple[str, ...], as_json: bool) -> None:
    """Remove aliases (functions or alias lines) from your profile."""
    from quickalias.core.use_cases.install import remove_aliases

    result = remove_aliases(list(names))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if not result.ok:
        _fail(result.reason or "Remove failed")

    if not result.removed_names:
        click.secho(f"Nothing to remove in {result.profile_path}", fg="yellow")
        return

    click.secho(f"✅ Removed {', '.join(result.removed_names)}", fg="green")
    if result.backup_path:
        click.echo(f"   💾 Backup: {result.backup_path}")


@git.command("show")
@click.argument("provider_id")
@click.option("--model", default=None, help="Model id passed to the provider.")
@click.option("--kind", type=click.Choice(["push", "commit"]), default="push", help="Workflow variant.")
@click.option("--name", default=None, help="Function name (default: configured alias).")
@click.pass_context
def show(ctx: click.Context, provider_id: str, model: str | None, kind: str, name: str | None) -> None:
    """Print the shell function that would be installed."""
    from quickalias.core.errors import UnknownProvider
    from quickalias.core.services.providers import get_provider
    from quickalias.core.services.workflow_emitter import render

    settings: Settings = ctx.obj["settings"]
    try:
        provider = get_provider(provider_id)
    except UnknownProvider as e:
        _fail(e.message)

    default_name = settings.push_alias if kind == "push" else settings.commit_alias
    click.echo(render(kind, name or default_name, provider, model, settings), nl=False)
