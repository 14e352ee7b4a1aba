"""
CLI commands for AI providers — detection, models, headless test.
"""

from __future__ import annotations

import json
import sys

import click


@click.group()
def providers() -> None:
    """AI provider CLIs — list, models, test."""


def _get(provider_id: str):
    from quickalias.core.errors import UnknownProvider
    from quickalias.core.services.providers import get_provider

    try:
        return get_provider(provider_id)
    except UnknownProvider as e:
        click.secho(f"❌ {e.message}", fg="red", err=True)
        sys.exit(1)


@providers.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def list_cmd(as_json: bool) -> None:
    """Show every supported provider and whether it is installed."""
    from quickalias.core.services.providers import all_providers, resolve_binary

    rows = [(p, resolve_binary(p)) for p in all_providers()]

    if as_json:
        click.echo(json.dumps([
            {
                "id": p.id,
                "name": p.display_name,
                "binary": p.binary_name,
                "installed": path is not None,
                "path": path,
                "install_hint": p.install_hint,
            }
            for p, path in rows
        ], indent=2))
        return

    for p, path in rows:
        if path:
            click.secho(f"  ✓ {p.id:<10}", fg="green", nl=False)
            click.echo(f" {p.display_name}  → {path}")
        else:
            click.secho(f"  ✗ {p.id:<10}", fg="bright_black", nl=False)
            click.echo(f" {p.display_name}  ({p.install_hint})")
    click.echo()


@providers.command("models")
@click.argument("provider_id")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def models(ctx: click.Context, provider_id: str, as_json: bool) -> None:
    """List the models offered for a provider."""
    from quickalias.core.services.providers import list_models

    provider = _get(provider_id)
    options = list_models(provider, timeout=ctx.obj["settings"].discovery_timeout)

    if as_json:
        click.echo(json.dumps([m.model_dump() for m in options], indent=2))
        return

    if not options:
        click.secho(f"{provider.display_name} takes no model argument.", fg="yellow")
        return

    click.secho(f"🧠 {provider.display_name}", fg="cyan", bold=True)
    for m in options:
        desc = f"  ({m.description})" if m.description else ""
        click.echo(f"   • {m.value}{desc}")
    click.echo()


@providers.command("test")
@click.argument("provider_id")
@click.option("--model", default=None, help="Model id passed to the provider.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def test(ctx: click.Context, provider_id: str, model: str | None, as_json: bool) -> None:
    """Run the provider once headlessly and report whether it answered."""
    from quickalias.core.services.headless_tester import TEST_PROMPT, run_headless_test

    provider = _get(provider_id)
    timeout = ctx.obj["settings"].test_timeout

    if not as_json:
        click.echo(f"🧪 Asking {provider.display_name} to \"{TEST_PROMPT}\" (timeout {timeout}s)...")
    result = run_headless_test(provider, model if provider.accepts_model else None, timeout=timeout)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.success else 1)

    if not result.success:
        click.secho(f"❌ {result.error}", fg="red", err=True)
        sys.exit(1)

    click.secho("✅ Provider responded", fg="green")
    if result.output:
        click.echo(f"   {result.output.strip()[:200]}")
