"""
CLI command that runs the AI commit workflow directly (no alias needed).
"""

from __future__ import annotations

import sys

import click


@click.command(context_settings={"ignore_unknown_options": True})
@click.argument("kind", type=click.Choice(["push", "commit"]))
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.option("--provider", "provider_id", default=None, help="Provider id (default: configured or first installed).")
@click.option("--model", default=None, help="Model id passed to the provider.")
@click.pass_context
def run(
    ctx: click.Context,
    kind: str,
    args: tuple[str, ...],
    provider_id: str | None,
    model: str | None,
) -> None:
    """Commit (and push) with an AI message: run push|commit [-r] [MESSAGE...]."""
    from quickalias.core.engine.workflow import run_workflow
    from quickalias.core.errors import UnknownProvider
    from quickalias.core.services.providers import all_providers, detect_providers, get_provider

    settings = ctx.obj["settings"]
    requested = provider_id or settings.provider
    if requested:
        try:
            provider = get_provider(requested)
        except UnknownProvider as e:
            click.secho(f"❌ {e.message}", fg="red", err=True)
            sys.exit(1)
    else:
        # With nothing installed the workflow still runs for a given message
        installed = detect_providers() or all_providers()
        provider = installed[0]

    result = run_workflow(
        kind,
        args,
        provider=provider,
        model=(model or settings.model) if provider.accepts_model else None,
        settings=settings,
    )
    sys.exit(result.exit_code)
