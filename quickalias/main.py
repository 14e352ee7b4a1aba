"""
quick-alias — CLI entrypoint.

Usage:
    quick-alias --help
    quick-alias git install
    quick-alias reload install
    quick-alias providers list
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click
import yaml

from quickalias.core.observability.logging_config import (
    LOG_FILE_ENV,
    LOG_FILE_LEVEL_ENV,
    resolve_level,
    setup_logging,
)

from quickalias import __version__


@click.group()
@click.version_option(version=__version__, prog_name="quick-alias")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to config.yml (default: $QUICKALIAS_CONFIG or ~/.config/quick-alias/config.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """quick-alias — install AI-powered git aliases into your shell profile."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
    )

    # ── Settings ────────────────────────────────────────────────
    from quickalias.core.config.loader import ConfigError, find_config_file, load_settings

    try:
        ctx.obj["settings"] = load_settings(ctx.obj["config_path"])
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)
    ctx.obj["settings_path"] = find_config_file(ctx.obj["config_path"])


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def profile(ctx: click.Context, as_json: bool) -> None:
    """Show the detected shell and profile, and which aliases it defines."""
    from quickalias.core.services import profile_ops
    from quickalias.core.services.profile_locator import load_profile, locate_profile

    settings = ctx.obj["settings"]
    location = locate_profile()
    try:
        shell_profile = load_profile(location)
    except (OSError, UnicodeDecodeError) as e:
        click.secho(f"❌ Cannot read {location.path}: {e}", fg="red", err=True)
        sys.exit(1)
    names = [settings.push_alias, settings.commit_alias, settings.reload_alias]
    defined = {name: profile_ops.matches(shell_profile.raw_text, name, "reload") for name in names}

    if as_json:
        click.echo(json.dumps({
            "shell": shell_profile.shell_kind,
            "path": str(shell_profile.path),
            "exists": location.path.exists(),
            "lines": len(shell_profile.lines),
            "aliases": defined,
        }, indent=2))
        return

    click.secho(f"🐚 {shell_profile.shell_kind}", fg="cyan", bold=True)
    state = "" if location.path.exists() else " (will be created)"
    click.echo(f"   Profile: {location.path}{state}")
    for name, present in defined.items():
        mark = click.style("✓", fg="green") if present else click.style("·", fg="bright_black")
        click.echo(f"   {mark} {name}")
    click.echo()


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("show")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_show(ctx: click.Context, as_json: bool) -> None:
    """Print the effective settings."""
    settings = ctx.obj["settings"]
    data = settings.model_dump(mode="json")

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    path = ctx.obj["settings_path"]
    source = str(path) if path.exists() else f"{path} (not found, using defaults)"
    click.secho(f"⚙️  {source}", fg="cyan")
    click.echo(yaml.safe_dump(data, sort_keys=False).rstrip())
    click.echo()


# ── Register sub-command groups from quickalias/ui/cli/ ─────────

from quickalias.ui.cli.git import git
from quickalias.ui.cli.providers import providers
from quickalias.ui.cli.reload import reload
from quickalias.ui.cli.run import run

cli.add_command(git)
cli.add_command(reload)
cli.add_command(providers)
cli.add_command(run)


if __name__ == "__main__":
    cli()
