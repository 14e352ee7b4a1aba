"""
CLI commands for the shell reload alias.
"""

from __future__ import annotations

import sys

import click

from quickalias.ui.cli.interactive import ask_new_name, choose_conflict_action


@click.group()
def reload() -> None:
    """Shell reload alias — re-source your profile with one word."""


@reload.command("install")
@click.argument("name", required=False)
@click.option("--overwrite", is_flag=True, help="Replace an existing definition without asking.")
@click.pass_context
def install(ctx: click.Context, name: str | None, overwrite: bool) -> None:
    """Install ``alias NAME="source <profile>"`` (default name: rl)."""
    from quickalias.core.use_cases.reload import install_reload_alias

    name = name or ctx.obj["settings"].reload_alias

    while True:
        result = install_reload_alias(name, overwrite)
        if not result.conflict:
            break
        action = choose_conflict_action(result.existing_names, result.profile_path)
        if action == "cancel":
            click.echo("Cancelled.")
            return
        if action == "override":
            overwrite = True
        else:
            name = ask_new_name(name)

    if not result.ok:
        click.secho(f"❌ {result.reason}", fg="red", err=True)
        sys.exit(1)

    click.secho(f"✅ Installed reload alias '{name}'", fg="green", bold=True)
    click.echo(f"   Profile: {result.profile_path}")
    if result.backup_path:
        click.echo(f"   💾 Backup: {result.backup_path}")
    click.secho(f"   Run 'source {result.profile_path}' once, then '{name}' from then on.", fg="cyan")
