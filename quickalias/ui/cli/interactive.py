"""
Interactive prompts shared by the install commands.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import click

CONFLICT_ACTIONS = ("override", "rename", "cancel")


def choose_index(title: str, labels: Sequence[str], default: int = 0) -> int:
    """Numbered menu; returns the 0-based index picked."""
    click.secho(title, fg="cyan", bold=True)
    for idx, label in enumerate(labels, start=1):
        click.echo(f"   {idx}. {label}")
    picked = click.prompt(
        "   Choose",
        type=click.IntRange(1, len(labels)),
        default=default + 1,
    )
    return picked - 1


def choose_conflict_action(existing: Sequence[str], profile_path: Path | None) -> str:
    """Ask how to handle names already defined in the profile."""
    where = f" in {profile_path}" if profile_path else ""
    click.secho(f"⚠️  Already defined{where}: {', '.join(existing)}", fg="yellow")
    labels = [
        "Override (replace the existing definitions)",
        "Rename (pick different names)",
        "Cancel",
    ]
    return CONFLICT_ACTIONS[choose_index("What do you want to do?", labels)]


def ask_new_name(current: str) -> str:
    return click.prompt(f"   New name for '{current}'", default=f"{current}a").strip()
