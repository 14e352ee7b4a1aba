"""
Install use case — provision the AI git workflow functions.

Protocol:
    locate profile → detect names → conflict? → back up → remove old
    blocks (overwrite only) → render banner + functions → append

Never raises for expected failures: every outcome is an InstallResult
(success / conflict / failure).  The caller owns the interaction loop
on conflict (override, rename or cancel).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from quickalias.core.errors import InvalidAliasName, ProfileIOError, QuickAliasError
from quickalias.core.models.profile import ProfileLocation
from quickalias.core.models.result import InstallResult
from quickalias.core.models.settings import Settings
from quickalias.core.services import profile_ops
from quickalias.core.services.profile_locator import locate_profile
from quickalias.core.services.providers import get_provider
from quickalias.core.services.workflow_emitter import render_install_block

logger = logging.getLogger(__name__)

_ALIAS_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


@dataclass
class InstallRequest:
    """What to install and how to treat existing definitions."""

    gp_alias: str = "gp"
    gc_alias: str = "gc"
    provider_id: str = "claude"
    model: str | None = None
    overwrite: bool = False

    @property
    def names(self) -> list[str]:
        return [self.gp_alias, self.gc_alias]


def validate_alias_name(name: str) -> None:
    """Raise InvalidAliasName unless ``name`` can be a shell function name."""
    if not _ALIAS_NAME.match(name or ""):
        raise InvalidAliasName(
            f"Invalid alias name '{name}': use letters, digits, '_' or '-' "
            "and start with a letter or '_'"
        )


def _replace_existing(path: Path, names: Sequence[str], kind: str) -> Path | None:
    """Back up the profile, then excise every block for ``names``.

    Returns the backup path (None when no backup could be taken).

    Raises:
        ProfileIOError: If a block could not be removed.
    """
    saved = profile_ops.backup(path) if path.exists() else None
    for name in names:
        if not profile_ops.remove(path, name, kind):
            raise ProfileIOError(f"Could not remove existing '{name}' from {path}")
    return saved.backup_path if saved else None


def install_aliases(
    request: InstallRequest,
    *,
    location: ProfileLocation | None = None,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> InstallResult:
    """Install the push and commit workflow functions.

    Args:
        request: Alias names, provider, model and overwrite policy.
        location: Profile to edit (located from the environment if None).
        settings: Limits and timeouts baked into the functions.
        now: Timestamp for the banner (current UTC time if None).

    Returns:
        InstallResult — conflict lists the names already defined when
        ``overwrite`` is False.
    """
    try:
        for name in request.names:
            validate_alias_name(name)
        if request.gp_alias == request.gc_alias:
            raise InvalidAliasName(f"Push and commit aliases must differ (both '{request.gp_alias}')")
        provider = get_provider(request.provider_id)
    except QuickAliasError as e:
        return InstallResult.failure(e.message, kind=e.kind)

    location = location or locate_profile()
    path = location.path
    model = request.model if provider.accepts_model else None

    existing = [n for n in request.names if profile_ops.exists(path, n, "workflow")]
    if existing and not request.overwrite:
        logger.info("Aliases already defined in %s: %s", path, ", ".join(existing))
        return InstallResult.conflicted(existing, path)

    backup_path = None
    try:
        if existing:
            backup_path = _replace_existing(path, existing, "workflow")
        elif path.exists():
            saved = profile_ops.backup(path)
            backup_path = saved.backup_path if saved else None

        block = render_install_block(
            request.gp_alias,
            request.gc_alias,
            provider,
            model,
            settings=settings,
            generated_at=now,
        )
        profile_ops.append(path, block)
    except ProfileIOError as e:
        return InstallResult.failure(e.message, kind=e.kind, profile_path=path, backup_path=backup_path)
    except OSError as e:
        return InstallResult.failure(
            f"Cannot write {path}: {e}", kind="io", profile_path=path, backup_path=backup_path
        )

    logger.info(
        "Installed %s/%s (%s, %s) into %s",
        request.gp_alias, request.gc_alias, provider.id, model or "default", path,
    )
    return InstallResult.success(
        location.shell_kind,
        path,
        removed_names=existing,
        backup_path=backup_path,
    )


def remove_aliases(
    names: Sequence[str],
    *,
    location: ProfileLocation | None = None,
) -> InstallResult:
    """Remove managed blocks (functions or ``alias`` lines) by name.

    Names that are not defined are ignored; the profile is backed up
    once before the first removal.
    """
    location = location or locate_profile()
    path = location.path

    present = [n for n in names if profile_ops.exists(path, n, "reload")]
    if not present:
        return InstallResult.success(location.shell_kind, path)

    try:
        backup_path = _replace_existing(path, present, "reload")
    except ProfileIOError as e:
        return InstallResult.failure(e.message, kind=e.kind, profile_path=path)

    return InstallResult.success(
        location.shell_kind,
        path,
        removed_names=present,
        backup_path=backup_path,
    )
