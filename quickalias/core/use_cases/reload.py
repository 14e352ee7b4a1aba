"""
Reload alias use case — ``alias rl="source <profile>"``.
"""

from __future__ import annotations

import logging
import shlex

from quickalias.core.errors import InvalidAliasName
from quickalias.core.models.profile import ProfileLocation
from quickalias.core.models.result import InstallResult
from quickalias.core.services import profile_ops
from quickalias.core.services.profile_locator import locate_profile
from quickalias.core.services.workflow_emitter import render_reload_alias
from quickalias.core.use_cases.install import validate_alias_name

logger = logging.getLogger(__name__)


def install_reload_alias(
    name: str = "rl",
    overwrite: bool = False,
    *,
    location: ProfileLocation | None = None,
) -> InstallResult:
    """Install an alias that re-sources the profile.

    Same protocol as ``install_aliases``: an existing definition of
    ``name`` (alias line or function) is a conflict unless
    ``overwrite`` is set, in which case it is removed first.
    """
    try:
        validate_alias_name(name)
    except InvalidAliasName as e:
        return InstallResult.failure(e.message, kind=e.kind)

    location = location or locate_profile()
    path = location.path

    if profile_ops.exists(path, name, "reload"):
        if not overwrite:
            return InstallResult.conflicted([name], path)
        existed = True
    else:
        existed = False

    backup_path = None
    try:
        if path.exists():
            saved = profile_ops.backup(path)
            backup_path = saved.backup_path if saved else None
        if existed and not profile_ops.remove_alias_line(path, name):
            return InstallResult.failure(
                f"Could not remove existing '{name}' from {path}",
                profile_path=path,
                backup_path=backup_path,
            )
        profile_ops.append(path, render_reload_alias(name, shlex.quote(str(path))))
    except OSError as e:
        return InstallResult.failure(
            f"Cannot write {path}: {e}", profile_path=path, backup_path=backup_path
        )

    logger.info("Installed reload alias '%s' into %s", name, path)
    return InstallResult.success(
        location.shell_kind,
        path,
        removed_names=[name] if existed else [],
        backup_path=backup_path,
    )
