"""
Profile locator — which shell does the user run, which file does it source.

Always returns a location; the file it names may not exist yet (it is
created by the first append).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from quickalias.core.data.profile_maps import _PROFILE_MAP
from quickalias.core.models.profile import ProfileLocation, ShellProfile
from quickalias.core.services import profile_ops

logger = logging.getLogger(__name__)


def _expand(path: str, home: Path) -> Path:
    return home / path[2:] if path.startswith("~/") else Path(path)


def locate_profile(
    env: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> ProfileLocation:
    """Resolve the shell kind and startup file.

    Policy:
        - ``$SHELL`` contains "zsh" → ``~/.zshrc`` (existence not checked)
        - otherwise the first existing of ``~/.bashrc``, ``~/.bash_profile``
        - neither exists → ``~/.bashrc``
    """
    env = os.environ if env is None else env
    home = home or Path.home()
    shell = env.get("SHELL", "")

    if "zsh" in shell:
        zsh = _PROFILE_MAP["zsh"]
        return ProfileLocation(shell_kind="zsh", path=_expand(str(zsh["rc_file"]), home))

    bash = _PROFILE_MAP["bash"]
    for candidate in bash["candidates"]:
        path = _expand(candidate, home)
        if path.exists():
            return ProfileLocation(shell_kind="bash", path=path)

    fallback = _expand(str(bash["rc_file"]), home)
    logger.debug("No bash profile found; will create %s", fallback)
    return ProfileLocation(shell_kind="bash", path=fallback)


def load_profile(location: ProfileLocation) -> ShellProfile:
    """Read the located profile ("" when it does not exist)."""
    return ShellProfile(
        shell_kind=location.shell_kind,
        path=location.path,
        raw_text=profile_ops.read_profile(location.path),
    )
