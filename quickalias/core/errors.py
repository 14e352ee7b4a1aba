"""
Error taxonomy — labelled failure kinds shared by every layer.

Use cases do not raise these across their public boundary: they return
result objects (``InstallResult``, ``HeadlessResult``, ``WorkflowRun``)
that carry the ``kind`` label instead.  The exceptions exist so internal
helpers can signal a specific category and the caller can map it onto a
result without string matching.
"""

from __future__ import annotations


class QuickAliasError(Exception):
    """Base class for all quick-alias failures."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UserInputConflict(QuickAliasError):
    """An alias name is already defined in the profile."""

    kind = "conflict"


class EnvironmentMissing(QuickAliasError):
    """A required binary (git, provider CLI) is not installed."""

    kind = "environment"


class ProviderTimeout(QuickAliasError):
    """The provider did not answer within the wall-clock bound."""

    kind = "timeout"


class TransientGitState(QuickAliasError):
    """Repository state blocks the workflow (conflicts, detached HEAD)."""

    kind = "git_state"


class ProfileIOError(QuickAliasError):
    """The shell profile could not be read or written."""

    kind = "io"


class UnknownProvider(QuickAliasError):
    """Provider id is not in the catalogue."""

    kind = "provider"


class InvalidAliasName(QuickAliasError):
    """An alias name is not a usable shell function name."""

    kind = "input"
