"""
Domain models — Pydantic types for quick-alias.

All models are re-exported here for convenient access:

    from quickalias.core.models import ProviderConfig, InstallResult, Receipt
"""

from quickalias.core.models.action import Action, Receipt
from quickalias.core.models.profile import (
    AliasBlock,
    Backup,
    OwnerKind,
    ProfileLocation,
    ShellKind,
    ShellProfile,
)
from quickalias.core.models.provider import ModelOption, ProviderConfig
from quickalias.core.models.result import InstallResult
from quickalias.core.models.settings import Settings

__all__ = [
    # action.py
    "Action",
    # profile.py
    "AliasBlock",
    "Backup",
    # result.py
    "InstallResult",
    # provider.py
    "ModelOption",
    "OwnerKind",
    "ProfileLocation",
    "ProviderConfig",
    "Receipt",
    # settings.py
    "Settings",
    "ShellKind",
    "ShellProfile",
]
