"""
Static catalogues — provider table and shell profile maps.

Plain module-level data, loaded once per process and never mutated:

    from quickalias.core.data import PROVIDERS

    claude = PROVIDERS["claude"]
"""

from quickalias.core.data.profile_maps import _COMMON_BIN_DIRS, _PROFILE_MAP
from quickalias.core.data.providers import (
    DEFAULT_NAMESPACE,
    MODEL_PRIORITY,
    MODEL_TAGS,
    PROVIDERS,
)

__all__ = [
    "DEFAULT_NAMESPACE",
    "MODEL_PRIORITY",
    "MODEL_TAGS",
    "PROVIDERS",
    "_COMMON_BIN_DIRS",
    "_PROFILE_MAP",
]
