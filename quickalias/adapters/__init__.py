"""Adapters — tool bindings for git and the AI CLIs.

Public re-exports for convenient access.
"""

from quickalias.adapters.base import Adapter, ExecutionContext
from quickalias.adapters.mock import MockAdapter
from quickalias.adapters.registry import AdapterRegistry, default_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "default_registry",
]
