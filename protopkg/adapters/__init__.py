"""Adapters — compiler bindings.

Public re-exports for convenient access.
"""

from protopkg.adapters.base import Adapter, ExecutionContext
from protopkg.adapters.mock import MockAdapter
from protopkg.adapters.protoc import ProtocAdapter, resolve_protoc

__all__ = [
    "Adapter",
    "ExecutionContext",
    "MockAdapter",
    "ProtocAdapter",
    "resolve_protoc",
]
