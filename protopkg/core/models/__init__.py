"""Domain models — the typed vocabulary of protopkg."""

from protopkg.core.models.action import Action, Receipt
from protopkg.core.models.build import BuildConfig

__all__ = [
    "Action",
    "BuildConfig",
    "Receipt",
]
