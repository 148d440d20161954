"""
Build errors — one class per pipeline phase.

Services raise these; the build use case catches them and turns
them into a BuildResult error. All of them are fatal for the run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from protopkg.core.models.action import Receipt


class BuildError(Exception):
    """Base class for every failure that aborts a build."""


class DiscoveryError(BuildError):
    """The schema root is missing, inaccessible, or not a directory."""


class CompilerError(BuildError):
    """The external compiler could not be run or exited non-zero."""

    def __init__(self, message: str, receipt: Receipt | None = None):
        super().__init__(message)
        self.receipt = receipt

    @property
    def command(self) -> list[str]:
        return self.receipt.command if self.receipt else []

    @property
    def compiler_args(self) -> list[str]:
        return self.receipt.args if self.receipt else []

    @property
    def stderr(self) -> str:
        if self.receipt is None:
            return ""
        return self.receipt.error or ""


class InstallError(BuildError):
    """A generated file could not be read, or a destination written."""
