"""
Adapter base — the contract between the compile service and compilers.

The compile service only talks to compilers through this protocol,
never directly via subprocess. Tests swap in the MockAdapter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from protopkg.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to run the compiler.

    The action carries the argument list; the context adds where to
    run it from.
    """

    action: Action
    working_dir: str = "."


class Adapter(ABC):
    """Abstract base class for compiler adapters.

    Adapters perform the external side effect and return receipts.
    They NEVER raise exceptions — failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'protoc', 'mock')."""

    @property
    def command(self) -> list[str]:
        """The argv prefix this adapter runs, for reporting."""
        return [self.name]

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the underlying compiler can be found.

        Should be fast and never raise.
        """

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Validate that the action can be executed.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the compiler and return a receipt.

        MUST never raise exceptions. All failures are captured
        in the Receipt with status='failed'.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
