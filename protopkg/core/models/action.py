"""
Action and Receipt models — the compiler invocation contract.

An Action is a requested compiler run. A Receipt is its outcome.
The compile service sends Actions, adapters return Receipts. Never
exceptions: turning a failed Receipt into an error is the caller's job.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class Action(BaseModel):
    """A requested compiler invocation.

    ``params["args"]`` holds the full argument list passed to the
    compiler (flags first, then schema files).
    """

    id: str                         # unique action identifier
    adapter: str                    # which adapter handles this
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def args(self) -> list[str]:
        return list(self.params.get("args", []))


class Receipt(BaseModel):
    """Result of an adapter execution.

    ``command`` and ``args`` are always filled in, so a failed run can
    be reported exactly as it was invoked.
    """

    adapter: str
    action_id: str
    status: Literal["ok", "failed"] = "ok"
    duration_ms: int = 0

    command: list[str] = Field(default_factory=list)
    args: list[str] = Field(default_factory=list)
    return_code: int | None = None

    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the action succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the action failed."""
        return self.status == "failed"

    @classmethod
    def success(
        cls,
        adapter: str,
        action_id: str,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        return cls(
            adapter=adapter,
            action_id=action_id,
            status="ok",
            output=output,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        adapter: str,
        action_id: str,
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(
            adapter=adapter,
            action_id=action_id,
            status="failed",
            error=error,
            **kwargs,
        )
