"""
Mock adapter — fake compiler for tests.

Stands in for protoc without touching external tools. It records every
call and, on success, writes a configured set of files into the
directory named by ``--python_out=``, the way the real compiler would.
"""

from __future__ import annotations

from pathlib import Path

from protopkg.adapters.base import Adapter, ExecutionContext
from protopkg.core.models.action import Receipt

PYTHON_OUT_FLAG = "--python_out="


class MockAdapter(Adapter):
    """Fake compiler.

    By default, succeeds and writes nothing. Use ``set_outputs`` to
    have it emit generated files, ``set_failure`` to make it exit
    non-zero.
    """

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        outputs: dict[str, str] | None = None,
    ):
        self._name = adapter_name
        self._available = available
        self._outputs: dict[str, str] = dict(outputs or {})
        self._failure: tuple[int, str] | None = None
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        """Number of times execute has been called."""
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_outputs(self, outputs: dict[str, str]) -> None:
        """Files (relative path -> content) to write into --python_out."""
        self._outputs = dict(outputs)

    def set_failure(self, return_code: int = 1, error: str = "Mock failure") -> None:
        """Make every subsequent execute fail with this exit code."""
        self._failure = (return_code, error)

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)
        args = context.action.args

        if self._failure is not None:
            return_code, error = self._failure
            return Receipt.failure(
                adapter=self._name,
                action_id=context.action.id,
                error=error,
                command=self.command,
                args=args,
                return_code=return_code,
            )

        out_dir = _python_out(args)
        if out_dir is not None:
            for rel_path, content in self._outputs.items():
                target = out_dir / rel_path
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content, encoding="utf-8", newline="")

        return Receipt.success(
            adapter=self._name,
            action_id=context.action.id,
            output=f"[mock] wrote {len(self._outputs)} files",
            command=self.command,
            args=args,
            return_code=0,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Clear call log, outputs and failure."""
        self._call_log.clear()
        self._outputs.clear()
        self._failure = None


def _python_out(args: list[str]) -> Path | None:
    for arg in args:
        if arg.startswith(PYTHON_OUT_FLAG):
            return Path(arg[len(PYTHON_OUT_FLAG):])
    return None
