"""
Protoc adapter — run the protocol-buffer compiler as a subprocess.

Compiler resolution, first match wins:
    explicit command  >  $PROTOC  >  protoc on PATH  >  python -m grpc_tools.protoc
"""

from __future__ import annotations

import importlib.util
import logging
import os
import shlex
import shutil
import subprocess
import sys
import time
from pathlib import Path

from protopkg.adapters.base import Adapter, ExecutionContext
from protopkg.core.models.action import Receipt

logger = logging.getLogger(__name__)

PROTOC_ENV = "PROTOC"


def resolve_protoc(explicit: str | list[str] | None = None) -> list[str] | None:
    """Find the compiler command to run.

    Args:
        explicit: A command configured by the user, either as a list or
            as a string that is shell-split.

    Returns:
        The command as an argv prefix, or None if nothing was found.
    """
    if explicit:
        return list(explicit) if isinstance(explicit, list) else shlex.split(explicit)

    env_value = os.environ.get(PROTOC_ENV)
    if env_value:
        return [env_value]

    found = shutil.which("protoc")
    if found:
        return [found]

    if importlib.util.find_spec("grpc_tools") is not None:
        return [sys.executable, "-m", "grpc_tools.protoc"]

    return None


class ProtocAdapter(Adapter):
    """Run protoc and capture its output.

    Action params:
        args (list[str]): Arguments passed to the compiler.

    There is no timeout: if the compiler hangs, the run hangs.
    """

    def __init__(self, command: str | list[str] | None = None):
        self._command = resolve_protoc(command)

    @property
    def name(self) -> str:
        return "protoc"

    @property
    def command(self) -> list[str]:
        """Resolved argv prefix (empty if no compiler was found)."""
        return list(self._command or [])

    def is_available(self) -> bool:
        if not self._command:
            return False
        program = self._command[0]
        return Path(program).is_file() or shutil.which(program) is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        if not self._command:
            return False, (
                "protoc not found. Install it, set $PROTOC, "
                "or install protopkg[grpc] for grpc_tools."
            )
        if not context.action.args:
            return False, "Missing required param: 'args'"
        if not Path(context.working_dir).is_dir():
            return False, f"Working directory does not exist: {context.working_dir}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        args = context.action.args
        command = self.command

        if not command:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error="protoc not found",
                args=args,
            )

        logger.debug("Executing: %s %s (cwd=%s)", command, args, context.working_dir)
        start = time.monotonic()

        try:
            result = subprocess.run(
                [*command, *args],
                cwd=context.working_dir,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Cannot run {command[0]}: {e}",
                command=command,
                args=args,
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = result.stdout.strip()
        stderr = result.stderr.strip()

        if result.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=context.action.id,
                output=stdout,
                duration_ms=elapsed_ms,
                command=command,
                args=args,
                return_code=result.returncode,
                metadata={"stderr": stderr},
            )

        return Receipt.failure(
            adapter=self.name,
            action_id=context.action.id,
            error=stderr or f"Compiler exited with code {result.returncode}",
            output=stdout,
            duration_ms=elapsed_ms,
            command=command,
            args=args,
            return_code=result.returncode,
        )
