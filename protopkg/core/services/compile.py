"""
Compile service — wipe the scratch directory and run the compiler once.

The compiler is reached only through an Adapter, so tests can drive
this with the MockAdapter instead of a real protoc.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from protopkg.adapters.base import Adapter, ExecutionContext
from protopkg.core.errors import BuildError, CompilerError
from protopkg.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


def guard_scratch(scratch: Path, protected: dict[str, Path]) -> None:
    """Refuse a scratch directory whose wipe would delete protected paths.

    Args:
        scratch: The scratch directory about to be wiped.
        protected: Label -> path (e.g. source root, output directory).

    Raises:
        BuildError: If scratch equals or contains any protected path.
    """
    wiped = Path(scratch).resolve()
    for label, path in protected.items():
        target = Path(path).resolve()
        if target == wiped or target.is_relative_to(wiped):
            raise BuildError(
                f"Refusing to wipe scratch directory {wiped}: it contains the {label} {target}"
            )


def prepare_scratch(scratch: Path) -> Path:
    """Delete the scratch directory if present and recreate it empty.

    Any previous contents are discarded unconditionally.

    Returns:
        The canonical path of the fresh directory.

    Raises:
        CompilerError: If the directory cannot be removed or created.
    """
    scratch = Path(scratch)
    try:
        if scratch.is_symlink() or scratch.is_file():
            scratch.unlink()
        elif scratch.exists():
            shutil.rmtree(scratch)
        scratch.mkdir(parents=True)
    except OSError as e:
        raise CompilerError(f"Failed to create protoc output directory {scratch}: {e}") from e

    logger.debug("Scratch directory ready: %s", scratch)
    return scratch.resolve()


def build_protoc_args(
    schemas: list[Path],
    source_root: Path,
    scratch: Path,
    pyi: bool = False,
    grpc: bool = False,
) -> list[str]:
    """Assemble the compiler argument list: flags, then every schema file."""
    args = [
        f"--proto_path={source_root}",
        f"--python_out={scratch}",
    ]
    if pyi:
        args.append(f"--pyi_out={scratch}")
    if grpc:
        args.append(f"--grpc_python_out={scratch}")
    args.extend(str(s) for s in schemas)
    return args


def compile_schemas(
    adapter: Adapter,
    schemas: list[Path],
    source_root: Path,
    scratch: Path,
    pyi: bool = False,
    grpc: bool = False,
) -> Receipt:
    """Run the compiler once over all schemas.

    Args:
        adapter: Compiler adapter (ProtocAdapter or a fake).
        schemas: Canonical schema paths.
        source_root: Import-resolution base passed as --proto_path.
        scratch: Prepared (empty) scratch directory for --python_out.
        pyi: Also emit type stubs.
        grpc: Also emit gRPC service stubs.

    Returns:
        The success Receipt.

    Raises:
        CompilerError: If validation fails or the compiler exits non-zero.
    """
    action = Action(
        id="protoc",
        adapter=adapter.name,
        params={"args": build_protoc_args(schemas, source_root, scratch, pyi=pyi, grpc=grpc)},
    )
    context = ExecutionContext(action=action, working_dir=str(source_root))

    is_valid, error_msg = adapter.validate(context)
    if not is_valid:
        raise CompilerError(f"Cannot run compiler: {error_msg}")

    logger.info("Compiling %d schema files with %s", len(schemas), adapter.name)
    receipt = adapter.execute(context)

    if receipt.failed:
        logger.error("cmd: %s", " ".join(receipt.command))
        for arg in receipt.args:
            logger.error("arg: %s", arg)
        code = receipt.return_code
        reason = f"exited with code {code}" if code is not None else "could not be run"
        raise CompilerError(f"Compiler {reason}: {receipt.error}", receipt=receipt)

    logger.debug("Compiler finished in %d ms", receipt.duration_ms)
    return receipt
