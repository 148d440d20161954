"""
Build use case — discover, compile, install.

This is the top-level orchestrator: it loads config, finds schemas,
runs the compiler into a fresh scratch directory, then rewrites and
installs the generated modules. Each phase must succeed before the
next one starts. Errors come back in the result, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from protopkg.adapters.base import Adapter
from protopkg.adapters.protoc import ProtocAdapter
from protopkg.core.config.loader import ConfigError, resolve_config
from protopkg.core.errors import BuildError, CompilerError
from protopkg.core.models.action import Receipt
from protopkg.core.models.build import BuildConfig
from protopkg.core.services.compile import (
    build_protoc_args,
    compile_schemas,
    guard_scratch,
    prepare_scratch,
)
from protopkg.core.services.discovery import canonical_root, discover_schemas
from protopkg.core.services.rewrite import InstallReport, install_generated

logger = logging.getLogger(__name__)


@dataclass
class DiscoverResult:
    """Result of schema discovery alone."""

    config: BuildConfig | None = None
    source_root: Path | None = None
    schemas: list[Path] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "source_root": str(self.source_root),
            "count": len(self.schemas),
            "schemas": [str(s) for s in self.schemas],
        }


@dataclass
class BuildResult:
    """Result of a build run."""

    config: BuildConfig | None = None
    source_root: Path | None = None
    schemas: list[Path] = field(default_factory=list)
    command: list[str] = field(default_factory=list)
    args: list[str] = field(default_factory=list)
    receipt: Receipt | None = None
    install: InstallReport | None = None
    dry_run: bool = False
    error: str | None = None
    compiler_stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"ok": self.ok, "dry_run": self.dry_run}
        if self.error:
            result["error"] = self.error
        if self.command or self.args:
            result["command"] = self.command
            result["args"] = self.args
        if self.compiler_stderr:
            result["compiler_stderr"] = self.compiler_stderr
        if self.source_root:
            result["source_root"] = str(self.source_root)
        result["schema_count"] = len(self.schemas)
        if self.config:
            result["output_dir"] = str(self.config.output_path)
            result["prefix"] = self.config.effective_prefix
        if self.install:
            result["install"] = self.install.to_dict()
        return result


def list_schemas(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> DiscoverResult:
    """Discover schema files without compiling anything."""
    result = DiscoverResult()

    try:
        config = resolve_config(config_path, overrides)
        result.config = config
        result.source_root = canonical_root(config.source_path)
        result.schemas = discover_schemas(result.source_root, config.schema_suffix)
    except (ConfigError, BuildError) as e:
        result.error = str(e)

    return result


def run_build(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    adapter: Adapter | None = None,
    dry_run: bool = False,
) -> BuildResult:
    """Compile schemas and install them as a prefixed package.

    Args:
        config_path: Optional explicit path to protopkg.yml.
        overrides: Config fields from the command line.
        adapter: Compiler adapter. Defaults to a ProtocAdapter built
            from the config's ``protoc`` setting.
        dry_run: Discover and plan, but don't touch the scratch
            directory or run the compiler.

    Returns:
        BuildResult with the install report, or an error.
    """
    result = BuildResult(dry_run=dry_run)

    # ── Load config ──────────────────────────────────────────────
    try:
        config = resolve_config(config_path, overrides)
    except ConfigError as e:
        result.error = str(e)
        return result
    result.config = config

    if adapter is None:
        adapter = ProtocAdapter(config.protoc)

    # ── Discover ─────────────────────────────────────────────────
    try:
        source_root = canonical_root(config.source_path)
        schemas = discover_schemas(source_root, config.schema_suffix)
    except BuildError as e:
        result.error = str(e)
        return result

    result.source_root = source_root
    result.schemas = schemas

    if not schemas:
        result.error = f"No {config.schema_suffix} files found under {source_root}"
        return result

    scratch = config.scratch_path.absolute()

    try:
        guard_scratch(
            scratch,
            {"schema source": source_root, "output directory": config.output_path},
        )
    except BuildError as e:
        result.error = str(e)
        return result

    # ── Dry run: plan only ───────────────────────────────────────
    if dry_run:
        result.command = adapter.command
        result.args = build_protoc_args(
            schemas, source_root, scratch, pyi=config.pyi, grpc=config.grpc
        )
        logger.info("[dry-run] Would compile %d schemas into %s", len(schemas), scratch)
        return result

    # ── Compile ──────────────────────────────────────────────────
    try:
        scratch = prepare_scratch(scratch)
        receipt = compile_schemas(
            adapter, schemas, source_root, scratch, pyi=config.pyi, grpc=config.grpc
        )
    except CompilerError as e:
        result.error = str(e)
        result.receipt = e.receipt
        result.command = e.command
        result.args = e.compiler_args
        result.compiler_stderr = e.stderr
        return result

    result.receipt = receipt
    result.command = receipt.command
    result.args = receipt.args

    # ── Install ──────────────────────────────────────────────────
    try:
        result.install = install_generated(
            scratch,
            config.output_path.absolute(),
            config.effective_prefix,
            suffixes=config.install_suffixes,
            passthrough=config.passthrough,
            marker=config.marker,
        )
    except BuildError as e:
        result.error = str(e)
        return result

    return result
