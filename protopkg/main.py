"""
protopkg — CLI entrypoint.

Usage:
    protopkg --help
    protopkg build
    protopkg build --source proto --output mypkg --prefix mypkg.
    protopkg discover
    protopkg config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import cast

import click

from protopkg import __version__
from protopkg.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    level_from_flags,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="protopkg")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to protopkg.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """protopkg — compile .proto schemas into a self-contained Python package."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=level_from_flags(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
    )


def _source_option(f):
    return click.option(
        "--source", "-s", "source_dir", default=None, help="Schema source directory."
    )(f)


def _from_cwd(value: str | None) -> str | None:
    """Anchor a path flag at the working directory, not the config file."""
    if value is None:
        return None
    return str(Path.cwd() / value)


@cli.command()
@_source_option
@click.option("--output", "-o", "output_dir", default=None, help="Destination package directory.")
@click.option("--scratch", "scratch_dir", default=None, help="Scratch directory (wiped every run).")
@click.option("--prefix", default=None, help="Namespace prefix for rewritten imports.")
@click.option("--protoc", default=None, help="Compiler command (default: $PROTOC, then PATH).")
@click.option("--pyi", is_flag=True, help="Also generate .pyi type stubs.")
@click.option("--grpc", is_flag=True, help="Also generate gRPC service stubs.")
@click.option("--dry-run", is_flag=True, help="Show what would run, but don't run it.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def build(
    ctx: click.Context,
    source_dir: str | None,
    output_dir: str | None,
    scratch_dir: str | None,
    prefix: str | None,
    protoc: str | None,
    pyi: bool,
    grpc: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Compile schemas and install them as a prefixed package.

    Examples:

        protopkg build

        protopkg build -s proto -o myapp/proto --prefix myapp.proto.

        protopkg build --dry-run
    """
    from protopkg.core.models.build import BuildConfig
    from protopkg.core.services.rewrite import InstallReport
    from protopkg.core.use_cases.build import run_build

    result = run_build(
        config_path=ctx.obj.get("config_path"),
        overrides={
            "source_dir": _from_cwd(source_dir),
            "output_dir": _from_cwd(output_dir),
            "scratch_dir": _from_cwd(scratch_dir),
            "prefix": prefix,
            "protoc": protoc,
            "pyi": pyi or None,
            "grpc": grpc or None,
        },
        dry_run=dry_run,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        if result.command or result.args:
            click.echo(f"   cmd: {' '.join(result.command)}")
            for arg in result.args:
                click.echo(f"   arg: {arg}")
        sys.exit(1)

    config = cast(BuildConfig, result.config)
    quiet = ctx.obj.get("quiet", False)

    if result.dry_run:
        click.secho("\n🔍 Dry run — nothing executed", fg="cyan", bold=True)
        click.echo(f"   Schemas: {len(result.schemas)} under {result.source_root}")
        click.echo(f"   Would run: {' '.join(result.command) or '(protoc not found)'}")
        for arg in result.args:
            click.echo(f"     {arg}")
        click.echo(f"   Would install into: {config.output_path} (prefix '{config.effective_prefix}')")
        click.echo()
        return

    install = cast(InstallReport, result.install)

    if not quiet:
        click.secho(f"\n📦 {config.output_path}", fg="cyan", bold=True)
        click.echo(f"   Schemas compiled: {len(result.schemas)}")
        click.echo(f"   Files installed:  {len(install.files)}")
        click.echo(f"   Packages:         {len(install.markers)}")
        click.echo(f"   Imports rewritten: {install.lines_rewritten}")
        if ctx.obj.get("verbose"):
            for path in install.files:
                click.echo(f"     • {path}")
        click.echo()

    click.secho("✅ Build complete", fg="green", bold=True)


@cli.command()
@_source_option
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def discover(ctx: click.Context, source_dir: str | None, as_json: bool) -> None:
    """List the schema files a build would compile."""
    from protopkg.core.use_cases.build import list_schemas

    overrides = {"source_dir": _from_cwd(source_dir)}
    if ctx.obj.get("config_path") is None and source_dir:
        # discovery needs no output dir; satisfy the model without a config file
        overrides["output_dir"] = "."

    result = list_schemas(config_path=ctx.obj.get("config_path"), overrides=overrides)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.error is None else 1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho(f"\n🔍 {result.source_root}", fg="cyan", bold=True)
    click.echo(f"   Schemas: {len(result.schemas)}")
    source_root = cast(Path, result.source_root)
    for schema in result.schemas:
        click.echo(f"     • {schema.relative_to(source_root)}")
    click.echo()


@cli.group()
def config() -> None:
    """Build configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate protopkg.yml configuration."""
    from protopkg.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)
        return

    if result.valid and result.config is not None:
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Source: {result.config.source_path}")
        click.echo(f"   Output: {result.config.output_path}")
        click.echo(f"   Prefix: {result.config.effective_prefix}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


if __name__ == "__main__":
    cli()
