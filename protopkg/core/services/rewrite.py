"""
Import rewriting and packaging — turn protoc output into a package.

protoc emits absolute imports between generated modules
(``from foo import bar_pb2``). Those only work when the output root is
on sys.path. Rewriting them to ``from <prefix>foo import bar_pb2``
makes the tree importable as a subpackage. Imports into passthrough
namespaces (``google.protobuf`` and friends) are left alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from protopkg.core.errors import InstallError
from protopkg.core.services.discovery import find_files

logger = logging.getLogger(__name__)

IMPORT_TOKEN = "from "
DEFAULT_PASSTHROUGH = ("google",)
DEFAULT_MARKER = "__init__.py"


@dataclass
class InstallReport:
    """What the install phase wrote."""

    output_dir: Path | None = None
    files: list[Path] = field(default_factory=list)
    markers: list[Path] = field(default_factory=list)
    lines_rewritten: int = 0

    def to_dict(self) -> dict:
        return {
            "output_dir": str(self.output_dir) if self.output_dir else None,
            "files": [str(f) for f in self.files],
            "markers": [str(m) for m in self.markers],
            "lines_rewritten": self.lines_rewritten,
        }


def rewrite_line(
    line: str,
    prefix: str,
    passthrough: list[str] | tuple[str, ...] = DEFAULT_PASSTHROUGH,
) -> str:
    """Prefix a ``from`` import unless it targets a passthrough namespace.

    The match is a plain string prefix test: ``from googleapis`` counts
    as ``google`` too. Everything after ``from `` is kept byte for byte,
    line ending included.
    """
    if not line.startswith(IMPORT_TOKEN):
        return line
    for namespace in passthrough:
        if line.startswith(IMPORT_TOKEN + namespace):
            return line
    return IMPORT_TOKEN + prefix + line[len(IMPORT_TOKEN):]


def rewrite_text(
    text: str,
    prefix: str,
    passthrough: list[str] | tuple[str, ...] = DEFAULT_PASSTHROUGH,
) -> tuple[str, int]:
    """Apply rewrite_line to every ``\\n``-separated line.

    Line endings (``\\n`` or ``\\r\\n``) and a missing final newline are
    preserved exactly.

    Returns:
        (new_text, number_of_rewritten_lines)
    """
    out: list[str] = []
    rewritten = 0
    for line in text.split("\n"):
        new = rewrite_line(line, prefix, passthrough)
        if new != line:
            rewritten += 1
        out.append(new)
    return "\n".join(out), rewritten


def install_generated(
    scratch: Path,
    output: Path,
    prefix: str,
    suffixes: list[str] | tuple[str, ...] = (".py",),
    passthrough: list[str] | tuple[str, ...] = DEFAULT_PASSTHROUGH,
    marker: str = DEFAULT_MARKER,
) -> InstallReport:
    """Rewrite every generated file under ``scratch`` into ``output``.

    Each file keeps its path relative to the scratch root. The first
    time a destination directory is seen it is created and gets an
    empty marker file; existing destination files are overwritten.

    Raises:
        InstallError: On the first I/O failure. Files already written
            stay in place.
    """
    scratch = Path(scratch).resolve()
    output = Path(output)
    report = InstallReport(output_dir=output)
    seen_dirs: set[Path] = set()

    for generated in find_files(scratch, tuple(suffixes)):
        try:
            relative = generated.relative_to(scratch)
        except ValueError as e:
            raise InstallError(
                f"Generated file is not based in the scratch directory: {generated}"
            ) from e

        destination = output / relative
        parent = destination.parent

        if parent not in seen_dirs:
            seen_dirs.add(parent)
            marker_path = parent / marker
            try:
                parent.mkdir(parents=True, exist_ok=True)
                marker_path.write_bytes(b"")
            except OSError as e:
                raise InstallError(f"Failed to create output directory {parent}: {e}") from e
            report.markers.append(marker_path)
            logger.debug("Package marker: %s", marker_path)

        try:
            with open(generated, encoding="utf-8", newline="") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise InstallError(f"Failed to read generated file {generated}: {e}") from e

        new_text, count = rewrite_text(text, prefix, passthrough)

        try:
            with open(destination, "w", encoding="utf-8", newline="") as f:
                f.write(new_text)
        except OSError as e:
            raise InstallError(f"Failed to write output file {destination}: {e}") from e

        report.files.append(destination)
        report.lines_rewritten += count
        logger.debug("Installed %s (%d imports rewritten)", destination, count)

    logger.info(
        "Installed %d files into %s (%d markers, %d imports rewritten)",
        len(report.files),
        output,
        len(report.markers),
        report.lines_rewritten,
    )
    return report
