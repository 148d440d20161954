"""
Build model — what to compile, where to put it, how to rewrite it.

Loaded from protopkg.yml (or assembled from CLI flags), this is the
complete description of one build run.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class BuildConfig(BaseModel):
    """Configuration for one protoc build.

    Relative paths are resolved against ``base_dir``, which the loader
    sets to the directory holding the config file.
    """

    source_dir: str = "proto"
    scratch_dir: str = "protoc_out"
    output_dir: str
    prefix: str | None = None

    schema_suffix: str = ".proto"
    generated_suffixes: list[str] = Field(default_factory=lambda: [".py"])
    passthrough: list[str] = Field(default_factory=lambda: ["google"])
    marker: str = "__init__.py"

    protoc: str | None = None       # explicit compiler command
    pyi: bool = False               # also emit .pyi stubs
    grpc: bool = False              # also emit *_pb2_grpc.py service stubs

    base_dir: str = "."

    @field_validator("output_dir")
    @classmethod
    def _output_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("output_dir must not be empty")
        return v

    @field_validator("schema_suffix")
    @classmethod
    def _dotted_suffix(cls, v: str) -> str:
        if not v.startswith("."):
            raise ValueError(f"suffix must start with '.': {v!r}")
        return v

    @field_validator("generated_suffixes")
    @classmethod
    def _dotted_suffixes(cls, v: list[str]) -> list[str]:
        bad = [s for s in v if not s.startswith(".")]
        if bad:
            raise ValueError(f"suffixes must start with '.': {', '.join(bad)}")
        return v

    @property
    def effective_prefix(self) -> str:
        """Namespace spliced after ``from `` (defaults to ``<output dir name>.``)."""
        if self.prefix is not None:
            return self.prefix
        return f"{Path(self.output_dir).name}."

    @property
    def install_suffixes(self) -> list[str]:
        """Generated-file suffixes picked up by the install phase."""
        suffixes = list(self.generated_suffixes)
        if self.pyi and ".pyi" not in suffixes:
            suffixes.append(".pyi")
        return suffixes

    def resolve(self, value: str) -> Path:
        """Anchor a configured path at ``base_dir`` unless it is absolute."""
        path = Path(value)
        if path.is_absolute():
            return path
        return Path(self.base_dir) / path

    @property
    def source_path(self) -> Path:
        return self.resolve(self.source_dir)

    @property
    def scratch_path(self) -> Path:
        return self.resolve(self.scratch_dir)

    @property
    def output_path(self) -> Path:
        return self.resolve(self.output_dir)
