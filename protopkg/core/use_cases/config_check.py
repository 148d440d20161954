"""
Config check use case — validate protopkg.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from protopkg.adapters.protoc import resolve_protoc
from protopkg.core.config.loader import ConfigError, find_config_file, load_config
from protopkg.core.models.build import BuildConfig


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: BuildConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "source_dir": str(self.config.source_path) if self.config else None,
            "output_dir": str(self.config.output_path) if self.config else None,
            "prefix": self.config.effective_prefix if self.config else None,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate build configuration and report issues.

    Args:
        config_path: Optional explicit path to protopkg.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()

    if config_path is None:
        result.errors.append("No protopkg.yml found.")
        return result

    result.config_path = config_path

    try:
        config = load_config(config_path)
        result.config = config
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    # Semantic checks
    if not config.source_path.is_dir():
        result.warnings.append(f"Source directory does not exist: {config.source_dir}")

    prefix = config.effective_prefix
    if prefix and not prefix.endswith("."):
        result.warnings.append(
            f"Prefix '{prefix}' does not end with '.'; rewritten imports will "
            "be glued to the module name."
        )

    scratch = config.scratch_path.absolute()
    output = config.output_path.absolute()
    if scratch == output:
        result.errors.append("scratch_dir and output_dir must differ (scratch is wiped every run).")
    elif output.is_relative_to(scratch):
        result.errors.append("output_dir must not live inside scratch_dir (scratch is wiped every run).")
    elif scratch.is_relative_to(output):
        result.warnings.append(
            "scratch_dir is inside output_dir; generated files may be picked up twice."
        )

    if resolve_protoc(config.protoc) is None:
        result.warnings.append(
            "protoc not found (set 'protoc', $PROTOC, or install protopkg[grpc])."
        )

    result.valid = len(result.errors) == 0
    return result
