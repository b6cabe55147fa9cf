"""Configuration schema for midlfmt.

Configuration is loaded from .midlfmt.yml in the project root.
"""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

CONFIG_FILENAME = ".midlfmt.yml"


class StyleConfig(BaseModel):
    """Layout settings consumed by the printer."""

    indent_width: int = 4
    attribute_inline_limit: int = 60  # Single attributes shorter than this stay inline

    @field_validator("indent_width")
    @classmethod
    def validate_indent_width(cls, v: int) -> int:
        if not 1 <= v <= 16:
            raise ValueError(f"Invalid indent_width: {v}. Must be between 1 and 16")
        return v

    @field_validator("attribute_inline_limit")
    @classmethod
    def validate_attribute_inline_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("attribute_inline_limit must be positive")
        return v

    @property
    def indent_unit(self) -> str:
        return " " * self.indent_width


class FilesConfig(BaseModel):
    """Which files the command line picks up when walking directories."""

    extensions: list[str] = Field(default_factory=lambda: [".idl", ".acf", ".odl"])
    exclude: list[str] = Field(
        default_factory=lambda: [".git", "build", "*.generated.idl"]
    )

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        return [ext if ext.startswith(".") else f".{ext}" for ext in (e.strip().lower() for e in v) if ext]

    def is_excluded(self, rel_path: Path) -> bool:
        """Check a relative path against the exclude globs (any component or full path)."""
        rel = rel_path.as_posix()
        for pat in self.exclude:
            if fnmatch.fnmatch(rel, pat):
                return True
            if any(fnmatch.fnmatch(part, pat) for part in rel_path.parts):
                return True
        return False

    def matches_extension(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions


class TelemetryConfig(BaseModel):
    """Telemetry configuration. Off by default."""

    enabled: bool = False
    log_path: str = ".midlfmt/telemetry.jsonl"
    retention_days: int = 30


class FormatterConfig(BaseModel):
    """Complete midlfmt configuration."""

    style: StyleConfig = Field(default_factory=StyleConfig)
    files: FilesConfig = Field(default_factory=FilesConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @classmethod
    def load_from_file(cls, config_path: Path | str) -> FormatterConfig:
        """Load configuration from YAML file."""
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {config_path}")

        return cls(**data)

    @classmethod
    def load_from_repo(cls, repo_path: Path | str) -> FormatterConfig:
        """Load configuration from a project's .midlfmt.yml."""
        config_path = Path(repo_path) / CONFIG_FILENAME

        if not config_path.exists():
            # Return default configuration
            return cls()

        return cls.load_from_file(config_path)

    def apply_env_overrides(self) -> None:
        """Apply environment variable overrides to configuration."""
        # Style overrides go through validation again
        if width := os.getenv("MIDLFMT_INDENT_WIDTH"):
            self.style = StyleConfig(
                indent_width=int(width),
                attribute_inline_limit=self.style.attribute_inline_limit,
            )
        if limit := os.getenv("MIDLFMT_ATTRIBUTE_INLINE_LIMIT"):
            self.style = StyleConfig(
                indent_width=self.style.indent_width,
                attribute_inline_limit=int(limit),
            )

        # Telemetry overrides
        if log_path := os.getenv("MIDLFMT_TELEMETRY_PATH"):
            self.telemetry.log_path = log_path
        toggle = os.getenv("MIDLFMT_TELEMETRY")
        if toggle == "1":
            self.telemetry.enabled = True
        elif toggle == "0":
            self.telemetry.enabled = False


def load_config(repo_path: Path | str) -> FormatterConfig:
    """
    Load configuration for a project.

    Args:
        repo_path: Directory that may contain .midlfmt.yml

    Returns:
        Loaded and validated configuration with environment overrides applied
    """
    config = FormatterConfig.load_from_repo(repo_path)
    config.apply_env_overrides()
    return config
