"""Configuration models for class consolidation runs."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.utils.errors import ConfigError

NamingMode = Literal["hash", "sequential"]

DEFAULT_DYNAMIC_PREFIXES: list[str] = [
    "lucide",
    "heroicon",
    "fa",
    "fas",
    "far",
    "fab",
    "fal",
    "fad",
    "fa-",
    "bi-",
    "mdi-",
    "ri-",
    "ti-",
    "icon-",
    "iconify",
]

_PREFIX_RE = re.compile(r"-?[_a-zA-Z][_a-zA-Z0-9-]*")
MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 32


class SafelistConfig(BaseModel):
    """Tokens and files that must never be folded into a synthetic name."""

    model_config = ConfigDict(extra="forbid")

    prefixes: list[str] = Field(default_factory=lambda: ["js-", "data-", "hook-", "track-"])
    suffixes: list[str] = Field(default_factory=lambda: ["-handler", "-trigger"])
    classes: list[str] = Field(default_factory=list)
    patterns: list[str] = Field(default_factory=lambda: ["^qa-", "^test-", "^e2e-"])
    files: list[str] = Field(default_factory=list)

    @field_validator("patterns")
    @classmethod
    def _patterns_compile(cls, value: list[str]) -> list[str]:
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"invalid safelist pattern {pattern!r}: {exc}") from exc
        return value


class OptimizerConfig(BaseModel):
    """Resolved configuration for one analyze/optimize run."""

    model_config = ConfigDict(extra="forbid")

    build_dir: Path = Path(".next")
    include: list[str] = Field(default_factory=list)
    min_occurrences: int = 2
    min_classes: int = 2
    min_bytes_saved: int = 10
    name_prefix: str = "cf-"
    name_length: int = 5
    naming: NamingMode = "hash"
    exclude: SafelistConfig = Field(default_factory=SafelistConfig)
    css_layer: str | None = None
    data_attributes: bool = False
    manifest: bool = True
    backup: bool = False
    ssr: bool = False
    skip_patterns_with_excluded_classes: bool = False
    exclude_dynamic_base_overlaps: bool = False
    exclude_dynamic_patterns: bool = True
    dynamic_prefixes: list[str] = Field(default_factory=lambda: list(DEFAULT_DYNAMIC_PREFIXES))
    force_all: bool = False

    @property
    def max_name_bytes(self) -> int:
        return len(self.name_prefix) + self.name_length


def validate_config(config: OptimizerConfig) -> list[str]:
    """Return human-readable problems; an empty list means the config is usable."""

    problems: list[str] = []

    if config.min_occurrences < 1:
        problems.append("min_occurrences must be at least 1")
    if config.min_classes < 1:
        problems.append("min_classes must be at least 1")
    if config.min_bytes_saved < 0:
        problems.append("min_bytes_saved must not be negative")
    if config.name_length < MIN_NAME_LENGTH:
        problems.append(f"name_length must be at least {MIN_NAME_LENGTH}")
    if config.name_length > MAX_NAME_LENGTH:
        problems.append(f"name_length must be at most {MAX_NAME_LENGTH}")
    if not config.name_prefix:
        problems.append("name_prefix must not be empty")
    elif not _PREFIX_RE.fullmatch(config.name_prefix):
        problems.append(f"name_prefix is not a valid CSS class name start: {config.name_prefix!r}")
    if config.css_layer is not None and not config.css_layer.strip():
        problems.append("css_layer must not be blank")

    return problems


def ensure_valid_config(config: OptimizerConfig) -> OptimizerConfig:
    problems = validate_config(config)
    if problems:
        raise ConfigError("Invalid configuration: " + "; ".join(problems), problems=problems)
    return config
