"""Configuration discovery and loading for classfold runs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from core.config.models import OptimizerConfig, SafelistConfig
from core.utils.errors import ConfigError

CONFIG_FILENAMES = (
    "classfold.config.yaml",
    "classfold.config.yml",
    "classfold.config.json",
)
_MERGED_SAFELIST_KEYS = ("prefixes", "suffixes", "classes", "patterns", "files")


def find_config_file(search_dir: Path | None = None) -> Path | None:
    """Return the first known config file name present in search_dir."""

    base = search_dir or Path.cwd()
    for name in CONFIG_FILENAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def load_config(
    path: Path | None = None,
    *,
    search_dir: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> OptimizerConfig:
    """Load defaults, merge an optional config file, then apply overrides.

    Rules:
    - Without an explicit path, the first of CONFIG_FILENAMES found in
      search_dir (default: cwd) is used; none found means defaults only.
    - Safelist lists in the file extend the defaults instead of replacing them.
    - Overrides (typically CLI options) win over the file; None values are ignored.
    """

    config_path = path if path is not None else find_config_file(search_dir)
    raw: dict[str, Any] = {}
    if config_path is not None:
        raw = _read_config_mapping(config_path)

    merged = _merge_with_defaults(raw)
    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    try:
        return OptimizerConfig.model_validate(merged)
    except ValidationError as exc:
        source = config_path if config_path is not None else "defaults"
        problems = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
        raise ConfigError(f"Invalid config schema: {source}", problems=problems) from exc


def _read_config_mapping(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc

    try:
        if path.suffix == ".json":
            raw = json.loads(text)
        else:
            raw = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid syntax in config file: {path}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")
    return raw


def _merge_with_defaults(raw: dict[str, Any]) -> dict[str, Any]:
    merged = dict(raw)
    user_exclude = raw.get("exclude")
    if user_exclude is None:
        return merged
    if not isinstance(user_exclude, dict):
        raise ConfigError("Config key 'exclude' must be a mapping")

    defaults = SafelistConfig().model_dump()
    exclude = dict(user_exclude)
    for key in _MERGED_SAFELIST_KEYS:
        extra = user_exclude.get(key) or []
        if not isinstance(extra, list):
            raise ConfigError(f"Config key 'exclude.{key}' must be a list")
        exclude[key] = [*defaults[key], *(item for item in extra if item not in defaults[key])]
    merged["exclude"] = exclude
    return merged
