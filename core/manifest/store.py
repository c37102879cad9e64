"""Manifest persistence inside the build directory."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from core.manifest.models import MappingManifest
from core.utils.files import atomic_write_json

MANIFEST_FILENAME = "classfold-manifest.json"


def manifest_path_for(build_dir: Path) -> Path:
    return build_dir / MANIFEST_FILENAME


def save_manifest(manifest: MappingManifest, path: Path) -> Path:
    """Write the manifest atomically, replacing any earlier run's file."""

    atomic_write_json(path, manifest.model_dump(mode="json"))
    return path


def load_manifest(path: Path) -> MappingManifest:
    """Read a previous run's manifest as read-only history."""

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValueError(f"Manifest not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid manifest JSON: {path}") from exc

    try:
        return MappingManifest.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid manifest schema: {path}") from exc
