"""File helpers for atomic rewriting and backups."""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any

BACKUP_SUFFIX = ".classfold.bak"


def read_text(path: Path) -> str:
    """Read UTF-8 text without newline translation."""

    with path.open(encoding="utf-8", newline="") as handle:
        return handle.read()


def atomic_write_text(path: Path, content: str) -> None:
    """Write text through a sibling temporary file + replace, keeping the target's mode."""

    temp_path = path.with_name(f"{path.name}.tmp")
    try:
        with temp_path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        if path.exists():
            shutil.copymode(path, temp_path)
        temp_path.replace(path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


def atomic_write_json(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    atomic_write_text(path, json.dumps(payload, ensure_ascii=False, indent=2) + "\n")


def backup_path_for(path: Path) -> Path:
    return path.with_name(f"{path.name}{BACKUP_SUFFIX}")


def backup_file(path: Path) -> Path | None:
    """Copy path next to itself once; an existing backup is kept as the pristine copy."""

    backup = backup_path_for(path)
    if backup.exists():
        return None
    shutil.copy2(path, backup)
    return backup
