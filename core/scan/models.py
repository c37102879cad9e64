"""Data models for artifact scanning and occurrence aggregation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

SourceKind = Literal["markup", "script", "fragment"]

SERVER_KINDS: frozenset[str] = frozenset({"markup", "fragment"})
SCRIPT_KINDS: frozenset[str] = frozenset({"script"})


@dataclass(frozen=True)
class Artifact:
    """A build file the scanner and rewriter operate on."""

    path: Path
    kind: SourceKind


@dataclass(frozen=True)
class FileLocation:
    file_path: str
    line: int | None = None


@dataclass
class Occurrence:
    """One normalized token set and every place it was found."""

    class_string: str
    normalized_key: str
    classes: list[str]
    excluded_classes: list[str]
    count: int = 1
    locations: list[FileLocation] = field(default_factory=list)
    source_kinds: set[str] = field(default_factory=set)


@dataclass
class DynamicBasePattern:
    """Static tokens written in front of a runtime-computed class suffix."""

    base_classes: list[str]
    normalized_key: str
    locations: list[FileLocation] = field(default_factory=list)


@dataclass
class FileStats:
    path: Path
    kind: SourceKind
    original_size: int


@dataclass
class ScanResult:
    """Everything one scan pass hands to candidate selection."""

    occurrences: dict[str, Occurrence] = field(default_factory=dict)
    dynamic_bases: dict[str, DynamicBasePattern] = field(default_factory=dict)
    files: list[FileStats] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    class_strings_found: int = 0
    tokens_seen: set[str] = field(default_factory=set)
    mergeable_keys: set[str] = field(default_factory=set)
