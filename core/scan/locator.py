"""Artifact discovery across common build-tool output layouts."""

from __future__ import annotations

import re
from pathlib import Path

from core.scan.models import Artifact, SourceKind

_KIND_BY_SUFFIX: dict[str, SourceKind] = {
    ".html": "markup",
    ".htm": "markup",
    ".js": "script",
    ".mjs": "script",
    ".cjs": "script",
    ".rsc": "fragment",
}

BUILD_TOOL_PATTERNS: dict[str, list[str]] = {
    "next": [
        "static/chunks/**/*.js",
        "server/app/**/*.js",
        "server/app/**/*.html",
        "server/app/**/*.rsc",
        "server/chunks/**/*.js",
        "server/pages/**/*.html",
    ],
    "next-standalone": [
        "standalone/.next/static/chunks/**/*.js",
        "standalone/.next/server/app/**/*.js",
        "standalone/.next/server/app/**/*.html",
        "standalone/.next/server/app/**/*.rsc",
        "standalone/.next/server/chunks/**/*.js",
    ],
    "astro": [
        "**/*.html",
        "_astro/**/*.js",
        "client/_astro/**/*.js",
        "server/**/*.mjs",
    ],
    "sveltekit": [
        "_app/**/*.js",
        "client/_app/**/*.js",
    ],
    "nuxt": [
        "public/_nuxt/**/*.js",
        "_nuxt/**/*.js",
    ],
    "vite": [
        "assets/**/*.js",
    ],
}

DEFAULT_PATTERNS: list[str] = [
    pattern for patterns in BUILD_TOOL_PATTERNS.values() for pattern in patterns
]


def source_kind_for(path: Path) -> SourceKind | None:
    return _KIND_BY_SUFFIX.get(path.suffix.lower())


def find_files(root: Path, patterns: list[str]) -> list[Path]:
    """Expand glob patterns relative to root into a sorted, de-duplicated file list."""

    if not root.is_dir():
        return []

    found: set[Path] = set()
    for pattern in patterns:
        for path in root.glob(pattern):
            if path.is_file():
                found.add(path)
    return sorted(found)


def should_exclude_file(path: Path, exclude_patterns: list[str]) -> bool:
    """Match glob-style exclusions (`**`, `*`, `?`) anywhere in the POSIX path."""

    if not exclude_patterns:
        return False
    normalized = path.as_posix()
    return any(_glob_to_regex(pattern).search(normalized) for pattern in exclude_patterns)


def find_artifacts(root: Path, include: list[str], exclude_files: list[str]) -> list[Artifact]:
    """Return markup/script/fragment artifacts under root, annotated with their kind."""

    patterns = include or DEFAULT_PATTERNS
    artifacts: list[Artifact] = []
    for path in find_files(root, patterns):
        kind = source_kind_for(path)
        if kind is None:
            continue
        if should_exclude_file(path, exclude_files):
            continue
        artifacts.append(Artifact(path=path, kind=kind))
    return artifacts


def _glob_to_regex(pattern: str) -> re.Pattern[str]:
    normalized = pattern.replace("\\", "/")
    parts: list[str] = []
    index = 0
    while index < len(normalized):
        if normalized.startswith("**", index):
            parts.append(".*")
            index += 2
            continue
        char = normalized[index]
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
        index += 1
    return re.compile("".join(parts))
