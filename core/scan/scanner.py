"""Occurrence scanner over built artifacts."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from core.config.models import OptimizerConfig
from core.scan.locator import find_artifacts
from core.scan.models import (
    SCRIPT_KINDS,
    SERVER_KINDS,
    Artifact,
    DynamicBasePattern,
    FileLocation,
    FileStats,
    Occurrence,
    ScanResult,
    SourceKind,
)
from core.scan.patterns import extract_dynamic_base_strings, iter_class_values, line_number
from core.scan.tokens import TokenClassifier
from core.utils.events import log_event
from core.utils.files import read_text

logger = logging.getLogger("classfold.scan")


@dataclass(frozen=True)
class ExtractedClassString:
    class_string: str
    location: FileLocation


def extract_class_strings(content: str, file_path: str) -> list[ExtractedClassString]:
    """Extract every static class list from one artifact's text."""

    results: list[ExtractedClassString] = []
    for match in iter_class_values(content):
        results.append(
            ExtractedClassString(
                class_string=match.value.strip(),
                location=FileLocation(file_path=file_path, line=line_number(content, match.start)),
            )
        )
    return results


@dataclass
class ScanAccumulator:
    """Single aggregation point for one scan pass."""

    classifier: TokenClassifier
    min_classes: int
    result: ScanResult = field(default_factory=ScanResult)

    def record_class_string(
        self, class_string: str, location: FileLocation, kind: SourceKind
    ) -> None:
        self.result.class_strings_found += 1
        normalized = self.classifier.normalize(class_string)
        self.result.tokens_seen.update(class_string.split())

        if not normalized.consolidatable:
            return
        if len(normalized.classes) < self.min_classes:
            return

        existing = self.result.occurrences.get(normalized.key)
        if existing is not None:
            existing.count += 1
            existing.locations.append(location)
            existing.source_kinds.add(kind)
            return

        self.result.occurrences[normalized.key] = Occurrence(
            class_string=class_string,
            normalized_key=normalized.key,
            classes=normalized.classes,
            excluded_classes=normalized.excluded_classes,
            locations=[location],
            source_kinds={kind},
        )

    def record_dynamic_base(self, base_string: str, location: FileLocation) -> None:
        normalized = self.classifier.normalize(base_string)
        if len(normalized.classes) < self.min_classes:
            return

        existing = self.result.dynamic_bases.get(normalized.key)
        if existing is not None:
            existing.locations.append(location)
            return
        self.result.dynamic_bases[normalized.key] = DynamicBasePattern(
            base_classes=normalized.classes,
            normalized_key=normalized.key,
            locations=[location],
        )


def scan_artifacts(artifacts: Iterable[Artifact], config: OptimizerConfig) -> ScanResult:
    """Scan artifacts one by one; a failing artifact is recorded and skipped."""

    accumulator = ScanAccumulator(
        classifier=TokenClassifier(config), min_classes=config.min_classes
    )
    result = accumulator.result

    for artifact in artifacts:
        file_path = str(artifact.path)
        try:
            content = read_text(artifact.path)
            size = artifact.path.stat().st_size
        except (OSError, ValueError) as exc:
            result.errors.append(f"Error scanning {file_path}: {exc}")
            log_event(logger, logging.WARNING, "scan_error", path=file_path, error=str(exc))
            continue

        result.files.append(FileStats(path=artifact.path, kind=artifact.kind, original_size=size))

        if artifact.kind in SCRIPT_KINDS:
            for base_string in extract_dynamic_base_strings(content):
                accumulator.record_dynamic_base(base_string, FileLocation(file_path=file_path))

        for extracted in extract_class_strings(content, file_path):
            accumulator.record_class_string(
                extracted.class_string, extracted.location, artifact.kind
            )

    result.mergeable_keys = detect_mergeable_patterns(result.occurrences)
    log_event(
        logger,
        logging.INFO,
        "scan_done",
        files=len(result.files),
        class_strings=result.class_strings_found,
        patterns=len(result.occurrences),
        dynamic_bases=len(result.dynamic_bases),
        mergeable=len(result.mergeable_keys),
        errors=len(result.errors),
    )
    return result


def scan_build_output(config: OptimizerConfig) -> ScanResult:
    """Locate and scan every artifact under config.build_dir."""

    artifacts = find_artifacts(config.build_dir, config.include, config.exclude.files)
    log_event(
        logger,
        logging.INFO,
        "scan_start",
        build_dir=str(config.build_dir),
        artifacts=len(artifacts),
    )
    return scan_artifacts(artifacts, config)


def is_proper_subset(classes_a: list[str], classes_b: list[str]) -> bool:
    if len(classes_a) >= len(classes_b):
        return False
    members = set(classes_b)
    return all(token in members for token in classes_a)


def detect_mergeable_patterns(occurrences: dict[str, Occurrence]) -> set[str]:
    """Script-side token sets that are strict subsets of a server-side one (likely merged props)."""

    script_side = [o for o in occurrences.values() if o.source_kinds & SCRIPT_KINDS]
    server_side = [o for o in occurrences.values() if o.source_kinds & SERVER_KINDS]

    mergeable: set[str] = set()
    for script_occurrence in script_side:
        for server_occurrence in server_side:
            if is_proper_subset(script_occurrence.classes, server_occurrence.classes):
                mergeable.add(script_occurrence.normalized_key)
                break
    return mergeable
