"""Candidate selection: which repeated token sets are worth consolidating."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from core.config.models import OptimizerConfig
from core.scan.models import SCRIPT_KINDS, SERVER_KINDS, DynamicBasePattern, Occurrence
from core.utils.events import log_event

logger = logging.getLogger("classfold.select")

_RULE_OVERHEAD_BYTES = 4
_DECLARATION_BYTES_PER_TOKEN = 6


@dataclass
class ConsolidationCandidate:
    class_string: str
    normalized_key: str
    frequency: int
    bytes_saved: int
    classes: list[str]
    excluded_classes: list[str]
    name: str = ""


@dataclass(frozen=True)
class CandidateSummary:
    total_patterns: int
    total_occurrences: int
    total_bytes_saved: int
    avg_frequency: float
    avg_classes_per_pattern: float


def is_consistency_safe(occurrence: Occurrence) -> bool:
    """Seen on a server/static side AND a script side."""

    kinds = occurrence.source_kinds
    return bool(kinds & SERVER_KINDS) and bool(kinds & SCRIPT_KINDS)


def calculate_bytes_saved(classes: list[str], name_bytes: int, frequency: int) -> int:
    """Savings of replacing the included tokens (with separators) by a name, times frequency."""

    included_length = len(" ".join(classes))
    return (included_length - name_bytes) * frequency


def estimate_rule_overhead(classes: list[str], name_bytes: int) -> int:
    return _RULE_OVERHEAD_BYTES + name_bytes + _DECLARATION_BYTES_PER_TOKEN * len(classes)


def overlaps_dynamic_base(classes: list[str], dynamic_bases: dict[str, DynamicBasePattern]) -> bool:
    members = set(classes)
    return any(
        all(token in members for token in base.base_classes) for base in dynamic_bases.values()
    )


def select_candidates(
    occurrences: dict[str, Occurrence],
    config: OptimizerConfig,
    dynamic_bases: dict[str, DynamicBasePattern] | None = None,
) -> list[ConsolidationCandidate]:
    """Filter occurrences into candidates ranked by descending byte savings."""

    name_bytes = config.max_name_bytes
    candidates: list[ConsolidationCandidate] = []
    rejected: dict[str, int] = {}

    def _reject(reason: str) -> None:
        rejected[reason] = rejected.get(reason, 0) + 1

    for occurrence in occurrences.values():
        if occurrence.count < config.min_occurrences:
            _reject("min_occurrences")
            continue
        if len(occurrence.classes) < config.min_classes:
            _reject("min_classes")
            continue
        if config.ssr and not is_consistency_safe(occurrence):
            _reject("consistency")
            continue
        if config.skip_patterns_with_excluded_classes and occurrence.excluded_classes:
            _reject("excluded_classes")
            continue
        if (
            config.exclude_dynamic_base_overlaps
            and dynamic_bases
            and overlaps_dynamic_base(occurrence.classes, dynamic_bases)
        ):
            _reject("dynamic_base")
            continue

        bytes_saved = calculate_bytes_saved(occurrence.classes, name_bytes, occurrence.count)
        if bytes_saved < config.min_bytes_saved:
            _reject("min_bytes_saved")
            continue
        overhead = estimate_rule_overhead(occurrence.classes, name_bytes)
        if not config.force_all and bytes_saved <= overhead:
            _reject("css_overhead")
            continue

        candidates.append(
            ConsolidationCandidate(
                class_string=occurrence.class_string,
                normalized_key=occurrence.normalized_key,
                frequency=occurrence.count,
                bytes_saved=bytes_saved,
                classes=list(occurrence.classes),
                excluded_classes=list(occurrence.excluded_classes),
            )
        )

    candidates.sort(key=lambda item: (-item.bytes_saved, item.normalized_key))
    log_event(
        logger,
        logging.INFO,
        "select_done",
        occurrences=len(occurrences),
        candidates=len(candidates),
        rejected=rejected,
    )
    return candidates


def summarize_candidates(candidates: list[ConsolidationCandidate]) -> CandidateSummary:
    total_patterns = len(candidates)
    total_occurrences = sum(candidate.frequency for candidate in candidates)
    total_classes = sum(len(candidate.classes) for candidate in candidates)
    return CandidateSummary(
        total_patterns=total_patterns,
        total_occurrences=total_occurrences,
        total_bytes_saved=sum(candidate.bytes_saved for candidate in candidates),
        avg_frequency=total_occurrences / total_patterns if total_patterns else 0.0,
        avg_classes_per_pattern=total_classes / total_patterns if total_patterns else 0.0,
    )
