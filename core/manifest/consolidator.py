"""Mapping creation and run metrics."""

from __future__ import annotations

from datetime import datetime, timezone

from core.config.models import OptimizerConfig
from core.manifest.models import (
    ClassMapping,
    MappingManifest,
    OptimizationMetrics,
    TopConsolidation,
)
from core.scan.models import ScanResult
from core.select.selector import ConsolidationCandidate

TOP_CONSOLIDATIONS = 10


def create_class_mappings(candidates: list[ConsolidationCandidate]) -> list[ClassMapping]:
    """Project named candidates into mappings; declarations are filled by the synthesizer."""

    mappings: list[ClassMapping] = []
    for candidate in candidates:
        if not candidate.name:
            raise ValueError(f"Candidate has no synthetic name: {candidate.normalized_key}")
        mappings.append(
            ClassMapping(
                original=candidate.class_string,
                consolidated=candidate.name,
                normalized_key=candidate.normalized_key,
                classes=list(candidate.classes),
                excluded_classes=list(candidate.excluded_classes),
                frequency=candidate.frequency,
                bytes_saved=candidate.bytes_saved,
            )
        )
    return mappings


def calculate_metrics(
    scan: ScanResult,
    mappings: list[ClassMapping],
    *,
    files_modified: int,
    bytes_saved: int,
    occurrences_replaced: int,
    css_bytes: int,
) -> OptimizationMetrics:
    original_total = sum(stats.original_size for stats in scan.files)
    net = bytes_saved - css_bytes
    ranked = sorted(mappings, key=lambda item: (-item.bytes_saved, item.normalized_key))
    return OptimizationMetrics(
        total_files_scanned=len(scan.files),
        total_files_modified=files_modified,
        total_class_strings_found=scan.class_strings_found,
        unique_class_patterns=len(scan.occurrences),
        consolidated_patterns=len(mappings),
        total_occurrences_replaced=occurrences_replaced,
        original_total_bytes=original_total,
        bytes_saved=bytes_saved,
        consolidated_css_bytes=css_bytes,
        net_bytes_saved=net,
        percentage_reduction=round(net / original_total * 100, 2) if original_total else 0.0,
        top_consolidations=[
            TopConsolidation(
                original=mapping.original,
                consolidated=mapping.consolidated,
                frequency=mapping.frequency,
                bytes_saved=mapping.bytes_saved,
            )
            for mapping in ranked[:TOP_CONSOLIDATIONS]
        ],
    )


def build_manifest(
    config: OptimizerConfig,
    mappings: list[ClassMapping],
    metrics: OptimizationMetrics,
    *,
    created: datetime | None = None,
) -> MappingManifest:
    timestamp = created or datetime.now(timezone.utc)
    return MappingManifest(
        build_dir=str(config.build_dir),
        created=timestamp.isoformat(),
        config=config.model_dump(mode="json"),
        mappings=mappings,
        metrics=metrics,
    )
