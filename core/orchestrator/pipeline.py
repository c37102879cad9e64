"""Orchestration pipeline for one analysis or optimization run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from core.config.models import OptimizerConfig, ensure_valid_config
from core.css.synthesizer import (
    InjectionResult,
    find_injection_target,
    inject_consolidated_css,
    synthesize_css,
)
from core.manifest.consolidator import build_manifest, calculate_metrics, create_class_mappings
from core.manifest.models import ClassMapping, MappingManifest, OptimizationMetrics
from core.manifest.store import manifest_path_for, save_manifest
from core.rewrite.rewriter import RewriteResult, rewrite_build_output
from core.scan.models import ScanResult
from core.scan.scanner import scan_build_output
from core.select.naming import assign_names
from core.select.selector import (
    CandidateSummary,
    ConsolidationCandidate,
    select_candidates,
    summarize_candidates,
)
from core.utils.errors import StylesheetNotFoundError
from core.utils.events import log_event

logger = logging.getLogger("classfold.pipeline")


@dataclass
class AnalysisOutput:
    scan: ScanResult
    candidates: list[ConsolidationCandidate]
    summary: CandidateSummary

    @property
    def warnings(self) -> list[str]:
        return list(self.scan.errors)


@dataclass
class RunOutput:
    """Everything one optimize run produced; partially filled when it stops early."""

    scan: ScanResult
    candidates: list[ConsolidationCandidate]
    mappings: list[ClassMapping] = field(default_factory=list)
    css_text: str = ""
    css_errors: list[str] = field(default_factory=list)
    rewrite: RewriteResult = field(default_factory=RewriteResult)
    injection: InjectionResult | None = None
    already_optimized: bool = False
    metrics: OptimizationMetrics = field(default_factory=OptimizationMetrics)
    manifest: MappingManifest | None = None
    manifest_path: Path | None = None
    dry_run: bool = False

    @property
    def warnings(self) -> list[str]:
        return [*self.scan.errors, *self.css_errors, *self.rewrite.errors]


def run_analysis(config: OptimizerConfig) -> AnalysisOutput:
    """Scan -> select -> name without touching the build."""

    ensure_valid_config(config)
    scan = scan_build_output(config)
    candidates = select_candidates(scan.occurrences, config, scan.dynamic_bases)
    assign_names(candidates, config, reserved=scan.tokens_seen)
    summary = summarize_candidates(candidates)
    return AnalysisOutput(scan=scan, candidates=candidates, summary=summary)


def run_optimize(config: OptimizerConfig, dry_run: bool = False) -> RunOutput:
    """Execute scan -> select -> name -> synthesize -> rewrite -> inject -> manifest."""

    ensure_valid_config(config)
    log_event(logger, logging.INFO, "run_start", build_dir=str(config.build_dir), dry_run=dry_run)

    scan = scan_build_output(config)
    candidates = select_candidates(scan.occurrences, config, scan.dynamic_bases)
    assign_names(candidates, config, reserved=scan.tokens_seen)
    mappings = create_class_mappings(candidates)
    synthesis = synthesize_css(mappings, config.build_dir, config.css_layer)

    output = RunOutput(
        scan=scan,
        candidates=candidates,
        mappings=synthesis.mappings,
        css_text=synthesis.css_text,
        css_errors=synthesis.errors,
        dry_run=dry_run,
    )

    if output.mappings:
        try:
            output.injection = find_injection_target(config.build_dir)
        except StylesheetNotFoundError as exc:
            exc.run_output = output
            log_event(logger, logging.ERROR, "stylesheet_missing", build_dir=str(config.build_dir))
            raise
        output.already_optimized = not output.injection.injected
    else:
        output.already_optimized = is_marked_build(config.build_dir)

    if output.already_optimized:
        # Marker present: an earlier run already consolidated this build and owns the manifest.
        log_event(logger, logging.WARNING, "already_optimized", build_dir=str(config.build_dir))
    elif output.injection is not None:
        output.rewrite = rewrite_build_output(
            output.mappings, config, dry_run=dry_run, dynamic_bases=scan.dynamic_bases
        )
        if not dry_run and output.rewrite.files_modified:
            output.injection = inject_consolidated_css(config.build_dir, output.css_text)

    applied = [] if output.already_optimized else output.mappings
    css_bytes = len(output.css_text.encode("utf-8")) if output.rewrite.files_modified else 0
    output.metrics = calculate_metrics(
        scan,
        applied,
        files_modified=output.rewrite.files_modified,
        bytes_saved=output.rewrite.bytes_changed,
        occurrences_replaced=output.rewrite.replacements,
        css_bytes=css_bytes,
    )

    if config.manifest and not dry_run and not output.already_optimized:
        output.manifest = build_manifest(config, applied, output.metrics)
        output.manifest_path = save_manifest(output.manifest, manifest_path_for(config.build_dir))

    log_event(
        logger,
        logging.INFO,
        "run_done",
        candidates=len(candidates),
        mappings=len(output.mappings),
        files_modified=output.rewrite.files_modified,
        net_bytes_saved=output.metrics.net_bytes_saved,
        warnings=len(output.warnings),
        dry_run=dry_run,
    )
    return output


def is_marked_build(build_dir: Path) -> bool:
    """True when a stylesheet in the build already carries the consolidation marker."""

    try:
        return not find_injection_target(build_dir).injected
    except StylesheetNotFoundError:
        return False
