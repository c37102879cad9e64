"""Human-readable run summaries for CLI output."""

from __future__ import annotations

from core.orchestrator.pipeline import AnalysisOutput, RunOutput
from core.select.selector import ConsolidationCandidate

TOP_PATTERNS = 10
MAX_WARNINGS = 5


def render_analysis_summary(output: AnalysisOutput) -> str:
    """Render one-screen summary of what an optimize run would consolidate."""

    scan = output.scan
    summary = output.summary
    lines: list[str] = []
    lines.append("analysis_summary:")
    lines.append(
        f"files_scanned={len(scan.files)} class_strings={scan.class_strings_found} "
        f"unique_patterns={len(scan.occurrences)}"
    )
    lines.append(
        f"candidates={summary.total_patterns} occurrences={summary.total_occurrences} "
        f"estimated_bytes_saved={summary.total_bytes_saved}"
    )
    if summary.total_patterns:
        lines.append(
            f"avg_frequency={summary.avg_frequency:.1f} "
            f"avg_classes_per_pattern={summary.avg_classes_per_pattern:.1f}"
        )
    if scan.dynamic_bases:
        lines.append(f"dynamic_bases={len(scan.dynamic_bases)}")
    if scan.mergeable_keys:
        lines.append(f"mergeable_patterns={len(scan.mergeable_keys)}")

    lines.extend(_candidate_lines(output.candidates))
    lines.extend(_warning_lines(output.warnings))
    return "\n".join(lines)


def render_run_summary(output: RunOutput) -> str:
    """Render one-screen summary of an optimize run."""

    metrics = output.metrics
    lines: list[str] = []
    lines.append("optimize_summary:" + (" (dry run)" if output.dry_run else ""))
    lines.append(
        f"files_scanned={metrics.total_files_scanned} "
        f"files_modified={output.rewrite.files_modified} "
        f"replacements={output.rewrite.replacements}"
    )
    lines.append(
        f"patterns={len(output.scan.occurrences)} candidates={len(output.candidates)} "
        f"mappings={len(output.mappings)}"
    )
    lines.append(
        f"bytes_saved={output.rewrite.bytes_changed} css_bytes={metrics.consolidated_css_bytes} "
        f"net_bytes_saved={metrics.net_bytes_saved} reduction={metrics.percentage_reduction:.2f}%"
    )
    if output.rewrite.skipped_for_consistency:
        lines.append(f"skipped_for_consistency={output.rewrite.skipped_for_consistency}")
    if output.already_optimized:
        lines.append("build already optimized: no files rewritten")
    elif output.injection is not None:
        verb = "injected into" if output.injection.injected and not output.dry_run else "target"
        lines.append(f"css {verb}: {output.injection.target}")
    if output.manifest_path is not None:
        lines.append(f"manifest: {output.manifest_path}")

    lines.extend(_candidate_lines(output.candidates))
    lines.extend(_warning_lines(output.warnings))
    return "\n".join(lines)


def _candidate_lines(candidates: list[ConsolidationCandidate]) -> list[str]:
    if not candidates:
        return ["top_patterns: none"]
    lines = ["top_patterns:"]
    for candidate in candidates[:TOP_PATTERNS]:
        lines.append(
            f"  {candidate.name} x{candidate.frequency} saves={candidate.bytes_saved} "
            f'"{candidate.class_string}"'
        )
    remaining = len(candidates) - TOP_PATTERNS
    if remaining > 0:
        lines.append(f"  ... and {remaining} more")
    return lines


def _warning_lines(warnings: list[str]) -> list[str]:
    if not warnings:
        return []
    lines = [f"warnings: {len(warnings)}"]
    lines.extend(f"  {warning}" for warning in warnings[:MAX_WARNINGS])
    return lines
