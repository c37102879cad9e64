"""Typer CLI entrypoint for classfold."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Annotated, Any

import typer

from apps.cli.report_human import render_analysis_summary, render_run_summary
from core.config.loader import load_config
from core.config.models import OptimizerConfig
from core.orchestrator.pipeline import AnalysisOutput, RunOutput, run_analysis, run_optimize
from core.utils.errors import ConfigError, StylesheetNotFoundError

app = typer.Typer(
    help="Consolidate repeated utility class lists in build output", rich_markup_mode=None
)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2
EXIT_NO_STYLESHEET = 3

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

BuildDirOption = Annotated[
    Path | None,
    typer.Option("--dir", "-d", help="Build output directory (default: .next)."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Config file (YAML or JSON)."),
]
MinOccurrencesOption = Annotated[int | None, typer.Option("--min-occurrences")]
MinClassesOption = Annotated[int | None, typer.Option("--min-classes")]
SsrOption = Annotated[
    bool,
    typer.Option("--ssr", help="Only consolidate patterns seen in both markup and scripts."),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Print a JSON report.")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log events to stderr.")]
DebugLogOption = Annotated[
    Path | None,
    typer.Option("--debug-log", help="Write debug-level JSON events to this file."),
]


@app.callback()
def cli_callback() -> None:
    """Keep `classfold analyze` / `classfold optimize` as explicit command forms."""


@app.command("analyze")
def analyze_command(
    build_dir: BuildDirOption = None,
    config: ConfigOption = None,
    min_occurrences: MinOccurrencesOption = None,
    min_classes: MinClassesOption = None,
    ssr: SsrOption = False,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
    debug_log: DebugLogOption = None,
) -> None:
    """Report consolidation candidates without modifying the build."""

    _configure_logging(verbose, debug_log)
    exit_code = EXIT_ERROR
    output: AnalysisOutput | None = None

    try:
        resolved = _resolve_config(
            config,
            build_dir=build_dir,
            min_occurrences=min_occurrences,
            min_classes=min_classes,
            ssr=True if ssr else None,
        )
        _ensure_build_dir(resolved)
        output = run_analysis(resolved)
        exit_code = EXIT_OK
    except ConfigError as exc:
        exit_code = EXIT_CONFIG
        _echo_config_error(exc)
    except Exception as exc:  # noqa: BLE001
        exit_code = EXIT_ERROR
        typer.echo(f"ERROR: {type(exc).__name__}: {exc}", err=True)

    if output is not None:
        if as_json:
            typer.echo(json.dumps(_analysis_payload(output), ensure_ascii=False, indent=2))
        else:
            typer.echo(render_analysis_summary(output))

    raise typer.Exit(code=exit_code)


@app.command("optimize")
def optimize_command(
    build_dir: BuildDirOption = None,
    config: ConfigOption = None,
    min_occurrences: MinOccurrencesOption = None,
    min_classes: MinClassesOption = None,
    ssr: SsrOption = False,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Compute everything but write nothing.")
    ] = False,
    backup: Annotated[
        bool, typer.Option("--backup", help="Keep a .classfold.bak copy of each rewritten file.")
    ] = False,
    no_manifest: Annotated[
        bool, typer.Option("--no-manifest", help="Skip writing classfold-manifest.json.")
    ] = False,
    data_attributes: Annotated[
        bool,
        typer.Option("--data-attributes", help="Record original classes in data-cf-original."),
    ] = False,
    css_layer: Annotated[
        str | None, typer.Option("--css-layer", help="Wrap generated rules in @layer NAME.")
    ] = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
    debug_log: DebugLogOption = None,
) -> None:
    """Rewrite the build in place and inject the consolidated stylesheet rules."""

    _configure_logging(verbose, debug_log)
    exit_code = EXIT_ERROR
    output: RunOutput | None = None

    try:
        resolved = _resolve_config(
            config,
            build_dir=build_dir,
            min_occurrences=min_occurrences,
            min_classes=min_classes,
            ssr=True if ssr else None,
            backup=True if backup else None,
            manifest=False if no_manifest else None,
            data_attributes=True if data_attributes else None,
            css_layer=css_layer,
        )
        _ensure_build_dir(resolved)
        output = run_optimize(resolved, dry_run=dry_run)
        exit_code = EXIT_ERROR if output.rewrite.errors else EXIT_OK
    except ConfigError as exc:
        exit_code = EXIT_CONFIG
        _echo_config_error(exc)
    except StylesheetNotFoundError as exc:
        exit_code = EXIT_NO_STYLESHEET
        output = exc.run_output
        typer.echo(f"ERROR: {exc}", err=True)
    except Exception as exc:  # noqa: BLE001
        exit_code = EXIT_ERROR
        typer.echo(f"ERROR: {type(exc).__name__}: {exc}", err=True)

    if output is not None:
        if as_json:
            typer.echo(json.dumps(_run_payload(output), ensure_ascii=False, indent=2))
        else:
            typer.echo(render_run_summary(output))

    if exit_code == EXIT_OK and not as_json:
        typer.echo("INFO: success")
    elif output is not None and output.rewrite.errors:
        typer.echo(
            f"ERROR: {len(output.rewrite.errors)} file(s) failed to rewrite "
            f"({output.rewrite.files_modified} modified)",
            err=True,
        )

    raise typer.Exit(code=exit_code)


def _resolve_config(config_path: Path | None, **overrides: Any) -> OptimizerConfig:
    return load_config(config_path, overrides=overrides)


def _ensure_build_dir(config: OptimizerConfig) -> None:
    if not config.build_dir.is_dir():
        raise ConfigError(
            f"Build directory not found: {config.build_dir}",
            problems=[f"build_dir does not exist: {config.build_dir}"],
        )


def _echo_config_error(exc: ConfigError) -> None:
    typer.echo(f"ERROR: {exc}", err=True)
    for problem in exc.problems:
        typer.echo(f"  - {problem}", err=True)


def _configure_logging(verbose: bool, debug_log: Path | None) -> None:
    root = logging.getLogger("classfold")
    for handler in list(root.handlers):
        if getattr(handler, "_classfold_cli", False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    levels: list[int] = []
    if verbose:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setLevel(logging.INFO)
        levels.append(logging.INFO)
        _attach(root, stream_handler, formatter)
    if debug_log is not None:
        debug_log.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(debug_log, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        levels.append(logging.DEBUG)
        _attach(root, file_handler, formatter)

    if levels:
        root.setLevel(min(levels))


def _attach(logger: logging.Logger, handler: logging.Handler, formatter: logging.Formatter) -> None:
    handler.setFormatter(formatter)
    handler._classfold_cli = True  # type: ignore[attr-defined]
    logger.addHandler(handler)


def _analysis_payload(output: AnalysisOutput) -> dict[str, Any]:
    scan = output.scan
    return {
        "files_scanned": len(scan.files),
        "class_strings_found": scan.class_strings_found,
        "unique_patterns": len(scan.occurrences),
        "dynamic_bases": len(scan.dynamic_bases),
        "mergeable_patterns": len(scan.mergeable_keys),
        "summary": asdict(output.summary),
        "candidates": [
            {
                "name": candidate.name,
                "class_string": candidate.class_string,
                "classes": candidate.classes,
                "excluded_classes": candidate.excluded_classes,
                "frequency": candidate.frequency,
                "bytes_saved": candidate.bytes_saved,
            }
            for candidate in output.candidates
        ],
        "warnings": output.warnings,
    }


def _run_payload(output: RunOutput) -> dict[str, Any]:
    injection = None
    if output.injection is not None:
        injection = {
            "target": str(output.injection.target),
            "injected": output.injection.injected and not output.dry_run,
        }
    return {
        "dry_run": output.dry_run,
        "already_optimized": output.already_optimized,
        "files_modified": [str(path) for path in output.rewrite.modified_files],
        "skipped_for_consistency": output.rewrite.skipped_for_consistency,
        "metrics": output.metrics.model_dump(mode="json"),
        "mappings": [mapping.model_dump(mode="json") for mapping in output.mappings],
        "injection": injection,
        "manifest_path": str(output.manifest_path) if output.manifest_path else None,
        "warnings": output.warnings,
    }


def main() -> None:
    """Console script entrypoint."""

    app()


if __name__ == "__main__":
    main()
