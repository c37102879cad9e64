"""Replace consolidated class lists in build artifacts."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from core.config.models import OptimizerConfig
from core.manifest.models import ClassMapping
from core.scan.locator import find_artifacts
from core.scan.models import SCRIPT_KINDS, SERVER_KINDS, DynamicBasePattern, SourceKind
from core.scan.patterns import VALUE_SYNTAXES, ClassSyntax, is_dynamic_class_string
from core.scan.tokens import TokenClassifier
from core.utils.events import log_event
from core.utils.files import atomic_write_text, backup_file, read_text

logger = logging.getLogger("classfold.rewrite")

DATA_ATTRIBUTE = "data-cf-original"


@dataclass
class ContentRewrite:
    content: str
    replacements: int = 0
    skipped_for_consistency: int = 0

    def modified(self, original: str) -> bool:
        return self.content != original


@dataclass
class RewriteResult:
    files_modified: int = 0
    bytes_changed: int = 0
    replacements: int = 0
    skipped_for_consistency: int = 0
    errors: list[str] = field(default_factory=list)
    modified_files: list[Path] = field(default_factory=list)


def is_superset_of_dynamic_base(
    classes: list[str], dynamic_bases: dict[str, DynamicBasePattern]
) -> bool:
    members = set(classes)
    for base in dynamic_bases.values():
        if len(classes) > len(base.base_classes) and all(
            token in members for token in base.base_classes
        ):
            return True
    return False


def matches_dynamic_base(classes: list[str], dynamic_bases: dict[str, DynamicBasePattern]) -> bool:
    members = set(classes)
    for base in dynamic_bases.values():
        if len(classes) == len(base.base_classes) and all(
            token in members for token in base.base_classes
        ):
            return True
    return False


def is_gated(
    mapping: ClassMapping, kind: SourceKind, dynamic_bases: dict[str, DynamicBasePattern]
) -> bool:
    """True when rewriting this mapping in this artifact kind could diverge from runtime output."""

    if not dynamic_bases:
        return False
    if kind in SERVER_KINDS:
        return is_superset_of_dynamic_base(mapping.classes, dynamic_bases)
    if kind in SCRIPT_KINDS:
        return matches_dynamic_base(mapping.classes, dynamic_bases)
    return False


def rewrite_content(
    content: str,
    kind: SourceKind,
    mappings: list[ClassMapping],
    classifier: TokenClassifier,
    config: OptimizerConfig,
    dynamic_bases: dict[str, DynamicBasePattern] | None = None,
) -> ContentRewrite:
    """Rewrite every static class list of one artifact whose included tokens equal a mapping's."""

    bases = dynamic_bases or {}
    active: dict[str, ClassMapping] = {}
    skipped = 0
    for mapping in mappings:
        if is_gated(mapping, kind, bases):
            skipped += 1
            continue
        active[mapping.normalized_key] = mapping

    result = ContentRewrite(content=content, skipped_for_consistency=skipped)
    if not active:
        return result

    for syntax in VALUE_SYNTAXES:
        result.content = syntax.regex.sub(
            lambda match, syntax=syntax: _replace(
                match, syntax, active, classifier, config, result
            ),
            result.content,
        )
    return result


def _replace(
    match: re.Match[str],
    syntax: ClassSyntax,
    active: dict[str, ClassMapping],
    classifier: TokenClassifier,
    config: OptimizerConfig,
    result: ContentRewrite,
) -> str:
    value = match.group("value")
    if not value.strip() or is_dynamic_class_string(value):
        return match.group(0)

    normalized = classifier.normalize(value)
    if normalized.rejected_classes:
        return match.group(0)
    mapping = active.get(normalized.key)
    if mapping is None:
        return match.group(0)

    tokens = [mapping.consolidated, *mapping.retained_classes, *normalized.excluded_classes]
    replacement = f"{match.group('open')}{' '.join(tokens)}{match.group('close')}"
    if config.data_attributes and syntax.supports_data_attr:
        replacement += f' {DATA_ATTRIBUTE}="{" ".join(mapping.classes)}"'
    result.replacements += 1
    return replacement


def rewrite_build_output(
    mappings: list[ClassMapping],
    config: OptimizerConfig,
    dry_run: bool = False,
    dynamic_bases: dict[str, DynamicBasePattern] | None = None,
) -> RewriteResult:
    """Rewrite every artifact under config.build_dir; a failing file is recorded and skipped."""

    result = RewriteResult()
    if not mappings:
        return result

    classifier = TokenClassifier(config)
    for artifact in find_artifacts(config.build_dir, config.include, config.exclude.files):
        path = artifact.path
        try:
            original = read_text(path)
            rewritten = rewrite_content(
                original, artifact.kind, mappings, classifier, config, dynamic_bases
            )
            result.skipped_for_consistency += rewritten.skipped_for_consistency
            if not rewritten.modified(original):
                continue
            if not dry_run:
                if config.backup:
                    backup_file(path)
                atomic_write_text(path, rewritten.content)
        except (OSError, ValueError) as exc:
            result.errors.append(f"Error rewriting {path}: {exc}")
            log_event(logger, logging.WARNING, "rewrite_error", path=str(path), error=str(exc))
            continue

        result.files_modified += 1
        result.modified_files.append(path)
        result.replacements += rewritten.replacements
        delta = len(original.encode("utf-8")) - len(rewritten.content.encode("utf-8"))
        result.bytes_changed += delta
        log_event(
            logger,
            logging.DEBUG,
            "file_rewritten",
            path=str(path),
            replacements=rewritten.replacements,
            dry_run=dry_run,
        )

    log_event(
        logger,
        logging.INFO,
        "rewrite_done",
        files_modified=result.files_modified,
        replacements=result.replacements,
        bytes_changed=result.bytes_changed,
        skipped_for_consistency=result.skipped_for_consistency,
        errors=len(result.errors),
        dry_run=dry_run,
    )
    return result
