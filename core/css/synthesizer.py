"""Consolidated rule synthesis and one-time stylesheet injection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from core.css.stylesheet import StylesheetIndex, build_stylesheet_index, find_stylesheets
from core.css.utilities import parse_utility_class
from core.manifest.models import ClassMapping, VariantRule
from core.utils.errors import StylesheetNotFoundError
from core.utils.events import log_event
from core.utils.files import atomic_write_text, read_text

logger = logging.getLogger("classfold.css")

CSS_MARKER = "/* classfold consolidated classes */"


@dataclass
class SynthesisResult:
    css_text: str
    mappings: list[ClassMapping] = field(default_factory=list)
    dropped: list[ClassMapping] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class InjectionResult:
    target: Path
    injected: bool


def resolve_mapping(mapping: ClassMapping, index: StylesheetIndex) -> None:
    """Fill the mapping's declarations; stylesheet rules win over the built-in interpreter."""

    base: list[str] = []
    variants: dict[tuple[str | None, str], list[str]] = {}
    retained: list[str] = []

    for token in mapping.classes:
        rules = index.lookup(token)
        if rules:
            for rule in rules:
                if rule.is_base:
                    base.extend(rule.declarations)
                else:
                    variants.setdefault((rule.media, rule.pseudo), []).extend(rule.declarations)
            continue

        parsed = parse_utility_class(token)
        if parsed:
            base.extend(parsed)
        else:
            retained.append(token)

    mapping.css_declarations = _dedupe(base)
    ordered_keys = sorted(variants, key=lambda key: key[0] is not None)
    mapping.variants = [
        VariantRule(media=media, pseudo=pseudo, declarations=_dedupe(variants[(media, pseudo)]))
        for media, pseudo in ordered_keys
    ]
    mapping.retained_classes = retained


def render_rules(mappings: list[ClassMapping], css_layer: str | None = None) -> str:
    """Render the marker comment plus one rule block per synthetic name."""

    blocks: list[str] = []
    for mapping in mappings:
        selector = f".{mapping.consolidated}"
        if mapping.css_declarations:
            blocks.append(_rule_block(selector, mapping.css_declarations))
        for variant in mapping.variants:
            block = _rule_block(selector + variant.pseudo, variant.declarations)
            if variant.media is not None:
                block = f"@media {variant.media} {{\n{_indent(block)}\n}}"
            blocks.append(block)

    if not blocks:
        return ""
    body = "\n\n".join(blocks)
    if css_layer:
        return f"{CSS_MARKER}\n@layer {css_layer} {{\n{_indent(body)}\n}}\n"
    return f"{CSS_MARKER}\n{body}\n"


def synthesize_css(
    mappings: list[ClassMapping],
    build_root: Path,
    css_layer: str | None = None,
    *,
    index: StylesheetIndex | None = None,
) -> SynthesisResult:
    """Resolve every mapping and render the consolidated stylesheet text.

    Mappings that resolve to no declaration at all are dropped: rewriting them
    would strip styling without anything to replace it.
    """

    stylesheet_index = index if index is not None else build_stylesheet_index(build_root)
    kept: list[ClassMapping] = []
    dropped: list[ClassMapping] = []

    for mapping in mappings:
        resolve_mapping(mapping, stylesheet_index)
        if mapping.has_rules:
            kept.append(mapping)
        else:
            dropped.append(mapping)
            log_event(
                logger,
                logging.WARNING,
                "mapping_unresolved",
                name=mapping.consolidated,
                classes=mapping.classes,
            )
        if mapping.retained_classes:
            log_event(
                logger,
                logging.INFO,
                "tokens_retained",
                name=mapping.consolidated,
                retained=mapping.retained_classes,
            )

    css_text = render_rules(kept, css_layer)
    log_event(
        logger,
        logging.INFO,
        "synthesize_done",
        mappings=len(kept),
        dropped=len(dropped),
        css_bytes=len(css_text.encode("utf-8")),
    )
    return SynthesisResult(
        css_text=css_text,
        mappings=kept,
        dropped=dropped,
        errors=list(stylesheet_index.errors),
    )


def find_injection_target(build_root: Path) -> InjectionResult:
    """Pick the stylesheet to inject into: an already-marked one, else the largest."""

    stylesheets = find_stylesheets(build_root)
    if not stylesheets:
        raise StylesheetNotFoundError(f"No CSS files found in build output: {build_root}")

    target: Path | None = None
    largest = -1
    for path in stylesheets:
        try:
            content = read_text(path)
        except (OSError, ValueError) as exc:
            log_event(
                logger,
                logging.WARNING,
                "injection_candidate_skipped",
                path=str(path),
                error=str(exc),
            )
            continue
        if CSS_MARKER in content:
            return InjectionResult(target=path, injected=False)
        size = len(content.encode("utf-8"))
        if size > largest:
            largest = size
            target = path

    if target is None:
        raise StylesheetNotFoundError(f"No readable CSS files found in build output: {build_root}")
    return InjectionResult(target=target, injected=True)


def inject_consolidated_css(build_root: Path, css_text: str) -> InjectionResult:
    """Append css_text to exactly one stylesheet, at most once per build."""

    planned = find_injection_target(build_root)
    if not planned.injected or not css_text:
        return InjectionResult(target=planned.target, injected=False)

    existing = read_text(planned.target)
    atomic_write_text(planned.target, f"{existing.rstrip()}\n\n{css_text}")
    log_event(logger, logging.INFO, "css_injected", target=str(planned.target))
    return planned


def _rule_block(selector: str, declarations: list[str]) -> str:
    lines = "\n".join(f"  {declaration};" for declaration in declarations)
    return f"{selector} {{\n{lines}\n}}"


def _indent(text: str) -> str:
    return "\n".join(f"  {line}" if line else line for line in text.split("\n"))


def _dedupe(declarations: list[str]) -> list[str]:
    return list(dict.fromkeys(declarations))
