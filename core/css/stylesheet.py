"""Index of single-class utility rules found in compiled build stylesheets."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

import cssutils  # type: ignore[import-untyped]

from core.scan.locator import find_files
from core.utils.events import log_event
from core.utils.files import read_text

logger = logging.getLogger("classfold.css")

cssutils.log.setLevel(logging.CRITICAL)

STYLESHEET_PATTERNS: list[str] = [
    "static/**/*.css",
    "standalone/.next/static/**/*.css",
    "browser/**/*.css",
    "_astro/**/*.css",
    "client/_astro/**/*.css",
    "public/_nuxt/**/*.css",
    "_app/**/*.css",
    "client/**/*.css",
    "assets/**/*.css",
    "**/*.css",
]

_SIMPLE_CLASS_SELECTOR_RE = re.compile(
    r"\.(?P<name>(?:\\[0-9a-fA-F]{1,6}\s?|\\.|[\w-])+)"
    r"(?P<pseudo>(?::{1,2}[\w-]+(?:\([^()]*\))?)*)"
)
_HEX_ESCAPE_RE = re.compile(r"\\([0-9a-fA-F]{1,6})\s?")
_CHAR_ESCAPE_RE = re.compile(r"\\(.)")
_BLOCK_AT_RULE_RE = re.compile(r"@(?:layer|supports)\b[^;{}]*\{")


@dataclass(frozen=True)
class UtilityRule:
    """Declarations of one `.token[:pseudo]` rule, optionally inside an @media block."""

    declarations: tuple[str, ...]
    pseudo: str = ""
    media: str | None = None

    @property
    def is_base(self) -> bool:
        return not self.pseudo and self.media is None


@dataclass
class StylesheetIndex:
    rules: dict[str, list[UtilityRule]] = field(default_factory=dict)
    files: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def lookup(self, class_name: str) -> list[UtilityRule]:
        return self.rules.get(class_name, [])

    def add_stylesheet_text(self, content: str) -> None:
        sheet = cssutils.parseString(unwrap_block_at_rules(content), validate=False)
        self._walk(sheet.cssRules, media=None)

    def _walk(self, rules, media: str | None) -> None:
        for rule in rules:
            if rule.type == rule.STYLE_RULE:
                self._add_style_rule(rule, media)
            elif rule.type == rule.MEDIA_RULE:
                self._walk(rule.cssRules, media=rule.media.mediaText)

    def _add_style_rule(self, rule, media: str | None) -> None:
        declarations = tuple(
            _declaration_text(prop) for prop in rule.style.getProperties(all=True)
        )
        if not declarations:
            return
        for selector in rule.selectorList:
            match = _SIMPLE_CLASS_SELECTOR_RE.fullmatch(selector.selectorText.strip())
            if not match:
                continue
            class_name = unescape_class_name(match.group("name"))
            self.rules.setdefault(class_name, []).append(
                UtilityRule(declarations=declarations, pseudo=match.group("pseudo"), media=media)
            )


def unwrap_block_at_rules(content: str) -> str:
    """Inline the bodies of @layer/@supports blocks, which cssutils keeps as opaque rules."""

    while True:
        match = _BLOCK_AT_RULE_RE.search(content)
        if match is None:
            return content
        close = _matching_brace(content, match.end() - 1)
        if close is None:
            return content[: match.start()] + content[match.end() :]
        content = content[: match.start()] + content[match.end() : close] + content[close + 1 :]


def _matching_brace(text: str, open_index: int) -> int | None:
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def unescape_class_name(escaped: str) -> str:
    """Turn a CSS-escaped class selector name (`md\\:flex`, `\\32xl`) back into the token."""

    text = _HEX_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 16)), escaped)
    return _CHAR_ESCAPE_RE.sub(lambda m: m.group(1), text)


def find_stylesheets(build_dir: Path) -> list[Path]:
    return [path for path in find_files(build_dir, STYLESHEET_PATTERNS) if path.suffix == ".css"]


def build_stylesheet_index(build_dir: Path) -> StylesheetIndex:
    """Parse every stylesheet under build_dir; unreadable files become warnings."""

    index = StylesheetIndex()
    for path in find_stylesheets(build_dir):
        try:
            index.add_stylesheet_text(read_text(path))
        except Exception as exc:  # noqa: BLE001
            index.errors.append(f"Error parsing stylesheet {path}: {exc}")
            log_event(logger, logging.WARNING, "stylesheet_error", path=str(path), error=str(exc))
            continue
        index.files.append(path)

    log_event(
        logger,
        logging.INFO,
        "stylesheet_index",
        files=len(index.files),
        classes=len(index.rules),
        errors=len(index.errors),
    )
    return index


def _declaration_text(prop) -> str:
    text = f"{prop.name}: {prop.value}"
    if prop.priority:
        text += " !important"
    return text
