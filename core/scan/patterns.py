"""Class-attribute syntaxes recognised in built markup, scripts and fragments.

Each syntax is an independent matcher whose regex exposes three named groups:
`open` (everything up to and including the opening quote), `value` (the raw
class list) and `close` (the closing quote, or the start of a dynamic suffix).
New syntaxes are added by appending to CLASS_SYNTAXES.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Literal

SyntaxRole = Literal["value", "dynamic_base"]


@dataclass(frozen=True)
class ClassSyntax:
    """One way a class list can be written in a build artifact."""

    name: str
    regex: re.Pattern[str]
    role: SyntaxRole = "value"
    supports_data_attr: bool = False

    def find(self, content: str) -> Iterator[ClassMatch]:
        for match in self.regex.finditer(content):
            yield ClassMatch(
                syntax=self,
                value=match.group("value"),
                start=match.start("value"),
                end=match.end("value"),
            )


@dataclass(frozen=True)
class ClassMatch:
    syntax: ClassSyntax
    value: str
    start: int
    end: int


CLASS_SYNTAXES: tuple[ClassSyntax, ...] = (
    ClassSyntax(
        "jsx_double",
        re.compile(r'(?P<open>className\s*=\s*")(?P<value>[^"]+)(?P<close>")'),
        supports_data_attr=True,
    ),
    ClassSyntax(
        "jsx_single",
        re.compile(r"(?P<open>className\s*=\s*')(?P<value>[^']+)(?P<close>')"),
        supports_data_attr=True,
    ),
    ClassSyntax(
        "object_double",
        re.compile(r'(?P<open>className\s*:\s*")(?P<value>[^"]+)(?P<close>")'),
    ),
    ClassSyntax(
        "object_single",
        re.compile(r"(?P<open>className\s*:\s*')(?P<value>[^']+)(?P<close>')"),
    ),
    ClassSyntax(
        "minified_positional",
        re.compile(r'(?P<open>"className"\s*,\s*")(?P<value>[^"]+)(?P<close>")'),
    ),
    ClassSyntax(
        "html_double",
        re.compile(r'(?P<open>\bclass\s*=\s*")(?P<value>[^"]+)(?P<close>")'),
        supports_data_attr=True,
    ),
    ClassSyntax(
        "html_single",
        re.compile(r"(?P<open>\bclass\s*=\s*')(?P<value>[^']+)(?P<close>')"),
        supports_data_attr=True,
    ),
    ClassSyntax(
        "html_entity",
        re.compile(r"(?P<open>\bclass=&quot;)(?P<value>[^&]+)(?P<close>&quot;)"),
        supports_data_attr=True,
    ),
    ClassSyntax(
        "html_numeric_entity",
        re.compile(r"(?P<open>\bclass=&#34;)(?P<value>[^&]+)(?P<close>&#34;)"),
        supports_data_attr=True,
    ),
    ClassSyntax(
        "escaped_fragment",
        re.compile(r'(?P<open>\\"className\\"\s*:\s*\\")(?P<value>[^"\\]+)(?P<close>\\")'),
    ),
    ClassSyntax(
        "template_static",
        re.compile(r"(?P<open>(?:className|\bclass)\s*:\s*`)(?P<value>[^`$]+)(?P<close>`)"),
    ),
    ClassSyntax(
        "template_dynamic",
        re.compile(
            r"(?P<open>(?:className\s*[:=]|\bclass\s*:)\s*`)(?P<value>[^`$]+?)(?P<close>\s*\$\{)"
        ),
        role="dynamic_base",
    ),
    ClassSyntax(
        "concat_double",
        re.compile(r'(?P<open>className\s*:\s*""\s*\.concat\s*\(\s*")(?P<value>[^"]+)(?P<close>")'),
        role="dynamic_base",
    ),
    ClassSyntax(
        "concat_single",
        re.compile(r"(?P<open>className\s*:\s*''\s*\.concat\s*\(\s*')(?P<value>[^']+)(?P<close>')"),
        role="dynamic_base",
    ),
)

VALUE_SYNTAXES: tuple[ClassSyntax, ...] = tuple(s for s in CLASS_SYNTAXES if s.role == "value")
DYNAMIC_BASE_SYNTAXES: tuple[ClassSyntax, ...] = tuple(
    s for s in CLASS_SYNTAXES if s.role == "dynamic_base"
)

_TERNARY_RE = re.compile(r"\?")
_CALL_RE = re.compile(r"\w+\s*\(")
_BARE_IDENTIFIER_RE = re.compile(r"[a-z][a-zA-Z0-9]*")


def is_dynamic_class_string(value: str) -> bool:
    """Return True when the value holds an expression that only resolves at runtime."""

    if "${" in value:
        return True
    if _TERNARY_RE.search(value) and ":" in value:
        return True
    if _CALL_RE.search(value):
        return True
    return bool(_BARE_IDENTIFIER_RE.fullmatch(value))


def iter_class_values(content: str) -> Iterator[ClassMatch]:
    """Yield static class-list values, each source span at most once."""

    seen_spans: set[int] = set()
    for syntax in VALUE_SYNTAXES:
        for match in syntax.find(content):
            if match.start in seen_spans:
                continue
            seen_spans.add(match.start)
            if not match.value.strip() or is_dynamic_class_string(match.value):
                continue
            yield match


def extract_dynamic_base_strings(content: str) -> list[str]:
    """Return the static class prefix of template literals and `"".concat(...)` calls."""

    results: list[str] = []
    for syntax in DYNAMIC_BASE_SYNTAXES:
        for match in syntax.find(content):
            base = match.value.strip()
            if base:
                results.append(base)
    return results


def line_number(content: str, offset: int) -> int:
    return content.count("\n", 0, offset) + 1
