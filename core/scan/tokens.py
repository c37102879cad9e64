"""Per-token classification and class-list normalization."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from core.config.models import OptimizerConfig, SafelistConfig


class TokenClass(str, Enum):
    """Three-way verdict for a single class token."""

    INCLUDED = "included"
    PRESERVED = "preserved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class NormalizedClasses:
    """A class list split by verdict, keyed by its sorted included tokens."""

    key: str
    classes: list[str]
    excluded_classes: list[str]
    rejected_classes: list[str]

    @property
    def consolidatable(self) -> bool:
        return bool(self.classes) and not self.rejected_classes


def contains_dynamic_prefix(token: str, dynamic_prefixes: list[str]) -> bool:
    """Match icon families: `fa-` style prefixes by startswith, bare ones as `name` or `name-*`."""

    for prefix in dynamic_prefixes:
        if prefix.endswith("-"):
            if token.startswith(prefix):
                return True
        elif token == prefix or token.startswith(f"{prefix}-"):
            return True
    return False


def is_safelisted(token: str, safelist: SafelistConfig, patterns: list[re.Pattern[str]]) -> bool:
    if any(token.startswith(prefix) for prefix in safelist.prefixes):
        return True
    if any(token.endswith(suffix) for suffix in safelist.suffixes):
        return True
    if token in safelist.classes:
        return True
    return any(pattern.search(token) for pattern in patterns)


class TokenClassifier:
    """Classify tokens against the safelist and icon-family prefixes of one config."""

    def __init__(self, config: OptimizerConfig) -> None:
        self._safelist = config.exclude
        self._patterns = [re.compile(pattern) for pattern in config.exclude.patterns]
        self._dynamic_prefixes = config.dynamic_prefixes if config.exclude_dynamic_patterns else []

    def classify(self, token: str) -> TokenClass:
        if is_safelisted(token, self._safelist, self._patterns):
            return TokenClass.PRESERVED
        if self._dynamic_prefixes and contains_dynamic_prefix(token, self._dynamic_prefixes):
            return TokenClass.REJECTED
        return TokenClass.INCLUDED

    def normalize(self, class_string: str) -> NormalizedClasses:
        classes: list[str] = []
        excluded: list[str] = []
        rejected: list[str] = []
        for token in class_string.split():
            verdict = self.classify(token)
            if verdict is TokenClass.INCLUDED:
                classes.append(token)
            elif verdict is TokenClass.PRESERVED:
                excluded.append(token)
            else:
                rejected.append(token)

        return NormalizedClasses(
            key=normalized_key(classes),
            classes=classes,
            excluded_classes=excluded,
            rejected_classes=rejected,
        )


def normalized_key(classes: list[str]) -> str:
    return " ".join(sorted(classes))
