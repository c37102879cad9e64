"""Models for class mappings, run metrics and the persisted manifest."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

MANIFEST_VERSION = "1"
TOOL_NAME = "classfold"


class VariantRule(BaseModel):
    """Declarations scoped to a pseudo-class and/or media query."""

    model_config = ConfigDict(extra="forbid")

    media: str | None = None
    pseudo: str = ""
    declarations: list[str] = Field(default_factory=list)


class ClassMapping(BaseModel):
    """One consolidated token set and everything needed to rewrite and style it.

    Rules:
    - classes are folded into `consolidated`
    - excluded_classes were safelisted and stay next to the synthetic name
    - retained_classes could not be resolved to CSS and also stay verbatim
    """

    model_config = ConfigDict(extra="forbid")

    original: str
    consolidated: str
    normalized_key: str
    classes: list[str]
    excluded_classes: list[str] = Field(default_factory=list)
    retained_classes: list[str] = Field(default_factory=list)
    css_declarations: list[str] = Field(default_factory=list)
    variants: list[VariantRule] = Field(default_factory=list)
    frequency: int
    bytes_saved: int

    @property
    def has_rules(self) -> bool:
        return bool(self.css_declarations) or any(v.declarations for v in self.variants)


class TopConsolidation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    original: str
    consolidated: str
    frequency: int
    bytes_saved: int


class OptimizationMetrics(BaseModel):
    """Aggregate numbers for one run."""

    model_config = ConfigDict(extra="forbid")

    total_files_scanned: int = 0
    total_files_modified: int = 0
    total_class_strings_found: int = 0
    unique_class_patterns: int = 0
    consolidated_patterns: int = 0
    total_occurrences_replaced: int = 0
    original_total_bytes: int = 0
    bytes_saved: int = 0
    consolidated_css_bytes: int = 0
    net_bytes_saved: int = 0
    percentage_reduction: float = 0.0
    top_consolidations: list[TopConsolidation] = Field(default_factory=list)


class MappingManifest(BaseModel):
    """Persisted record of one run; never merged with earlier manifests."""

    model_config = ConfigDict(extra="forbid")

    version: str = MANIFEST_VERSION
    tool: str = TOOL_NAME
    build_dir: str
    created: str
    config: dict[str, Any] = Field(default_factory=dict)
    mappings: list[ClassMapping] = Field(default_factory=list)
    metrics: OptimizationMetrics = Field(default_factory=OptimizationMetrics)
