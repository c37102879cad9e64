"""Custom exceptions for core logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.orchestrator.pipeline import RunOutput


class ConfigError(ValueError):
    """Raised when configuration cannot be loaded or fails validation."""

    def __init__(self, message: str, *, problems: list[str] | None = None) -> None:
        super().__init__(message)
        self.problems = problems or []


class NamingError(Exception):
    """Raised when the synthetic name space is exhausted."""


class StylesheetNotFoundError(Exception):
    """Raised when the build has no stylesheet to inject consolidated rules into."""

    def __init__(self, message: str, *, run_output: RunOutput | None = None) -> None:
        super().__init__(message)
        self.run_output = run_output
