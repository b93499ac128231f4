"""
Explicit result values returned by pipeline stages.

Each stage hands back a ``StageOutcome`` instead of raising, so the
orchestrator decides what is fatal and what is only a warning.
"""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from .exceptions import JobError, UnitError

T = TypeVar("T")


@dataclass
class StageOutcome(Generic[T]):
    """
    Result of one pipeline stage.

    Attributes:
        value: The stage's output, None when the stage failed.
        warnings: Unit-level failures that were skipped.
        error: The fatal error, if the stage failed.
    """

    value: T | None = None
    warnings: list[UnitError] = field(default_factory=list)
    error: JobError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T, warnings: list[UnitError] | None = None) -> "StageOutcome[T]":
        return cls(value=value, warnings=list(warnings or []))

    @classmethod
    def failure(cls, error: JobError, warnings: list[UnitError] | None = None) -> "StageOutcome[T]":
        return cls(error=error, warnings=list(warnings or []))


@dataclass
class ExtractedText:
    """Text pulled from a PDF and the method that produced it."""

    text: str
    method: str  # "native" or "ocr"
    pages: int = 0
