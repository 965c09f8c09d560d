"""
Extraction Diagnostics.

Every extraction stage returns an ExtractionOutcome: the value it
managed to produce plus the diagnostics describing what degraded on
the way (an unsupported PDF filter, a missing ZIP entry, a failed
inflate). Diagnostics never stop the pipeline.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class ExtractionDiagnostic:
    """
    A single degradation reported by an extraction stage.

    Attributes:
        stage: Component that degraded (decompression, container, pdf,
            docx, xlsx, text, interpreter).
        message: Short human-readable description.
        detail: Optional extra context (entry name, filter name, error text).
    """
    stage: str
    message: str
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'stage': self.stage, 'message': self.message, 'detail': self.detail}

    def __str__(self) -> str:
        if self.detail:
            return f"[{self.stage}] {self.message} ({self.detail})"
        return f"[{self.stage}] {self.message}"


@dataclass
class ExtractionOutcome(Generic[T]):
    """
    Value produced by an extraction stage together with its diagnostics.

    Example:
        >>> outcome = ExtractionOutcome(b"")
        >>> outcome.add("container", "ZIP entry missing", "word/document.xml")
        >>> outcome.degraded
        True
    """
    value: T
    diagnostics: List[ExtractionDiagnostic] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        """True when at least one diagnostic was recorded."""
        return bool(self.diagnostics)

    def add(self, stage: str, message: str, detail: Optional[str] = None) -> ExtractionDiagnostic:
        """Record a diagnostic and return it."""
        diagnostic = ExtractionDiagnostic(stage, message, detail)
        self.diagnostics.append(diagnostic)
        return diagnostic

    def absorb(self, other: 'ExtractionOutcome[U]') -> U:
        """Take over the diagnostics of a nested outcome and return its value."""
        self.diagnostics.extend(other.diagnostics)
        return other.value
