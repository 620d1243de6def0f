"""
Finding models shared by the structure, consistency and tree checks.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Severity(Enum):
    """Severity levels for findings."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown severity: {value!r}. Expected one of: {[s.value for s in cls]}"
            ) from None


@dataclass
class Finding:
    """A single rule violation or observation."""

    code: str
    severity: Severity
    message: str
    layer: Optional[int] = None
    path: Optional[str] = None
    line: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
            "layer": self.layer,
            "path": self.path,
            "line": self.line,
            "metadata": self.metadata,
        }


_SEVERITY_ORDER = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}


@dataclass
class FindingReport:
    """Collection of findings with summary helpers."""

    findings: List[Finding] = field(default_factory=list)

    def extend(self, findings: List[Finding]) -> None:
        self.findings.extend(findings)

    def counts_by_severity(self) -> Dict[str, int]:
        counts = Counter(f.severity.value for f in self.findings)
        return {s.value: counts.get(s.value, 0) for s in Severity}

    def has_errors(self) -> bool:
        return any(f.is_error for f in self.findings)

    def for_layer(self, number: int) -> List[Finding]:
        return [f for f in self.findings if f.layer == number]

    def sorted(self) -> List[Finding]:
        """Findings ordered by layer, then severity, then code."""
        return sorted(
            self.findings,
            key=lambda f: (
                f.layer if f.layer is not None else -1,
                _SEVERITY_ORDER[f.severity],
                f.code,
            ),
        )

    def __len__(self) -> int:
        return len(self.findings)

    def __iter__(self):
        return iter(self.findings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_findings": len(self.findings),
            "findings_by_severity": self.counts_by_severity(),
            "findings": [f.to_dict() for f in self.sorted()],
        }
