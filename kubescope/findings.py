from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"

    @property
    def sort_order(self) -> int:
        return {Severity.CRITICAL: 0, Severity.WARNING: 1}[self]


@dataclass(frozen=True)
class ValidationFinding:
    """
    One cross-resource health finding.

    A finding always implicates at least one object; a check that finds
    nothing returns no finding at all.
    """

    id: str
    severity: Severity
    title: str
    details: str
    objects: list[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.objects:
            raise ValueError(f"Finding '{self.id}' must implicate at least one object")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "severity": self.severity.value,
            "title": self.title,
            "details": self.details,
            "objects": list(self.objects),
        }


def sort_findings(findings: list[ValidationFinding]) -> list[ValidationFinding]:
    """Critical before warning, then by title. Stable within ties."""
    return sorted(findings, key=lambda f: (f.severity.sort_order, f.title))
