from kubescope.findings import Severity, ValidationFinding
from kubescope.snapshot import ResourceSnapshot


class ValidationCheck:
    """
    Base class for all validation checks.
    """

    # ---- Metadata (mandatory) ----
    name: str = "base-check"
    category: str = "Generic"
    severity: Severity = Severity.WARNING
    priority: int = 100
    title: str = ""
    details: str = ""

    # ---- Contract requirements ----
    requires: list[str] = []  # snapshot collections, e.g. ["services", "pods"]

    def evaluate(self, snapshot: ResourceSnapshot) -> list[ValidationFinding]:
        """
        Must return a (possibly empty) list of ValidationFinding.
        """
        raise NotImplementedError

    def finding(
        self, objects: list[str], id: str | None = None, details: str | None = None
    ) -> list[ValidationFinding]:
        """Wrap implicated objects into this check's finding, or nothing."""
        if not objects:
            return []
        return [
            ValidationFinding(
                id=id or self.name,
                severity=self.severity,
                title=self.title,
                details=details or self.details,
                objects=list(objects),
            )
        ]
