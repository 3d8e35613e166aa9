from kubescope.checks.base_check import ValidationCheck
from kubescope.findings import Severity
from kubescope.model import get_conditions, get_name

PRESSURE_CONDITIONS = (
    "MemoryPressure",
    "DiskPressure",
    "PIDPressure",
    "NetworkUnavailable",
)


class NodePressureCheck(ValidationCheck):
    name = "node-pressure"
    category = "Node"
    severity = Severity.CRITICAL
    priority = 50
    title = "Node pressure conditions"
    details = "Nodes report pressure conditions or network unavailable."
    requires = ["nodes"]

    def evaluate(self, snapshot):
        issues = [
            f"{get_name(node)} ({cond.get('type')})"
            for node in snapshot.nodes
            for cond in get_conditions(node)
            if cond.get("status") == "True" and cond.get("type") in PRESSURE_CONDITIONS
        ]
        return self.finding(issues)
