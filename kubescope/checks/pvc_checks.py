from kubescope.checks.base_check import ValidationCheck
from kubescope.findings import Severity
from kubescope.model import object_ref


class PVCPendingCheck(ValidationCheck):
    name = "pvc-pending"
    category = "PersistentVolumeClaim"
    severity = Severity.WARNING
    priority = 60
    title = "PVCs stuck Pending"
    details = "Some PersistentVolumeClaims are not bound."
    requires = ["pvcs"]

    def evaluate(self, snapshot):
        pending = [
            object_ref(pvc)
            for pvc in snapshot.pvcs
            if (pvc.get("status") or {}).get("phase") == "Pending"
        ]
        return self.finding(pending)
