from kubescope.checks.base_check import ValidationCheck
from kubescope.findings import Severity
from kubescope.joins import ns_key
from kubescope.model import get_name, get_namespace, ingress_backends


class IngressMissingServiceCheck(ValidationCheck):
    name = "ingress-missing-service"
    category = "Ingress"
    severity = Severity.WARNING
    priority = 30
    title = "Ingress points to missing Service"
    details = "Ingress backend references a Service that does not exist."
    requires = ["ingresses"]

    def evaluate(self, snapshot):
        known = {ns_key(get_namespace(svc), get_name(svc)) for svc in snapshot.services}
        missing = []
        for ingress in snapshot.ingresses:
            namespace = get_namespace(ingress)
            for backend in ingress_backends(ingress):
                if ns_key(namespace, backend) not in known:
                    missing.append(f"{namespace}/{get_name(ingress)} -> {backend}")
        return self.finding(missing)
