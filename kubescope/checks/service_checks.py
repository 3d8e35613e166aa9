from kubescope.checks.base_check import ValidationCheck
from kubescope.findings import Severity
from kubescope.joins import ns_key, pods_matching
from kubescope.model import (
    count_endpoints,
    get_name,
    get_namespace,
    object_ref,
    pod_ready,
    service_selector,
    service_type,
    slice_service_name,
)


class ServicesWithoutEndpointsCheck(ValidationCheck):
    name = "services-no-endpoints"
    category = "Service"
    severity = Severity.WARNING
    priority = 10
    title = "Services without endpoints"
    details = "Services have no ready endpoints in EndpointSlices."
    requires = ["services", "endpoint_slices"]

    def evaluate(self, snapshot):
        has_endpoints: set[str] = set()
        for endpoint_slice in snapshot.endpoint_slices:
            svc_name = slice_service_name(endpoint_slice)
            if svc_name and count_endpoints(endpoint_slice) > 0:
                has_endpoints.add(ns_key(get_namespace(endpoint_slice), svc_name))

        missing = [
            ns_key(get_namespace(svc), get_name(svc))
            for svc in snapshot.services
            if service_type(svc) != "ExternalName"
            and ns_key(get_namespace(svc), get_name(svc)) not in has_endpoints
        ]
        return self.finding(missing)


class PodsNotReadyBehindServiceCheck(ValidationCheck):
    """
    One finding per Service whose selected pods are not all Ready.
    Services without a selector are skipped rather than matched to every pod.
    """

    name = "pods-not-ready"
    category = "Service"
    severity = Severity.WARNING
    priority = 20
    title = "Pods not Ready behind Service"
    details = "Service selects pods that are not Ready."
    requires = ["services", "pods"]

    def evaluate(self, snapshot):
        findings = []
        for svc in snapshot.services:
            selector = service_selector(svc)
            if not selector:
                continue
            namespace, svc_name = get_namespace(svc), get_name(svc)
            matching = pods_matching(selector, namespace, snapshot.pods)
            not_ready = [object_ref(pod) for pod in matching if not pod_ready(pod)]
            findings.extend(
                self.finding(
                    not_ready,
                    id=f"pods-not-ready-{namespace}-{svc_name}",
                    details=f"Service {namespace}/{svc_name} has pods that are not Ready.",
                )
            )
        return findings


class EndpointSliceWithoutServiceCheck(ValidationCheck):
    name = "endpointslice-missing-service"
    category = "Service"
    severity = Severity.WARNING
    priority = 40
    title = "EndpointSlice without Service"
    details = "EndpointSlices reference a Service that is missing."
    requires = ["endpoint_slices"]

    def evaluate(self, snapshot):
        known = {ns_key(get_namespace(svc), get_name(svc)) for svc in snapshot.services}
        orphaned = []
        for endpoint_slice in snapshot.endpoint_slices:
            svc_name = slice_service_name(endpoint_slice)
            if not svc_name:
                continue
            if ns_key(get_namespace(endpoint_slice), svc_name) not in known:
                orphaned.append(ns_key(get_namespace(endpoint_slice), get_name(endpoint_slice)))
        return self.finding(orphaned)
