from collections import defaultdict
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from typing import Any

from kubescope.joins import ns_key
from kubescope.model import (
    get_name,
    get_namespace,
    ingress_routes,
    service_external_ips,
    service_type,
    slice_service_name,
)


@dataclass(frozen=True)
class ContainerPortMapping:
    namespace: str
    pod: str
    container: str
    port: int
    protocol: str
    host_port: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "namespace": self.namespace,
            "pod": self.pod,
            "container": self.container,
            "port": self.port,
            "protocol": self.protocol,
            "hostPort": self.host_port,
        }


@dataclass(frozen=True)
class ServicePortMapping:
    namespace: str
    service: str
    type: str
    port: int
    target_port: str
    protocol: str
    node_port: int = 0
    external_ips: list[str] = field(default_factory=list)
    pod_endpoints: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "namespace": self.namespace,
            "service": self.service,
            "type": self.type,
            "port": self.port,
            "targetPort": self.target_port,
            "protocol": self.protocol,
            "nodePort": self.node_port,
            "externalIps": list(self.external_ips),
            "podEndpoints": list(self.pod_endpoints),
        }


@dataclass(frozen=True)
class IngressPortMapping:
    namespace: str
    ingress: str
    host: str
    path: str
    service: str
    port: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class PortsReport:
    services: list[ServicePortMapping] = field(default_factory=list)
    containers: list[ContainerPortMapping] = field(default_factory=list)
    ingresses: list[IngressPortMapping] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "services": [s.to_dict() for s in self.services],
            "containers": [c.to_dict() for c in self.containers],
            "ingresses": [i.to_dict() for i in self.ingresses],
        }


def target_port_string(target: Any) -> str:
    if target is None:
        return ""
    return str(target)


def service_port_matches(port: dict[str, Any], slice_port: dict[str, Any]) -> bool:
    """
    Named ports match by name; otherwise an integer targetPort matches the
    slice port number; otherwise the service port number itself.
    """
    slice_number = slice_port.get("port")
    if port.get("name") and slice_port.get("name") is not None:
        return port["name"] == slice_port["name"]
    target = port.get("targetPort")
    if isinstance(target, int) and slice_number is not None:
        return target == slice_number
    number = port.get("port") or 0
    return number != 0 and slice_number is not None and number == slice_number


def service_endpoints_for_port(
    port: dict[str, Any], endpoint_slices: Iterable[dict[str, Any]]
) -> list[str]:
    endpoints: list[str] = []
    for endpoint_slice in endpoint_slices:
        for slice_port in endpoint_slice.get("ports") or []:
            if slice_port.get("port") is None:
                continue
            if not service_port_matches(port, slice_port):
                continue
            protocol = slice_port.get("protocol") or "TCP"
            for endpoint in endpoint_slice.get("endpoints") or []:
                for address in endpoint.get("addresses") or []:
                    endpoints.append(f"{address}:{slice_port['port']}/{protocol}")
    return endpoints


def build_container_ports(pods: Iterable[dict[str, Any]]) -> list[ContainerPortMapping]:
    rows = []
    for pod in pods:
        for container in (pod.get("spec") or {}).get("containers") or []:
            for port in container.get("ports") or []:
                rows.append(
                    ContainerPortMapping(
                        namespace=get_namespace(pod),
                        pod=get_name(pod),
                        container=container.get("name", ""),
                        port=port.get("containerPort", 0),
                        protocol=port.get("protocol", "TCP"),
                        host_port=port.get("hostPort", 0) or 0,
                    )
                )
    return rows


def build_ingress_ports(ingresses: Iterable[dict[str, Any]]) -> list[IngressPortMapping]:
    return [
        IngressPortMapping(
            namespace=get_namespace(ingress),
            ingress=get_name(ingress),
            host=route["host"],
            path=route["path"],
            service=route["service"],
            port=route["port"],
        )
        for ingress in ingresses
        for route in ingress_routes(ingress)
    ]


# ----------------------------
# Port correlation
# ----------------------------


def build_ports(
    pods: Iterable[dict[str, Any]] | None = None,
    services: Iterable[dict[str, Any]] | None = None,
    endpoint_slices: Iterable[dict[str, Any]] | None = None,
    ingresses: Iterable[dict[str, Any]] | None = None,
) -> PortsReport:
    slices_by_service: dict[str, list[dict[str, Any]]] = defaultdict(list)
    for endpoint_slice in endpoint_slices or []:
        svc_name = slice_service_name(endpoint_slice)
        if svc_name:
            slices_by_service[ns_key(get_namespace(endpoint_slice), svc_name)].append(
                endpoint_slice
            )

    service_rows = []
    for svc in services or []:
        namespace, name = get_namespace(svc), get_name(svc)
        related = slices_by_service.get(ns_key(namespace, name), [])
        external = service_external_ips(svc)
        for port in (svc.get("spec") or {}).get("ports") or []:
            service_rows.append(
                ServicePortMapping(
                    namespace=namespace,
                    service=name,
                    type=service_type(svc),
                    port=port.get("port", 0),
                    target_port=target_port_string(port.get("targetPort")),
                    protocol=port.get("protocol", "TCP"),
                    node_port=port.get("nodePort", 0) or 0,
                    external_ips=list(external),
                    pod_endpoints=service_endpoints_for_port(port, related),
                )
            )

    service_rows.sort(key=lambda row: (row.namespace, row.service))

    return PortsReport(
        services=service_rows,
        containers=build_container_ports(pods or []),
        ingresses=build_ingress_ports(ingresses or []),
    )
