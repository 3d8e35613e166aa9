from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from kubescope.joins import pods_matching, selector_string
from kubescope.model import get_name, get_namespace, service_selector
from kubescope.ports import IngressPortMapping, build_ingress_ports

NO_SELECTOR = "(none)"


@dataclass(frozen=True)
class ServiceIntent:
    namespace: str
    service: str
    selector: str
    pods: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "namespace": self.namespace,
            "service": self.service,
            "selector": self.selector,
            "pods": list(self.pods),
        }


@dataclass(frozen=True)
class NetworkPolicySummary:
    namespace: str
    name: str
    types: list[str]
    pod_selector: str
    ingress_rules: int
    egress_rules: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "namespace": self.namespace,
            "name": self.name,
            "types": list(self.types),
            "podSelector": self.pod_selector,
            "ingressRules": self.ingress_rules,
            "egressRules": self.egress_rules,
        }


@dataclass
class TrafficReport:
    service_intents: list[ServiceIntent] = field(default_factory=list)
    ingress_intents: list[IngressPortMapping] = field(default_factory=list)
    network_policies: list[NetworkPolicySummary] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "serviceIntents": [s.to_dict() for s in self.service_intents],
            "ingressIntents": [i.to_dict() for i in self.ingress_intents],
            "networkPolicies": [p.to_dict() for p in self.network_policies],
        }


def map_service_intents(
    services: Iterable[dict[str, Any]], pods: Iterable[dict[str, Any]]
) -> list[ServiceIntent]:
    """
    Selector-less services get the "(none)" sentinel and no pods instead
    of being matched against every pod in the namespace.
    """
    pods = list(pods)
    intents = []
    for svc in services:
        selector = service_selector(svc)
        namespace, name = get_namespace(svc), get_name(svc)
        if not selector:
            intents.append(ServiceIntent(namespace, name, NO_SELECTOR, []))
            continue
        matches = [get_name(pod) for pod in pods_matching(selector, namespace, pods)]
        intents.append(ServiceIntent(namespace, name, selector_string(selector), matches))
    return intents


def map_network_policies(
    policies: Iterable[dict[str, Any]],
) -> list[NetworkPolicySummary]:
    summaries = []
    for policy in policies:
        spec = policy.get("spec") or {}
        summaries.append(
            NetworkPolicySummary(
                namespace=get_namespace(policy),
                name=get_name(policy),
                types=list(spec.get("policyTypes") or []),
                pod_selector=selector_string(
                    (spec.get("podSelector") or {}).get("matchLabels")
                ),
                ingress_rules=len(spec.get("ingress") or []),
                egress_rules=len(spec.get("egress") or []),
            )
        )
    return summaries


def build_traffic(
    services: Iterable[dict[str, Any]] | None = None,
    pods: Iterable[dict[str, Any]] | None = None,
    ingresses: Iterable[dict[str, Any]] | None = None,
    network_policies: Iterable[dict[str, Any]] | None = None,
) -> TrafficReport:
    return TrafficReport(
        service_intents=map_service_intents(services or [], pods or []),
        ingress_intents=build_ingress_ports(ingresses or []),
        network_policies=map_network_policies(network_policies or []),
    )
