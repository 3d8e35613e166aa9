import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from kubescope.joins import index_by_name, ns_key
from kubescope.model import (
    endpoint_slice_status,
    get_labels,
    get_name,
    get_namespace,
    get_pod_ip,
    get_pod_phase,
    ingress_backends,
    ingress_class_name,
    node_ready_status,
    service_type,
    slice_addresses,
    slice_service_name,
)

logger = logging.getLogger(__name__)


class NodeKind(str, Enum):
    ENDPOINT_SLICE = "EndpointSlice"
    INGRESS = "Ingress"
    NODE = "Node"
    POD = "Pod"
    SERVICE = "Service"

    @property
    def prefix(self) -> str:
        return self.value.lower()


class RelationKind(str, Enum):
    SERVICE_TO_ENDPOINT_SLICE = "ServiceToEndpointSlice"
    ENDPOINT_SLICE_TO_POD = "EndpointSliceToPod"
    INGRESS_TO_SERVICE = "IngressToService"


def identity_key(kind: NodeKind, name: str, namespace: str = "") -> str:
    if kind is NodeKind.NODE:
        return f"{kind.prefix}:{name}"
    return f"{kind.prefix}:{namespace}/{name}"


@dataclass(frozen=True)
class TopologyNode:
    id: str
    kind: NodeKind
    name: str
    namespace: str = ""
    status: str = ""
    labels: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "kind": self.kind.value, "name": self.name}
        if self.namespace:
            data["namespace"] = self.namespace
        if self.status:
            data["status"] = self.status
        if self.labels:
            data["labels"] = dict(self.labels)
        return data


@dataclass(frozen=True)
class TopologyEdge:
    id: str
    source: str
    target: str
    kind: RelationKind

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "from": self.source,
            "to": self.target,
            "kind": self.kind.value,
        }


@dataclass
class Topology:
    nodes: list[TopologyNode] = field(default_factory=list)
    edges: list[TopologyEdge] = field(default_factory=list)

    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


class _GraphBuilder:
    """
    Accumulates nodes keyed by identity, so a repeated source object
    never produces two nodes with the same key.
    """

    def __init__(self):
        self.nodes: dict[str, TopologyNode] = {}
        self.edges: list[TopologyEdge] = []

    def add_node(
        self, kind: NodeKind, obj: dict[str, Any], status: str, cluster_scoped=False
    ) -> str:
        name = get_name(obj)
        namespace = "" if cluster_scoped else get_namespace(obj)
        key = identity_key(kind, name, namespace)
        if key in self.nodes:
            logger.debug("Duplicate %s %s ignored", kind.value, key)
            return key
        self.nodes[key] = TopologyNode(
            id=key,
            kind=kind,
            name=name,
            namespace=namespace,
            status=status,
            labels=dict(get_labels(obj)),
        )
        return key

    def add_edge(
        self, source: str, target: str, kind: RelationKind, suffix: str = ""
    ) -> None:
        if source not in self.nodes or target not in self.nodes:
            return
        edge_id = f"{source}->{target}"
        if suffix:
            edge_id = f"{edge_id}:{suffix}"
        self.edges.append(TopologyEdge(id=edge_id, source=source, target=target, kind=kind))

    def build(self) -> Topology:
        nodes = sorted(self.nodes.values(), key=lambda n: (n.kind.value, n.name))
        return Topology(nodes=nodes, edges=list(self.edges))


# ----------------------------
# Graph assembly
# ----------------------------


def build_topology(
    nodes: Iterable[dict[str, Any]] | None = None,
    pods: Iterable[dict[str, Any]] | None = None,
    services: Iterable[dict[str, Any]] | None = None,
    ingresses: Iterable[dict[str, Any]] | None = None,
    endpoint_slices: Iterable[dict[str, Any]] | None = None,
) -> Topology:
    """
    Join Nodes, Pods, Services, EndpointSlices and Ingresses into a graph.

    Joins are heuristic: EndpointSlice -> Service by the owning-service
    label, EndpointSlice -> Pod by endpoint address vs pod IP, and
    Ingress -> Service by backend service name. Anything that does not
    resolve is dropped; the graph only gets smaller, never inconsistent.
    """
    nodes = list(nodes or [])
    pods = list(pods or [])
    services = list(services or [])
    ingresses = list(ingresses or [])
    endpoint_slices = list(endpoint_slices or [])

    graph = _GraphBuilder()

    # Pod IPs are reused across pod lifecycles, so the last pod wins
    pod_by_ip: dict[str, str] = {}
    for pod in pods:
        key = graph.add_node(NodeKind.POD, pod, get_pod_phase(pod))
        ip = get_pod_ip(pod)
        if ip:
            pod_by_ip[ip] = key

    for node in nodes:
        graph.add_node(NodeKind.NODE, node, node_ready_status(node), cluster_scoped=True)

    for svc in services:
        graph.add_node(NodeKind.SERVICE, svc, service_type(svc))

    for endpoint_slice in endpoint_slices:
        graph.add_node(
            NodeKind.ENDPOINT_SLICE, endpoint_slice, endpoint_slice_status(endpoint_slice)
        )

    for ingress in ingresses:
        graph.add_node(NodeKind.INGRESS, ingress, ingress_class_name(ingress))

    service_ids = index_by_name(
        services, lambda s: identity_key(NodeKind.SERVICE, get_name(s), get_namespace(s))
    )
    slice_ids = index_by_name(
        endpoint_slices,
        lambda s: identity_key(NodeKind.ENDPOINT_SLICE, get_name(s), get_namespace(s)),
    )

    # Service -> EndpointSlice -> Pod
    for endpoint_slice in endpoint_slices:
        svc_name = slice_service_name(endpoint_slice)
        if not svc_name:
            continue
        namespace = get_namespace(endpoint_slice)
        svc_id = service_ids.get(ns_key(namespace, svc_name))
        if svc_id is None:
            logger.debug(
                "EndpointSlice %s/%s: owning service %s not found",
                namespace,
                get_name(endpoint_slice),
                svc_name,
            )
            continue
        slice_id = slice_ids[ns_key(namespace, get_name(endpoint_slice))]
        graph.add_edge(svc_id, slice_id, RelationKind.SERVICE_TO_ENDPOINT_SLICE)

        for address in slice_addresses(endpoint_slice):
            pod_id = pod_by_ip.get(address)
            if pod_id is not None:
                graph.add_edge(slice_id, pod_id, RelationKind.ENDPOINT_SLICE_TO_POD)

    # Ingress -> Service
    for ingress in ingresses:
        namespace = get_namespace(ingress)
        ingress_id = identity_key(NodeKind.INGRESS, get_name(ingress), namespace)
        for backend in ingress_backends(ingress):
            svc_id = service_ids.get(ns_key(namespace, backend))
            if svc_id is None:
                logger.debug(
                    "Ingress %s/%s: backend service %s not found",
                    namespace,
                    get_name(ingress),
                    backend,
                )
                continue
            graph.add_edge(ingress_id, svc_id, RelationKind.INGRESS_TO_SERVICE, backend)

    topology = graph.build()
    logger.debug(
        "Topology built: %d nodes, %d edges", len(topology.nodes), len(topology.edges)
    )
    return topology


def build_snapshot_topology(snapshot) -> Topology:
    return build_topology(
        nodes=snapshot.nodes,
        pods=snapshot.pods,
        services=snapshot.services,
        ingresses=snapshot.ingresses,
        endpoint_slices=snapshot.endpoint_slices,
    )
