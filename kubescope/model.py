import json
from typing import Any

import yaml

# ----------------------------
# Parsing utilities
# ----------------------------

SERVICE_NAME_LABEL = "kubernetes.io/service-name"


def load_json(path: str) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_yaml(path: str) -> Any:
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f)


def normalize_items(data: Any) -> list[dict[str, Any]]:
    """
    Accept a `kubectl get -o json` List, a bare list, a single object
    or None and return a plain list of objects.
    """
    if data is None:
        return []
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]
    if isinstance(data, dict):
        if isinstance(data.get("items"), list):
            return [item for item in data["items"] if isinstance(item, dict)]
        if (data.get("kind") or "").endswith("List"):
            return []
        return [data]
    return []


# ----------------------------
# Object accessors
# ----------------------------


def get_name(obj: dict[str, Any]) -> str:
    return (obj.get("metadata") or {}).get("name", "")


def get_namespace(obj: dict[str, Any]) -> str:
    return (obj.get("metadata") or {}).get("namespace", "") or ""


def get_labels(obj: dict[str, Any]) -> dict[str, str]:
    return (obj.get("metadata") or {}).get("labels") or {}


def object_ref(obj: dict[str, Any]) -> str:
    """namespace/name, or just name for cluster-scoped objects."""
    namespace = get_namespace(obj)
    if namespace:
        return f"{namespace}/{get_name(obj)}"
    return get_name(obj)


def get_conditions(obj: dict[str, Any]) -> list[dict[str, Any]]:
    return (obj.get("status") or {}).get("conditions") or []


def condition_status(obj: dict[str, Any], cond_type: str) -> str | None:
    for c in get_conditions(obj):
        if c.get("type") == cond_type:
            return c.get("status")
    return None


# ----------------------------
# Pods
# ----------------------------


def get_pod_phase(pod: dict[str, Any]) -> str:
    return (pod.get("status") or {}).get("phase", "") or ""


def get_pod_ip(pod: dict[str, Any]) -> str:
    return (pod.get("status") or {}).get("podIP", "") or ""


def pod_ready(pod: dict[str, Any]) -> bool:
    return condition_status(pod, "Ready") == "True"


# ----------------------------
# Nodes
# ----------------------------


def node_ready_status(node: dict[str, Any]) -> str:
    status = condition_status(node, "Ready")
    if status is None:
        return "Unknown"
    return "Ready" if status == "True" else "NotReady"


# ----------------------------
# Services
# ----------------------------


def service_type(svc: dict[str, Any]) -> str:
    return (svc.get("spec") or {}).get("type", "") or ""


def service_selector(svc: dict[str, Any]) -> dict[str, str]:
    return (svc.get("spec") or {}).get("selector") or {}


def service_external_ips(svc: dict[str, Any]) -> list[str]:
    spec = svc.get("spec") or {}
    if spec.get("externalIPs"):
        return list(spec["externalIPs"])
    if spec.get("type") == "LoadBalancer":
        ips = []
        lb = ((svc.get("status") or {}).get("loadBalancer") or {}).get("ingress") or []
        for entry in lb:
            if entry.get("ip"):
                ips.append(entry["ip"])
            if entry.get("hostname"):
                ips.append(entry["hostname"])
        return ips
    return []


# ----------------------------
# EndpointSlices
# ----------------------------


def slice_service_name(endpoint_slice: dict[str, Any]) -> str:
    return get_labels(endpoint_slice).get(SERVICE_NAME_LABEL, "")


def slice_addresses(endpoint_slice: dict[str, Any]) -> list[str]:
    addresses: list[str] = []
    for endpoint in endpoint_slice.get("endpoints") or []:
        addresses.extend(endpoint.get("addresses") or [])
    return addresses


def count_endpoints(endpoint_slice: dict[str, Any]) -> int:
    return len(slice_addresses(endpoint_slice))


def count_ready_endpoints(endpoint_slice: dict[str, Any]) -> int:
    ready = 0
    for endpoint in endpoint_slice.get("endpoints") or []:
        # ready is a tri-state pointer upstream; only an explicit true counts
        if (endpoint.get("conditions") or {}).get("ready") is True:
            ready += len(endpoint.get("addresses") or [])
    return ready


def endpoint_slice_status(endpoint_slice: dict[str, Any]) -> str:
    return f"Ready {count_ready_endpoints(endpoint_slice)}/{count_endpoints(endpoint_slice)}"


# ----------------------------
# Ingresses
# ----------------------------


def ingress_class_name(ingress: dict[str, Any]) -> str:
    return (ingress.get("spec") or {}).get("ingressClassName") or ""


def backend_port_string(port: dict[str, Any] | None) -> str:
    port = port or {}
    number = port.get("number")
    if isinstance(number, int) and number > 0:
        return str(number)
    return port.get("name", "") or ""


def ingress_routes(ingress: dict[str, Any]) -> list[dict[str, str]]:
    """
    Flatten an Ingress into backend routes.

    The default backend comes first with host and path "*", followed by
    every HTTP path of every rule. Backends without a service are skipped.
    """
    spec = ingress.get("spec") or {}
    routes: list[dict[str, str]] = []

    default_service = (spec.get("defaultBackend") or {}).get("service")
    if default_service and default_service.get("name"):
        routes.append(
            {
                "host": "*",
                "path": "*",
                "service": default_service["name"],
                "port": backend_port_string(default_service.get("port")),
            }
        )

    for rule in spec.get("rules") or []:
        http = rule.get("http")
        if not http:
            continue
        for path in http.get("paths") or []:
            service = (path.get("backend") or {}).get("service")
            if not service or not service.get("name"):
                continue
            routes.append(
                {
                    "host": rule.get("host", "") or "",
                    "path": path.get("path", "") or "",
                    "service": service["name"],
                    "port": backend_port_string(service.get("port")),
                }
            )
    return routes


def ingress_backends(ingress: dict[str, Any]) -> list[str]:
    return [route["service"] for route in ingress_routes(ingress)]
