"""Live snapshot collection through the official Kubernetes Python client."""

import logging
from typing import Any

from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

from kubescope.errors import SnapshotFetchError
from kubescope.model import normalize_items
from kubescope.snapshot import MANDATORY_COLLECTIONS, ResourceSnapshot

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 500


def connect(kubeconfig: str | None = None, context: str | None = None) -> client.ApiClient:
    """
    Build an ApiClient from kubeconfig, falling back to in-cluster config
    when no kubeconfig can be loaded.
    """
    try:
        config.load_kube_config(config_file=kubeconfig, context=context)
    except ConfigException as exc:
        if kubeconfig or context:
            raise SnapshotFetchError("kubeconfig", str(exc)) from exc
        logger.debug("No usable kubeconfig (%s), trying in-cluster config", exc)
        try:
            config.load_incluster_config()
        except ConfigException as incluster_exc:
            raise SnapshotFetchError("kubeconfig", str(incluster_exc)) from incluster_exc
    return client.ApiClient()


def _list_all(
    api_client: client.ApiClient,
    list_fn,
    timeout: float | None,
    page_size: int,
    **kwargs: Any,
) -> list[dict[str, Any]]:
    """Follow continue tokens and return every item as a plain dict."""
    items: list[dict[str, Any]] = []
    token = None
    while True:
        call_kwargs = dict(kwargs, limit=page_size)
        if timeout:
            call_kwargs["_request_timeout"] = timeout
        if token:
            call_kwargs["_continue"] = token
        data = api_client.sanitize_for_serialization(list_fn(**call_kwargs)) or {}
        items.extend(normalize_items(data))
        token = (data.get("metadata") or {}).get("continue")
        if not token:
            return items


def fetch_snapshot(
    api_client: client.ApiClient,
    namespace: str | None = None,
    timeout: float | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> ResourceSnapshot:
    """
    Fetch every snapshot collection for a namespace (None for all).

    Core collections are mandatory: the first failure raises
    SnapshotFetchError. RBAC, PVC and NetworkPolicy lists are best-effort
    and degrade to empty lists.
    """
    core = client.CoreV1Api(api_client)
    discovery = client.DiscoveryV1Api(api_client)
    net = client.NetworkingV1Api(api_client)
    rbac = client.RbacAuthorizationV1Api(api_client)

    ns_args: dict[str, Any] = {"namespace": namespace} if namespace else {}

    def _ns_call(namespaced_fn, all_ns_fn):
        return namespaced_fn if namespace else all_ns_fn

    tasks: list[tuple[str, Any, dict[str, Any]]] = [
        ("nodes", core.list_node, {}),
        ("pods", _ns_call(core.list_namespaced_pod, core.list_pod_for_all_namespaces), ns_args),
        ("services", _ns_call(core.list_namespaced_service, core.list_service_for_all_namespaces), ns_args),
        ("endpoint_slices", _ns_call(discovery.list_namespaced_endpoint_slice, discovery.list_endpoint_slice_for_all_namespaces), ns_args),
        ("ingresses", _ns_call(net.list_namespaced_ingress, net.list_ingress_for_all_namespaces), ns_args),
        ("network_policies", _ns_call(net.list_namespaced_network_policy, net.list_network_policy_for_all_namespaces), ns_args),
        ("pvcs", _ns_call(core.list_namespaced_persistent_volume_claim, core.list_persistent_volume_claim_for_all_namespaces), ns_args),
        ("roles", _ns_call(rbac.list_namespaced_role, rbac.list_role_for_all_namespaces), ns_args),
        ("cluster_roles", rbac.list_cluster_role, {}),
        ("role_bindings", _ns_call(rbac.list_namespaced_role_binding, rbac.list_role_binding_for_all_namespaces), ns_args),
        ("cluster_role_bindings", rbac.list_cluster_role_binding, {}),
    ]

    collections: dict[str, list[dict[str, Any]]] = {}
    for collection, list_fn, api_args in tasks:
        try:
            collections[collection] = _list_all(
                api_client, list_fn, timeout, page_size, **api_args
            )
        except Exception as exc:
            if collection in MANDATORY_COLLECTIONS:
                raise SnapshotFetchError(collection, str(exc)) from exc
            logger.warning("Best-effort fetch of %s failed: %s", collection, exc)
            collections[collection] = []
        logger.debug("Fetched %d %s", len(collections[collection]), collection)

    return ResourceSnapshot(namespace=namespace, **collections)
