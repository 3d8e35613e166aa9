from typing import Any

from kubescope.model import normalize_items

MANDATORY_COLLECTIONS = (
    "nodes",
    "pods",
    "services",
    "endpoint_slices",
    "ingresses",
)

BEST_EFFORT_COLLECTIONS = (
    "network_policies",
    "pvcs",
    "roles",
    "cluster_roles",
    "role_bindings",
    "cluster_role_bindings",
)

COLLECTIONS = MANDATORY_COLLECTIONS + BEST_EFFORT_COLLECTIONS


class ResourceSnapshot:
    """
    Point-in-time bundle of the resource collections for one namespace scope.

    Every collection is optional. Absent (None) and empty are treated the
    same: both become an empty list, so correlation code never has to tell
    a failed fetch from a genuinely empty one.
    """

    def __init__(self, namespace: str | None = None, **collections: Any):
        unknown = set(collections) - set(COLLECTIONS)
        if unknown:
            raise TypeError(f"Unknown snapshot collections: {sorted(unknown)}")

        self.namespace = namespace or None

        self.nodes: list[dict[str, Any]] = normalize_items(collections.get("nodes"))
        self.pods: list[dict[str, Any]] = normalize_items(collections.get("pods"))
        self.services: list[dict[str, Any]] = normalize_items(collections.get("services"))
        self.endpoint_slices: list[dict[str, Any]] = normalize_items(
            collections.get("endpoint_slices")
        )
        self.ingresses: list[dict[str, Any]] = normalize_items(collections.get("ingresses"))
        self.network_policies: list[dict[str, Any]] = normalize_items(
            collections.get("network_policies")
        )
        self.pvcs: list[dict[str, Any]] = normalize_items(collections.get("pvcs"))
        self.roles: list[dict[str, Any]] = normalize_items(collections.get("roles"))
        self.cluster_roles: list[dict[str, Any]] = normalize_items(
            collections.get("cluster_roles")
        )
        self.role_bindings: list[dict[str, Any]] = normalize_items(
            collections.get("role_bindings")
        )
        self.cluster_role_bindings: list[dict[str, Any]] = normalize_items(
            collections.get("cluster_role_bindings")
        )

    def collection(self, name: str) -> list[dict[str, Any]]:
        if name not in COLLECTIONS:
            raise KeyError(name)
        return getattr(self, name)

    def counts(self) -> dict[str, int]:
        return {name: len(getattr(self, name)) for name in COLLECTIONS}

    @property
    def scope(self) -> str:
        return self.namespace or "all"
