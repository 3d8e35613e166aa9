import logging
import os
from typing import Any

from kubescope.errors import SnapshotLoadError
from kubescope.model import get_namespace, load_json, load_yaml, normalize_items
from kubescope.snapshot import MANDATORY_COLLECTIONS, ResourceSnapshot

logger = logging.getLogger(__name__)

# snapshot collection -> file stem in a dump directory
COLLECTION_FILES = {
    "nodes": "nodes",
    "pods": "pods",
    "services": "services",
    "endpoint_slices": "endpointslices",
    "ingresses": "ingresses",
    "network_policies": "networkpolicies",
    "pvcs": "pvcs",
    "roles": "roles",
    "cluster_roles": "clusterroles",
    "role_bindings": "rolebindings",
    "cluster_role_bindings": "clusterrolebindings",
}

CLUSTER_SCOPED = {"nodes", "cluster_roles", "cluster_role_bindings"}

EXTENSIONS = (".json", ".yaml", ".yml")


def _find_file(directory: str, stem: str) -> str | None:
    for ext in EXTENSIONS:
        path = os.path.join(directory, stem + ext)
        if os.path.isfile(path):
            return path
    return None


def _read_collection(path: str) -> list[dict[str, Any]]:
    if path.endswith(".json"):
        return normalize_items(load_json(path))
    return normalize_items(load_yaml(path))


def _in_scope(obj: dict[str, Any], namespace: str | None) -> bool:
    return namespace is None or get_namespace(obj) == namespace


def load_snapshot(directory: str, namespace: str | None = None) -> ResourceSnapshot:
    """
    Build a snapshot from `kubectl get <kind> -o json|yaml` dumps.

    A missing file is an empty collection. An unreadable file aborts the
    load for mandatory collections and degrades to empty for the others.
    """
    if not os.path.isdir(directory):
        raise SnapshotLoadError("snapshot", f"not a directory: {directory}")

    namespace = namespace or None
    collections: dict[str, list[dict[str, Any]]] = {}

    for collection, stem in COLLECTION_FILES.items():
        path = _find_file(directory, stem)
        if path is None:
            logger.debug("No %s file in %s", stem, directory)
            continue

        try:
            items = _read_collection(path)
        except Exception as exc:
            if collection in MANDATORY_COLLECTIONS:
                raise SnapshotLoadError(collection, f"cannot read {path}: {exc}") from exc
            logger.warning("Ignoring unreadable %s (%s): %s", collection, path, exc)
            items = []

        if collection not in CLUSTER_SCOPED:
            items = [obj for obj in items if _in_scope(obj, namespace)]

        logger.debug("Loaded %d %s from %s", len(items), collection, path)
        collections[collection] = items

    return ResourceSnapshot(namespace=namespace, **collections)
