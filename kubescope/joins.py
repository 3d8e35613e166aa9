from collections.abc import Iterable
from typing import Any

from kubescope.model import get_labels, get_name, get_namespace

# ----------------------------
# Join primitives
# ----------------------------


def ns_key(namespace: str, name: str) -> str:
    return f"{namespace}/{name}"


def index_by_name(
    objects: Iterable[dict[str, Any]], value=None
) -> dict[str, Any]:
    """
    Build a (namespace/name) -> value lookup, built once per correlation pass.
    `value` maps each object to the stored value and defaults to the object.
    """
    index: dict[str, Any] = {}
    for obj in objects:
        key = ns_key(get_namespace(obj), get_name(obj))
        index[key] = value(obj) if value else obj
    return index


def selector_matches(selector: dict[str, str], labels: dict[str, str]) -> bool:
    """
    Exact-match AND of all selector keys. An empty selector matches nothing.
    """
    if not selector:
        return False
    for key, expected in selector.items():
        if key not in labels or labels[key] != expected:
            return False
    return True


def selector_string(selector: dict[str, str] | None) -> str:
    return ",".join(sorted(f"{k}={v}" for k, v in (selector or {}).items()))


def pods_matching(
    selector: dict[str, str], namespace: str, pods: Iterable[dict[str, Any]]
) -> list[dict[str, Any]]:
    return [
        pod
        for pod in pods
        if get_namespace(pod) == namespace and selector_matches(selector, get_labels(pod))
    ]


def contains_wildcard(items: Iterable[str] | None) -> bool:
    return any(item == "*" for item in items or [])
