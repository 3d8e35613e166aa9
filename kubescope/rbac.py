import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from kubescope.joins import contains_wildcard, ns_key
from kubescope.model import get_name, get_namespace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PolicyRule:
    verbs: tuple[str, ...] = ()
    resources: tuple[str, ...] = ()
    api_groups: tuple[str, ...] = ()
    resource_names: tuple[str, ...] = ()
    non_resource_urls: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, rule: dict[str, Any]) -> "PolicyRule":
        return cls(
            verbs=tuple(rule.get("verbs") or ()),
            resources=tuple(rule.get("resources") or ()),
            api_groups=tuple(rule.get("apiGroups") or ()),
            resource_names=tuple(rule.get("resourceNames") or ()),
            non_resource_urls=tuple(rule.get("nonResourceURLs") or ()),
        )

    @property
    def has_wildcard(self) -> bool:
        return contains_wildcard(self.verbs) or contains_wildcard(self.resources)

    @property
    def first_verb(self) -> str:
        return self.verbs[0] if self.verbs else ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "verbs": list(self.verbs),
            "resources": list(self.resources),
            "apiGroups": list(self.api_groups),
            "resourceNames": list(self.resource_names),
            "nonResourceUrls": list(self.non_resource_urls),
        }


@dataclass(frozen=True)
class EffectivePermissionSet:
    namespace: str
    principal: str
    rules: list[PolicyRule] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "namespace": self.namespace,
            "serviceAccount": self.principal,
            "rules": [r.to_dict() for r in self.rules],
        }


def map_rules(rules: Iterable[dict[str, Any]] | None) -> list[PolicyRule]:
    return [PolicyRule.from_dict(r) for r in rules or []]


def has_wildcard_rule(rules: Iterable[dict[str, Any]] | None) -> bool:
    return any(rule.has_wildcard for rule in map_rules(rules))


def binding_applies(binding: dict[str, Any], namespace: str, principal: str) -> bool:
    """
    True if a ServiceAccount subject of the binding names the principal,
    in the queried namespace or with no namespace at all.
    """
    for subject in binding.get("subjects") or []:
        if subject.get("kind") != "ServiceAccount":
            continue
        if subject.get("name") != principal:
            continue
        subject_ns = subject.get("namespace") or ""
        if subject_ns and subject_ns != namespace:
            continue
        return True
    return False


# ----------------------------
# Binding chain resolution
# ----------------------------


def resolve_effective(
    namespace: str,
    principal: str,
    role_bindings: Iterable[dict[str, Any]] | None = None,
    cluster_role_bindings: Iterable[dict[str, Any]] | None = None,
    roles: Iterable[dict[str, Any]] | None = None,
    cluster_roles: Iterable[dict[str, Any]] | None = None,
) -> list[PolicyRule]:
    """
    Walk binding -> roleRef -> role for every binding that applies to the
    service account and concatenate the granted rules.

    Overlapping grants are kept as repeated entries. A roleRef to a role
    that does not exist contributes nothing; a ClusterRoleBinding that
    references a namespaced Role is ignored.
    """
    role_rules: dict[str, list[PolicyRule]] = {
        ns_key(get_namespace(role), get_name(role)): map_rules(role.get("rules"))
        for role in roles or []
    }
    cluster_role_rules: dict[str, list[PolicyRule]] = {
        get_name(role): map_rules(role.get("rules")) for role in cluster_roles or []
    }

    rules: list[PolicyRule] = []
    for binding in role_bindings or []:
        if not binding_applies(binding, namespace, principal):
            continue
        ref = binding.get("roleRef") or {}
        ref_kind, ref_name = ref.get("kind"), ref.get("name", "")
        if ref_kind == "Role":
            binding_ns = get_namespace(binding) or namespace
            granted = role_rules.get(ns_key(binding_ns, ref_name), [])
        elif ref_kind == "ClusterRole":
            granted = cluster_role_rules.get(ref_name, [])
        else:
            continue
        if not granted:
            logger.debug(
                "RoleBinding %s: %s %s grants no rules", get_name(binding), ref_kind, ref_name
            )
        rules.extend(granted)

    for binding in cluster_role_bindings or []:
        if not binding_applies(binding, namespace, principal):
            continue
        ref = binding.get("roleRef") or {}
        if ref.get("kind") != "ClusterRole":
            continue
        rules.extend(cluster_role_rules.get(ref.get("name", ""), []))

    return sorted(rules, key=lambda r: r.first_verb)


def effective_permissions(
    namespace: str,
    principal: str,
    role_bindings=None,
    cluster_role_bindings=None,
    roles=None,
    cluster_roles=None,
) -> EffectivePermissionSet:
    return EffectivePermissionSet(
        namespace=namespace,
        principal=principal,
        rules=resolve_effective(
            namespace,
            principal,
            role_bindings,
            cluster_role_bindings,
            roles,
            cluster_roles,
        ),
    )
