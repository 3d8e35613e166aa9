from kubescope.rbac import (
    PolicyRule,
    binding_applies,
    effective_permissions,
    resolve_effective,
)
from kubescope.tests.objects import (
    cluster_role,
    cluster_role_binding,
    role,
    role_binding,
    rule,
    sa_subject,
)


def test_binding_applies_to_matching_service_account():
    binding = role_binding("b", subjects=[sa_subject("deployer", "default")])
    assert binding_applies(binding, "default", "deployer")
    assert not binding_applies(binding, "other", "deployer")
    assert not binding_applies(binding, "default", "someone-else")


def test_subject_without_namespace_matches_any_namespace():
    binding = role_binding("b", subjects=[sa_subject("deployer")])
    assert binding_applies(binding, "prod", "deployer")


def test_non_service_account_subjects_are_ignored():
    binding = role_binding("b", subjects=[{"kind": "User", "name": "deployer"}])
    assert not binding_applies(binding, "default", "deployer")


def test_overlapping_role_bindings_are_concatenated():
    roles = [
        role("pod-reader", rules=[rule(["get", "list"], ["pods"])]),
        role("pod-watcher", rules=[rule(["get", "watch"], ["pods"]), rule(["list"], ["services"])]),
    ]
    bindings = [
        role_binding("rb-1", role_name="pod-reader", subjects=[sa_subject("app", "default")]),
        role_binding("rb-2", role_name="pod-watcher", subjects=[sa_subject("app", "default")]),
    ]
    rules = resolve_effective("default", "app", bindings, [], roles, [])

    assert len(rules) == 3
    assert [r.first_verb for r in rules] == ["get", "get", "list"]
    assert rules[0] == PolicyRule(verbs=("get", "list"), resources=("pods",), api_groups=("",))


def test_identical_grants_are_not_deduplicated():
    roles = [role("reader", rules=[rule(["get"], ["pods"])])]
    bindings = [
        role_binding("rb-1", role_name="reader", subjects=[sa_subject("app")]),
        role_binding("rb-2", role_name="reader", subjects=[sa_subject("app")]),
    ]
    rules = resolve_effective("default", "app", bindings, [], roles, [])
    assert rules == [rules[0], rules[0]]


def test_role_binding_to_cluster_role():
    rules = resolve_effective(
        "default",
        "app",
        role_bindings=[
            role_binding("rb", role_kind="ClusterRole", role_name="view", subjects=[sa_subject("app")])
        ],
        cluster_roles=[cluster_role("view", rules=[rule(["list"], ["configmaps"])])],
    )
    assert [r.resources for r in rules] == [("configmaps",)]


def test_role_lookup_is_namespace_scoped():
    rules = resolve_effective(
        "default",
        "app",
        role_bindings=[role_binding("rb", role_name="reader", subjects=[sa_subject("app")])],
        roles=[role("reader", namespace="other", rules=[rule(["get"], ["secrets"])])],
    )
    assert rules == []


def test_missing_role_contributes_nothing():
    rules = resolve_effective(
        "default",
        "app",
        role_bindings=[
            role_binding("rb-1", role_name="gone", subjects=[sa_subject("app")]),
            role_binding("rb-2", role_kind="ClusterRole", role_name="gone", subjects=[sa_subject("app")]),
        ],
    )
    assert rules == []


def test_cluster_role_binding_only_honors_cluster_roles():
    rules = resolve_effective(
        "default",
        "app",
        cluster_role_bindings=[
            cluster_role_binding("crb-1", "reader", role_kind="Role", subjects=[sa_subject("app", "default")]),
            cluster_role_binding("crb-2", "edit", subjects=[sa_subject("app", "default")]),
        ],
        roles=[role("reader", rules=[rule(["get"], ["pods"])])],
        cluster_roles=[cluster_role("edit", rules=[rule(["update"], ["deployments"], ["apps"])])],
    )
    assert [r.verbs for r in rules] == [("update",)]


def test_rules_sorted_by_first_verb_with_empty_first():
    cluster_roles = [
        cluster_role(
            "mixed",
            rules=[
                rule(["watch"], ["pods"]),
                {"nonResourceURLs": ["/healthz"], "verbs": []},
                rule(["create"], ["pods"]),
            ],
        )
    ]
    rules = resolve_effective(
        "default",
        "app",
        cluster_role_bindings=[cluster_role_binding("crb", "mixed", subjects=[sa_subject("app")])],
        cluster_roles=cluster_roles,
    )
    assert [r.first_verb for r in rules] == ["", "create", "watch"]
    assert rules[0].non_resource_urls == ("/healthz",)


def test_absent_collections_yield_no_rules():
    assert resolve_effective("default", "app", None, None, None, None) == []


def test_effective_permission_set_serialization():
    result = effective_permissions(
        "default",
        "app",
        role_bindings=[role_binding("rb", role_name="reader", subjects=[sa_subject("app")])],
        roles=[role("reader", rules=[rule(["get"], ["pods"])])],
    )
    assert result.to_dict() == {
        "namespace": "default",
        "serviceAccount": "app",
        "rules": [
            {
                "verbs": ["get"],
                "resources": ["pods"],
                "apiGroups": [""],
                "resourceNames": [],
                "nonResourceUrls": [],
            }
        ],
    }


def test_wildcard_detection():
    assert PolicyRule(verbs=("*",), resources=("pods",)).has_wildcard
    assert PolicyRule(verbs=("get",), resources=("*",)).has_wildcard
    assert not PolicyRule(verbs=("get",), resources=("pods",), api_groups=("*",)).has_wildcard
