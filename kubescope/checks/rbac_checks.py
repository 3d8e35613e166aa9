from kubescope.checks.base_check import ValidationCheck
from kubescope.findings import Severity
from kubescope.model import get_name, object_ref
from kubescope.rbac import has_wildcard_rule


class ClusterAdminBindingCheck(ValidationCheck):
    """
    Only ClusterRoleBindings are inspected. A namespaced RoleBinding that
    grants the cluster-admin ClusterRole is scoped to its namespace and is
    not reported here.
    """

    name = "rbac-cluster-admin"
    category = "RBAC"
    severity = Severity.WARNING
    priority = 70
    title = "Cluster-admin bindings"
    details = "ClusterRoleBindings grant cluster-admin privileges."
    requires = ["cluster_role_bindings"]

    def evaluate(self, snapshot):
        bindings = [
            get_name(binding)
            for binding in snapshot.cluster_role_bindings
            if (binding.get("roleRef") or {}).get("name", "").lower() == "cluster-admin"
        ]
        return self.finding(bindings)


class RBACWildcardCheck(ValidationCheck):
    name = "rbac-wildcards"
    category = "RBAC"
    severity = Severity.WARNING
    priority = 80
    title = "RBAC wildcard permissions"
    details = "Roles contain wildcard verbs or resources."
    requires = ["roles", "cluster_roles"]

    def evaluate(self, snapshot):
        wildcards = [
            object_ref(role)
            for role in snapshot.roles
            if has_wildcard_rule(role.get("rules"))
        ]
        wildcards.extend(
            get_name(role)
            for role in snapshot.cluster_roles
            if has_wildcard_rule(role.get("rules"))
        )
        return self.finding(wildcards)
