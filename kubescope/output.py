import json
from typing import Any

import yaml

# ----------------------------
# Output formatting
# ----------------------------


def render(result: dict[str, Any], fmt: str = "text", kind: str = "") -> str:
    if fmt == "json":
        return json.dumps(result, indent=2)
    if fmt == "yaml":
        return yaml.safe_dump(result, sort_keys=False)
    renderer = _TEXT_RENDERERS.get(kind, _render_generic)
    return renderer(result)


def output_result(result: dict[str, Any], fmt: str = "text", kind: str = "") -> None:
    print(render(result, fmt, kind))


# ----------------------------
# Text output
# ----------------------------


def _render_topology(result: dict[str, Any]) -> str:
    lines = [f"Nodes ({len(result['nodes'])}):"]
    for node in result["nodes"]:
        status = f" [{node['status']}]" if node.get("status") else ""
        lines.append(f"  {node['id']}{status}")
    lines.append(f"\nEdges ({len(result['edges'])}):")
    for edge in result["edges"]:
        lines.append(f"  {edge['from']} -> {edge['to']} ({edge['kind']})")
    return "\n".join(lines)


def _render_findings(result: dict[str, Any]) -> str:
    items = result.get("items", [])
    if not items:
        return "No findings."
    lines = []
    for item in items:
        lines.append(f"[{item['severity'].upper()}] {item['title']} ({item['id']})")
        lines.append(f"  {item['details']}")
        for obj in item["objects"]:
            lines.append(f"  - {obj}")
    return "\n".join(lines)


def _render_permissions(result: dict[str, Any]) -> str:
    lines = [
        f"ServiceAccount: {result['namespace']}/{result['serviceAccount']}",
        f"Rules ({len(result['rules'])}):",
    ]
    for rule in result["rules"]:
        target = ",".join(rule["resources"] or rule["nonResourceUrls"]) or "-"
        groups = ",".join(g or '""' for g in rule["apiGroups"]) or "-"
        lines.append(f"  {','.join(rule['verbs']) or '-'} on {target} (apiGroups: {groups})")
    return "\n".join(lines)


def _render_generic(result: dict[str, Any]) -> str:
    lines = []
    for section, rows in result.items():
        lines.append(f"{section}:")
        for row in rows:
            lines.append("  " + " ".join(f"{k}={v}" for k, v in row.items()))
    return "\n".join(lines)


_TEXT_RENDERERS = {
    "topology": _render_topology,
    "validate": _render_findings,
    "permissions": _render_permissions,
}
