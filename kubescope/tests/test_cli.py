import json

import pytest

from kubescope.cli import build_parser, main
from kubescope.tests.objects import (
    endpoint_slice,
    ingress,
    pod,
    role,
    role_binding,
    rule,
    sa_subject,
    service,
)


@pytest.fixture(autouse=True)
def no_user_config(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for var in ("KUBESCOPE_NAMESPACE", "KUBESCOPE_CONTEXT", "KUBESCOPE_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def snapshot_dir(tmp_path):
    directory = tmp_path / "snapshot"
    directory.mkdir()
    dumps = {
        "pods": [pod("web-1", "prod", labels={"app": "web"}, ip="10.0.0.1")],
        "services": [
            service("web", "prod", selector={"app": "web"}, ports=[{"port": 80, "targetPort": 8080}]),
            service("orphan", "prod", selector={"app": "gone"}),
        ],
        "endpointslices": [
            endpoint_slice("web-abc", "prod", "web", endpoints=[(["10.0.0.1"], True)], ports=[{"port": 8080}])
        ],
        "ingresses": [ingress("edge", "prod", paths=[("/", "web", 80)])],
        "roles": [role("reader", "prod", rules=[rule(["get"], ["pods"])])],
        "rolebindings": [role_binding("rb", "prod", role_name="reader", subjects=[sa_subject("app")])],
    }
    for stem, items in dumps.items():
        (directory / f"{stem}.json").write_text(
            json.dumps({"kind": "List", "items": items}), encoding="utf-8"
        )
    return directory


def _run_json(capsys, *argv):
    assert main([*argv, "--format", "json"]) == 0
    return json.loads(capsys.readouterr().out)


def test_topology_command(snapshot_dir, capsys):
    result = _run_json(capsys, "topology", "--snapshot", str(snapshot_dir))
    kinds = {e["kind"] for e in result["edges"]}
    assert kinds == {"ServiceToEndpointSlice", "EndpointSliceToPod", "IngressToService"}


def test_validate_command_reports_orphan_service(snapshot_dir, capsys):
    result = _run_json(capsys, "validate", "--snapshot", str(snapshot_dir))
    ids = [item["id"] for item in result["items"]]
    assert "services-no-endpoints" in ids


def test_validate_with_disabled_checks(snapshot_dir, capsys):
    result = _run_json(
        capsys, "validate", "--snapshot", str(snapshot_dir), "--disable-checks", "Service"
    )
    assert all(item["id"] != "services-no-endpoints" for item in result["items"])


def test_permissions_command(snapshot_dir, capsys):
    result = _run_json(
        capsys, "permissions", "--snapshot", str(snapshot_dir), "-n", "prod", "--service-account", "app"
    )
    assert result["serviceAccount"] == "app"
    assert [r["verbs"] for r in result["rules"]] == [["get"]]


def test_permissions_requires_namespace(snapshot_dir, capsys):
    assert main(["permissions", "--snapshot", str(snapshot_dir), "--service-account", "app"]) == 1
    assert "namespace" in capsys.readouterr().err


def test_ports_and_traffic_commands(snapshot_dir, capsys):
    ports = _run_json(capsys, "ports", "--snapshot", str(snapshot_dir))
    assert ports["services"][0]["podEndpoints"] == ["10.0.0.1:8080/TCP"]

    traffic = _run_json(capsys, "traffic", "--snapshot", str(snapshot_dir))
    assert traffic["serviceIntents"][0]["pods"] == ["web-1"]


def test_missing_snapshot_directory_exits_nonzero(tmp_path, capsys):
    assert main(["topology", "--snapshot", str(tmp_path / "absent")]) == 1
    assert capsys.readouterr().err.startswith("kubescope: ")


def test_text_output_for_empty_findings(tmp_path, capsys):
    empty = tmp_path / "empty"
    empty.mkdir()
    assert main(["validate", "--snapshot", str(empty)]) == 0
    assert "No findings." in capsys.readouterr().out


def test_subcommand_is_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_numeric_namespace_from_config_file(tmp_path, capsys):
    directory = tmp_path / "numeric"
    directory.mkdir()
    dumps = {
        "pods": [pod("p", "2024")],
        "roles": [role("r", "2024", rules=[rule(["get"], ["pods"])])],
        "rolebindings": [role_binding("rb", "2024", role_name="r", subjects=[sa_subject("app")])],
    }
    for stem, items in dumps.items():
        (directory / f"{stem}.json").write_text(json.dumps({"items": items}), encoding="utf-8")
    config_file = tmp_path / "kubescope.yaml"
    config_file.write_text("namespace: 2024\n", encoding="utf-8")

    topology = _run_json(capsys, "topology", "--snapshot", str(directory), "--config", str(config_file))
    assert [n["id"] for n in topology["nodes"]] == ["pod:2024/p"]

    result = _run_json(
        capsys,
        "permissions",
        "--snapshot",
        str(directory),
        "--config",
        str(config_file),
        "--service-account",
        "app",
    )
    assert result["namespace"] == "2024"
    assert [r["verbs"] for r in result["rules"]] == [["get"]]
