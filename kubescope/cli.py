import argparse
import logging
import sys

from kubescope.config import LOG_LEVELS, OUTPUT_FORMATS, Config, load_config
from kubescope.context import load_snapshot
from kubescope.engine import validate
from kubescope.errors import KubescopeError
from kubescope.output import output_result
from kubescope.ports import build_ports
from kubescope.rbac import effective_permissions
from kubescope.snapshot import ResourceSnapshot
from kubescope.topology import build_snapshot_topology
from kubescope.traffic import build_traffic

logger = logging.getLogger("kubescope")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kubescope", description="Correlate Kubernetes resources for inspection"
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--snapshot", help="Directory of kubectl JSON/YAML dumps")
    common.add_argument("--kubeconfig", help="Path to kubeconfig file")
    common.add_argument("--context", help="Kubeconfig context to use")
    common.add_argument("-n", "--namespace", help="Namespace scope (default: all)")
    common.add_argument("--config", help="Path to config file")
    common.add_argument("--timeout", type=float, help="Per-request timeout in seconds")
    common.add_argument("--format", choices=OUTPUT_FORMATS, help="Output format")
    common.add_argument("--log-level", choices=LOG_LEVELS)
    common.add_argument("--verbose", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("topology", parents=[common], help="Resource relationship graph")

    validate_cmd = sub.add_parser("validate", parents=[common], help="Health findings")
    validate_cmd.add_argument("--enable-checks", nargs="*", default=None)
    validate_cmd.add_argument("--disable-checks", nargs="*", default=None)

    perms = sub.add_parser(
        "permissions", parents=[common], help="Effective RBAC rules of a service account"
    )
    perms.add_argument("--service-account", required=True)

    sub.add_parser("ports", parents=[common], help="Service, container and ingress ports")
    sub.add_parser("traffic", parents=[common], help="Service and ingress intents")

    return parser


def configure_logging(cfg: Config, verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else _LEVELS[cfg.log_level]
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def obtain_snapshot(args, cfg: Config) -> ResourceSnapshot:
    if args.snapshot:
        return load_snapshot(args.snapshot, namespace=cfg.namespace)

    # imported lazily so offline use does not need cluster credentials
    from kubescope.fetch import connect, fetch_snapshot

    api_client = connect(cfg.kubeconfig, cfg.context)
    return fetch_snapshot(api_client, namespace=cfg.namespace, timeout=cfg.timeout_seconds)


def run(args, cfg: Config) -> dict:
    if args.command == "permissions" and not cfg.namespace:
        raise KubescopeError("permissions requires --namespace")

    snapshot = obtain_snapshot(args, cfg)
    logger.debug("Snapshot for %s: %s", snapshot.scope, snapshot.counts())

    if args.command == "topology":
        return build_snapshot_topology(snapshot).to_dict()

    if args.command == "validate":
        findings = validate(
            snapshot,
            enabled_checks=args.enable_checks,
            disabled_checks=args.disable_checks,
        )
        return {"items": [f.to_dict() for f in findings]}

    if args.command == "permissions":
        return effective_permissions(
            cfg.namespace,
            args.service_account,
            role_bindings=snapshot.role_bindings,
            cluster_role_bindings=snapshot.cluster_role_bindings,
            roles=snapshot.roles,
            cluster_roles=snapshot.cluster_roles,
        ).to_dict()

    if args.command == "ports":
        return build_ports(
            snapshot.pods, snapshot.services, snapshot.endpoint_slices, snapshot.ingresses
        ).to_dict()

    return build_traffic(
        snapshot.services, snapshot.pods, snapshot.ingresses, snapshot.network_policies
    ).to_dict()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cfg = load_config(
            args.config,
            overrides={
                "kubeconfig": args.kubeconfig,
                "context": args.context,
                "namespace": args.namespace,
                "log_level": args.log_level,
                "timeout_seconds": args.timeout,
                "output": args.format,
            },
        )
        configure_logging(cfg, args.verbose)
        result = run(args, cfg)
    except KubescopeError as exc:
        print(f"kubescope: {exc}", file=sys.stderr)
        return 1

    output_result(result, cfg.output, args.command)
    return 0


if __name__ == "__main__":
    sys.exit(main())
