import logging
import os

from kubescope.checks.base_check import ValidationCheck
from kubescope.findings import ValidationFinding, sort_findings
from kubescope.loader import load_checks, load_plugins
from kubescope.snapshot import ResourceSnapshot

logger = logging.getLogger(__name__)

_DEFAULT_CHECKS = None


def get_default_checks() -> list[ValidationCheck]:
    global _DEFAULT_CHECKS
    if _DEFAULT_CHECKS is None:
        checks_path = os.path.join(os.path.dirname(__file__), "checks")
        plugin_path = os.path.join(os.path.dirname(__file__), "plugins")
        _DEFAULT_CHECKS = sorted(
            load_checks(checks_path) + load_plugins(plugin_path),
            key=lambda c: getattr(c, "priority", 100),
        )
    return _DEFAULT_CHECKS


def _selected(check: ValidationCheck, names: list[str] | None) -> bool:
    return check.name in names or check.category in names


def _enforce_contract(check: ValidationCheck, result) -> list[ValidationFinding]:
    if not isinstance(result, list):
        raise TypeError(f"{check.name}.evaluate() must return a list")
    for finding in result:
        if not isinstance(finding, ValidationFinding):
            raise TypeError(
                f"{check.name}.evaluate() must return ValidationFinding items, "
                f"got {type(finding).__name__}"
            )
    return result


# ----------------------------
# Validation engine
# ----------------------------


def validate(
    snapshot: ResourceSnapshot,
    checks: list[ValidationCheck] | None = None,
    enabled_checks: list[str] | None = None,
    disabled_checks: list[str] | None = None,
) -> list[ValidationFinding]:
    """
    Run every check over the snapshot and return the sorted findings.

    - Checks are independent and see the same snapshot
    - A check whose required collections are all empty cannot find
      anything and is skipped
    - enabled/disabled filters accept check names or categories
    - Output is ordered critical before warning, then by title
    """
    checks = checks if checks is not None else get_default_checks()

    findings: list[ValidationFinding] = []
    for check in sorted(checks, key=lambda c: getattr(c, "priority", 100)):
        if enabled_checks and not _selected(check, enabled_checks):
            continue
        if disabled_checks and _selected(check, disabled_checks):
            continue

        requires = getattr(check, "requires", [])
        if requires and not any(snapshot.collection(name) for name in requires):
            logger.debug("Skipping '%s': no data in %s", check.name, requires)
            continue

        result = _enforce_contract(check, check.evaluate(snapshot))
        if result:
            logger.debug(
                "Check '%s' produced %d finding(s)", check.name, len(result)
            )
        findings.extend(result)

    return sort_findings(findings)
