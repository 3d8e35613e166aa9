import glob
import importlib.util
import logging
import os

from kubescope.checks.base_check import ValidationCheck
from kubescope.findings import Severity
from kubescope.snapshot import COLLECTIONS

logger = logging.getLogger(__name__)

# ----------------------------
# Dynamic Check Loader
# ----------------------------


def validate_check(check: ValidationCheck):
    required_fields = ["name", "category", "severity", "priority", "title", "requires"]
    for field in required_fields:
        if not hasattr(check, field):
            raise ValueError(f"Check {check} missing required field '{field}'")

    if not isinstance(check.name, str) or not check.name:
        raise ValueError("Check.name must be a non-empty string")
    if not isinstance(check.category, str) or not check.category:
        raise ValueError(f"Check {check.name}.category must be a non-empty string")
    if not isinstance(check.severity, Severity):
        raise ValueError(f"Check {check.name}.severity must be a Severity")
    if not isinstance(check.title, str) or not check.title:
        raise ValueError(f"Check {check.name}.title must be a non-empty string")
    if not isinstance(check.priority, int):
        raise ValueError(f"Check {check.name}.priority must be an integer")
    if not (0 <= check.priority <= 1000):
        raise ValueError(f"Check {check.name}.priority must be between 0 and 1000")
    if not isinstance(check.requires, list):
        raise ValueError(f"Check {check.name}.requires must be a list")

    unknown = set(check.requires) - set(COLLECTIONS)
    if unknown:
        raise ValueError(
            f"Check {check.name}.requires has invalid collections: {sorted(unknown)}"
        )


def load_checks(check_folder=None) -> list[ValidationCheck]:
    if check_folder is None:
        check_folder = os.path.join(os.path.dirname(__file__), "checks")

    checks: list[ValidationCheck] = []

    for file in sorted(glob.glob(os.path.join(check_folder, "*.py"))):
        if os.path.basename(file) in ("base_check.py", "__init__.py"):
            continue
        module_name = "kubescope_checks_" + os.path.splitext(os.path.basename(file))[0]
        spec = importlib.util.spec_from_file_location(module_name, file)
        if spec is None or spec.loader is None:
            continue
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        for attr in dir(module):
            cls = getattr(module, attr)
            if (
                isinstance(cls, type)
                and issubclass(cls, ValidationCheck)
                and cls is not ValidationCheck
                and cls.__module__ == module_name
            ):
                checks.append(cls())

    # ---- CONTRACT VALIDATION ----
    for check in checks:
        validate_check(check)

    names = [c.name for c in checks]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValueError(f"Duplicate check names: {duplicates}")

    logger.debug("Loaded %d checks from %s", len(checks), check_folder)
    return checks


def load_plugins(plugin_folder=None) -> list[ValidationCheck]:
    if plugin_folder is None or not os.path.exists(plugin_folder):
        return []
    return load_checks(plugin_folder)
