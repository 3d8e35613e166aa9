"""Configuration: config file, environment and CLI overrides."""

import os
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from kubescope.errors import ConfigError

LOG_LEVELS = ("debug", "info", "warn", "error")
OUTPUT_FORMATS = ("text", "json", "yaml")

# env var -> Config field
ENV_KEYS = {
    "KUBECONFIG": "kubeconfig",
    "KUBESCOPE_CONTEXT": "context",
    "KUBESCOPE_NAMESPACE": "namespace",
    "KUBESCOPE_LOG_LEVEL": "log_level",
}


class Config(BaseModel):
    """
    Resolved settings for one kubescope run.

    Config files use the camelCase aliases (logLevel, timeoutSeconds);
    code and CLI overrides use the field names.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    kubeconfig: str | None = None
    context: str | None = None
    namespace: str | None = None  # None means all namespaces
    log_level: Literal["debug", "info", "warn", "error"] = Field(default="info", alias="logLevel")
    timeout_seconds: float = Field(default=30.0, gt=0, alias="timeoutSeconds")
    output: Literal["text", "json", "yaml"] = "text"
    config_file: str | None = None

    @field_validator("kubeconfig", "context", "namespace", mode="before")
    @classmethod
    def _numeric_names_as_text(cls, value: Any) -> Any:
        # YAML reads an all-digit namespace such as 2024 as an int
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _lowercase_level(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


def _validated(data: dict[str, Any], source: str) -> Config:
    try:
        return Config.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid {source}: {exc}") from exc


def default_config_path() -> str:
    return os.path.join(os.path.expanduser("~"), ".config", "kubescope", "config.yaml")


def read_config_file(path: str) -> dict[str, Any]:
    """Parse and validate a config file, returning only the fields it sets."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"parse config file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    return _validated(data, f"config file {path}").model_dump(exclude_unset=True)


def load_config(
    path: str | None = None,
    overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> Config:
    """
    Resolve configuration: defaults < config file < environment < overrides.

    An explicit `path` must exist; the default path is optional.
    Overrides with a None value are ignored.
    """
    environ = os.environ if environ is None else environ
    values: dict[str, Any] = {}

    path_used = path or default_config_path()
    if os.path.isfile(path_used):
        values.update(read_config_file(path_used))
        values["config_file"] = path_used
    elif path:
        raise ConfigError(f"read config file: {path} does not exist")

    for env_key, field_name in ENV_KEYS.items():
        if environ.get(env_key):
            values[field_name] = environ[env_key]

    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value

    return _validated(values, "configuration")
