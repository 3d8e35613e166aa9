import pytest
from pydantic import ValidationError

from kubescope.config import Config, default_config_path, load_config
from kubescope.errors import ConfigError


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


def _write_default(home, text):
    path = home / ".config" / "kubescope" / "config.yaml"
    path.parent.mkdir(parents=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults():
    cfg = load_config(environ={})
    assert cfg == Config()
    assert cfg.log_level == "info"
    assert cfg.timeout_seconds == 30.0
    assert cfg.namespace is None


def test_default_path_is_read_when_present(isolated_home):
    path = _write_default(isolated_home, "namespace: prod\nlogLevel: debug\ntimeoutSeconds: 5\n")
    assert default_config_path() == str(path)

    cfg = load_config(environ={})
    assert cfg.namespace == "prod"
    assert cfg.log_level == "debug"
    assert cfg.timeout_seconds == 5
    assert cfg.config_file == str(path)


def test_precedence_file_env_overrides(tmp_path):
    path = tmp_path / "kubescope.yaml"
    path.write_text("namespace: from-file\ncontext: file-ctx\noutput: yaml\n", encoding="utf-8")

    cfg = load_config(
        str(path),
        overrides={"namespace": "from-flag", "context": None},
        environ={"KUBESCOPE_NAMESPACE": "from-env", "KUBESCOPE_CONTEXT": "env-ctx"},
    )
    assert cfg.namespace == "from-flag"
    assert cfg.context == "env-ctx"
    assert cfg.output == "yaml"


def test_env_log_level_is_case_insensitive():
    assert load_config(environ={"KUBESCOPE_LOG_LEVEL": "WARN"}).log_level == "warn"


def test_explicit_missing_file_is_an_error(tmp_path):
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "absent.yaml"), environ={})


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("namespace: [oops", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path), environ={})


def test_unknown_keys_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("listen: 0.0.0.0\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path), environ={})


@pytest.mark.parametrize(
    "overrides",
    [
        {"log_level": "verbose"},
        {"output": "xml"},
        {"timeout_seconds": 0},
        {"timeout_seconds": "soon"},
        {"listen": "0.0.0.0"},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ConfigError):
        load_config(overrides=overrides, environ={})


def test_numeric_namespace_in_file_is_kept_as_text(tmp_path):
    path = tmp_path / "kubescope.yaml"
    path.write_text("namespace: 2024\ncontext: 7\n", encoding="utf-8")

    cfg = load_config(str(path), environ={})
    assert cfg.namespace == "2024"
    assert cfg.context == "7"


@pytest.mark.parametrize("text", ["namespace: [a, b]\n", "kubeconfig: {path: x}\n", "namespace: true\n"])
def test_non_string_names_rejected(tmp_path, text):
    path = tmp_path / "kubescope.yaml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path), environ={})


def test_config_is_immutable():
    cfg = load_config(environ={})
    with pytest.raises(ValidationError):
        cfg.namespace = "prod"
