from pathlib import Path

import pytest

from athena_mcp.config import DEFAULT_BASE_URL, DEFAULT_CLIENT, load_config
from athena_mcp.errors import ConfigError
from athena_mcp.server.main import main


def write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(content)
    return path


def test_defaults() -> None:
    config = load_config(env={})
    assert config.gateway.base_url == DEFAULT_BASE_URL
    assert config.gateway.api_key == ""
    assert config.gateway.client == DEFAULT_CLIENT
    assert config.gateway.timeout_seconds == 30
    assert config.server.read_only is False
    assert config.server.health_port is None
    assert config.observability.log_level == "info"


def test_environment_values() -> None:
    config = load_config(
        env={
            "ATHENA_BASE_URL": "http://localhost:4052/",
            "ATHENA_API_KEY": "key",
            "ATHENA_CLIENT": "local",
            "READ_ONLY": "true",
            "HEALTH_PORT": "8081",
        }
    )
    assert config.gateway.base_url == "http://localhost:4052"
    assert config.gateway.api_key == "key"
    assert config.gateway.client == "local"
    assert config.server.read_only is True
    assert config.server.health_port == 8081


@pytest.mark.parametrize("value", ["1", "TRUE", "yes", ""])
def test_read_only_requires_literal_true(value: str) -> None:
    assert load_config(env={"READ_ONLY": value}).server.read_only is False


def test_non_positive_health_port_disables_listener() -> None:
    assert load_config(env={"HEALTH_PORT": "0"}).server.health_port is None


def test_invalid_health_port() -> None:
    with pytest.raises(ConfigError, match="HEALTH_PORT"):
        load_config(env={"HEALTH_PORT": "eighty"})


def test_invalid_base_url() -> None:
    with pytest.raises(ConfigError, match="must start with http:// or https://"):
        load_config(env={"ATHENA_BASE_URL": "ftp://gateway"})


def test_invalid_timeout() -> None:
    with pytest.raises(ConfigError):
        load_config(env={"ATHENA_TIMEOUT_SECONDS": "0"})


def test_yaml_with_env_substitution(tmp_path: Path) -> None:
    cfg_path = write_config(
        tmp_path,
        """
gateway:
  base_url: https://gateway.example.com
  api_key: ${ATHENA_SECRET}
  client: yaml_client
server:
  read_only: true
  health_port: 9000
observability:
  log_level: debug
""",
    )
    config = load_config(cfg_path, env={"ATHENA_SECRET": "secret-value"})
    assert config.gateway.base_url == "https://gateway.example.com"
    assert config.gateway.api_key == "secret-value"
    assert config.gateway.client == "yaml_client"
    assert config.server.read_only is True
    assert config.server.health_port == 9000
    assert config.observability.log_level == "debug"


def test_environment_overrides_yaml(tmp_path: Path) -> None:
    cfg_path = write_config(
        tmp_path,
        """
gateway:
  client: yaml_client
server:
  read_only: true
""",
    )
    config = load_config(cfg_path, env={"ATHENA_CLIENT": "env_client", "READ_ONLY": "false"})
    assert config.gateway.client == "env_client"
    assert config.server.read_only is False


def test_config_path_from_environment(tmp_path: Path) -> None:
    cfg_path = write_config(tmp_path, "gateway:\n  client: from_file\n")
    config = load_config(env={"ATHENA_MCP_CONFIG": str(cfg_path)})
    assert config.gateway.client == "from_file"


def test_missing_substitution_variable(tmp_path: Path) -> None:
    cfg_path = write_config(tmp_path, "gateway:\n  api_key: ${NOT_SET_ANYWHERE}\n")
    with pytest.raises(ConfigError, match="NOT_SET_ANYWHERE"):
        load_config(cfg_path, env={})


@pytest.mark.parametrize("section", ["gateway", "server", "observability"])
def test_section_must_be_mapping(tmp_path: Path, section: str) -> None:
    cfg_path = write_config(tmp_path, f"{section}:\n  - a\n")
    with pytest.raises(ConfigError, match=f"Config section {section} must be a mapping"):
        load_config(cfg_path, env={})


def test_empty_section_uses_defaults(tmp_path: Path) -> None:
    cfg_path = write_config(tmp_path, "gateway:\nserver:\n")
    config = load_config(cfg_path, env={})
    assert config.gateway.base_url == DEFAULT_BASE_URL
    assert config.server.read_only is False


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="does not exist"):
        load_config(tmp_path / "missing.yml", env={})


def test_config_is_immutable() -> None:
    config = load_config(env={})
    with pytest.raises(AttributeError):
        config.server.read_only = True  # type: ignore[misc]


def test_main_exits_on_bad_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ATHENA_MCP_CONFIG", raising=False)
    monkeypatch.setenv("ATHENA_BASE_URL", "gateway.example.com")
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 1
