from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigError

DEFAULT_BASE_URL = "https://mirror3.athena-db.com"
DEFAULT_CLIENT = "railway_direct"
DEFAULT_TIMEOUT_SECONDS = 30


@dataclass(frozen=True)
class GatewayConfig:
    base_url: str = DEFAULT_BASE_URL
    api_key: str = ""
    client: str = DEFAULT_CLIENT
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class ServerConfig:
    read_only: bool = False
    health_port: int | None = None


@dataclass(frozen=True)
class ObservabilityConfig:
    log_level: str = "info"


@dataclass(frozen=True)
class AppConfig:
    gateway: GatewayConfig
    server: ServerConfig
    observability: ObservabilityConfig


def _resolve_env(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        expanded = os.path.expandvars(value)
        if expanded.startswith("${") and expanded.endswith("}"):
            key = expanded[2:-1]
            if key not in env:
                raise ConfigError(f"Environment variable {key} is required but not set")
            return env[key]
        return expanded
    if isinstance(value, list):
        return [_resolve_env(v, env) for v in value]
    if isinstance(value, dict):
        return {k: _resolve_env(v, env) for k, v in value.items()}
    return value


def _load_yaml(path: str | Path | None, env: Mapping[str, str]) -> dict[str, Any]:
    if path is None:
        return {}
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file {config_path} does not exist")
    try:
        raw = yaml.safe_load(config_path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file {config_path} is not valid YAML: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return _resolve_env(raw, env)


def _section(resolved: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = resolved.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section {name} must be a mapping")
    return section


def _validate_base_url(value: str) -> str:
    if not value.startswith("http://") and not value.startswith("https://"):
        raise ConfigError(f"ATHENA_BASE_URL must start with http:// or https://, got: {value}")
    return value.rstrip("/")


def _parse_port(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        port = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"HEALTH_PORT must be an integer, got: {value}") from exc
    return port if port > 0 else None


def _parse_timeout(value: Any) -> int:
    try:
        timeout = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"timeout_seconds must be an integer, got: {value}") from exc
    if timeout <= 0:
        raise ConfigError("timeout_seconds must be greater than 0")
    return timeout


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value) == "true"


def load_config(path: str | Path | None = None, env: Mapping[str, str] | None = None) -> AppConfig:
    """Build the immutable application config.

    Values come from an optional YAML file and are overridden by environment
    variables (``ATHENA_BASE_URL``, ``ATHENA_API_KEY``, ``ATHENA_CLIENT``,
    ``ATHENA_TIMEOUT_SECONDS``, ``READ_ONLY``, ``HEALTH_PORT``,
    ``ATHENA_LOG_LEVEL``).
    """
    env = os.environ if env is None else env
    if path is None:
        path = env.get("ATHENA_MCP_CONFIG") or None
    resolved = _load_yaml(path, env)

    gateway_raw = _section(resolved, "gateway")
    server_raw = _section(resolved, "server")
    observability_raw = _section(resolved, "observability")

    gateway = GatewayConfig(
        base_url=_validate_base_url(
            str(env.get("ATHENA_BASE_URL", gateway_raw.get("base_url", DEFAULT_BASE_URL)))
        ),
        api_key=str(env.get("ATHENA_API_KEY", gateway_raw.get("api_key") or "")),
        client=str(env.get("ATHENA_CLIENT", gateway_raw.get("client", DEFAULT_CLIENT))),
        timeout_seconds=_parse_timeout(
            env.get("ATHENA_TIMEOUT_SECONDS", gateway_raw.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS))
        ),
    )

    server = ServerConfig(
        read_only=_parse_bool(env.get("READ_ONLY", server_raw.get("read_only", False))),
        health_port=_parse_port(env.get("HEALTH_PORT", server_raw.get("health_port"))),
    )

    observability = ObservabilityConfig(
        log_level=str(env.get("ATHENA_LOG_LEVEL", observability_raw.get("log_level", "info"))),
    )

    return AppConfig(gateway=gateway, server=server, observability=observability)
