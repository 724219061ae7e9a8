from __future__ import annotations

from typing import Any


class AthenaMCPError(Exception):
    """Base class for errors surfaced to MCP callers."""


class ConfigError(AthenaMCPError, ValueError):
    """Configuration is missing or invalid."""


class GuardrailError(AthenaMCPError, ValueError):
    """Tool argument failed validation before SQL generation."""


class ReadOnlyError(AthenaMCPError, PermissionError):
    """Operation refused because the server runs in read-only mode."""


class GatewayError(AthenaMCPError, RuntimeError):
    """Gateway request failed or returned a non-2xx status."""

    def __init__(self, message: str, status: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body
