"""MCP server entry point and initialization."""

from .app import create_health_app, create_server, start_health_server
from .main import main

__all__ = ["create_health_app", "create_server", "main", "start_health_server"]
