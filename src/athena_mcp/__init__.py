"""Athena MCP server package."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("athena-mcp")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "config",
    "server",
]
