"""MCP tool definitions."""

from .data_tools import register_data_tools
from .write_tools import register_write_tools

__all__ = ["register_data_tools", "register_write_tools"]
