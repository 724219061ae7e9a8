"""Shared plumbing for MCP tool handlers."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable

from fastmcp.exceptions import ToolError

from ..errors import AthenaMCPError


def render(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


async def call_tool(func: Callable[..., Any], *args: Any) -> str:
    """Run a blocking database call off the event loop and render its result.

    Domain errors become ``ToolError`` so the caller receives an error result
    carrying the exception message.
    """
    try:
        result = await asyncio.to_thread(func, *args)
    except AthenaMCPError as exc:
        raise ToolError(str(exc)) from exc
    return render(result)
