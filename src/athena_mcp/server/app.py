"""Application wiring for the Athena MCP server.

This module sets up the core application by:
1. Building the gateway client and access policy from configuration
2. Creating the FastMCP server instance and registering all tools
3. Providing the optional FastAPI health endpoint served by uvicorn
"""

import logging
import threading

import uvicorn
from fastapi import FastAPI
from fastmcp import FastMCP

from .. import __version__
from ..client import GatewayClient, GatewayTransport
from ..config import AppConfig
from ..db import AthenaDatabase
from ..policy import AccessPolicy
from ..tools import register_data_tools, register_write_tools

logger = logging.getLogger(__name__)


def create_server(config: AppConfig, transport: GatewayTransport | None = None) -> FastMCP:
    """Create the FastMCP server with every tool registered.

    Args:
        config: Loaded application configuration
        transport: Optional gateway transport; defaults to an HTTP GatewayClient

    Returns:
        FastMCP: Server ready to run on stdio
    """
    policy = AccessPolicy.from_read_only(config.server.read_only)
    database = AthenaDatabase(transport or GatewayClient(config.gateway), policy)

    mcp_server = FastMCP(name="athena-mcp")
    register_data_tools(mcp_server, database)
    register_write_tools(mcp_server, database)
    return mcp_server


def create_health_app() -> FastAPI:
    """Create the health-check application.

    Only ``GET /health`` and ``GET /`` are routed; everything else is a 404.
    """
    app = FastAPI(
        title="Athena MCP Server",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.get("/health")
    @app.get("/")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "ok", "version": __version__}

    return app


def start_health_server(port: int | None) -> uvicorn.Server | None:
    """Serve the health app on a daemon thread when a port is configured."""
    if port is None or port <= 0:
        return None

    # Access logs go to stdout, which belongs to the MCP stdio stream.
    server = uvicorn.Server(
        uvicorn.Config(
            create_health_app(),
            host="0.0.0.0",
            port=port,
            log_level="warning",
            access_log=False,
        )
    )
    thread = threading.Thread(target=server.run, name="athena-mcp-health", daemon=True)
    thread.start()
    logger.info(f"athena-mcp health server listening on port {port}")
    return server
