"""Main entry point for the Athena MCP server.

It's configured as the entry point in pyproject.toml, so you can run the
server using the command: athena-mcp

The MCP protocol is spoken over stdio; logs go to stderr.
"""

import argparse
import dataclasses
import logging
import sys

from .. import __version__
from ..config import load_config
from ..errors import ConfigError
from ..logging_utils import configure_logging
from .app import create_server, start_health_server

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Start the MCP server on stdio.

    Configuration comes from the environment and an optional YAML file.

    Usage:
        Run with environment config: athena-mcp
        Run with a config file: athena-mcp --config config.example.yml
        Force read-only mode: athena-mcp --read-only
    """
    parser = argparse.ArgumentParser(description="Start the Athena MCP server")
    parser.add_argument("--config", default=None, help="Path to a YAML config file")
    parser.add_argument(
        "--read-only",
        action="store_true",
        help="Block every mutating tool and write SQL",
    )
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        configure_logging("info")
        logger.error(f"Fatal error: {exc}")
        sys.exit(1)

    if args.read_only:
        config = dataclasses.replace(
            config, server=dataclasses.replace(config.server, read_only=True)
        )

    configure_logging(config.observability.log_level)
    mcp_server = create_server(config)
    start_health_server(config.server.health_port)

    logger.info(
        f"athena-mcp started (base_url={config.gateway.base_url}, "
        f"client={config.gateway.client}, read_only={config.server.read_only}, "
        f"version={__version__})"
    )
    mcp_server.run()


if __name__ == "__main__":
    main()
