"""Entry point for the spurs MCP server."""

import logging

from spurs.services import get_config
from spurs.utils.console import configure_logging

logger = logging.getLogger(__name__)


def run_server() -> None:
    """Run the MCP server with configured transport."""
    config = get_config()
    configure_logging(config.settings.log_level, config.settings.log_colors)

    from spurs.server import create_server

    mcp = create_server()

    if config.transport == "stdio":
        logger.info("Starting spurs server (transport=stdio)")
        mcp.run(transport="stdio")
    else:
        logger.info(
            "Starting spurs server (transport=http, host=%s, port=%d)",
            config.http_host,
            config.http_port,
        )
        mcp.run(
            transport="http",
            host=config.http_host,
            port=config.http_port,
        )


if __name__ == "__main__":
    run_server()
