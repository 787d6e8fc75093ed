"""spurs FastMCP server.

Thin wiring of the command tools and host resource onto FastMCP. All
execution logic lives in services/.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from spurs.resources import list_hosts_resource
from spurs.services import get_config, get_registry
from spurs.tools import jobs, join, run, spawn

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Load hosts at startup and close every shell at shutdown."""
    logger.info("spurs server starting up")
    hosts = get_config().get_hosts()
    logger.info(
        "Loaded %d SSH host(s): %s",
        len(hosts),
        ", ".join(sorted(hosts)) if hosts else "(none)",
    )
    logger.info("spurs server ready to accept connections")

    try:
        yield {"hosts": sorted(hosts)}
    finally:
        logger.info("spurs server shutting down")
        registry = get_registry()
        if registry.active_hosts or registry.jobs():
            await registry.close_all()
        logger.info("spurs server shutdown complete")


def create_server() -> FastMCP:
    """Create the MCP server with tools, resources and the health route."""
    server = FastMCP("spurs", lifespan=app_lifespan)

    server.tool()(run)
    server.tool()(spawn)
    server.tool()(join)
    server.tool()(jobs)

    server.resource("hosts://list")(list_hosts_resource)

    @server.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> PlainTextResponse:
        """Health check endpoint."""
        client_host = request.client.host if request.client else "unknown"
        logger.debug("Health check from %s", client_host)
        return PlainTextResponse("OK")

    return server
