"""MCP resources for spurs."""

from spurs.resources.hosts import list_hosts_resource

__all__ = ["list_hosts_resource"]
