"""MCP tools for spurs."""

from spurs.tools.commands import jobs, join, run, spawn

__all__ = ["jobs", "join", "run", "spawn"]
