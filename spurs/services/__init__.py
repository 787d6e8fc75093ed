"""Services for spurs."""

from spurs.services.connection import Connection
from spurs.services.identity import DefaultKeyProvider, StaticIdentityProvider
from spurs.services.registry import Job, ShellRegistry
from spurs.services.shell import SshShell
from spurs.services.spawn import SpawnResult, SshSpawnHandle
from spurs.services.state import (
    get_config,
    get_registry,
    reset_state,
    set_config,
    set_registry,
)

__all__ = [
    "Connection",
    "DefaultKeyProvider",
    "Job",
    "ShellRegistry",
    "SpawnResult",
    "SshShell",
    "SshSpawnHandle",
    "StaticIdentityProvider",
    "get_config",
    "get_registry",
    "reset_state",
    "set_config",
    "set_registry",
]
