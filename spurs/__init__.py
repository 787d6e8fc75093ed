"""spurs: run shell commands on remote hosts over SSH.

    async with await SshShell.with_default_key("markm", "myhost:22") as shell:
        await shell.execute(cmd("ls {}", "/tmp"))
        handle = await shell.spawn(SshCommand("make -j8").cwd("/src"))
        ...
        outcome = await handle.join()
"""

from spurs.errors import (
    AlreadyJoinedError,
    AuthFailedError,
    CommandError,
    ConnectionError,
    InvalidCommandError,
    IoError,
    KeyNotFoundError,
    SpursError,
)
from spurs.models import Identity, SshCommand, SshOutput, SSHHost, cmd
from spurs.services import (
    Connection,
    DefaultKeyProvider,
    SpawnResult,
    SshShell,
    SshSpawnHandle,
    StaticIdentityProvider,
)

__version__ = "0.1.0"

__all__ = [
    "AlreadyJoinedError",
    "AuthFailedError",
    "CommandError",
    "Connection",
    "ConnectionError",
    "DefaultKeyProvider",
    "Identity",
    "InvalidCommandError",
    "IoError",
    "KeyNotFoundError",
    "SSHHost",
    "SpawnResult",
    "SpursError",
    "SshCommand",
    "SshOutput",
    "SshShell",
    "SshSpawnHandle",
    "StaticIdentityProvider",
    "cmd",
]
