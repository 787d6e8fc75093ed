"""Data models for spurs."""

from spurs.models.command import SshCommand, cmd
from spurs.models.output import SshOutput
from spurs.models.ssh import Identity, SSHHost

__all__ = [
    "Identity",
    "SSHHost",
    "SshCommand",
    "SshOutput",
    "cmd",
]
