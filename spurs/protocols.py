"""Protocol interfaces for dependency inversion.

Utilities that issue commands depend on `Execute` rather than on `SshShell`,
so tests can pass a recording fake:

    class RecordingShell:
        async def execute(self, spec):
            self.commands.append(spec)
            return SshOutput(b"", b"")

    await reboot(RecordingShell(), settle_seconds=0)
"""

from typing import Any, Protocol, runtime_checkable

from spurs.models import Identity, SshCommand, SshOutput, SSHHost


@runtime_checkable
class IdentityProvider(Protocol):
    """Resolves the identity to authenticate as when none is supplied."""

    def resolve(self, username: str, host: SSHHost) -> Identity:
        """Return the identity for `username` on `host`.

        Raises:
            KeyNotFoundError: If no usable private key exists
        """
        ...


@runtime_checkable
class Execute(Protocol):
    """Something that can run an `SshCommand` remotely."""

    async def execute(self, spec: SshCommand) -> SshOutput:
        """Run a command and wait for it to complete."""
        ...

    async def spawn(self, spec: SshCommand) -> Any:
        """Run a command in the background and return a joinable handle."""
        ...

    async def reconnect(
        self,
        *,
        retry_interval: float | None = None,
        max_attempts: int | None = None,
    ) -> None:
        """Replace the underlying transport, retrying until it succeeds."""
        ...
