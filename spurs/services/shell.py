"""Remote shell sessions: execute, spawn, duplicate, reconnect."""

import asyncio
import logging
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING

from spurs.config.settings import Settings
from spurs.errors import (
    AuthFailedError,
    CommandError,
    ConnectionError,
    InvalidCommandError,
    KeyNotFoundError,
)
from spurs.models import Identity, SshCommand, SshOutput, SSHHost
from spurs.services.connection import Connection
from spurs.services.identity import DefaultKeyProvider
from spurs.utils.shell import escape_for_bash, quote_path

if TYPE_CHECKING:
    from spurs.protocols import IdentityProvider
    from spurs.services.spawn import SshSpawnHandle

logger = logging.getLogger(__name__)

# Operator-visible line per executed command: "<user>@<host>: <command>"
command_logger = logging.getLogger("spurs.commands")


def _validate(spec: SshCommand) -> None:
    if not spec.cmd.strip():
        raise InvalidCommandError("command text is empty")


class SshShell:
    """A connection to one remote host that commands are run on.

    Commands run with `execute` are strictly ordered. `spawn` runs a command
    on a duplicated connection so the shell stays free for other work.
    """

    def __init__(
        self,
        connection: Connection,
        *,
        username: str | None = None,
        remote_name: str | None = None,
        settings: Settings | None = None,
        dry_run_mode: bool = False,
    ) -> None:
        self._connection = connection
        self.username = username or connection.identity.username
        self.remote_name = remote_name or connection.host.name
        self.settings = settings or Settings()
        self.dry_run_mode = dry_run_mode
        self._lock = asyncio.Lock()

    @classmethod
    async def connect(
        cls,
        host: SSHHost,
        identity: Identity | None = None,
        *,
        identity_provider: "IdentityProvider | None" = None,
        known_hosts: str | None = None,
        strict_host_key_checking: bool = True,
        settings: Settings | None = None,
    ) -> "SshShell":
        """Connect to `host`.

        Args:
            host: Endpoint to connect to
            identity: Explicit identity; resolved via `identity_provider` if omitted
            identity_provider: Defaults to `DefaultKeyProvider` (`~/.ssh/id_rsa`)
            known_hosts: Path to known_hosts file, or None to skip verification
            strict_host_key_checking: Whether to reject unverifiable host keys
            settings: Connection and capture settings

        Raises:
            KeyNotFoundError: If no private key can be resolved
            ConnectionError: If the transport cannot be established
        """
        settings = settings or Settings()
        if identity is None:
            provider = identity_provider or DefaultKeyProvider(settings.default_key)
            identity = provider.resolve(host.user, host)

        connection = await Connection.connect(
            host,
            identity,
            known_hosts=known_hosts,
            strict_host_key_checking=strict_host_key_checking,
            connect_timeout=settings.connect_timeout,
        )
        logger.info("New SSH shell: %s@%s (%s)", identity.username, host.name, host.address)
        return cls(connection, settings=settings)

    @classmethod
    async def with_key(
        cls,
        username: str,
        remote: str,
        key: Path | str,
        *,
        known_hosts: str | None = None,
        strict_host_key_checking: bool = True,
        settings: Settings | None = None,
    ) -> "SshShell":
        """Connect to `remote` (`host` or `host:port`) with the private key `key`.

        Raises:
            KeyNotFoundError: If `key` does not exist
            ConnectionError: If the transport cannot be established
        """
        host = SSHHost.parse(remote, user=username)
        key = Path(key).expanduser()
        if not key.is_file():
            raise KeyNotFoundError(host.name, key)
        return await cls.connect(
            host,
            Identity(username=username, key_path=key),
            known_hosts=known_hosts,
            strict_host_key_checking=strict_host_key_checking,
            settings=settings,
        )

    @classmethod
    async def with_default_key(
        cls,
        username: str,
        remote: str,
        *,
        identity_provider: "IdentityProvider | None" = None,
        known_hosts: str | None = None,
        strict_host_key_checking: bool = True,
        settings: Settings | None = None,
    ) -> "SshShell":
        """Connect to `remote` with the default key (`~/.ssh/id_rsa`).

        Raises:
            KeyNotFoundError: If the default key does not exist
            ConnectionError: If the transport cannot be established
        """
        host = SSHHost.parse(remote, user=username)
        return await cls.connect(
            host,
            identity_provider=identity_provider,
            known_hosts=known_hosts,
            strict_host_key_checking=strict_host_key_checking,
            settings=settings,
        )

    @staticmethod
    def effective_command(spec: SshCommand) -> str:
        """Command line actually sent to the remote for `spec`."""
        line = spec.cmd
        if spec.bash:
            line = f"bash -c {escape_for_bash(line)}"
        if spec.cwd_path is not None:
            line = f"cd {quote_path(str(spec.cwd_path))} && {line}"
        return line

    async def execute(self, spec: SshCommand) -> SshOutput:
        """Run a command and wait for it to complete.

        Note that `sudo` commands hang if sudo asks for a password.

        Returns:
            SshOutput with captured stdout, stderr and exit status.

        Raises:
            InvalidCommandError: If the command text is empty
            CommandError: If the command exits non-zero without `allow_error()`
            IoError: If the transport fails mid-command
        """
        _validate(spec)
        line = self.effective_command(spec)
        command_logger.info("%s@%s: %s", self.username, self.remote_name, line)

        if spec.is_dry_run or self.dry_run_mode:
            logger.debug("Dry run, not executing: %s", line)
            return SshOutput(stdout=b"", stderr=b"")

        async with self._lock:
            output = await self._connection.exec(
                line,
                capture_stdout=spec.capture_stdout,
                capture_stderr=spec.capture_stderr,
                max_output=self.settings.max_output,
            )

        logger.debug("Exit status %d for %s", output.exit_status, line)
        if output.exit_status != 0 and not spec.tolerate_error:
            raise CommandError(line, output.exit_status, output.stdout, output.stderr)
        return output

    async def spawn(self, spec: SshCommand) -> "SshSpawnHandle":
        """Run a command in the background on a duplicated connection.

        Returns as soon as the remote command has been scheduled; this shell
        is immediately available for further work.

        Raises:
            InvalidCommandError: If the command text is empty
            ConnectionError: If the connection cannot be duplicated
        """
        from spurs.services.spawn import SshSpawnHandle

        _validate(spec)
        shell = await self.duplicate()
        handle = SshSpawnHandle.start(shell, spec)
        logger.debug("Spawned background command on %s", self.remote_name)
        return handle

    async def duplicate(self) -> "SshShell":
        """New shell with the same credentials over its own transport."""
        connection = await self._connection.duplicate()
        return SshShell(
            connection,
            username=self.username,
            remote_name=self.remote_name,
            settings=self.settings,
            dry_run_mode=self.dry_run_mode,
        )

    async def reconnect(
        self,
        *,
        retry_interval: float | None = None,
        max_attempts: int | None = None,
    ) -> None:
        """Replace the transport, retrying until the remote answers.

        Retries forever unless `max_attempts` is given. Authentication
        failures are not retried.

        Raises:
            AuthFailedError: If the remote rejects the identity
            ConnectionError: If `max_attempts` attempts all failed
        """
        interval = self.settings.reconnect_interval if retry_interval is None else retry_interval
        attempt = 0
        logger.info("Reconnecting to %s", self.remote_name)
        while True:
            attempt += 1
            try:
                connection = await self._connection.duplicate()
                break
            except AuthFailedError:
                raise
            except ConnectionError as e:
                if max_attempts is not None and attempt >= max_attempts:
                    raise
                logger.warning(
                    "Reconnect attempt %d to %s failed: %s, retrying in %ss",
                    attempt,
                    self.remote_name,
                    e.original_error,
                    interval,
                )
                await asyncio.sleep(interval)

        async with self._lock:
            old, self._connection = self._connection, connection
        old.close()
        logger.info("Reconnected to %s after %d attempt(s)", self.remote_name, attempt)

    def set_dry_run(self, on: bool) -> None:
        """Print commands instead of executing them (still connected)."""
        self.dry_run_mode = on
        logger.info("Toggled dry run mode: %s", "on" if on else "off")

    def close(self) -> None:
        self._connection.close()

    async def aclose(self) -> None:
        self._connection.close()
        await self._connection.wait_closed()

    @property
    def is_closed(self) -> bool:
        return self._connection.is_closed

    @property
    def host(self) -> SSHHost:
        return self._connection.host

    async def __aenter__(self) -> "SshShell":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return (
            f"SshShell({self.username}@{self.remote_name} "
            f"dry_run={self.dry_run_mode} key={self._connection.identity.key_path})"
        )
