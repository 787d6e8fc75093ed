"""One authenticated SSH transport to one endpoint."""

import asyncio
import logging
from typing import TYPE_CHECKING

import asyncssh

from spurs.errors import AuthFailedError, ConnectionError, IoError
from spurs.models import Identity, SshOutput, SSHHost

if TYPE_CHECKING:
    from asyncssh import SSHReader

logger = logging.getLogger(__name__)

_READ_SIZE = 65536


async def _drain(reader: "SSHReader[bytes]", keep: bool, limit: int) -> tuple[bytes, bool]:
    """Read a stream to EOF, keeping at most `limit` bytes.

    Returns:
        Tuple of (kept bytes, was_truncated boolean).
    """
    chunks: list[bytes] = []
    kept = 0
    truncated = False
    while True:
        data = await reader.read(_READ_SIZE)
        if not data:
            break
        if not keep:
            continue
        room = limit - kept
        if len(data) > room:
            data = data[:room]
            truncated = True
        if data:
            chunks.append(data)
            kept += len(data)
    return b"".join(chunks), truncated


class Connection:
    """Owns exactly one live transport to `host` as `identity`.

    A Connection is never shared between concurrently running commands;
    `duplicate()` opens a brand new transport for that.
    """

    def __init__(
        self,
        host: SSHHost,
        identity: Identity,
        conn: asyncssh.SSHClientConnection,
        *,
        known_hosts: str | None = None,
        strict_host_key_checking: bool = True,
        connect_timeout: float | None = None,
    ) -> None:
        self.host = host
        self.identity = identity
        self._conn = conn
        self._known_hosts = known_hosts
        self._strict_host_key = strict_host_key_checking
        self._connect_timeout = connect_timeout
        self._closed = False

    @classmethod
    async def connect(
        cls,
        host: SSHHost,
        identity: Identity,
        *,
        known_hosts: str | None = None,
        strict_host_key_checking: bool = True,
        connect_timeout: float | None = None,
    ) -> "Connection":
        """Open and authenticate a transport.

        Args:
            host: Endpoint to connect to
            identity: User and private key to authenticate with
            known_hosts: Path to known_hosts file, or None to skip verification
            strict_host_key_checking: Whether to reject unverifiable host keys
            connect_timeout: Seconds to wait for the handshake

        Raises:
            AuthFailedError: If the remote rejects the identity
            ConnectionError: If the transport cannot be established
        """
        conn = await cls._open(
            host,
            identity,
            known_hosts=known_hosts,
            strict_host_key_checking=strict_host_key_checking,
            connect_timeout=connect_timeout,
        )
        return cls(
            host,
            identity,
            conn,
            known_hosts=known_hosts,
            strict_host_key_checking=strict_host_key_checking,
            connect_timeout=connect_timeout,
        )

    @staticmethod
    async def _open(
        host: SSHHost,
        identity: Identity,
        *,
        known_hosts: str | None,
        strict_host_key_checking: bool,
        connect_timeout: float | None,
    ) -> asyncssh.SSHClientConnection:
        logger.info(
            "Opening SSH connection to %s (%s@%s:%d)",
            host.name,
            identity.username,
            host.hostname,
            host.port,
        )
        try:
            try:
                conn = await asyncssh.connect(
                    host.hostname,
                    port=host.port,
                    username=identity.username,
                    known_hosts=known_hosts,
                    client_keys=identity.client_keys,
                    connect_timeout=connect_timeout,
                )
            except asyncssh.HostKeyNotVerifiable as e:
                if strict_host_key_checking:
                    logger.error(
                        "Host key verification failed for %s: %s. Add the host key to %s "
                        "or set SPURS_STRICT_HOST_KEY_CHECKING=false",
                        host.name,
                        e,
                        known_hosts,
                    )
                    raise
                logger.warning(
                    "Host key not verified for %s (strict mode disabled): %s",
                    host.name,
                    e,
                )
                conn = await asyncssh.connect(
                    host.hostname,
                    port=host.port,
                    username=identity.username,
                    known_hosts=None,
                    client_keys=identity.client_keys,
                    connect_timeout=connect_timeout,
                )
        except asyncssh.PermissionDenied as e:
            logger.error("Authentication as %s failed for %s: %s", identity.username, host.name, e)
            raise AuthFailedError(host.name, identity.key_path, e) from e
        except (asyncssh.Error, OSError, asyncio.TimeoutError) as e:
            logger.error("Connection to %s failed: %s", host.name, e)
            raise ConnectionError(host.name, e) from e

        logger.info("SSH connection established to %s", host.name)
        return conn

    async def duplicate(self) -> "Connection":
        """Open a second, independent transport with the same credentials.

        Authentication is performed again from scratch, so this can fail
        even while `self` stays healthy.

        Raises:
            ConnectionError: If the new transport cannot be established
        """
        logger.debug("Duplicating connection to %s", self.host.name)
        return await Connection.connect(
            self.host,
            self.identity,
            known_hosts=self._known_hosts,
            strict_host_key_checking=self._strict_host_key,
            connect_timeout=self._connect_timeout,
        )

    async def exec(
        self,
        command: str,
        *,
        capture_stdout: bool = True,
        capture_stderr: bool = True,
        max_output: int = 16 * 1_048_576,
    ) -> SshOutput:
        """Run `command` on a fresh exec channel and wait for it to finish.

        Stdin is closed immediately. Stdout and stderr are drained
        concurrently until the channel closes; streams that are not captured
        are still read so the remote never blocks on a full window.

        Returns:
            SshOutput with captured streams and exit status, whatever it is.

        Raises:
            IoError: If the transport fails before an exit status arrives
        """
        try:
            process = await self._conn.create_process(command, encoding=None)
            process.stdin.write_eof()
            drains = [
                asyncio.ensure_future(_drain(process.stdout, capture_stdout, max_output)),
                asyncio.ensure_future(_drain(process.stderr, capture_stderr, max_output)),
            ]
            try:
                (stdout, out_truncated), (stderr, err_truncated) = await asyncio.gather(*drains)
            finally:
                for drain in drains:
                    drain.cancel()
            await process.wait_closed()
        except (asyncssh.Error, OSError) as e:
            logger.error("Transport to %s failed during command: %s", self.host.name, e)
            raise IoError(command, e) from e

        exit_status = process.returncode
        if exit_status is None:
            raise IoError(command, RuntimeError("channel closed without an exit status"))

        if out_truncated or err_truncated:
            logger.warning(
                "Output of %r on %s truncated to %d bytes per stream",
                command,
                self.host.name,
                max_output,
            )

        return SshOutput(
            stdout=stdout,
            stderr=stderr,
            exit_status=exit_status,
            truncated=out_truncated or err_truncated,
        )

    def close(self) -> None:
        """Close the transport. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        logger.debug("Closing connection to %s", self.host.name)
        self._conn.close()

    async def wait_closed(self) -> None:
        await self._conn.wait_closed()

    @property
    def is_closed(self) -> bool:
        """True once closed locally or dropped by the remote."""
        return self._closed or self._conn.is_closed()
