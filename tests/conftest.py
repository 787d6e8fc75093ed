"""Shared fakes standing in for asyncssh connections and processes."""

import asyncio
import inspect
from collections.abc import Callable
from typing import Any
from unittest.mock import patch

import pytest

# (stdout, stderr, exit status) for a command line
Reply = tuple[bytes, bytes, int | None]


class FakeReader:
    """Serves a byte buffer in small chunks, yielding between reads."""

    def __init__(self, data: bytes, chunk_size: int = 4096, error: Exception | None = None):
        self._data = data
        self._pos = 0
        self._chunk_size = chunk_size
        self._error = error

    async def read(self, n: int = -1) -> bytes:
        await asyncio.sleep(0)
        if self._pos >= len(self._data) and self._error is not None:
            raise self._error
        size = min(n, self._chunk_size) if n > 0 else self._chunk_size
        chunk = self._data[self._pos : self._pos + size]
        self._pos += len(chunk)
        return chunk


class FakeStdin:
    def __init__(self) -> None:
        self.eof_written = False

    def write_eof(self) -> None:
        self.eof_written = True


class FakeProcess:
    def __init__(self, reply: Reply, error: Exception | None = None):
        stdout, stderr, returncode = reply
        self.stdin = FakeStdin()
        self.stdout = FakeReader(stdout, error=error)
        self.stderr = FakeReader(stderr)
        self.returncode = returncode

    async def wait_closed(self) -> None:
        await asyncio.sleep(0)


class FakeSSHConnection:
    """One fake transport; records every command line it runs."""

    def __init__(self, server: "FakeSSHServer", kwargs: dict[str, Any]):
        self.server = server
        self.kwargs = kwargs
        self.commands: list[str] = []
        self.processes: list[FakeProcess] = []
        self.closed = False

    async def create_process(self, command: str, encoding: str | None = "utf-8") -> FakeProcess:
        assert encoding is None
        if self.closed:
            import asyncssh

            raise asyncssh.ConnectionLost("connection closed")
        self.commands.append(command)
        reply = self.server.handler(command)
        if inspect.isawaitable(reply):
            reply = await reply
        process = FakeProcess(reply, error=self.server.stream_error)
        self.processes.append(process)
        return process

    def close(self) -> None:
        self.closed = True

    def is_closed(self) -> bool:
        return self.closed

    async def wait_closed(self) -> None:
        return None


def default_handler(command: str) -> Reply:
    """Tiny subset of shell behaviour used by the tests."""
    if command == "cd /tmp && pwd":
        return b"/tmp\n", b"", 0
    if command == "bash -c 'echo hello | tr a-z A-Z'":
        return b"HELLO\n", b"", 0
    if command == "whoami":
        return b"markm\n", b"", 0
    if command.startswith("false"):
        return b"partial output\n", b"something broke\n", 1
    return b"", b"", 0


class FakeSSHServer:
    """Replaces `asyncssh.connect`; every call opens a new FakeSSHConnection."""

    def __init__(self) -> None:
        self.handler: Callable[[str], Any] = default_handler
        self.connections: list[FakeSSHConnection] = []
        self.connect_errors: list[Exception] = []
        self.stream_error: Exception | None = None

    async def connect(self, hostname: str, **kwargs: Any) -> FakeSSHConnection:
        if self.connect_errors:
            raise self.connect_errors.pop(0)
        conn = FakeSSHConnection(self, {"hostname": hostname, **kwargs})
        self.connections.append(conn)
        return conn

    @property
    def commands(self) -> list[str]:
        return [c for conn in self.connections for c in conn.commands]


@pytest.fixture
def ssh_server() -> Any:
    """Patch asyncssh.connect with a fake server."""
    server = FakeSSHServer()
    with patch("asyncssh.connect", side_effect=server.connect):
        yield server


@pytest.fixture
def gate(ssh_server: FakeSSHServer) -> asyncio.Event:
    """`slow` blocks until the gate is set; other commands use the default replies."""
    event = asyncio.Event()

    async def handler(command: str) -> Reply:
        if command == "slow":
            await event.wait()
            return b"done\n", b"", 0
        return default_handler(command)

    ssh_server.handler = handler
    return event
