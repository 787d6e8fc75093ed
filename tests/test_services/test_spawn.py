"""Tests for spawning commands on duplicated shells and joining them."""

import asyncio
import gc
from typing import Any

import pytest
import pytest_asyncio

from spurs.errors import AlreadyJoinedError, CommandError, ConnectionError, InvalidCommandError
from spurs.models import Identity, SshCommand, SSHHost
from spurs.services.shell import SshShell


@pytest_asyncio.fixture
async def shell(ssh_server: Any) -> SshShell:
    host = SSHHost(name="testhost", hostname="10.0.0.5", user="markm")
    return await SshShell.connect(host, Identity(username="markm"))


async def _wait_for(predicate: Any) -> None:
    async def poll() -> None:
        while not predicate():
            await asyncio.sleep(0)

    await asyncio.wait_for(poll(), timeout=1)


@pytest.mark.asyncio
async def test_spawn_does_not_block_parent(
    shell: SshShell, ssh_server: Any, gate: asyncio.Event
) -> None:
    """The parent shell keeps working while the spawned command runs."""
    handle = await shell.spawn(SshCommand("slow"))
    assert handle.done() is False

    output = await shell.execute(SshCommand("whoami"))
    assert output.stdout == b"markm\n"
    assert handle.done() is False

    gate.set()
    outcome = await handle.join()

    assert outcome.result().stdout == b"done\n"
    parent_conn, spawned_conn = ssh_server.connections
    assert parent_conn.commands == ["whoami"]
    assert spawned_conn.commands == ["slow"]


@pytest.mark.asyncio
async def test_join_returns_usable_shell(shell: SshShell, ssh_server: Any) -> None:
    """The shell returned by join runs further commands on its own transport."""
    handle = await shell.spawn(SshCommand("pwd").cwd("/tmp"))
    outcome = await handle.join()

    assert outcome.ok is True
    assert outcome.output is not None
    assert outcome.output.stdout == b"/tmp\n"
    assert outcome.shell is not shell
    assert outcome.shell.username == shell.username
    assert outcome.shell.remote_name == shell.remote_name

    again = await outcome.shell.execute(SshCommand("whoami"))
    assert again.stdout == b"markm\n"
    assert ssh_server.connections[1].commands == ["cd /tmp && pwd", "whoami"]


@pytest.mark.asyncio
async def test_double_join_fails_without_rerun(shell: SshShell, ssh_server: Any) -> None:
    """A second join raises AlreadyJoinedError and runs nothing."""
    handle = await shell.spawn(SshCommand("whoami"))
    await handle.join()
    commands_before = list(ssh_server.commands)

    with pytest.raises(AlreadyJoinedError):
        await handle.join()

    assert ssh_server.commands == commands_before


@pytest.mark.asyncio
async def test_join_carries_command_error(shell: SshShell) -> None:
    """A failing spawned command is reported through the outcome."""
    handle = await shell.spawn(SshCommand("false"))
    outcome = await handle.join()

    assert outcome.ok is False
    assert isinstance(outcome.error, CommandError)
    assert outcome.error.stderr == b"something broke\n"
    with pytest.raises(CommandError):
        outcome.result()

    # The duplicated shell is still handed back
    assert (await outcome.shell.execute(SshCommand("whoami"))).stdout == b"markm\n"


@pytest.mark.asyncio
async def test_concurrent_spawns_are_isolated(shell: SshShell, ssh_server: Any) -> None:
    """Two concurrent spawns each capture only their own bytes."""
    size = 1_000_000
    patterns = {
        "emit-a": (b"A" * size, b"a" * 1000),
        "emit-b": (b"0123456789" * (size // 10), b"b" * 1000),
    }
    ssh_server.handler = lambda command: (*patterns[command], 0)

    handle_a = await shell.spawn(SshCommand("emit-a"))
    handle_b = await shell.spawn(SshCommand("emit-b"))
    outcome_a, outcome_b = await asyncio.gather(handle_a.join(), handle_b.join())

    assert outcome_a.result().stdout == patterns["emit-a"][0]
    assert outcome_a.result().stderr == patterns["emit-a"][1]
    assert outcome_b.result().stdout == patterns["emit-b"][0]
    assert outcome_b.result().stderr == patterns["emit-b"][1]
    assert len(ssh_server.connections) == 3


@pytest.mark.asyncio
async def test_spawn_duplicate_failure(shell: SshShell, ssh_server: Any) -> None:
    """If duplication fails, spawn raises and the parent stays healthy."""
    ssh_server.connect_errors.append(OSError("network blip"))

    with pytest.raises(ConnectionError):
        await shell.spawn(SshCommand("whoami"))

    assert (await shell.execute(SshCommand("whoami"))).exit_status == 0


@pytest.mark.asyncio
async def test_spawn_empty_command(shell: SshShell, ssh_server: Any) -> None:
    """Empty commands are rejected before duplicating the connection."""
    with pytest.raises(InvalidCommandError):
        await shell.spawn(SshCommand(""))
    assert len(ssh_server.connections) == 1


@pytest.mark.asyncio
async def test_join_timeout_abandons_wait_not_command(
    shell: SshShell, gate: asyncio.Event
) -> None:
    """Timing out a join leaves the command running and the handle joinable."""
    handle = await shell.spawn(SshCommand("slow"))

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(handle.join(), timeout=0.01)
    assert handle.done() is False

    gate.set()
    outcome = await handle.join()
    assert outcome.result().stdout == b"done\n"


@pytest.mark.asyncio
async def test_detach_closes_shell_after_completion(
    shell: SshShell, ssh_server: Any, gate: asyncio.Event
) -> None:
    """A detached command finishes, then its duplicated transport closes."""
    handle = await shell.spawn(SshCommand("slow"))
    spawned_conn = ssh_server.connections[1]

    handle.detach()
    assert spawned_conn.closed is False

    gate.set()
    await _wait_for(lambda: spawned_conn.closed)
    assert spawned_conn.commands == ["slow"]

    with pytest.raises(AlreadyJoinedError):
        await handle.join()


@pytest.mark.asyncio
async def test_dropped_handle_is_detached(shell: SshShell, ssh_server: Any) -> None:
    """Garbage-collecting an unjoined handle closes its shell once done."""
    handle = await shell.spawn(SshCommand("whoami"))
    spawned_conn = ssh_server.connections[1]

    del handle
    gc.collect()

    await _wait_for(lambda: spawned_conn.closed)
    assert spawned_conn.commands == ["whoami"]


@pytest.mark.asyncio
async def test_spawn_inherits_dry_run(shell: SshShell, ssh_server: Any) -> None:
    """A dry-run shell spawns dry-run siblings."""
    shell.set_dry_run(True)

    outcome = await (await shell.spawn(SshCommand("rm -rf /scratch"))).join()

    assert outcome.shell.dry_run_mode is True
    assert ssh_server.commands == []
