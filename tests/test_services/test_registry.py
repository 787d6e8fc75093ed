"""Tests for the server-side shell registry and job store."""

import asyncio
from pathlib import Path
from typing import Any

import pytest

from spurs.config import Config
from spurs.errors import AlreadyJoinedError
from spurs.models import SshCommand
from spurs.services.registry import ShellRegistry


@pytest.fixture
def key(tmp_path: Path) -> Path:
    path = tmp_path / "tootie_key"
    path.write_text("key")
    return path


@pytest.fixture
def config(tmp_path: Path, key: Path) -> Config:
    ssh_config = tmp_path / "ssh_config"
    ssh_config.write_text(f"""
Host tootie
    HostName 192.168.1.10
    User admin
    IdentityFile {key}
""")
    config = Config.from_ssh_config(ssh_config_path=ssh_config)
    config.settings.default_key = str(key)
    return config


@pytest.mark.asyncio
async def test_get_shell_reuses_open_shell(ssh_server: Any, config: Config, key: Path) -> None:
    """One shell per host is opened and reused."""
    registry = ShellRegistry(config)

    first = await registry.get_shell("tootie")
    second = await registry.get_shell("tootie")

    assert first is second
    assert len(ssh_server.connections) == 1
    kwargs = ssh_server.connections[0].kwargs
    assert kwargs["hostname"] == "192.168.1.10"
    assert kwargs["username"] == "admin"
    assert kwargs["client_keys"] == [str(key)]
    assert registry.active_hosts == ["tootie"]


@pytest.mark.asyncio
async def test_get_shell_replaces_closed_shell(ssh_server: Any, config: Config) -> None:
    """A closed shell is replaced on next use."""
    registry = ShellRegistry(config)

    first = await registry.get_shell("tootie")
    first.close()
    second = await registry.get_shell("tootie")

    assert second is not first
    assert len(ssh_server.connections) == 2


@pytest.mark.asyncio
async def test_get_shell_for_unconfigured_target(ssh_server: Any, config: Config, key: Path) -> None:
    """Targets missing from SSH config are parsed as [user@]host[:port]."""
    registry = ShellRegistry(config)

    await registry.get_shell("deploy@10.1.1.1:2022")

    kwargs = ssh_server.connections[0].kwargs
    assert kwargs["hostname"] == "10.1.1.1"
    assert kwargs["port"] == 2022
    assert kwargs["username"] == "deploy"
    assert kwargs["client_keys"] == [str(key)]


@pytest.mark.asyncio
async def test_spawn_and_join_job(ssh_server: Any, config: Config, gate: asyncio.Event) -> None:
    """Jobs are tracked by id until joined; the duplicate shell is then closed."""
    registry = ShellRegistry(config)

    job = await registry.spawn("tootie", SshCommand("slow"))
    assert job.id == "job-1"
    assert job.command == "slow"
    assert [j.id for j in registry.jobs()] == ["job-1"]

    gate.set()
    outcome = await registry.join(job.id)

    assert outcome.result().stdout == b"done\n"
    assert registry.jobs() == []
    assert ssh_server.connections[1].closed is True
    assert ssh_server.connections[0].closed is False


@pytest.mark.asyncio
async def test_join_unknown_job(ssh_server: Any, config: Config) -> None:
    """Unknown job ids raise KeyError."""
    registry = ShellRegistry(config)
    with pytest.raises(KeyError):
        await registry.join("job-99")


@pytest.mark.asyncio
async def test_close_all_detaches_jobs(
    ssh_server: Any, config: Config, gate: asyncio.Event
) -> None:
    """close_all closes shells and detaches unjoined jobs."""
    registry = ShellRegistry(config)
    job = await registry.spawn("tootie", SshCommand("slow"))

    await registry.close_all()

    assert ssh_server.connections[0].closed is True
    assert registry.jobs() == []
    with pytest.raises(AlreadyJoinedError):
        await job.handle.join()

    gate.set()
    for _ in range(100):
        if ssh_server.connections[1].closed:
            break
        await asyncio.sleep(0)
    assert ssh_server.connections[1].closed is True


@pytest.mark.asyncio
async def test_get_shell_replaces_shell_dropped_by_remote(ssh_server: Any, config: Config) -> None:
    """A shell whose transport the remote dropped is replaced on next use."""
    registry = ShellRegistry(config)

    first = await registry.get_shell("tootie")
    ssh_server.connections[0].closed = True
    second = await registry.get_shell("tootie")

    assert second is not first
    output = await second.execute(SshCommand("whoami"))
    assert output.stdout == b"markm\n"


@pytest.mark.asyncio
async def test_cancelled_join_keeps_job(
    ssh_server: Any, config: Config, gate: asyncio.Event
) -> None:
    """A join that times out leaves the job tracked and joinable."""
    registry = ShellRegistry(config)
    job = await registry.spawn("tootie", SshCommand("slow"))

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(registry.join(job.id), 0.01)

    assert [j.id for j in registry.jobs()] == [job.id]

    gate.set()
    outcome = await registry.join(job.id)

    assert outcome.result().stdout == b"done\n"
    assert registry.jobs() == []
