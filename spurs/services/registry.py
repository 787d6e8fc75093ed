"""Shells and spawned jobs kept alive across server requests.

Locking Strategy:
- `_meta_lock`: Protects the `_shells` and `_host_locks` dict structure
- Per-host locks: Protect shell creation/removal for a specific host
- Lock acquisition order: Always per-host lock first, then meta-lock if needed

Each spawned job owns its own duplicated shell, so jobs need no locking
beyond the dict they are stored in.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from spurs.models import SshCommand
from spurs.services.shell import SshShell

if TYPE_CHECKING:
    from spurs.config import Config
    from spurs.services.spawn import SpawnResult, SshSpawnHandle

logger = logging.getLogger(__name__)


@dataclass
class Job:
    """A spawned command tracked by id."""

    id: str
    host: str
    command: str
    handle: "SshSpawnHandle"


class ShellRegistry:
    """One shell per configured host, plus the jobs spawned from them."""

    def __init__(self, config: "Config") -> None:
        self.config = config
        self._shells: dict[str, SshShell] = {}
        self._jobs: dict[str, Job] = {}
        self._host_locks: dict[str, asyncio.Lock] = {}
        self._meta_lock = asyncio.Lock()
        self._job_ids = itertools.count(1)

    async def _get_host_lock(self, host_name: str) -> asyncio.Lock:
        async with self._meta_lock:
            if host_name not in self._host_locks:
                self._host_locks[host_name] = asyncio.Lock()
            return self._host_locks[host_name]

    async def get_shell(self, host_name: str) -> SshShell:
        """Get or open the shell for a host alias or `[user@]host[:port]`.

        Raises:
            ConnectionError: If the host cannot be reached
        """
        host_lock = await self._get_host_lock(host_name)

        async with host_lock:
            shell = self._shells.get(host_name)
            if shell is not None and not shell.is_closed:
                logger.debug("Reusing shell for %s", host_name)
                return shell

            host = self.config.resolve_host(host_name)
            shell = await SshShell.connect(
                host,
                known_hosts=self.config.known_hosts_path,
                strict_host_key_checking=self.config.strict_host_key_checking,
                settings=self.config.settings,
            )
            async with self._meta_lock:
                self._shells[host_name] = shell
            logger.info("Registered shell for %s (shells=%d)", host_name, len(self._shells))
            return shell

    async def spawn(self, host_name: str, spec: SshCommand) -> Job:
        """Spawn `spec` on a duplicate of the host's shell and track it."""
        shell = await self.get_shell(host_name)
        handle = await shell.spawn(spec)
        job = Job(
            id=f"job-{next(self._job_ids)}",
            host=host_name,
            command=SshShell.effective_command(spec),
            handle=handle,
        )
        async with self._meta_lock:
            self._jobs[job.id] = job
        logger.info("Spawned %s on %s: %s", job.id, host_name, job.command)
        return job

    async def join(self, job_id: str) -> "SpawnResult":
        """Join a job and forget it. The duplicated shell is closed.

        A cancelled join leaves the job tracked so it can be joined again.

        Raises:
            KeyError: If no such job is tracked
        """
        async with self._meta_lock:
            job = self._jobs[job_id]
        outcome = await job.handle.join()
        self._jobs.pop(job_id, None)
        outcome.shell.close()
        logger.info("Joined %s on %s (ok=%s)", job_id, job.host, outcome.ok)
        return outcome

    def jobs(self) -> list[Job]:
        return list(self._jobs.values())

    async def remove_shell(self, host_name: str) -> None:
        host_lock = await self._get_host_lock(host_name)
        async with host_lock:
            shell = self._shells.pop(host_name, None)
            if shell is not None:
                logger.info("Closing shell for %s", host_name)
                shell.close()

    async def close_all(self) -> None:
        """Close every shell and detach every outstanding job."""
        async with self._meta_lock:
            host_names = list(self._shells.keys())
            jobs = list(self._jobs.values())
            self._jobs.clear()

        for job in jobs:
            logger.info("Detaching unjoined %s on %s", job.id, job.host)
            job.handle.detach()

        for host_name in host_names:
            await self.remove_shell(host_name)

    @property
    def active_hosts(self) -> list[str]:
        return list(self._shells.keys())
