"""Background execution of a command on a duplicated shell.

A handle owns the duplicated shell and the task running the command.
Joining hands both back. A handle that is detached, or garbage collected
without ever being joined, lets the command run to completion and closes
the duplicated shell afterwards; the remote process is never killed.
"""

import asyncio
import logging
import weakref
from dataclasses import dataclass
from typing import TYPE_CHECKING

from spurs.errors import AlreadyJoinedError, SpursError
from spurs.models import SshCommand, SshOutput

if TYPE_CHECKING:
    from spurs.services.shell import SshShell

logger = logging.getLogger(__name__)

# Strong references so running tasks are not garbage collected mid-flight
_background_tasks: set["asyncio.Task[SshOutput]"] = set()


@dataclass
class SpawnResult:
    """Outcome of a joined spawn plus the now idle duplicated shell."""

    shell: "SshShell"
    output: SshOutput | None = None
    error: SpursError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def result(self) -> SshOutput:
        """Return the output, or raise the error the command failed with."""
        if self.error is not None:
            raise self.error
        assert self.output is not None
        return self.output


def _close_when_done(task: "asyncio.Task[SshOutput]", shell: "SshShell") -> None:
    def _finish(t: "asyncio.Task[SshOutput]") -> None:
        if not t.cancelled() and t.exception() is not None:
            logger.warning(
                "Detached command on %s failed: %s",
                shell.remote_name,
                t.exception(),
            )
        shell.close()

    if task.done():
        _finish(task)
    else:
        task.add_done_callback(_finish)


class SshSpawnHandle:
    """A command running in the background; join it exactly once."""

    def __init__(self, shell: "SshShell", task: "asyncio.Task[SshOutput]") -> None:
        self._shell = shell
        self._task = task
        self._joined = False
        self._finalizer = weakref.finalize(self, _close_when_done, task, shell)
        self._finalizer.atexit = False

    @classmethod
    def start(cls, shell: "SshShell", spec: SshCommand) -> "SshSpawnHandle":
        """Schedule `spec` on `shell` and return its handle.

        Must be called from a running event loop.
        """
        task = asyncio.get_running_loop().create_task(
            shell.execute(spec),
            name=f"spurs-spawn:{shell.remote_name}",
        )
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
        return cls(shell, task)

    async def join(self) -> SpawnResult:
        """Wait for the command and return its outcome with the shell.

        Cancelling the caller (e.g. via `asyncio.wait_for`) abandons the wait
        but not the command; the handle can then be joined again.

        Raises:
            AlreadyJoinedError: If the handle was already joined or detached
        """
        if self._joined:
            raise AlreadyJoinedError()
        self._joined = True
        logger.debug("Blocking on spawned command on %s", self._shell.remote_name)

        try:
            output = await asyncio.shield(self._task)
        except asyncio.CancelledError:
            self._joined = False
            raise
        except SpursError as e:
            outcome = SpawnResult(shell=self._shell, error=e)
        else:
            outcome = SpawnResult(shell=self._shell, output=output)

        self._finalizer.detach()
        return outcome

    def done(self) -> bool:
        """Whether the background command has finished."""
        return self._task.done()

    def detach(self) -> None:
        """Give up the handle; the duplicated shell closes when the command ends.

        Raises:
            AlreadyJoinedError: If the handle was already joined or detached
        """
        if self._joined:
            raise AlreadyJoinedError()
        self._joined = True
        self._finalizer()

    def __repr__(self) -> str:
        state = "joined" if self._joined else ("done" if self._task.done() else "running")
        return f"SshSpawnHandle({self._shell.remote_name} {state})"
