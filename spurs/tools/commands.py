"""MCP tools for running commands on remote hosts."""

import logging

from spurs.errors import CommandError, SpursError
from spurs.models import SshCommand, SshOutput
from spurs.services import get_registry

logger = logging.getLogger(__name__)


def _build_spec(
    command: str,
    cwd: str | None,
    use_bash: bool,
    allow_error: bool,
) -> SshCommand:
    spec = SshCommand(command)
    if cwd:
        spec = spec.cwd(cwd)
    if use_bash:
        spec = spec.use_bash()
    if allow_error:
        spec = spec.allow_error()
    return spec


def format_output(output: SshOutput) -> str:
    """Render captured streams and exit status for a tool response."""
    parts = [output.stdout_text.rstrip("\n")] if output.stdout else []
    if output.stderr:
        stderr = output.stderr_text.rstrip("\n")
        parts.append(f"[stderr]\n{stderr}")
    if output.exit_status != 0:
        parts.append(f"[exit code: {output.exit_status}]")
    if output.truncated:
        parts.append("[output truncated]")
    return "\n\n".join(parts) if parts else "(no output)"


def format_error(error: SpursError) -> str:
    """Render an error, including both streams for failed commands."""
    if isinstance(error, CommandError):
        lines = [f"Error: {error}"]
        if error.stdout:
            stdout = error.stdout_text.rstrip("\n")
            lines.append(f"[stdout]\n{stdout}")
        if error.stderr:
            stderr = error.stderr_text.rstrip("\n")
            lines.append(f"[stderr]\n{stderr}")
        return "\n\n".join(lines)
    return f"Error: {error}"


async def run(
    host: str,
    command: str,
    cwd: str | None = None,
    use_bash: bool = False,
    allow_error: bool = False,
) -> str:
    """Run a command on a remote host and wait for it to finish.

    Args:
        host: SSH config alias or [user@]host[:port]
        command: Command text to run
        cwd: Directory to change into first
        use_bash: Run through `bash -c` (pipes, globs, redirection)
        allow_error: Report output instead of an error on non-zero exit

    Returns:
        Command output, or an error description.
    """
    spec = _build_spec(command, cwd, use_bash, allow_error)
    try:
        shell = await get_registry().get_shell(host)
        output = await shell.execute(spec)
    except SpursError as e:
        logger.warning("run on %s failed: %s", host, e)
        return format_error(e)
    except ValueError as e:
        return f"Error: {e}"
    return format_output(output)


async def spawn(
    host: str,
    command: str,
    cwd: str | None = None,
    use_bash: bool = False,
    allow_error: bool = False,
) -> str:
    """Start a command in the background; collect it later with `join`.

    Args:
        host: SSH config alias or [user@]host[:port]
        command: Command text to run
        cwd: Directory to change into first
        use_bash: Run through `bash -c` (pipes, globs, redirection)
        allow_error: Report output instead of an error on non-zero exit

    Returns:
        The job id to pass to `join`, or an error description.
    """
    spec = _build_spec(command, cwd, use_bash, allow_error)
    try:
        job = await get_registry().spawn(host, spec)
    except SpursError as e:
        logger.warning("spawn on %s failed: %s", host, e)
        return format_error(e)
    except ValueError as e:
        return f"Error: {e}"
    return f"Spawned {job.id} on {host}: {job.command}"


async def join(job_id: str) -> str:
    """Wait for a spawned job and return its output.

    Args:
        job_id: Id returned by `spawn`

    Returns:
        Command output, or an error description.
    """
    try:
        outcome = await get_registry().join(job_id)
    except KeyError:
        return f"Error: Unknown job: {job_id}"
    except SpursError as e:
        return format_error(e)
    if outcome.error is not None:
        return format_error(outcome.error)
    assert outcome.output is not None
    return format_output(outcome.output)


async def jobs() -> str:
    """List spawned jobs that have not been joined yet."""
    tracked = get_registry().jobs()
    if not tracked:
        return "No outstanding jobs."
    lines = ["Outstanding jobs:"]
    for job in tracked:
        state = "done" if job.handle.done() else "running"
        lines.append(f"  {job.id} [{state}] {job.host}: {job.command}")
    return "\n".join(lines)
