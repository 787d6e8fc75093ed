"""Error taxonomy for remote command execution."""

from pathlib import Path


class SpursError(Exception):
    """Base class for every error raised by spurs."""


class ConnectionError(SpursError):
    """Failed to open or authenticate an SSH transport."""

    def __init__(self, host_name: str, original_error: Exception):
        """Initialize connection error.

        Args:
            host_name: Name of the SSH host
            original_error: Original exception that caused the failure
        """
        self.host_name = host_name
        self.original_error = original_error
        super().__init__(f"Cannot connect to {host_name}: {original_error}")


class KeyNotFoundError(ConnectionError):
    """The private key to authenticate with does not exist."""

    def __init__(self, host_name: str, key: Path | str):
        self.key = Path(key)
        super().__init__(host_name, FileNotFoundError(f"no such key: {key}"))


class AuthFailedError(ConnectionError):
    """The remote rejected the supplied identity."""

    def __init__(self, host_name: str, key: Path | str | None, original_error: Exception):
        self.key = Path(key) if key is not None else None
        super().__init__(host_name, original_error)


class CommandError(SpursError):
    """Remote command exited non-zero and failure was not tolerated.

    Carries both captured streams so a caller can print a full postmortem
    without re-running the command.
    """

    def __init__(self, cmd: str, exit_status: int, stdout: bytes, stderr: bytes):
        self.cmd = cmd
        self.exit_status = exit_status
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"non-zero exit ({exit_status}) for command: {cmd}")

    @property
    def stderr_text(self) -> str:
        """Captured stderr decoded as UTF-8."""
        return self.stderr.decode("utf-8", errors="replace")

    @property
    def stdout_text(self) -> str:
        """Captured stdout decoded as UTF-8."""
        return self.stdout.decode("utf-8", errors="replace")


class IoError(SpursError):
    """Transport dropped while a command was running."""

    def __init__(self, cmd: str, original_error: Exception):
        self.cmd = cmd
        self.original_error = original_error
        super().__init__(f"I/O failure while running {cmd!r}: {original_error}")


class AlreadyJoinedError(SpursError):
    """A spawn handle was joined more than once."""

    def __init__(self) -> None:
        super().__init__("spawn handle has already been joined")


class InvalidCommandError(SpursError, ValueError):
    """Command specification cannot be executed (e.g. empty text)."""
