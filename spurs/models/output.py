"""Command execution data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SshOutput:
    """Result of a remote command execution."""

    stdout: bytes
    stderr: bytes
    exit_status: int = 0
    truncated: bool = False

    @property
    def stdout_text(self) -> str:
        """Stdout decoded as UTF-8, undecodable bytes replaced."""
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        """Stderr decoded as UTF-8, undecodable bytes replaced."""
        return self.stderr.decode("utf-8", errors="replace")

    @property
    def success(self) -> bool:
        return self.exit_status == 0
