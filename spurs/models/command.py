"""Command specification built with chained calls."""

from dataclasses import dataclass, replace
from pathlib import PurePosixPath


@dataclass(frozen=True)
class SshCommand:
    """Immutable description of a remote command and how to run it.

    Every builder method returns a new value:

        spec = SshCommand("make -j8").cwd("/src/linux").allow_error()
    """

    cmd: str
    cwd_path: PurePosixPath | None = None
    bash: bool = False
    tolerate_error: bool = False
    capture_stdout: bool = True
    capture_stderr: bool = True
    is_dry_run: bool = False

    def cwd(self, path: str | PurePosixPath) -> "SshCommand":
        """Change to `path` before executing."""
        return replace(self, cwd_path=PurePosixPath(path))

    def use_bash(self) -> "SshCommand":
        """Execute through `bash -c` (pipes, globs, redirection)."""
        return replace(self, bash=True)

    def allow_error(self) -> "SshCommand":
        """Return output even if the command exits non-zero."""
        return replace(self, tolerate_error=True)

    def no_stdout(self) -> "SshCommand":
        """Discard stdout instead of capturing it."""
        return replace(self, capture_stdout=False)

    def no_stderr(self) -> "SshCommand":
        """Discard stderr instead of capturing it."""
        return replace(self, capture_stderr=False)

    def dry_run(self, is_dry: bool = True) -> "SshCommand":
        """Only print the command; still requires a live shell."""
        return replace(self, is_dry_run=is_dry)


def cmd(fmt: str, *args: object) -> SshCommand:
    """Build an `SshCommand` from a format string.

    `cmd("ls {}", "/tmp")` is `SshCommand("ls /tmp")`.
    """
    return SshCommand(fmt.format(*args) if args else fmt)
