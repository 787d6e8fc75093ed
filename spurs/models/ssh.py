"""SSH-related data models."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SSHHost:
    """SSH endpoint."""

    name: str
    hostname: str
    user: str = "root"
    port: int = 22
    identity_file: str | None = None

    @classmethod
    def parse(cls, remote: str, user: str = "root") -> "SSHHost":
        """Build a host from `host` or `host:port`.

        Bracketed IPv6 literals (`[::1]:2222`) are accepted.

        Raises:
            ValueError: If the port is not an integer
        """
        hostname, port = remote, 22
        if remote.startswith("["):
            end = remote.index("]")
            hostname = remote[1:end]
            rest = remote[end + 1 :]
            if rest.startswith(":"):
                port = int(rest[1:])
        elif remote.count(":") == 1:
            hostname, port_str = remote.split(":")
            port = int(port_str)
        return cls(name=remote, hostname=hostname, user=user, port=port)

    @property
    def address(self) -> str:
        """`hostname:port` for display."""
        return f"{self.hostname}:{self.port}"


@dataclass(frozen=True)
class Identity:
    """Who to authenticate as, and with which private key."""

    username: str
    key_path: Path | None = None

    @property
    def client_keys(self) -> list[str] | None:
        """Value for asyncssh's `client_keys` argument."""
        return [str(self.key_path)] if self.key_path else None
