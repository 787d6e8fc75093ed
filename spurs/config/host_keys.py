"""SSH host key verification.

Resolves the known_hosts file handed to asyncssh.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class HostKeyVerifier:
    """Resolves which known_hosts file (if any) verifies remote host keys."""

    def __init__(
        self,
        known_hosts_path: str | None = None,
        strict_checking: bool = True,
    ):
        """Initialize host key verifier.

        Args:
            known_hosts_path: Path to known_hosts file or 'none' to disable
            strict_checking: Reject unknown host keys

        Raises:
            FileNotFoundError: If strict mode and the file is missing
        """
        self.strict_checking = strict_checking
        self._known_hosts = self._resolve_known_hosts(known_hosts_path)

    def _resolve_known_hosts(self, value: str | None) -> str | None:
        if value and value.lower() == "none":
            logger.warning(
                "SSH host key verification DISABLED (SPURS_KNOWN_HOSTS=none) - "
                "vulnerable to MITM attacks"
            )
            return None

        path = Path(os.path.expanduser(value)) if value else Path.home() / ".ssh" / "known_hosts"
        if path.exists():
            return str(path)

        if self.strict_checking:
            raise FileNotFoundError(
                f"SSH host key verification required but known_hosts not found at {path}.\n"
                f"Add host keys with: ssh-keyscan <hostname> >> {path}\n"
                f"or disable verification (NOT RECOMMENDED): SPURS_KNOWN_HOSTS=none"
            )
        logger.warning("known_hosts not found at %s, verification disabled", path)
        return None

    def get_known_hosts_path(self) -> str | None:
        """Get path to known_hosts file, or None if verification is disabled."""
        return self._known_hosts

    def is_enabled(self) -> bool:
        return self._known_hosts is not None
