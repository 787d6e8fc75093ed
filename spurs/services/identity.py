"""Identity resolution for SSH authentication."""

import logging
from pathlib import Path

from spurs.errors import KeyNotFoundError
from spurs.models import Identity, SSHHost

logger = logging.getLogger(__name__)

DEFAULT_KEY_SUFFIX = Path(".ssh") / "id_rsa"


class DefaultKeyProvider:
    """Resolves the conventional private key under the home directory.

    A key named by the host's SSH config (`IdentityFile`) wins over the
    default location.
    """

    def __init__(self, key_path: Path | str | None = None, home: Path | None = None):
        """Initialize the provider.

        Args:
            key_path: Explicit key to use instead of `~/.ssh/id_rsa`
            home: Home directory to resolve the default key against
        """
        self._key_path = Path(key_path).expanduser() if key_path else None
        self._home = home

    @property
    def default_key(self) -> Path:
        if self._key_path is not None:
            return self._key_path
        return (self._home or Path.home()) / DEFAULT_KEY_SUFFIX

    def resolve(self, username: str, host: SSHHost) -> Identity:
        key = Path(host.identity_file).expanduser() if host.identity_file else self.default_key
        if not key.is_file():
            raise KeyNotFoundError(host.name, key)
        logger.debug("Using key %s for %s@%s", key, username, host.name)
        return Identity(username=username, key_path=key)


class StaticIdentityProvider:
    """Always returns the same key, whatever the user or host."""

    def __init__(self, key_path: Path | str | None):
        self._key_path = Path(key_path) if key_path else None

    def resolve(self, username: str, host: SSHHost) -> Identity:
        return Identity(username=username, key_path=self._key_path)
