"""Application configuration.

Delegates to specialized components:
- SSHConfigParser: Reads ~/.ssh/config
- HostKeyVerifier: Manages known_hosts
- Settings: Environment variables
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from spurs.config.host_keys import HostKeyVerifier
from spurs.config.parser import SSHConfigParser
from spurs.config.settings import Settings
from spurs.models import SSHHost

logger = logging.getLogger(__name__)


def _split_env_list(key: str) -> list[str] | None:
    value = os.getenv(key, "").strip()
    if not value:
        return None
    return [h.strip() for h in value.split(",") if h.strip()]


@dataclass
class Config:
    """Application configuration.

    Aggregates settings from SSH config, known_hosts, and environment.
    """

    settings: Settings
    parser: SSHConfigParser
    host_keys: HostKeyVerifier
    _hosts_cache: dict[str, SSHHost] | None = field(default=None, init=False, repr=False)

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment.

        Returns:
            Configured instance with all components initialized
        """
        settings = Settings.from_env()
        parser = SSHConfigParser(
            config_path=os.getenv("SPURS_SSH_CONFIG") or None,
            allowlist=_split_env_list("SPURS_ALLOWLIST"),
            blocklist=_split_env_list("SPURS_BLOCKLIST"),
        )
        host_keys = HostKeyVerifier(
            known_hosts_path=settings.known_hosts,
            strict_checking=settings.strict_host_key_checking,
        )
        return cls(settings=settings, parser=parser, host_keys=host_keys)

    @classmethod
    def from_ssh_config(
        cls,
        ssh_config_path: Path | str | None = None,
        settings: Settings | None = None,
    ) -> "Config":
        """Create config for an explicit SSH config file with host key checks off.

        Intended for tests and throwaway environments.
        """
        return cls(
            settings=settings or Settings(strict_host_key_checking=False),
            parser=SSHConfigParser(config_path=ssh_config_path),
            host_keys=HostKeyVerifier(known_hosts_path="none", strict_checking=False),
        )

    def get_hosts(self) -> dict[str, SSHHost]:
        """Get SSH hosts from config, parsed once and cached."""
        if self._hosts_cache is None:
            self._hosts_cache = self.parser.parse()
        return self._hosts_cache

    def get_host(self, name: str) -> SSHHost | None:
        return self.get_hosts().get(name)

    def resolve_host(self, target: str) -> SSHHost:
        """Resolve an alias from SSH config or a `[user@]host[:port]` string.

        Raises:
            ValueError: If the target has an invalid port
        """
        host = self.get_host(target)
        if host is not None:
            return host

        if "@" in target:
            user, target = target.split("@", 1)
            host = self.get_host(target)
            if host is not None:
                return replace(host, user=user)
            return SSHHost.parse(target, user=user)
        return SSHHost.parse(target)

    @property
    def known_hosts_path(self) -> str | None:
        """Path to known_hosts file (None if verification disabled)."""
        return self.host_keys.get_known_hosts_path()

    @property
    def strict_host_key_checking(self) -> bool:
        return self.host_keys.strict_checking

    @property
    def transport(self) -> str:
        """Transport type (http or stdio)."""
        return self.settings.transport

    @property
    def http_host(self) -> str:
        return self.settings.http_host

    @property
    def http_port(self) -> int:
        return self.settings.http_port
