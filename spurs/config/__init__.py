"""Configuration module for spurs.

- Config: Main configuration class (aggregates all components)
- SSHConfigParser: Parses ~/.ssh/config files
- HostKeyVerifier: Manages SSH host key verification
- Settings: Environment variable configuration
"""

from spurs.config.host_keys import HostKeyVerifier
from spurs.config.main import Config
from spurs.config.parser import SSHConfigParser
from spurs.config.settings import Settings

__all__ = ["Config", "SSHConfigParser", "HostKeyVerifier", "Settings"]
