"""Global state for the spurs server."""

from spurs.config import Config
from spurs.services.registry import ShellRegistry

_config: Config | None = None
_registry: ShellRegistry | None = None


def get_config() -> Config:
    """Get or create config."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def get_registry() -> ShellRegistry:
    """Get or create the shell registry."""
    global _registry
    if _registry is None:
        _registry = ShellRegistry(get_config())
    return _registry


def reset_state() -> None:
    """Reset global state for testing."""
    global _config, _registry
    _config = None
    _registry = None


def set_config(config: Config) -> None:
    """Set the global config instance."""
    global _config
    _config = config


def set_registry(registry: ShellRegistry) -> None:
    """Set the global registry instance."""
    global _registry
    _registry = registry
