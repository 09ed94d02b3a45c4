"""Config subsystem public API.

Provides:
    get_config()        -> AggregatedConfig (activation, lifecycle, logging)
    as_dict()           -> dict representation
    configure_logging() -> apply the logging section to the autoboot logger
    ConfigError         -> raised on validation / unknown key
"""

from .loader import (  # noqa: F401
    AggregatedConfig,
    ConfigError,
    as_dict,
    clear_config_cache,
    configure_logging,
    get_config,
)


def reset_for_tests() -> None:
    """Alias of clear_config_cache() kept for test fixtures."""
    clear_config_cache()


__all__ = [
    "AggregatedConfig",
    "get_config",
    "as_dict",
    "configure_logging",
    "ConfigError",
    "clear_config_cache",
    "reset_for_tests",
]
