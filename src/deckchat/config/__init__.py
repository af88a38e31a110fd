"""Configuration module for deckchat."""

from deckchat.config.loader import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigParseError,
    EnvVarNotFoundError,
    load_config,
)
from deckchat.config.models import (
    AppConfig,
    ChannelTemplate,
    DatabaseConfig,
    LoggingConfig,
    ReactionConfig,
    ServerConfig,
    SessionConfig,
)

__all__ = [
    # Exceptions
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigParseError",
    "EnvVarNotFoundError",
    # Functions
    "load_config",
    # Models
    "AppConfig",
    "ChannelTemplate",
    "DatabaseConfig",
    "LoggingConfig",
    "ReactionConfig",
    "ServerConfig",
    "SessionConfig",
]
