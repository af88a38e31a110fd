"""Pydantic models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_RELAYS = [
    "wss://relay.damus.io",
    "wss://relay.nostr.band",
    "wss://nos.lol",
]


class ChannelTemplate(BaseModel):
    """A channel seeded into a freshly created channel list."""

    name: str
    hashtags: list[str] = Field(min_length=1)


class SessionConfig(BaseModel):
    """Chat session configuration."""

    identity: str = Field(
        default="anonymous",
        description="Identity whose channel list is active at startup.",
    )
    group_threshold_seconds: float = Field(
        default=300.0,
        ge=0,
        description=(
            "Maximum gap in seconds between two consecutive messages of the "
            "same author for them to share one message block."
        ),
    )
    default_channels: list[ChannelTemplate] = Field(
        default_factory=lambda: [
            ChannelTemplate(name="General", hashtags=["general"])
        ],
        description="Channels created for an identity seen for the first time.",
    )
    default_relays: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RELAYS),
        description="Relays used when no relay configuration has been saved yet.",
    )


class ReactionConfig(BaseModel):
    """Outbound reaction publishing configuration."""

    publisher_url: str | None = Field(
        default=None,
        description=(
            "Endpoint receiving reaction publish requests. When unset, a mock "
            "publisher that always succeeds is used."
        ),
    )
    max_attempts: int = Field(
        default=3,
        ge=1,
        description="Publish attempts before an optimistic reaction is reverted.",
    )
    retry_delay: float = Field(
        default=2.0,
        ge=0,
        description="Delay in seconds before a failed publish is retried.",
    )


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = Field(
        default="sqlite+aiosqlite:///./data/deckchat.db",
        description=(
            "SQLAlchemy-style database connection URL "
            "(e.g., 'sqlite+aiosqlite:///path/to/db')."
        ),
    )


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "json"


class AppConfig(BaseModel):
    """Application configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    reactions: ReactionConfig = Field(default_factory=ReactionConfig)
