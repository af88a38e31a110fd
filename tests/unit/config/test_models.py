"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from deckchat.config.models import (
    DEFAULT_RELAYS,
    AppConfig,
    ChannelTemplate,
    DatabaseConfig,
    LoggingConfig,
    ReactionConfig,
    ServerConfig,
    SessionConfig,
)


class TestSessionConfig:
    def test_defaults(self) -> None:
        config = SessionConfig()

        assert config.identity == "anonymous"
        assert config.group_threshold_seconds == 300.0
        assert [c.name for c in config.default_channels] == ["General"]
        assert config.default_channels[0].hashtags == ["general"]
        assert config.default_relays == DEFAULT_RELAYS

    def test_default_relays_not_shared(self) -> None:
        first = SessionConfig()
        first.default_relays.append("wss://extra")

        assert SessionConfig().default_relays == DEFAULT_RELAYS

    def test_negative_threshold_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SessionConfig(group_threshold_seconds=-1)

    def test_empty_default_channels_allowed(self) -> None:
        assert SessionConfig(default_channels=[]).default_channels == []


class TestChannelTemplate:
    def test_requires_hashtags(self) -> None:
        with pytest.raises(ValidationError):
            ChannelTemplate(name="Empty", hashtags=[])


class TestReactionConfig:
    def test_defaults(self) -> None:
        config = ReactionConfig()

        assert config.publisher_url is None
        assert config.max_attempts == 3
        assert config.retry_delay == 2.0

    @pytest.mark.parametrize("attempts", [0, -1])
    def test_max_attempts_must_be_positive(self, attempts: int) -> None:
        with pytest.raises(ValidationError):
            ReactionConfig(max_attempts=attempts)


class TestLoggingConfig:
    def test_defaults(self) -> None:
        config = LoggingConfig()

        assert config.level == "INFO"
        assert config.format == "json"

    def test_invalid_level(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="VERBOSE")  # type: ignore[arg-type]

    def test_invalid_format(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")  # type: ignore[arg-type]


class TestAppConfig:
    def test_all_sections_have_defaults(self) -> None:
        config = AppConfig()

        assert config.server == ServerConfig()
        assert config.database == DatabaseConfig()
        assert config.database.url.startswith("sqlite+aiosqlite://")
        assert config.session == SessionConfig()
        assert config.reactions == ReactionConfig()
