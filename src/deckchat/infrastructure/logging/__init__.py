"""Logging infrastructure module."""

from deckchat.infrastructure.logging.setup import (
    bind_identity,
    get_logger,
    setup_logging,
)

__all__ = ["bind_identity", "get_logger", "setup_logging"]
