"""Shared pytest fixtures."""

import pytest


@pytest.fixture
def aiohttp_unused_port(unused_tcp_port_factory):
    """Alias for the port factory that pytest-aiohttp 1.x no longer provides."""
    return unused_tcp_port_factory
