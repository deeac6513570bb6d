"""Shared pytest fixtures and configuration."""

import logging
from collections.abc import Iterator

import pytest
from xmlrpc_fake import FakeTracServer

from tracflow.config import TracConfig
from tracflow.trac import Trac


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: tests against a live Trac server")
    config.addinivalue_line("markers", "real: tests that modify a live Trac ticket (local only)")


# Shared fixtures


@pytest.fixture(autouse=True)
def reset_tracflow_logging() -> Iterator[None]:
    """Drop handlers installed by setup_logging so tests don't leak them."""
    yield
    logger = logging.getLogger("tracflow")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def trac_config() -> TracConfig:
    """Connection settings for the fake server."""
    return TracConfig(username="alice", password="s3cret", host="trac.example.com", path="/trac/")


@pytest.fixture
def trac_server() -> FakeTracServer:
    """Fake XML-RPC server that records calls."""
    return FakeTracServer()


@pytest.fixture
def trac(trac_config: TracConfig, trac_server: FakeTracServer) -> Trac:
    """Trac client wired to the fake server."""
    return Trac(trac_config, transport=trac_server.transport())
