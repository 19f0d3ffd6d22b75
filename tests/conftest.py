"""
Shared pytest fixtures for intent client tests.

Provides fixtures for:
- Client configuration and sample requests
- Stub transports
- An in-process gRPC Sessions server
- Logging capture and restoration
"""

import logging
import sys
from pathlib import Path
from typing import Iterator, Tuple

import pytest
import structlog

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from intent_client import ClientConfig, DetectIntentRequest
from tests.stubs import SessionsServicer, StubTransport, start_server


# ============================================================================
# Logging Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def configure_test_logging(caplog):
    """Configure logging for all tests."""
    caplog.set_level(logging.DEBUG)
    return caplog


@pytest.fixture
def restore_logging():
    """
    Undo configure_logging() after a test.

    configure_logging installs a structlog handler on the root logger and
    configures structlog globally; both are removed here.
    """
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def stub_config() -> ClientConfig:
    """Insecure development config pointing at a stub endpoint."""
    return ClientConfig(endpoint="stub:443", secure=False)


@pytest.fixture
def greeting_request() -> DetectIntentRequest:
    return DetectIntentRequest(
        project_id="p1", session_id="s1", text="Hi", language_code="en"
    )


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run in an empty directory with no INTENT_* variables set."""
    for name in (
        "INTENT_ENDPOINT", "INTENT_SECURE", "INTENT_ENVIRONMENT", "INTENT_TIMEOUT",
        "INTENT_PROCEDURE", "INTENT_ROOT_CERTS", "INTENT_CLIENT_KEY",
        "INTENT_CLIENT_CERT", "INTENT_ACCESS_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ============================================================================
# Transport Fixtures
# ============================================================================

@pytest.fixture
def stub_transport() -> StubTransport:
    """Transport echoing a greeting reply."""
    return StubTransport()


# ============================================================================
# gRPC Fixtures
# ============================================================================

@pytest.fixture
def sessions_server() -> Iterator[Tuple[SessionsServicer, int]]:
    """
    In-process Sessions server on a free local port.

    Usage:
        def test_call(sessions_server):
            servicer, port = sessions_server
            config = ClientConfig(endpoint=f"127.0.0.1:{port}")
    """
    servicer = SessionsServicer()
    server, port = start_server(servicer)
    yield servicer, port
    servicer.release.set()
    server.stop(grace=None)
