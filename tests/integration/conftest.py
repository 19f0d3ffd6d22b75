"""
pytest configuration for integration tests.

Integration tests run against an in-process gRPC server bound to a free
local port; no external services are needed.
"""

import logging

import pytest


def pytest_collection_modifyitems(config, items):
    """Mark every test under tests/integration as an integration test."""
    for item in items:
        if "integration" in item.nodeid.split("/"):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def quiet_grpc_logs():
    logging.getLogger("grpc").setLevel(logging.WARNING)
