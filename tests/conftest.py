"""
Pytest configuration and fixtures
"""

import pytest

from rpc_fetch import ClientConfig


@pytest.fixture
def test_config():
    """Create test configuration fixture"""
    return ClientConfig(
        base_url="http://127.0.0.1:9",
        timeout_ms=1000,
        headers={"X-Client": "tests"},
    )


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Keep RPC_FETCH_* settings from the developer's shell out of tests"""
    for name in ("RPC_FETCH_BASE_URL", "RPC_FETCH_TIMEOUT_MS", "RPC_FETCH_DEBUG"):
        monkeypatch.delenv(name, raising=False)
