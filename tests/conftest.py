"""
Pytest configuration and shared fixtures for ActorGate testing.

Provides a transport whose session is mocked, retry policies without
real delays, and temporary configuration directories.
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import yaml

from actorgate.api.client import HTTPClient
from actorgate.api.retry import RetryPolicy

from .fixtures.http import TEST_BASE_URL
from .fixtures.sample_data import SAMPLE_CONFIGURATIONS


@pytest.fixture
def no_sleep():
    """Replacement for time.sleep recording the requested delays"""
    return Mock(return_value=None)


@pytest.fixture
def retry_policy():
    """Small retry policy with no jitter"""
    return RetryPolicy(max_attempts=3, base_delay_ms=10, max_delay_ms=1000, jitter_ms=0)


@pytest.fixture
def http_client(no_sleep, retry_policy):
    """HTTPClient whose session.request is mocked"""
    client = HTTPClient(
        base_url=TEST_BASE_URL,
        token="test-token",
        timeout_secs=30,
        retry_policy=retry_policy,
        sleep=no_sleep
    )
    with patch.object(client.session, 'request') as mock_request:
        client.mock_request = mock_request
        yield client
    client.close()


@pytest.fixture
def temp_config_dir():
    """Temporary directory with default, development and local config files"""
    with tempfile.TemporaryDirectory() as temp_dir:
        config_dir = Path(temp_dir) / "config"
        config_dir.mkdir()

        for name, file_name in (
            ("default", "default_config.yaml"),
            ("development", "development.yaml"),
            ("local", "local.yaml")
        ):
            with open(config_dir / file_name, "w") as f:
                yaml.dump(SAMPLE_CONFIGURATIONS[name], f)

        yield config_dir


@pytest.fixture
def clean_env(monkeypatch):
    """Remove ACTORGATE_* variables inherited from the environment"""
    for key in list(os.environ):
        if key.startswith("ACTORGATE_"):
            monkeypatch.delenv(key)
    return monkeypatch


def pytest_configure(config):
    """Configure custom pytest markers"""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# Test Collection Hooks
def pytest_collection_modifyitems(config, items):
    """Add markers based on file location"""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
