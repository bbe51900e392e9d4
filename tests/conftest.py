"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Iterator
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from ec2kit.config.settings import Settings, get_settings
from ec2kit.utils.throttling import reset_global_throttler

AWS_ENV_VARS = (
    "AWS_REGION",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_ENDPOINT_URL",
    "CHECK_INTERVAL_SECONDS",
    "MAX_CONCURRENT_AWS_CALLS",
    "AWS_API_RATE_LIMIT",
    "AWS_API_MAX_TOKENS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test without ambient AWS configuration or cached singletons."""
    for name in AWS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    reset_global_throttler()
    yield
    get_settings.cache_clear()
    reset_global_throttler()


@pytest.fixture
def sample_instance_id() -> str:
    """Provide a sample EC2 instance ID for testing.

    Returns:
        A valid-format EC2 instance ID.
    """
    return "i-1234567890abcdef0"


@pytest.fixture
def sample_region() -> str:
    """Provide a sample AWS region for testing.

    Returns:
        AWS region name.
    """
    return "us-east-1"


@pytest.fixture
def settings() -> Settings:
    """Provide settings with a short poll interval."""
    return Settings(_env_file=None, check_interval_seconds=0.01)


@pytest.fixture
def mock_client(sample_region: str) -> Mock:
    """Fixture providing a mocked AWSClientWrapper."""
    client = Mock()
    client.region = sample_region
    client.call = AsyncMock()
    return client


@pytest.fixture
def make_instance_data() -> Callable[..., dict[str, Any]]:
    """Provide a builder for raw DescribeInstances instance entries."""

    def build(
        instance_id: str = "i-1234567890abcdef0",
        state: str = "running",
        instance_type: str = "t3.micro",
        **extra: Any,
    ) -> dict[str, Any]:
        return {
            "InstanceId": instance_id,
            "InstanceType": instance_type,
            "State": {"Name": state},
            **extra,
        }

    return build
