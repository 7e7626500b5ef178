"""Shared fixtures for relay plugin tests."""

from collections.abc import Iterator
from unittest.mock import AsyncMock, Mock, patch

import pytest

from rest_relay.adapters.driven.http.client import HttpClient
from rest_relay.ports.http import HttpResponseDto
from rest_relay.ports.settings import SettingsPort

AUTH_HEALTH_URL = "http://auth-health"
AUTH_TOKEN_URL = "http://auth-token"
DESTINATION_URL = "http://destination"


@pytest.fixture
def settings() -> SettingsPort:
    """Settings with a budget of 10 attempts."""
    return SettingsPort(
        retry_attempts=10,
        max_sockets=10,
        auth_health_url=AUTH_HEALTH_URL,
        auth_token_url=AUTH_TOKEN_URL,
        destination_transport_url=DESTINATION_URL,
        auth_username="testuser",
        auth_password="testpass",
    )


@pytest.fixture
def http() -> Mock:
    """HTTP client double: healthy auth service, token 'default-token'."""
    client = Mock(spec=HttpClient)
    client.open = AsyncMock()
    client.close = AsyncMock()
    client.get = AsyncMock(return_value=HttpResponseDto(status=200))
    client.post = AsyncMock(return_value=HttpResponseDto(status=200, body=b"default-token"))
    return client


@pytest.fixture
def no_sleep() -> Iterator[AsyncMock]:
    """Replace backoff sleeps with an instant mock."""
    mock_sleep = AsyncMock()
    with patch("rest_relay.core.retry.asyncio.sleep", mock_sleep):
        yield mock_sleep


@pytest.fixture
def host_logger() -> Mock:
    """Host logger double."""
    return Mock(spec=["log", "error"])


@pytest.fixture
def tracer() -> Mock:
    """Host tracer double; each start_* call returns a fresh span mock."""
    tracer = Mock(spec=["start_transaction", "start_span"])
    tracer.start_transaction.side_effect = lambda name: Mock(spec=["end"])
    tracer.start_span.side_effect = lambda name: Mock(spec=["end"])
    return tracer
