"""Tests for token fetching with retry."""

from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock, Mock

import aiohttp
import pytest

from rest_relay.adapters.driven.cache.memory_cache import InMemoryTokenCache
from rest_relay.core.errors import InvalidTokenResponseError, TokenFetchError
from rest_relay.core.token_fetcher import TOKEN_RETRY_DELAY_SEC, TokenFetcher, parse_token
from rest_relay.ports.http import HttpResponseDto
from rest_relay.ports.observability import LOG_SOURCE
from rest_relay.ports.settings import SettingsPort

__all__ = []


def make_fetcher(settings: SettingsPort, http: Mock, host_logger: Mock | None = None) -> TokenFetcher:
    """Build a fetcher with a fresh in-memory cache."""
    return TokenFetcher(settings, http, InMemoryTokenCache(), logger=host_logger)


@pytest.mark.asyncio
async def test_fetch_token_returns_and_caches_first_valid_token(
    settings: SettingsPort, http: Mock, no_sleep: AsyncMock
) -> None:
    """A valid first response should be cached and returned without delay."""
    http.post.return_value = HttpResponseDto(status=200, body=b"valid-token")
    fetcher = make_fetcher(settings, http)

    token = await fetcher.fetch_token()

    assert token == "valid-token"
    assert fetcher.cache.get("testuser") == "valid-token"
    http.post.assert_awaited_once_with(
        settings.auth_token_url,
        json={"username": "testuser", "password": "testpass"},
    )
    no_sleep.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("attempts", [1, 3, 10])
async def test_fetch_token_gives_up_after_budget_on_network_errors(
    settings: SettingsPort, http: Mock, host_logger: Mock, no_sleep: AsyncMock, attempts: int
) -> None:
    """A permanently unreachable auth service should get exactly N POSTs."""
    settings = replace(settings, retry_attempts=attempts)
    error = aiohttp.ClientConnectionError("connection refused")
    http.post.side_effect = error
    fetcher = make_fetcher(settings, http, host_logger)

    with pytest.raises(TokenFetchError, match="Failed to fetch token after multiple attempts"):
        await fetcher.fetch_token()

    assert http.post.await_count == attempts
    assert no_sleep.await_count == attempts - 1
    assert all(call.args == (TOKEN_RETRY_DELAY_SEC,) for call in no_sleep.call_args_list)
    host_logger.error.assert_called_with("Error fetching token", error, LOG_SOURCE)
    assert fetcher.cache.get("testuser") is None


@pytest.mark.asyncio
async def test_fetch_token_retries_after_empty_body(
    settings: SettingsPort, http: Mock, host_logger: Mock, no_sleep: AsyncMock
) -> None:
    """An empty body should be logged as invalid and retried after a delay."""
    empty = HttpResponseDto(status=200, body=b"")
    http.post.side_effect = [empty, HttpResponseDto(status=200, body=b"second-token")]
    fetcher = make_fetcher(settings, http, host_logger)

    token = await fetcher.fetch_token()

    assert token == "second-token"
    assert http.post.await_count == 2
    no_sleep.assert_awaited_once_with(TOKEN_RETRY_DELAY_SEC)
    host_logger.error.assert_called_once_with("Invalid token response", empty, LOG_SOURCE)


@pytest.mark.asyncio
async def test_fetch_token_treats_error_status_as_invalid(
    settings: SettingsPort, http: Mock, no_sleep: AsyncMock
) -> None:
    """A non-2xx answer must never be cached, even with a body."""
    http.post.side_effect = [
        HttpResponseDto(status=503, body=b"Service Unavailable"),
        HttpResponseDto(status=200, body=b"good-token"),
    ]
    fetcher = make_fetcher(settings, http)

    assert await fetcher.fetch_token() == "good-token"
    assert http.post.await_count == 2


@pytest.mark.asyncio
async def test_fetch_token_propagates_unexpected_errors(
    settings: SettingsPort, http: Mock, no_sleep: AsyncMock
) -> None:
    """Programming errors should not be retried."""
    http.post.side_effect = RuntimeError("Session not initialized")
    fetcher = make_fetcher(settings, http)

    with pytest.raises(RuntimeError, match="Session not initialized"):
        await fetcher.fetch_token()

    assert http.post.await_count == 1


@pytest.mark.asyncio
async def test_fetch_token_overwrites_cached_token(
    settings: SettingsPort, http: Mock, no_sleep: AsyncMock
) -> None:
    """Each successful fetch should replace the previous token."""
    http.post.side_effect = [
        HttpResponseDto(status=200, body=b"first"),
        HttpResponseDto(status=200, body=b"second"),
    ]
    fetcher = make_fetcher(settings, http)

    await fetcher.fetch_token()
    await fetcher.fetch_token()

    assert fetcher.cache.get("testuser") == "second"


@pytest.mark.asyncio
async def test_request_token_raises_on_empty_body(settings: SettingsPort, http: Mock) -> None:
    """A single request with an empty body should raise, not cache."""
    http.post.return_value = HttpResponseDto(status=200, body=b"   ")
    fetcher = make_fetcher(settings, http)

    with pytest.raises(InvalidTokenResponseError) as exc_info:
        await fetcher.request_token()

    assert exc_info.value.detail.status == 200
    assert len(fetcher.cache) == 0


@pytest.mark.parametrize(
    ("response", "expected"),
    [
        (HttpResponseDto(status=200, body=b"abc.def.ghi"), "abc.def.ghi"),
        (HttpResponseDto(status=200, body=b"abc\n"), "abc"),
        (HttpResponseDto(status=200, body=b'"quoted-token"'), "quoted-token"),
        (HttpResponseDto(status=201, body=b"created"), "created"),
        (HttpResponseDto(status=200, body=b""), None),
        (HttpResponseDto(status=200, body=b'""'), None),
        (HttpResponseDto(status=401, body=b"nope"), None),
    ],
)
def test_parse_token(response: HttpResponseDto, expected: str | None) -> None:
    """parse_token should return the raw token or None."""
    assert parse_token(response) == expected


def test_fetcher_keeps_falsy_host_logger(settings: SettingsPort, http: Mock) -> None:
    """A host logger that evaluates false is still the one used."""
    host_logger = MagicMock()
    host_logger.__bool__.return_value = False

    fetcher = make_fetcher(settings, http, host_logger)

    assert fetcher.logger is host_logger
