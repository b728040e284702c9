"""Tests for HTTP feed fetching and response caching."""

import base64
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError

from dashboard_feeds import USER_AGENT
from dashboard_feeds.errors import FetchError
from dashboard_feeds.feeds.cache import FeedCache, _key
from dashboard_feeds.feeds.fetcher import Fetcher

URL = "https://example.com/feed.xml"
BODY = b"<rss version='2.0'><channel><title>T</title></channel></rss>"


def make_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.MockTransport(handler), headers={"User-Agent": USER_AGENT}
    )


@pytest.fixture
def mock_redis():
    """Create a mock Redis client."""
    redis = AsyncMock(spec=Redis)
    redis.get = AsyncMock(return_value=None)
    redis.setex = AsyncMock()
    return redis


@pytest.mark.asyncio
async def test_fetch_returns_body():
    """A 200 response yields the raw body bytes."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=BODY)

    async with Fetcher(client=make_client(handler)) as fetcher:
        body = await fetcher.fetch(URL)

    assert body == BODY
    assert str(seen[0].url) == URL
    assert seen[0].headers["User-Agent"] == USER_AGENT


@pytest.mark.asyncio
async def test_non_success_status_is_fetch_error():
    """Non-2xx responses raise FetchError with the status code."""
    client = make_client(lambda request: httpx.Response(404))

    async with Fetcher(client=client) as fetcher:
        with pytest.raises(FetchError, match="HTTP 404") as exc_info:
            await fetcher.fetch(URL)

    assert exc_info.value.url == URL


@pytest.mark.asyncio
async def test_connection_failure_is_fetch_error():
    """Transport errors (connect, timeout) raise FetchError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    async with Fetcher(client=make_client(handler)) as fetcher:
        with pytest.raises(FetchError, match="timed out"):
            await fetcher.fetch(URL)


@pytest.mark.asyncio
async def test_owned_client_uses_timeout_and_user_agent():
    """Without an injected client, one is built with the app's defaults."""
    fetcher = Fetcher(timeout=3.5)
    try:
        assert fetcher._client.timeout.read == 3.5
        assert fetcher._client.headers["User-Agent"] == USER_AGENT
        assert fetcher._client.follow_redirects is True
    finally:
        await fetcher.aclose()


@pytest.mark.asyncio
async def test_cache_hit_skips_http(mock_redis):
    """A fresh cache entry is returned without an HTTP request."""
    mock_redis.get.return_value = base64.b64encode(BODY)
    handler = AsyncMock()
    cache = FeedCache(mock_redis)

    async with Fetcher(client=make_client(handler), cache=cache) as fetcher:
        body = await fetcher.fetch(URL)

    assert body == BODY
    handler.assert_not_called()
    mock_redis.get.assert_called_once_with(_key(URL))


@pytest.mark.asyncio
async def test_cache_miss_fetches_and_stores(mock_redis):
    """On a miss the body is fetched and cached with TTL + splay."""
    cache = FeedCache(mock_redis, ttl_seconds=900, splay_max=300)
    client = make_client(lambda request: httpx.Response(200, content=BODY))

    async with Fetcher(client=client, cache=cache) as fetcher:
        body = await fetcher.fetch(URL)

    assert body == BODY
    key, ttl, stored = mock_redis.setex.call_args[0]
    assert key == _key(URL)
    assert 900 <= ttl <= 1200
    assert base64.b64decode(stored) == BODY


@pytest.mark.asyncio
async def test_failed_fetch_is_not_cached(mock_redis):
    cache = FeedCache(mock_redis)
    client = make_client(lambda request: httpx.Response(500))

    async with Fetcher(client=client, cache=cache) as fetcher:
        with pytest.raises(FetchError):
            await fetcher.fetch(URL)

    mock_redis.setex.assert_not_called()


@pytest.mark.asyncio
async def test_cache_errors_fall_back_to_network(mock_redis):
    """Redis being down never fails the fetch."""
    mock_redis.get.side_effect = RedisConnectionError("refused")
    mock_redis.setex.side_effect = RedisConnectionError("refused")
    cache = FeedCache(mock_redis)
    client = make_client(lambda request: httpx.Response(200, content=BODY))

    async with Fetcher(client=client, cache=cache) as fetcher:
        assert await fetcher.fetch(URL) == BODY


@pytest.mark.asyncio
async def test_corrupt_cache_entry_is_a_miss(mock_redis):
    """A value that is not our base64 encoding falls back to the network."""
    mock_redis.get.return_value = b"!!!notbase64"
    cache = FeedCache(mock_redis)
    client = make_client(lambda request: httpx.Response(200, content=BODY))

    assert await cache.get(URL) is None
    async with Fetcher(client=client, cache=cache) as fetcher:
        assert await fetcher.fetch(URL) == BODY

    mock_redis.setex.assert_called_once()


@pytest.mark.asyncio
async def test_invalid_url_is_fetch_error():
    """URLs httpx refuses to build a request for still fail as FetchError."""
    client = make_client(lambda request: httpx.Response(200, content=BODY))

    async with Fetcher(client=client) as fetcher:
        with pytest.raises(FetchError, match="invalid URL"):
            await fetcher.fetch("http://exa mple.com/\x00")


def test_cache_key_is_stable_per_url():
    assert _key(URL) == _key(URL)
    assert _key(URL) != _key(URL + "?page=2")
    assert _key(URL).startswith("df:feed:")


def test_cache_from_url_builds_redis_client():
    with patch("dashboard_feeds.feeds.cache.Redis.from_url") as from_url:
        cache = FeedCache.from_url("redis://localhost:6379/1", ttl_seconds=60, splay_max=0)

    from_url.assert_called_once_with("redis://localhost:6379/1")
    assert cache.ttl_seconds == 60
    assert cache.splay_max == 0
