"""HTTP retrieval of raw feed bodies."""

import logging

import httpx

from dashboard_feeds import USER_AGENT
from dashboard_feeds.errors import FetchError

from .cache import FeedCache

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class Fetcher:
    """Fetches feed URLs over one shared httpx.AsyncClient.

    The client is safe to share between concurrent tasks on one event loop;
    each ``fetch`` call is otherwise independent. No retries: a single
    failure is final for that call.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        cache: FeedCache | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the fetcher.

        Args:
            client: Client to use; one is created (and owned) when omitted
            cache: Optional response cache consulted before each request
            timeout: Per-request timeout in seconds for an owned client
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )
        self._cache = cache

    async def fetch(self, url: str) -> bytes:
        """Fetch the body of ``url``, from cache when a fresh copy exists.

        Raises:
            FetchError: On connection/timeout failure, non-2xx status, or
                body read failure
        """
        if self._cache is not None:
            cached = await self._cache.get(url)
            if cached is not None:
                logger.debug("Cache hit for %s", url)
                return cached

        try:
            response = await self._client.get(url)
            response.raise_for_status()
            body = response.content
        except httpx.HTTPStatusError as exc:
            raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FetchError(url, str(exc) or type(exc).__name__) from exc
        except httpx.InvalidURL as exc:
            raise FetchError(url, f"invalid URL: {exc}") from exc

        if self._cache is not None:
            await self._cache.set(url, body)
        return body

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
        if self._cache is not None:
            await self._cache.aclose()

    async def __aenter__(self) -> "Fetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
