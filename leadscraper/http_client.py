"""HTTP utilities for fetching listing pages, API payloads and business websites."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Awaitable, Callable, Sequence

import httpx

from .config import ScraperConfig

LOGGER = logging.getLogger(__name__)

DEFAULT_USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/117.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_0) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/117.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/117.0.5938.92 Safari/537.36",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1",
)

_MAX_REDIRECTS = 5

SleepFn = Callable[[float], Awaitable[Any]]


class HttpFetchError(RuntimeError):
    """Raised when an HTTP request fails irrecoverably."""


class UserAgentRotator:
    """Round-robin pool of client identities shared by every caller."""

    def __init__(self, user_agents: Sequence[str] = DEFAULT_USER_AGENTS) -> None:
        if not user_agents:
            raise ValueError("At least one user agent is required")
        self._user_agents = tuple(user_agents)
        self._index = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._user_agents)

    def next(self) -> str:
        with self._lock:
            self._index = (self._index + 1) % len(self._user_agents)
            return self._user_agents[self._index]


class HttpExecutor:
    """Async HTTP client issuing requests with timeout, backoff and UA rotation."""

    def __init__(
        self,
        *,
        timeout: float = 15.0,
        max_retries: int = 3,
        initial_delay: float = 1.0,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        rotator: UserAgentRotator | None = None,
        sleep: SleepFn | None = None,
    ) -> None:
        self._timeout = timeout
        self._max_retries = max_retries
        self._initial_delay = initial_delay
        self._transport = transport
        self._client = client or self._build_client()
        self._owns_client = client is None
        self._rotator = rotator or UserAgentRotator()
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_config(cls, config: ScraperConfig, **kwargs: Any) -> "HttpExecutor":
        return cls(
            timeout=config.timeout.request_timeout,
            max_retries=config.retry.max_retries,
            initial_delay=config.retry.base_delay,
            **kwargs,
        )

    @property
    def max_retries(self) -> int:
        return self._max_retries

    def _build_client(self) -> httpx.AsyncClient:
        kwargs: dict[str, object] = {
            "timeout": self._timeout,
            "follow_redirects": True,
            "max_redirects": _MAX_REDIRECTS,
        }
        if self._transport:
            kwargs["transport"] = self._transport
        return httpx.AsyncClient(**kwargs)

    async def _send_once(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        headers.setdefault("User-Agent", self._rotator.next())
        response = await self._client.request(method, url, headers=headers, **kwargs)
        if not response.is_success:
            raise HttpFetchError(f"Unexpected status {response.status_code} for {url}")
        return response

    async def execute(
        self,
        method: str,
        url: str,
        *,
        max_retries: int | None = None,
        initial_delay: float | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, retrying failures with exponential backoff.

        ``max_retries`` retries follow the first attempt; attempt ``n`` (from 0)
        is followed by an ``initial_delay * 2 ** n`` second pause, where
        ``initial_delay`` defaults to the executor-wide value. The last failure
        is raised as :class:`HttpFetchError` once retries are exhausted.
        """

        retries = self._max_retries if max_retries is None else max(0, max_retries)
        if initial_delay is None:
            initial_delay = self._initial_delay
        attempt = 0
        while True:
            try:
                return await self._send_once(method, url, **kwargs)
            except (httpx.HTTPError, HttpFetchError) as exc:
                if attempt >= retries:
                    if isinstance(exc, HttpFetchError):
                        raise
                    raise HttpFetchError(f"{type(exc).__name__} for {url}: {exc}") from exc
                delay = initial_delay * (2 ** attempt)
                LOGGER.debug(
                    "Request %s %s failed (%s); retry %d/%d in %.2fs",
                    method,
                    url,
                    exc,
                    attempt + 1,
                    retries,
                    delay,
                )
                attempt += 1
                await self._sleep(delay)

    async def get_text(self, url: str, **kwargs: Any) -> str:
        response = await self.execute("GET", url, **kwargs)
        return response.text

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpExecutor":
        return self

    async def __aexit__(self, *_exc_info) -> None:
        await self.aclose()
