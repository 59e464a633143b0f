"""Probe a business website's common pages for contact emails."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence
from urllib.parse import urljoin, urlsplit

import httpx

from .extractor import extract_emails
from .http_client import HttpExecutor, HttpFetchError

LOGGER = logging.getLogger(__name__)

CONTACT_PATHS: tuple[str, ...] = (
    "/",
    "/contact",
    "/contact-us",
    "/about",
    "/about-us",
    "/company",
    "/info",
)


def normalize_url(raw: str | None) -> Optional[str]:
    """Trim ``raw`` and add an ``http://`` scheme when none is present."""

    if not raw:
        return None
    cleaned = raw.strip()
    if not cleaned:
        return None
    if not cleaned.lower().startswith(("http://", "https://")):
        cleaned = "http://" + cleaned
    return cleaned


def _resolve(base_url: str, path: str) -> Optional[str]:
    try:
        resolved = urljoin(base_url, path)
        parts = urlsplit(resolved)
    except ValueError:
        return None
    if parts.scheme not in ("http", "https") or not parts.hostname:
        return None
    return resolved


class SiteCrawler:
    """Fetch candidate contact pages until one of them yields emails."""

    def __init__(
        self,
        executor: HttpExecutor,
        *,
        paths: Sequence[str] = CONTACT_PATHS,
        path_delay: float = 0.12,
        max_retries: int | None = None,
        initial_delay: float = 0.8,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        self._executor = executor
        self._paths = tuple(paths)
        self._path_delay = path_delay
        self._max_retries = max_retries
        self._initial_delay = initial_delay
        self._sleep = sleep or asyncio.sleep

    async def _fetch(self, url: str) -> Optional[str]:
        try:
            return await self._executor.get_text(
                url,
                max_retries=self._max_retries,
                initial_delay=self._initial_delay,
            )
        except (HttpFetchError, httpx.InvalidURL) as exc:
            LOGGER.debug("Skipping %s: %s", url, exc)
            return None

    async def crawl(self, website: str | None) -> list[str]:
        """Return the emails of the first path that has any, else ``[]``."""

        base_url = normalize_url(website)
        if not base_url:
            return []

        tried: set[str] = set()
        for path in self._paths:
            url = _resolve(base_url, path)
            if url is None or url in tried:
                continue
            tried.add(url)

            html = await self._fetch(url)
            if html is None:
                continue
            emails = extract_emails(html)
            if emails:
                LOGGER.debug("Found %d emails at %s", len(emails), url)
                return sorted(emails)
            if self._path_delay:
                await self._sleep(self._path_delay)
        return []
