"""YellowPages search results as the primary listing source."""

from __future__ import annotations

import logging
from urllib.parse import quote, urlencode

from bs4 import BeautifulSoup, Tag

from ..http_client import HttpExecutor, HttpFetchError
from ..models import Listing, ListingSourceKind, Location
from . import ListingSource, SearchPage, SourceError

LOGGER = logging.getLogger(__name__)

YELLOWPAGES_SEARCH_URL = "https://www.yellowpages.com/search"
_REDIRECT_PREFIX = "/biz_redirect?"


def build_search_url(category: str, location: Location, page: int = 1) -> str:
    query = urlencode(
        {
            "search_terms": category,
            "geo_location_terms": location.geo,
            "page": page,
        },
        quote_via=quote,
    )
    return f"{YELLOWPAGES_SEARCH_URL}?{query}"


def _text(node: Tag | None) -> str:
    if node is None:
        return ""
    return node.get_text(strip=True)


def _extract_website(row: Tag) -> str:
    link = row.select_one("a.track-visit-website")
    if link is None:
        return ""
    website = (link.get("href") or "").strip()
    if website.startswith(_REDIRECT_PREFIX):
        website = (link.get("data-visit") or website).strip()
    return website


def parse_search_results(html: str) -> SearchPage:
    """Parse a YellowPages result page into listings and a next-page flag."""

    if not isinstance(html, str):
        raise SourceError("Search response is not text")
    soup = BeautifulSoup(html, "html.parser")

    listings: list[Listing] = []
    for row in soup.select(".result"):
        name = _text(row.select_one(".business-name span")) or _text(row.select_one(".business-name"))
        if not name:
            continue
        phone = _text(row.select_one(".phones"))
        website = _extract_website(row)
        listings.append(
            Listing(
                name=name,
                phone=phone or None,
                website=website or None,
                source=ListingSourceKind.PRIMARY,
            )
        )

    has_next = soup.select_one(".pagination a.next") is not None
    return SearchPage(listings=listings, has_next=has_next)


class YellowPagesSource(ListingSource):
    """Scrape YellowPages, optionally through a fetch proxy to reduce blocking."""

    kind = ListingSourceKind.PRIMARY

    def __init__(
        self,
        executor: HttpExecutor,
        *,
        proxy_template: str | None = None,
        use_proxy: bool = False,
    ) -> None:
        self._executor = executor
        self._proxy_template = proxy_template
        self._use_proxy = bool(use_proxy and proxy_template)

    def request_url(self, category: str, location: Location, page: int = 1) -> str:
        target = build_search_url(category, location, page)
        if not self._use_proxy:
            return target
        return self._proxy_template.format(url=quote(target, safe=""))

    async def resolve(self, category: str, location: Location, page: int = 1) -> SearchPage:
        url = self.request_url(category, location, page)
        try:
            html = await self._executor.get_text(url)
            result = parse_search_results(html)
        except (HttpFetchError, SourceError) as exc:
            LOGGER.warning(
                "YellowPages lookup failed for %s in %s (page %d): %s",
                category,
                location.geo,
                page,
                exc,
            )
            return SearchPage.empty()
        LOGGER.debug(
            "YellowPages returned %d listings for %s in %s (page %d, next=%s)",
            len(result.listings),
            category,
            location.geo,
            page,
            result.has_next,
        )
        return result
