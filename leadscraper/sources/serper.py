"""Serper Places API as the credentialed fallback listing source."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..extractor import is_valid_email
from ..http_client import HttpExecutor, HttpFetchError
from ..models import Listing, ListingSourceKind, Location
from . import ListingSource, SearchPage, SourceError

LOGGER = logging.getLogger(__name__)

SERPER_PLACES_URL = "https://google.serper.dev/places"
_RESULTS_PER_PAGE = 30


def _first_str(place: Mapping[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = place.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def build_payload(category: str, location: Location, page: int = 1) -> list[dict[str, Any]]:
    return [
        {
            "q": f"{category} in {location.city}",
            "location": f"{location.city}, {location.region}, United States",
            "num": _RESULTS_PER_PAGE,
            "page": page,
        }
    ]


def place_to_listing(place: Mapping[str, Any]) -> Listing:
    """Map one Serper place object onto the canonical listing shape."""

    email = _first_str(place, "email")
    if email and not is_valid_email(email):
        email = None
    return Listing(
        name=_first_str(place, "title", "name") or "",
        phone=_first_str(place, "phoneNumber", "phone"),
        website=_first_str(place, "website", "url"),
        email=email.lower() if email else None,
        source=ListingSourceKind.FALLBACK,
    )


def parse_places(payload: Any) -> list[Listing]:
    if not isinstance(payload, list) or not payload or not isinstance(payload[0], Mapping):
        raise SourceError("Unexpected Serper response shape")
    places = payload[0].get("places") or []
    if not isinstance(places, list):
        raise SourceError("Serper 'places' is not a list")
    return [place_to_listing(place) for place in places if isinstance(place, Mapping)]


class SerperPlacesSource(ListingSource):
    kind = ListingSourceKind.FALLBACK

    def __init__(self, executor: HttpExecutor, api_key: str | None) -> None:
        self._executor = executor
        self._api_key = api_key

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    async def resolve(self, category: str, location: Location, page: int = 1) -> SearchPage:
        if not self.enabled:
            return SearchPage.empty()

        try:
            response = await self._executor.execute(
                "POST",
                SERPER_PLACES_URL,
                json=build_payload(category, location, page),
                headers={"X-API-KEY": self._api_key, "Content-Type": "application/json"},
            )
            listings = parse_places(response.json())
        except (HttpFetchError, SourceError, ValueError) as exc:
            LOGGER.warning("Serper lookup failed for %s in %s: %s", category, location.geo, exc)
            return SearchPage.empty()

        LOGGER.debug("Serper returned %d places for %s in %s", len(listings), category, location.geo)
        return SearchPage(listings=listings, has_next=False)
