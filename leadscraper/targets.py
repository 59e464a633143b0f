"""Default search targets and task generation."""

from __future__ import annotations

import json
import logging
from typing import Iterable, Mapping, Sequence

from .models import Location, Task

LOGGER = logging.getLogger(__name__)

# Major population centres per state, not every town.
DEFAULT_STATE_CITY_MAP: dict[str, list[str]] = {
    "Alabama": ["Birmingham", "Montgomery", "Mobile"],
    "Alaska": ["Anchorage", "Fairbanks"],
    "Arizona": ["Phoenix", "Tucson", "Mesa"],
    "Arkansas": ["Little Rock", "Fayetteville"],
    "California": ["Los Angeles", "San Francisco", "San Diego", "Sacramento", "San Jose"],
    "Colorado": ["Denver", "Colorado Springs", "Aurora"],
    "Connecticut": ["Bridgeport", "New Haven", "Hartford"],
    "Delaware": ["Wilmington", "Dover"],
    "Florida": ["Miami", "Orlando", "Tampa", "Jacksonville"],
    "Georgia": ["Atlanta", "Savannah", "Augusta"],
    "Hawaii": ["Honolulu"],
    "Idaho": ["Boise", "Idaho Falls"],
    "Illinois": ["Chicago", "Aurora", "Naperville"],
    "Indiana": ["Indianapolis", "Fort Wayne"],
    "Iowa": ["Des Moines", "Cedar Rapids"],
    "Kansas": ["Wichita", "Overland Park"],
    "Kentucky": ["Louisville", "Lexington"],
    "Louisiana": ["New Orleans", "Baton Rouge"],
    "Maine": ["Portland"],
    "Maryland": ["Baltimore", "Annapolis"],
    "Massachusetts": ["Boston", "Worcester"],
    "Michigan": ["Detroit", "Grand Rapids", "Ann Arbor"],
    "Minnesota": ["Minneapolis", "Saint Paul"],
    "Mississippi": ["Jackson"],
    "Missouri": ["St. Louis", "Kansas City"],
    "Montana": ["Billings"],
    "Nebraska": ["Omaha", "Lincoln"],
    "Nevada": ["Las Vegas", "Reno"],
    "New Hampshire": ["Manchester"],
    "New Jersey": ["Newark", "Jersey City"],
    "New Mexico": ["Albuquerque", "Santa Fe"],
    "New York": ["New York City", "Buffalo", "Rochester"],
    "North Carolina": ["Charlotte", "Raleigh", "Durham"],
    "North Dakota": ["Fargo"],
    "Ohio": ["Columbus", "Cleveland", "Cincinnati"],
    "Oklahoma": ["Oklahoma City", "Tulsa"],
    "Oregon": ["Portland", "Eugene"],
    "Pennsylvania": ["Philadelphia", "Pittsburgh", "Harrisburg"],
    "Rhode Island": ["Providence"],
    "South Carolina": ["Charleston", "Columbia"],
    "South Dakota": ["Sioux Falls"],
    "Tennessee": ["Nashville", "Memphis", "Knoxville"],
    "Texas": ["Houston", "Dallas", "Austin", "San Antonio"],
    "Utah": ["Salt Lake City", "Provo"],
    "Vermont": ["Burlington"],
    "Virginia": ["Richmond", "Virginia Beach"],
    "Washington": ["Seattle", "Spokane"],
    "West Virginia": ["Charleston"],
    "Wisconsin": ["Milwaukee", "Madison"],
    "Wyoming": ["Cheyenne"],
}

DEFAULT_CATEGORIES: tuple[str, ...] = (
    "restaurants",
    "coffee shops",
    "bakeries",
    "hair salons",
    "barbershops",
    "dentist offices",
    "doctors clinics",
    "pharmacies",
    "veterinary clinics",
    "pet shops",
    "shoe stores",
    "auto repair shops",
    "plumbers",
    "electricians",
    "dry cleaners",
    "florists",
    "bookstores",
    "jewelry stores",
    "lawyers",
    "accountants",
)


def parse_state_list(raw_value: str | None) -> dict[str, list[str]] | None:
    """Parse a ``{"State": ["City", ...]}`` JSON override.

    Invalid input is logged and ignored so the built-in table stays in effect.
    """

    if not raw_value:
        return None
    try:
        payload = json.loads(raw_value)
    except json.JSONDecodeError as exc:
        LOGGER.warning("STATE_LIST is not valid JSON (%s); using defaults", exc)
        return None

    if not isinstance(payload, dict):
        LOGGER.warning("STATE_LIST must be a JSON object; using defaults")
        return None

    parsed: dict[str, list[str]] = {}
    for state, cities in payload.items():
        if not isinstance(state, str) or not state.strip() or not isinstance(cities, list):
            LOGGER.warning("Ignoring malformed STATE_LIST entry %r", state)
            continue
        names = [city.strip() for city in cities if isinstance(city, str) and city.strip()]
        if names:
            parsed[state.strip()] = names
    return parsed or None


def iter_locations(state_city_map: Mapping[str, Iterable[str]]) -> Iterable[Location]:
    for state, cities in state_city_map.items():
        for city in cities:
            yield Location(city=city, region=state)


def build_tasks(
    state_city_map: Mapping[str, Iterable[str]] | None = None,
    categories: Sequence[str] | None = None,
) -> list[Task]:
    """Return every (location, category) task in generation order."""

    state_city_map = state_city_map or DEFAULT_STATE_CITY_MAP
    categories = categories or DEFAULT_CATEGORIES
    return [
        Task(location=location, category=category)
        for location in iter_locations(state_city_map)
        for category in categories
    ]
