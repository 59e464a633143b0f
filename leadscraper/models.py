"""Data models shared by the listing sources, enrichment and output stages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ListingSourceKind(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"


@dataclass(frozen=True, slots=True)
class Location:
    city: str
    region: str

    @property
    def geo(self) -> str:
        return f"{self.city}, {self.region}"


@dataclass(frozen=True, slots=True)
class Task:
    """One (location, category) search, consumed once by the pipeline."""

    location: Location
    category: str

    def describe(self) -> str:
        return f"{self.category} in {self.location.geo}"


@dataclass(slots=True)
class Listing:
    """Canonical business candidate produced by every listing source.

    ``email`` is only populated when the originating source already delivered
    a validated address; the enrichment stage then skips the website crawl.
    """

    name: str
    phone: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    source: ListingSourceKind = ListingSourceKind.PRIMARY

    @property
    def display_name(self) -> str:
        return (self.name or "").strip() or "Unknown"


@dataclass(frozen=True, slots=True)
class ContactRecord:
    name: str
    phone: str
    website: str
    email: str
    category: str
    city: str
    state: str

    @classmethod
    def from_listing(cls, listing: Listing, task: Task, email: str = "") -> "ContactRecord":
        return cls(
            name=listing.display_name,
            phone=(listing.phone or "").strip(),
            website=(listing.website or "").strip(),
            email=email,
            category=task.category,
            city=task.location.city,
            state=task.location.region,
        )

    @property
    def has_email(self) -> bool:
        return bool(self.email)

    def as_row(self, include_phone: bool = True) -> list[str]:
        row = [self.name, self.phone, self.website, self.email, self.category, self.city, self.state]
        if not include_phone:
            del row[1]
        return row
