"""Listing source interfaces and shared result types."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..models import Listing, ListingSourceKind, Location


class SourceError(RuntimeError):
    """Raised when a source response cannot be turned into listings."""


@dataclass(slots=True)
class SearchPage:
    listings: list[Listing] = field(default_factory=list)
    has_next: bool = False

    @classmethod
    def empty(cls) -> "SearchPage":
        return cls()


class ListingSource:
    """Base interface for listing providers.

    ``resolve`` never raises for transport or parse failures; implementations
    log them and return :meth:`SearchPage.empty`.
    """

    kind: ListingSourceKind = ListingSourceKind.PRIMARY

    @property
    def enabled(self) -> bool:
        return True

    async def resolve(self, category: str, location: Location, page: int = 1) -> SearchPage:  # pragma: no cover - interface only
        raise NotImplementedError


__all__ = ["ListingSource", "SearchPage", "SourceError"]
