"""Bounded-concurrency enrichment of listings into contact records."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from .dedupe import DedupeStore, make_dedupe_key
from .models import ContactRecord, Listing, Task
from .progress import ProgressTracker
from .shutdown import ShutdownCoordinator

LOGGER = logging.getLogger(__name__)

_STOP = object()


class EmailCrawler(Protocol):
    async def crawl(self, website: str | None) -> list[str]:  # pragma: no cover - protocol
        ...


@dataclass(slots=True)
class EnrichmentPolicy:
    skip_website_crawl: bool = False
    emit_placeholder_rows: bool = True


class EnrichmentScheduler:
    """Worker pool turning listings into records, at most ``concurrency`` at a time."""

    def __init__(
        self,
        *,
        store: DedupeStore,
        crawler: EmailCrawler,
        concurrency: int = 8,
        policy: EnrichmentPolicy | None = None,
        tracker: ProgressTracker | None = None,
        shutdown: ShutdownCoordinator | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._store = store
        self._crawler = crawler
        self._concurrency = concurrency
        self._policy = policy or EnrichmentPolicy()
        self._tracker = tracker
        self._shutdown = shutdown

    async def _find_emails(self, listing: Listing) -> list[str]:
        if listing.email:
            return [listing.email]
        if not listing.website or self._policy.skip_website_crawl:
            return []
        emails = await self._crawler.crawl(listing.website)
        if self._tracker is not None:
            self._tracker.websites_fetched += 1
        return emails

    async def enrich_listing(self, task: Task, listing: Listing) -> Optional[list[ContactRecord]]:
        """Process one listing; ``None`` means it was skipped."""

        if self._shutdown is not None and self._shutdown.requested:
            return None

        key = make_dedupe_key(listing.display_name, task.location)
        if not self._store.claim(key):
            return None

        try:
            emails = await self._find_emails(listing)
        except Exception:
            LOGGER.exception("Email lookup failed for %s (%s)", listing.display_name, task.describe())
            emails = []

        records = [ContactRecord.from_listing(listing, task, email) for email in emails]
        if not records and self._policy.emit_placeholder_rows:
            records.append(ContactRecord.from_listing(listing, task))

        self._store.add(key)
        return records

    async def _worker(
        self,
        task: Task,
        queue: asyncio.Queue,
        results: list[Optional[list[ContactRecord]]],
    ) -> None:
        while True:
            listing = await queue.get()
            try:
                if listing is _STOP:
                    return
                results.append(await self.enrich_listing(task, listing))
            finally:
                queue.task_done()

    async def run(self, task: Task, listings: Iterable[Listing]) -> list[ContactRecord]:
        """Enrich ``listings`` for ``task`` and return all produced records.

        Completion order across listings is not preserved.
        """

        pending = list(listings)
        if not pending:
            return []

        queue: asyncio.Queue = asyncio.Queue()
        for listing in pending:
            queue.put_nowait(listing)

        worker_count = min(self._concurrency, len(pending))
        for _ in range(worker_count):
            queue.put_nowait(_STOP)

        results: list[Optional[list[ContactRecord]]] = []
        workers = [
            asyncio.create_task(self._worker(task, queue, results), name=f"enrich-{index}")
            for index in range(worker_count)
        ]
        try:
            await asyncio.gather(*workers)
        finally:
            for worker in workers:
                if not worker.done():
                    worker.cancel()

        records: list[ContactRecord] = []
        for batch in results:
            if batch:
                records.extend(batch)
        return records
