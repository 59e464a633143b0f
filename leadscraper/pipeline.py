"""Pipeline orchestration: tasks -> listings -> enrichment -> CSV output."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Sequence

from .config import ScraperConfig
from .dedupe import DedupeStore, PeriodicFlusher
from .enrichment import EnrichmentPolicy, EnrichmentScheduler
from .http_client import HttpExecutor
from .models import Listing, Task
from .output import CsvOutputSink
from .progress import ProgressTracker
from .shutdown import ShutdownCoordinator
from .site_crawler import SiteCrawler
from .sources import ListingSource
from .sources.serper import SerperPlacesSource
from .sources.yellowpages import YellowPagesSource

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RunSummary:
    stats: dict[str, Any] = field(default_factory=dict)
    interrupted: bool = False


class Pipeline:
    """Drive every task through source resolution, enrichment and output."""

    def __init__(
        self,
        *,
        primary: ListingSource,
        fallback: Optional[ListingSource],
        scheduler: EnrichmentScheduler,
        store: DedupeStore,
        sink: CsvOutputSink,
        tracker: ProgressTracker,
        shutdown: ShutdownCoordinator,
        max_pages: int = 2,
        per_request_delay: float = 0.15,
        page_delay: float = 0.12,
        task_cooldown: float = 0.12,
        flush_interval: float = 60.0,
        executor: Optional[HttpExecutor] = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        self.primary = primary
        self.fallback = fallback
        self.scheduler = scheduler
        self.store = store
        self.sink = sink
        self.tracker = tracker
        self.shutdown = shutdown
        self.max_pages = max(1, max_pages)
        self.per_request_delay = per_request_delay
        self.page_delay = page_delay
        self.task_cooldown = task_cooldown
        self._flusher = PeriodicFlusher(store, flush_interval)
        self._executor = executor
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_config(
        cls,
        config: ScraperConfig,
        *,
        executor: Optional[HttpExecutor] = None,
        shutdown: Optional[ShutdownCoordinator] = None,
    ) -> "Pipeline":
        executor = executor or HttpExecutor.from_config(config)
        shutdown = shutdown or ShutdownCoordinator()
        tracker = ProgressTracker()
        store = DedupeStore(config.dedupe_path)
        crawler = SiteCrawler(
            executor,
            path_delay=config.rate_limit.path_delay,
            initial_delay=config.retry.site_base_delay,
        )
        scheduler = EnrichmentScheduler(
            store=store,
            crawler=crawler,
            concurrency=config.rate_limit.site_concurrency,
            policy=EnrichmentPolicy(
                skip_website_crawl=config.skip_website_crawl,
                emit_placeholder_rows=config.emit_placeholder_rows,
            ),
            tracker=tracker,
            shutdown=shutdown,
        )
        return cls(
            primary=YellowPagesSource(
                executor,
                proxy_template=config.fetch_proxy_template,
                use_proxy=config.has_api_key,
            ),
            fallback=SerperPlacesSource(executor, config.serper_api_key),
            scheduler=scheduler,
            store=store,
            sink=CsvOutputSink(config.output_path, include_phone=config.include_phone),
            tracker=tracker,
            shutdown=shutdown,
            max_pages=config.max_pages,
            per_request_delay=config.rate_limit.per_request_delay,
            page_delay=config.rate_limit.page_delay,
            task_cooldown=config.rate_limit.task_cooldown,
            flush_interval=config.dedupe_flush_interval,
            executor=executor,
        )

    async def _pause(self, seconds: float) -> None:
        if seconds > 0:
            await self._sleep(seconds)

    async def resolve_listings(self, task: Task) -> list[Listing]:
        """Collect primary results across pages, falling back when there are none."""

        listings: list[Listing] = []
        for page in range(1, self.max_pages + 1):
            if self.shutdown.requested:
                break
            result = await self.primary.resolve(task.category, task.location, page)
            listings.extend(result.listings)
            if not result.has_next:
                break
            await self._pause(self.page_delay)

        if not listings and self.fallback is not None and self.fallback.enabled and not self.shutdown.requested:
            LOGGER.info(
                "No %s listings for %s; querying %s source",
                self.primary.kind.value,
                task.describe(),
                self.fallback.kind.value,
            )
            result = await self.fallback.resolve(task.category, task.location, 1)
            listings.extend(result.listings)
        return listings

    async def process_task(self, task: Task) -> int:
        """Run one task end to end and return the number of records written."""

        LOGGER.info("[Task] %s", task.describe())
        await self._pause(self.per_request_delay)

        listings = await self.resolve_listings(task)
        LOGGER.info("Candidate places: %d", len(listings))

        records = await self.scheduler.run(task, listings)
        appended = self.sink.append_records(records)
        with_email = sum(1 for record in records if record.has_email)
        self.tracker.record_batch(appended, with_email)
        if appended:
            LOGGER.info("Appended %d rows (emails found: %d)", appended, with_email)
        else:
            LOGGER.info("No new rows for this batch")
        return appended

    async def run(self, tasks: Sequence[Task]) -> RunSummary:
        self.sink.ensure_header()
        self.store.load()
        self.tracker.start(len(tasks))
        self._flusher.start()

        try:
            for index, task in enumerate(tasks):
                if self.shutdown.requested:
                    break
                await self.process_task(task)
                self.tracker.complete_task()
                self.tracker.log_progress(LOGGER)

                next_task = tasks[index + 1] if index + 1 < len(tasks) else None
                if next_task is None or next_task.location != task.location:
                    self.store.persist()
                await self._pause(self.task_cooldown)
        finally:
            await self._flusher.stop()
            self.store.persist()
            summary = RunSummary(stats=self.tracker.snapshot(), interrupted=self.shutdown.requested)
            LOGGER.info("Scrape finished. Final stats: %s", summary.stats)
        return summary

    async def aclose(self) -> None:
        if self._executor is not None:
            await self._executor.aclose()
