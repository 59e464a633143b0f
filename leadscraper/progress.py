"""Run progress counters, throughput and ETA reporting."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Optional

UNKNOWN_ETA = "unknown"


def format_duration(value: timedelta) -> str:
    total = max(0, int(round(value.total_seconds())))
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


@dataclass(slots=True)
class ProgressTracker:
    total: int = 0
    completed: int = 0
    websites_fetched: int = 0
    emails_found: int = 0
    records_appended: int = 0
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    started_at: Optional[float] = None

    def start(self, total: int) -> None:
        self.total = total
        self.started_at = self.clock()

    def complete_task(self) -> None:
        self.completed += 1

    def record_batch(self, appended: int, with_email: int) -> None:
        self.records_appended += appended
        self.emails_found += with_email

    @property
    def remaining(self) -> int:
        return max(0, self.total - self.completed)

    def elapsed(self) -> float:
        if self.started_at is None:
            return 0.0
        return max(0.0, self.clock() - self.started_at)

    def throughput(self) -> float:
        """Completed tasks per second, with elapsed time floored at one second."""

        return self.completed / max(1.0, self.elapsed())

    def eta(self) -> Optional[timedelta]:
        rate = self.throughput()
        if rate <= 0:
            return None
        return timedelta(seconds=self.remaining / rate)

    def format_eta(self) -> str:
        eta = self.eta()
        if eta is None:
            return UNKNOWN_ETA
        return format_duration(eta)

    def snapshot(self) -> dict[str, int | float | str]:
        return {
            "tasks_total": self.total,
            "tasks_completed": self.completed,
            "websites_fetched": self.websites_fetched,
            "emails_found": self.emails_found,
            "records_appended": self.records_appended,
            "elapsed_seconds": round(self.elapsed(), 1),
            "eta": self.format_eta(),
        }

    def log_progress(self, logger: logging.Logger) -> None:
        logger.info(
            "Progress: %d/%d tasks, ETA %s",
            self.completed,
            self.total,
            self.format_eta(),
        )
        logger.info(
            "Websites fetched: %d | emails found: %d | rows appended: %d",
            self.websites_fetched,
            self.emails_found,
            self.records_appended,
        )
