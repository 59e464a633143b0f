from __future__ import annotations

import asyncio
import hashlib
import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from .models import Location

LOGGER = logging.getLogger(__name__)


def make_dedupe_key(name: str, location: Location) -> str:
    """Stable digest identifying a business by name and city/state."""

    cleaned = (name or "").strip() or "Unknown"
    core = f"{cleaned}|{location.city}|{location.region}"
    return hashlib.md5(core.encode("utf-8")).hexdigest()


class DedupeStore:
    """Persists processed business keys so reruns skip them.

    Keys move through two states: *claimed* while a listing is being enriched
    and *seen* once it has been processed. Only seen keys are written to disk.
    """

    def __init__(self, path: Path, keys: Iterable[str] = ()) -> None:
        self._path = Path(path)
        self._seen: set[str] = set(keys)
        self._claimed: set[str] = set()

    @property
    def path(self) -> Path:
        return self._path

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, key: object) -> bool:
        return key in self._seen

    def keys(self) -> frozenset[str]:
        return frozenset(self._seen)

    def has(self, key: str) -> bool:
        return key in self._seen

    def add(self, key: str) -> None:
        self._claimed.discard(key)
        self._seen.add(key)

    def claim(self, key: str) -> bool:
        """Atomically reserve ``key`` for processing.

        Returns ``False`` when the key was already processed or is being
        processed by another unit. Must not await between check and insert.
        """

        if key in self._seen or key in self._claimed:
            return False
        self._claimed.add(key)
        return True

    def load(self) -> int:
        """Replace the in-memory set with the keys stored on disk."""

        self._seen = set()
        if not self._path.exists():
            return 0
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            LOGGER.warning("Could not load dedupe file %s: %s", self._path, exc)
            return 0

        if not isinstance(payload, list):
            LOGGER.warning("Dedupe file %s does not contain a list; starting empty", self._path)
            return 0

        self._seen = {item for item in payload if isinstance(item, str)}
        LOGGER.info("Loaded %d dedupe keys from %s", len(self._seen), self._path)
        return len(self._seen)

    def persist(self) -> bool:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(sorted(self._seen)), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as exc:
            LOGGER.warning("Could not persist dedupe file %s: %s", self._path, exc)
            return False
        return True


class PeriodicFlusher:
    """Background task persisting a :class:`DedupeStore` on a fixed interval."""

    def __init__(self, store: DedupeStore, interval: float) -> None:
        self._store = store
        self._interval = interval
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self._store.persist()

    def start(self) -> None:
        if self._interval <= 0 or self.running:
            return
        self._task = asyncio.create_task(self._run(), name="dedupe-flusher")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
