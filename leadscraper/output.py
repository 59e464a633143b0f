"""Append-only CSV output for contact records."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Iterable, Sequence

from .models import ContactRecord

LOGGER = logging.getLogger(__name__)

FULL_HEADER: tuple[str, ...] = ("name", "phone", "website", "email", "category", "city", "state")
REDUCED_HEADER: tuple[str, ...] = tuple(column for column in FULL_HEADER if column != "phone")


class OutputSinkError(RuntimeError):
    """Raised when records cannot be written to the output file."""


def _render(rows: Iterable[Sequence[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    # QUOTE_MINIMAL leaves a bare "\r" unquoted under a "\n" terminator.
    quote_all = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        if any("\r" in field for field in row):
            quote_all.writerow(row)
        else:
            writer.writerow(row)
    return buffer.getvalue()


class CsvOutputSink:
    def __init__(self, path: Path, *, include_phone: bool = True) -> None:
        self._path = Path(path)
        self._include_phone = include_phone

    @property
    def path(self) -> Path:
        return self._path

    @property
    def header(self) -> tuple[str, ...]:
        return FULL_HEADER if self._include_phone else REDUCED_HEADER

    def ensure_header(self) -> bool:
        """Write the header when the file is missing or empty; return whether it did."""

        try:
            if self._path.exists() and self._path.stat().st_size > 0:
                return False
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("w", encoding="utf-8", newline="") as handle:
                handle.write(_render([self.header]))
        except OSError as exc:
            raise OutputSinkError(f"Cannot write header to {self._path}: {exc}") from exc
        LOGGER.info("Created output file %s", self._path)
        return True

    def append_records(self, records: Sequence[ContactRecord]) -> int:
        """Append ``records`` with a single write call and return how many were written."""

        if not records:
            return 0
        payload = _render(record.as_row(self._include_phone) for record in records)
        try:
            with self._path.open("a", encoding="utf-8", newline="") as handle:
                handle.write(payload)
        except OSError as exc:
            raise OutputSinkError(f"Cannot append {len(records)} records to {self._path}: {exc}") from exc
        return len(records)
