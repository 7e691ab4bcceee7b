from __future__ import annotations

import math
import time
from collections.abc import Sequence
from typing import Any, Callable, TypeVar

from .formatting import format_decimal


T = TypeVar("T")

DEFAULT_PAGE_SIZE = 50
DEFAULT_DEBOUNCE_SECONDS = 0.25


def _search_fields(record: Any) -> list[str]:
    return [
        str(getattr(record, "date", "")),
        str(getattr(record, "distance_m", "")),
        format_decimal(getattr(record, "duration_min", 0) or 0),
        (getattr(record, "stroke", "") or "").lower(),
        (getattr(record, "notes", "") or "").lower(),
    ]


def matches(record: Any, query: str) -> bool:
    q = (query or "").strip().lower()
    if not q:
        return True
    return any(q in field for field in _search_fields(record))


def filter_records(records: Sequence[T], query: str) -> list[T]:
    return [r for r in records if matches(r, query)]


def view(records: Sequence[T], query: str, page_index: int, page_size: int = DEFAULT_PAGE_SIZE) -> list[T]:
    """Filter then paginate. Pages past the end (or negative) are empty."""
    if page_index < 0 or page_size <= 0:
        return []
    start = page_index * page_size
    return filter_records(records, query)[start : start + page_size]


def page_count(total: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    if total <= 0 or page_size <= 0:
        return 0
    return math.ceil(total / page_size)


class QueryDebouncer:
    """Coalesces raw search input into a committed query.

    ``submit`` records the latest raw text; ``committed`` only moves to it once
    no new text has arrived for ``delay`` seconds.
    """

    def __init__(self, delay: float = DEFAULT_DEBOUNCE_SECONDS, clock: Callable[[], float] = time.monotonic) -> None:
        self.delay = delay
        self._clock = clock
        self._raw = ""
        self._committed = ""
        self._changed_at: float | None = None

    @property
    def raw(self) -> str:
        return self._raw

    def submit(self, text: str) -> None:
        text = text or ""
        if text == self._raw:
            return
        self._raw = text
        self._changed_at = self._clock()

    def committed(self) -> str:
        if self._changed_at is not None and self._clock() - self._changed_at >= self.delay:
            self._committed = self._raw
            self._changed_at = None
        return self._committed

    def flush(self) -> str:
        self._committed = self._raw
        self._changed_at = None
        return self._committed

    @property
    def settled(self) -> bool:
        return self._changed_at is None
