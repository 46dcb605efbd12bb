"""History provider interface and the in-memory replay provider.

A provider answers ``search(start_time, end_time, max_results)`` over the
half-open window ``start_time <= t < end_time``.  When more than
``max_results`` records fall inside the window, a provider returns the
``max_results`` records nearest the END of the window, newest first.  The
fetcher relies on that convention to page backwards in time.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from history_graph.history.records import HistoryRecord


class HistoryProviderError(Exception):
    """Raised by a provider when a query cannot be answered."""


class HistoryProvider(Protocol):
    async def search(
        self, start_time: int, end_time: int, max_results: int | None
    ) -> list[HistoryRecord]:
        """Return records in ``[start_time, end_time)``, newest first, capped."""
        ...


class InMemoryHistoryProvider:
    """Replays a fixed record list with browser-history query semantics.

    ``max_results=None`` performs an uncapped query, which is what a
    single unbounded browser query would return.
    """

    def __init__(self, records: list[HistoryRecord]) -> None:
        # Stable sort keeps the input order among equal timestamps
        self._records = sorted(records, key=lambda r: r.last_visit_time, reverse=True)
        self.queries: list[tuple[int, int, int | None]] = []

    async def search(
        self, start_time: int, end_time: int, max_results: int | None
    ) -> list[HistoryRecord]:
        self.queries.append((start_time, end_time, max_results))
        if max_results is not None and max_results < 1:
            raise HistoryProviderError(f"max_results must be >= 1, got {max_results}")

        matches = [
            r for r in self._records if start_time <= r.last_visit_time < end_time
        ]
        if max_results is None:
            return matches
        return matches[:max_results]


class _RecordData(BaseModel):
    url: str
    last_visit_time: float = Field(alias="lastVisitTime")


_RECORD_LIST = TypeAdapter(list[_RecordData])


def load_history_json(path: Path) -> list[HistoryRecord]:
    """Read a JSON array of ``{url, lastVisitTime}`` objects.

    Raises:
        HistoryProviderError: If the file is unreadable or malformed.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        items = _RECORD_LIST.validate_python(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise HistoryProviderError(f"Cannot load history from {path}: {e}") from e
    return [HistoryRecord.from_dict(i.model_dump(by_alias=True)) for i in items]
