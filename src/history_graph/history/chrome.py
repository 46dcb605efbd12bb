"""History provider backed by a Chromium ``History`` SQLite database.

Chromium stores ``urls.last_visit_time`` as microseconds since
1601-01-01 UTC.  Window bounds are converted to that unit before querying
and record times are converted back to Unix milliseconds, so that a
record lies inside ``[start, end)`` in one unit exactly when it does in
the other.

The browser keeps the live database locked; point the provider at a copy
of the file when the browser is running.
"""

from __future__ import annotations

from pathlib import Path

import sqlalchemy as sa
import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from history_graph.history.provider import HistoryProviderError
from history_graph.history.records import HistoryRecord

logger = structlog.get_logger()

# Milliseconds between 1601-01-01 and 1970-01-01
WEBKIT_EPOCH_OFFSET_MS = 11_644_473_600_000

_SEARCH_SQL = sa.text(
    "SELECT url, last_visit_time FROM urls "
    "WHERE last_visit_time >= :start AND last_visit_time < :end "
    "ORDER BY last_visit_time DESC, id DESC "
    "LIMIT :limit"
)


def unix_ms_to_webkit(ms: int) -> int:
    return (ms + WEBKIT_EPOCH_OFFSET_MS) * 1000


def webkit_to_unix_ms(webkit_us: int) -> int:
    return webkit_us // 1000 - WEBKIT_EPOCH_OFFSET_MS


class ChromeHistoryProvider:
    def __init__(self, database_url: str) -> None:
        self._database_url = database_url
        self._engine: AsyncEngine | None = None

    @classmethod
    def from_path(cls, path: Path) -> ChromeHistoryProvider:
        """Open the database file read-only."""
        uri = f"file:{path.resolve()}?mode=ro"
        return cls(f"sqlite+aiosqlite:///{uri}&uri=true")

    def _get_engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_engine(self._database_url)
        return self._engine

    async def search(
        self, start_time: int, end_time: int, max_results: int | None
    ) -> list[HistoryRecord]:
        # SQLite treats a negative LIMIT as unbounded
        limit = -1 if max_results is None else max_results
        params = {
            "start": unix_ms_to_webkit(start_time),
            "end": unix_ms_to_webkit(end_time),
            "limit": limit,
        }
        try:
            async with self._get_engine().connect() as conn:
                result = await conn.execute(_SEARCH_SQL, params)
                rows = result.all()
        except SQLAlchemyError as e:
            logger.error("history_query_failed", error=str(e))
            raise HistoryProviderError(f"History database query failed: {e}") from e

        return [
            HistoryRecord(url=row.url, last_visit_time=webkit_to_unix_ms(row.last_visit_time))
            for row in rows
        ]

    async def aclose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None

    async def __aenter__(self) -> ChromeHistoryProvider:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
