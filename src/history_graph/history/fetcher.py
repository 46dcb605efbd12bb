"""Paged retrieval of a history window around the provider's result cap.

The provider returns at most ``max_results_per_search`` records per query,
always the newest ones in the window.  The fetcher keeps querying a window
whose end moves backwards past each full page until a short page shows the
window is exhausted.

Records that share the oldest timestamp of a full page may be split across
the cap, so they are held back and the next window ends just after that
timestamp; the next query then returns all of them together.  Only when a
full page holds a single timestamp (more visits at one instant than the
cap) is the page accepted as is, since the window cannot be narrowed
around it.
"""

from __future__ import annotations

import time

import structlog

from history_graph.history.provider import HistoryProvider, HistoryProviderError
from history_graph.history.records import MS_PER_DAY, HistoryRecord

logger = structlog.get_logger()


class FetchError(Exception):
    """Raised when the provider fails during a fetch; no partial result exists."""


class HistoryFetcher:
    def __init__(self, provider: HistoryProvider, max_results_per_search: int) -> None:
        if max_results_per_search < 1:
            raise ValueError(
                f"max_results_per_search must be >= 1, got {max_results_per_search}"
            )
        self._provider = provider
        self._cap = max_results_per_search

    async def fetch(self, horizon_days: int, now: int | None = None) -> list[HistoryRecord]:
        """Fetch every record of the last ``horizon_days`` days, oldest first."""
        if now is None:
            now = int(time.time() * 1000)
        start = now - max(horizon_days, 0) * MS_PER_DAY
        return await self.fetch_window(start, now)

    async def fetch_window(self, start: int, end: int) -> list[HistoryRecord]:
        """Fetch all records in ``[start, end)``, sorted ascending by visit time.

        Raises:
            FetchError: If any provider query fails.
        """
        log = logger.bind(window_start=start, window_end=end, cap=self._cap)
        collected: list[HistoryRecord] = []
        window_end = end
        pages = 0

        while window_end > start:
            try:
                chunk = await self._provider.search(start, window_end, self._cap)
            except HistoryProviderError as e:
                log.warning("history_fetch_failed", pages=pages, error=str(e))
                raise FetchError(f"Error fetching history: {e}") from e
            pages += 1

            if len(chunk) < self._cap:
                collected.extend(chunk)
                break

            oldest = min(r.last_visit_time for r in chunk)
            newer = [r for r in chunk if r.last_visit_time != oldest]
            if newer:
                collected.extend(newer)
                window_end = oldest + 1
            else:
                log.warning(
                    "history_page_saturated",
                    timestamp=oldest,
                    page_size=len(chunk),
                )
                collected.extend(chunk)
                window_end = oldest

        collected.sort(key=lambda r: r.last_visit_time)
        log.info("history_fetched", pages=pages, records=len(collected))
        return collected
