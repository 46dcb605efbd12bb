"""History retrieval: provider access, paged fetching, and horizon filtering."""

from history_graph.history.fetcher import FetchError, HistoryFetcher
from history_graph.history.provider import (
    HistoryProvider,
    HistoryProviderError,
    InMemoryHistoryProvider,
    load_history_json,
)
from history_graph.history.records import MS_PER_DAY, HistoryRecord
from history_graph.history.time_filter import filter_by_horizon

__all__ = [
    "FetchError",
    "filter_by_horizon",
    "HistoryFetcher",
    "HistoryProvider",
    "HistoryProviderError",
    "HistoryRecord",
    "InMemoryHistoryProvider",
    "load_history_json",
    "MS_PER_DAY",
]
