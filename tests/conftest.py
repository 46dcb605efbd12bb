"""Shared test fixtures."""

import pytest

from history_graph.history.provider import InMemoryHistoryProvider
from history_graph.history.records import MS_PER_DAY, HistoryRecord

# Fixed "current time" for deterministic horizon arithmetic (Unix ms)
NOW = 1_700_000_000_000


def _days_ago(days: float) -> int:
    return NOW - int(days * MS_PER_DAY)


@pytest.fixture
def now() -> int:
    return NOW


@pytest.fixture
def scenario_records() -> list[HistoryRecord]:
    """a.com@1, b.com@2, a.com@3, c.com@4."""
    return [
        HistoryRecord("https://a.com/home", 1),
        HistoryRecord("https://b.com/page", 2),
        HistoryRecord("https://a.com/other", 3),
        HistoryRecord("https://c.com/", 4),
    ]


@pytest.fixture
def recent_history() -> list[HistoryRecord]:
    """Two browsing sessions inside the last three days plus one older visit.

    Session one alternates docs.python.org and stackoverflow.com, session
    two alternates news.ycombinator.com and lobste.rs.  The first record
    is ten days old.
    """
    return [
        HistoryRecord("https://old.example.org/", _days_ago(10)),
        HistoryRecord("https://docs.python.org/3/library/asyncio.html", _days_ago(3)),
        HistoryRecord("https://stackoverflow.com/questions/1", _days_ago(2.9)),
        HistoryRecord("https://docs.python.org/3/library/typing.html", _days_ago(2.8)),
        HistoryRecord("https://stackoverflow.com/questions/2", _days_ago(2.7)),
        HistoryRecord("https://docs.python.org/3/", _days_ago(2.6)),
        HistoryRecord("https://news.ycombinator.com/", _days_ago(1)),
        HistoryRecord("https://lobste.rs/", _days_ago(0.9)),
        HistoryRecord("https://news.ycombinator.com/item?id=1", _days_ago(0.8)),
        HistoryRecord("https://lobste.rs/t/python", _days_ago(0.7)),
    ]


@pytest.fixture
def recent_provider(recent_history: list[HistoryRecord]) -> InMemoryHistoryProvider:
    return InMemoryHistoryProvider(recent_history)
