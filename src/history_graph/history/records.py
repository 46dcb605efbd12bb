"""History record type shared by providers, the fetcher, and the graph builder."""

from __future__ import annotations

from dataclasses import dataclass

MS_PER_DAY = 1000 * 60 * 60 * 24


@dataclass(frozen=True)
class HistoryRecord:
    """One visited URL with its most recent visit time (Unix milliseconds)."""

    url: str
    last_visit_time: int

    @classmethod
    def from_dict(cls, data: dict) -> HistoryRecord:
        """Build a record from the provider wire shape ``{url, lastVisitTime}``.

        Browsers report ``lastVisitTime`` as fractional milliseconds; the
        sub-millisecond part is dropped.
        """
        return cls(url=data["url"], last_visit_time=int(data["lastVisitTime"]))
