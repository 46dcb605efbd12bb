"""Tests for the horizon filter."""

from history_graph.history.records import MS_PER_DAY, HistoryRecord
from history_graph.history.time_filter import filter_by_horizon

NOW = 1_700_000_000_000


def _at(offset_ms: int, url: str = "https://example.com/") -> HistoryRecord:
    return HistoryRecord(url, NOW + offset_ms)


class TestFilterByHorizon:
    def test_keeps_records_inside_horizon(self):
        records = [_at(-2 * MS_PER_DAY, "https://a.com/"), _at(-1000, "https://b.com/")]
        kept = filter_by_horizon(records, 1, NOW)
        assert kept == [records[1]]

    def test_cutoff_is_exclusive(self):
        """A record exactly at now - horizon is dropped, one ms later is kept."""
        on_cutoff = _at(-MS_PER_DAY)
        after_cutoff = _at(-MS_PER_DAY + 1)
        assert filter_by_horizon([on_cutoff, after_cutoff], 1, NOW) == [after_cutoff]

    def test_zero_horizon_is_empty(self):
        """Zero days keeps nothing, even records stamped after now."""
        records = [_at(-1), _at(0), _at(5000)]
        assert filter_by_horizon(records, 0, NOW) == []

    def test_negative_horizon_is_empty(self):
        assert filter_by_horizon([_at(-1)], -3, NOW) == []

    def test_preserves_order(self):
        records = [_at(-300), _at(-100), _at(-200)]
        assert filter_by_horizon(records, 7, NOW) == records

    def test_accepts_iterables(self):
        records = (r for r in [_at(-10), _at(-8 * MS_PER_DAY)])
        assert len(filter_by_horizon(records, 7, NOW)) == 1

    def test_only_returns_records_after_cutoff(self):
        records = [_at(-d * MS_PER_DAY // 2) for d in range(30)]
        for horizon in (1, 3, 7):
            cutoff = NOW - horizon * MS_PER_DAY
            kept = filter_by_horizon(records, horizon, NOW)
            assert all(r.last_visit_time > cutoff for r in kept)
            assert len(kept) == sum(1 for r in records if r.last_visit_time > cutoff)
