"""Horizon cutoff applied to fetched history."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from history_graph.history.records import MS_PER_DAY, HistoryRecord

logger = structlog.get_logger()


def filter_by_horizon(
    records: Iterable[HistoryRecord], horizon_days: int, now: int
) -> list[HistoryRecord]:
    """Keep records visited strictly after ``now - horizon_days`` days.

    Order is preserved.  A horizon of zero (or less) keeps nothing,
    including records stamped in the future.
    """
    records = list(records)
    if horizon_days <= 0:
        kept: list[HistoryRecord] = []
    else:
        cutoff = now - horizon_days * MS_PER_DAY
        kept = [r for r in records if r.last_visit_time > cutoff]

    logger.debug(
        "history_filtered",
        horizon_days=horizon_days,
        received=len(records),
        kept=len(kept),
    )
    return kept
