"""Pipeline orchestrator: fetch -> filter -> build -> cluster -> show.

``build_clustered_graph`` is the pure part of the pipeline.  The
``Orchestrator`` adds the history fetch and the latest-run-wins rule:
each ``run`` takes a generation number when it starts, and only the run
holding the newest number when its fetch returns may apply its graph.
Results of superseded runs are dropped without being reported as errors.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import structlog

from history_graph.clustering.label_propagation import ClusterResult, propagate_labels
from history_graph.graph.builder import build_graph
from history_graph.graph.model import Graph
from history_graph.history.fetcher import FetchError, HistoryFetcher
from history_graph.history.records import HistoryRecord
from history_graph.history.time_filter import filter_by_horizon
from history_graph.pipeline.config import PipelineConfig

logger = structlog.get_logger()


class GraphSink(Protocol):
    """Receives every graph the orchestrator applies (renderer, exporter)."""

    def show(self, graph: Graph, result: ClusterResult | None) -> None: ...


@dataclass
class PipelineResult:
    """Complete result of one applied pipeline run.

    Attributes:
        generation: Generation number of the run.
        horizon_days: Requested horizon.
        fetched_count: Records returned by the fetch.
        kept_count: Records left after the horizon filter.
        graph: Clustered graph.
        clustering: Label propagation outcome.
    """

    generation: int
    horizon_days: int
    fetched_count: int
    kept_count: int
    graph: Graph
    clustering: ClusterResult


def _now_ms() -> int:
    return int(time.time() * 1000)


def build_clustered_graph(
    records: list[HistoryRecord],
    horizon_days: int,
    now: int,
    config: PipelineConfig,
) -> tuple[Graph, ClusterResult, int]:
    """Filter, build and cluster.  PURE FUNCTION -- no I/O.

    Returns:
        The graph with cluster labels assigned, the clustering outcome,
        and the number of records that survived the horizon filter.
    """
    kept = filter_by_horizon(records, horizon_days, now)
    graph = build_graph(kept)
    result = propagate_labels(graph, max_passes=config.clustering.max_passes)
    graph.assign_clusters(result.assignment)
    return graph, result, len(kept)


class Orchestrator:
    def __init__(
        self,
        fetcher: HistoryFetcher,
        config: PipelineConfig | None = None,
        sink: GraphSink | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._config = config or PipelineConfig()
        self._sink = sink
        self._clock = clock or _now_ms
        self._generation = 0
        self.current: Graph | None = None

    @property
    def generation(self) -> int:
        """Generation number of the most recently started run."""
        return self._generation

    async def run(self, horizon_days: int) -> PipelineResult | None:
        """Run the whole pipeline for ``horizon_days`` and apply the result.

        Returns:
            The applied result, or ``None`` if a newer run started while
            this one was fetching, whether the fetch succeeded or failed.

        Raises:
            ValueError: If ``horizon_days`` is negative.
            FetchError: If retrieval failed for the latest run; nothing
                is applied.
        """
        if horizon_days < 0:
            raise ValueError(f"horizon_days must be >= 0, got {horizon_days}")

        self._generation += 1
        generation = self._generation
        log = logger.bind(generation=generation, horizon_days=horizon_days)

        now = self._clock()
        try:
            records = await self._fetcher.fetch(horizon_days, now=now)
        except FetchError as e:
            if generation != self._generation:
                log.debug("stale_run_discarded", latest=self._generation, error=str(e))
                return None
            log.error("pipeline_failed", error=str(e))
            raise

        if generation != self._generation:
            log.debug("stale_run_discarded", latest=self._generation)
            return None

        graph, clustering, kept_count = build_clustered_graph(
            records, horizon_days, now, self._config
        )
        self._apply(graph, clustering)

        log.info(
            "pipeline_complete",
            fetched=len(records),
            kept=kept_count,
            nodes=len(graph.nodes),
            links=len(graph.links),
            clusters=clustering.cluster_count,
            passes=clustering.passes,
            converged=clustering.converged,
        )
        return PipelineResult(
            generation=generation,
            horizon_days=horizon_days,
            fetched_count=len(records),
            kept_count=kept_count,
            graph=graph,
            clustering=clustering,
        )

    def delete_cluster(self, label: str, graph: Graph | None = None) -> Graph:
        """Drop every node labelled ``label`` and every link touching one.

        Operates on ``graph``, or on the current graph when omitted.  The
        remaining nodes keep their labels; clustering is not re-run.
        """
        if graph is None:
            if self.current is None:
                raise ValueError("no graph to delete a cluster from")
            graph = self.current

        reduced = graph.without_cluster(label)
        logger.info(
            "cluster_deleted",
            cluster=label,
            nodes_removed=len(graph.nodes) - len(reduced.nodes),
            links_removed=len(graph.links) - len(reduced.links),
        )
        self._apply(reduced, None)
        return reduced

    def _apply(self, graph: Graph, result: ClusterResult | None) -> None:
        self.current = graph
        if self._sink is not None:
            self._sink.show(graph, result)
