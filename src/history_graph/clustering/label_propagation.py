"""Asynchronous label propagation over the domain graph.

Every node starts labelled with its own id.  A pass visits nodes in graph
insertion order and gives each node the most frequent label among its
neighbours, reading labels already rewritten earlier in the same pass.
Passes repeat until one changes nothing, or until ``max_passes`` is
reached.  In that case the last labels are returned and the result is
marked as not converged.

Neighbour lists are built from links in insertion order and keep
duplicates: ``a -> b`` and ``b -> a`` make ``b`` appear twice in ``a``'s
list, which doubles its vote.  Ties go to the label met first.  With a
fixed insertion order the output is fully deterministic.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from history_graph.graph.model import Graph

logger = structlog.get_logger()

DEFAULT_MAX_PASSES = 100


@dataclass
class ClusterResult:
    """Outcome of a label propagation run.

    Attributes:
        assignment: Node id to label, in node insertion order.
        passes: Number of full passes executed.
        converged: ``False`` if the pass limit stopped the run.
    """

    assignment: dict[str, str]
    passes: int
    converged: bool

    @property
    def cluster_count(self) -> int:
        return len(set(self.assignment.values()))


def build_neighbors(graph: Graph) -> dict[str, list[str]]:
    """Adjacency lists with one entry per link endpoint, duplicates kept."""
    neighbors: dict[str, list[str]] = {node_id: [] for node_id in graph.nodes}
    for link in graph.links.values():
        neighbors[link.source].append(link.target)
        neighbors[link.target].append(link.source)
    return neighbors


def mode(labels: Sequence[str]) -> str:
    """Most frequent label; on equal counts the earliest one wins.

    Raises:
        ValueError: If ``labels`` is empty.
    """
    if not labels:
        raise ValueError("mode of an empty label sequence is undefined")
    # Counter keeps first-seen order and most_common is stable on ties
    return Counter(labels).most_common(1)[0][0]


def run_pass(
    order: Sequence[str],
    labels: dict[str, str],
    neighbors: dict[str, list[str]],
) -> int:
    """Run one in-place pass over ``order`` and return how many labels changed."""
    changes = 0
    for node_id in order:
        adjacent = neighbors[node_id]
        if not adjacent:
            continue
        best = mode([labels[n] for n in adjacent])
        if best != labels[node_id]:
            labels[node_id] = best
            changes += 1
    return changes


def propagate_labels(graph: Graph, max_passes: int = DEFAULT_MAX_PASSES) -> ClusterResult:
    """Cluster ``graph`` and return the label assignment.

    The graph itself is not modified; callers apply the result with
    ``Graph.assign_clusters``.
    """
    if max_passes < 1:
        raise ValueError(f"max_passes must be >= 1, got {max_passes}")

    order = list(graph.nodes)
    neighbors = build_neighbors(graph)
    labels = {node_id: node_id for node_id in order}

    passes = 0
    converged = False
    while passes < max_passes:
        passes += 1
        if run_pass(order, labels, neighbors) == 0:
            converged = True
            break

    result = ClusterResult(assignment=labels, passes=passes, converged=converged)
    if converged:
        logger.debug(
            "label_propagation_converged",
            nodes=len(order),
            passes=passes,
            clusters=result.cluster_count,
        )
    else:
        logger.warning(
            "label_propagation_not_converged",
            nodes=len(order),
            max_passes=max_passes,
            clusters=result.cluster_count,
        )
    return result
