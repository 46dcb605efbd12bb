"""Per-cluster summaries and partition quality for a clustered graph.

Summaries feed the cluster list a viewer shows next to the graph;
modularity gives a single number for how well the labels separate the
co-visitation structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import networkx as nx

from history_graph.graph.model import Graph


@dataclass
class ClusterSummary:
    """One community of domains.

    Attributes:
        label: Cluster label (a node id), ``None`` for unclustered nodes.
        members: Node ids in graph insertion order.
        total_visits: Sum of member visit counts.
        last_visit: Most recent visit among members.
    """

    label: str | None
    members: list[str] = field(default_factory=list)
    total_visits: int = 0
    last_visit: int = 0

    @property
    def size(self) -> int:
        return len(self.members)


def summarize_clusters(graph: Graph) -> list[ClusterSummary]:
    """Summarise clusters in the order their first member appears."""
    summaries: dict[str | None, ClusterSummary] = {}
    for node in graph.nodes.values():
        summary = summaries.get(node.cluster)
        if summary is None:
            summary = ClusterSummary(label=node.cluster, last_visit=node.last_visit)
            summaries[node.cluster] = summary
        summary.members.append(node.id)
        summary.total_visits += node.visit_count
        summary.last_visit = max(summary.last_visit, node.last_visit)
    return list(summaries.values())


def partition_modularity(graph: Graph) -> float:
    """Weighted modularity of the current labels on the undirected graph.

    Returns ``0.0`` for a graph without links, where modularity is undefined.
    """
    if not graph.links:
        return 0.0
    communities = [set(members) for members in graph.clusters().values()]
    return nx.community.modularity(graph.to_networkx(), communities, weight="weight")
