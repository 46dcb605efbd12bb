"""Domain graph model: nodes per domain, links per ordered transition.

Both mappings are plain dicts, so iteration follows first-seen order.
Clustering depends on that order, which makes it part of the model's
contract rather than an implementation detail.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace

import networkx as nx


@dataclass
class Node:
    """A domain seen in history.

    Attributes:
        id: The domain (or the raw URL when no host could be parsed).
        sample_url: URL of the first record seen for the domain.
        visit_count: Number of records mapping to the domain.
        last_visit: Latest visit time among those records.
        cluster: Community label, ``None`` until clustering runs.
    """

    id: str
    sample_url: str
    visit_count: int
    last_visit: int
    cluster: str | None = None


@dataclass
class Link:
    """Consecutive visits from ``source`` to a different domain ``target``.

    ``source -> target`` and ``target -> source`` are separate links.
    """

    source: str
    target: str
    weight: int = 1

    @property
    def key(self) -> tuple[str, str]:
        return (self.source, self.target)


@dataclass
class Graph:
    nodes: dict[str, Node] = field(default_factory=dict)
    links: dict[tuple[str, str], Link] = field(default_factory=dict)

    def assign_clusters(self, assignment: Mapping[str, str]) -> None:
        """Write cluster labels onto nodes; ids not in the graph are ignored."""
        for node_id, label in assignment.items():
            node = self.nodes.get(node_id)
            if node is not None:
                node.cluster = label

    def clusters(self) -> dict[str | None, list[str]]:
        """Group node ids by cluster label, labels in first-seen node order."""
        groups: dict[str | None, list[str]] = {}
        for node in self.nodes.values():
            groups.setdefault(node.cluster, []).append(node.id)
        return groups

    def without_cluster(self, label: str) -> Graph:
        """Return a copy without the nodes labelled ``label`` or their links.

        Surviving nodes keep their labels; nothing is re-clustered.
        """
        nodes = {
            node_id: replace(node)
            for node_id, node in self.nodes.items()
            if node.cluster != label
        }
        links = {
            key: replace(link)
            for key, link in self.links.items()
            if link.source in nodes and link.target in nodes
        }
        return Graph(nodes=nodes, links=links)

    def to_dict(self) -> dict:
        """Serialise to the graph model consumed by renderers and exports."""
        return {
            "nodes": [
                {
                    "id": n.id,
                    "url": n.sample_url,
                    "visitCount": n.visit_count,
                    "lastVisit": n.last_visit,
                    "cluster": n.cluster,
                }
                for n in self.nodes.values()
            ],
            "links": [
                {"source": link.source, "target": link.target, "value": link.weight}
                for link in self.links.values()
            ],
        }

    def to_networkx(self) -> nx.Graph:
        """Undirected weighted view; both directions of a pair are summed."""
        G = nx.Graph()
        for node in self.nodes.values():
            G.add_node(node.id, cluster=node.cluster, visit_count=node.visit_count)
        for link in self.links.values():
            if G.has_edge(link.source, link.target):
                G[link.source][link.target]["weight"] += link.weight
            else:
                G.add_edge(link.source, link.target, weight=link.weight)
        return G
