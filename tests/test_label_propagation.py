"""Tests for asynchronous label propagation."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from history_graph.clustering import ClusterResult, propagate_labels
from history_graph.clustering.label_propagation import build_neighbors, mode, run_pass
from history_graph.graph.builder import build_graph
from history_graph.graph.model import Graph, Link, Node


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _graph(node_ids: list[str], edges: list[tuple[str, str]]) -> Graph:
    """Graph with the given node order and one link per (source, target)."""
    graph = Graph(nodes={n: Node(n, f"https://{n}/", 1, 0) for n in node_ids})
    for source, target in edges:
        key = (source, target)
        if key in graph.links:
            graph.links[key].weight += 1
        else:
            graph.links[key] = Link(source, target)
    return graph


# ---------------------------------------------------------------------------
# mode
# ---------------------------------------------------------------------------

class TestMode:
    def test_most_frequent(self):
        assert mode(["x", "y", "y", "z"]) == "y"

    def test_tie_goes_to_earliest(self):
        assert mode(["x", "y", "y", "x"]) == "x"
        assert mode(["y", "x"]) == "y"

    def test_later_label_needs_strictly_more(self):
        assert mode(["z", "z", "y", "y", "x", "y"]) == "y"

    def test_single(self):
        assert mode(["only"]) == "only"

    def test_empty_is_undefined(self):
        with pytest.raises(ValueError):
            mode([])


# ---------------------------------------------------------------------------
# Neighbour lists
# ---------------------------------------------------------------------------

class TestBuildNeighbors:
    def test_scenario_neighbor_lists(self, scenario_records):
        neighbors = build_neighbors(build_graph(scenario_records))
        assert neighbors == {
            "a.com": ["b.com", "b.com", "c.com"],
            "b.com": ["a.com", "a.com"],
            "c.com": ["a.com"],
        }

    def test_isolated_node_has_empty_list(self):
        neighbors = build_neighbors(_graph(["a", "b", "lonely"], [("a", "b")]))
        assert neighbors["lonely"] == []

    def test_link_weight_does_not_add_entries(self):
        """One entry per link, regardless of its weight."""
        graph = _graph(["a", "b"], [("a", "b"), ("a", "b"), ("a", "b")])
        assert build_neighbors(graph) == {"a": ["b"], "b": ["a"]}


# ---------------------------------------------------------------------------
# Propagation
# ---------------------------------------------------------------------------

class TestPropagateLabels:
    def test_scenario_merges_into_one_community(self, scenario_records):
        result = propagate_labels(build_graph(scenario_records))

        assert result.assignment == {"a.com": "b.com", "b.com": "b.com", "c.com": "b.com"}
        assert result.passes == 2
        assert result.converged is True
        assert result.cluster_count == 1

    def test_first_pass_uses_labels_written_earlier_in_the_pass(self, scenario_records):
        graph = build_graph(scenario_records)
        labels = {n: n for n in graph.nodes}

        changes = run_pass(list(graph.nodes), labels, build_neighbors(graph))

        # b.com sees a.com's new label "b.com" and keeps its own; c.com follows a.com
        assert changes == 2
        assert labels == {"a.com": "b.com", "b.com": "b.com", "c.com": "b.com"}

    def test_zero_edge_graph_is_all_singletons(self):
        graph = _graph(["a", "b", "c"], [])
        result = propagate_labels(graph)

        assert result.assignment == {"a": "a", "b": "b", "c": "c"}
        assert result.converged is True
        assert result.passes == 1

    def test_empty_graph(self):
        result = propagate_labels(Graph())
        assert result == ClusterResult(assignment={}, passes=1, converged=True)

    def test_two_components_stay_apart(self):
        graph = _graph(
            ["a", "b", "c", "x", "y", "z"],
            [("a", "b"), ("b", "c"), ("c", "a"), ("x", "y"), ("y", "z"), ("z", "x")],
        )
        result = propagate_labels(graph)

        left = {result.assignment[n] for n in "abc"}
        right = {result.assignment[n] for n in "xyz"}
        assert len(left) == 1
        assert len(right) == 1
        assert left != right

    def test_idempotent_after_convergence(self, recent_history):
        graph = build_graph(recent_history)
        result = propagate_labels(graph)
        assert result.converged

        labels = dict(result.assignment)
        assert run_pass(list(graph.nodes), labels, build_neighbors(graph)) == 0
        assert labels == result.assignment

    def test_deterministic_for_fixed_order(self, recent_history):
        first = propagate_labels(build_graph(recent_history))
        second = propagate_labels(build_graph(recent_history))
        assert first == second

    def test_does_not_modify_graph(self, scenario_records):
        graph = build_graph(scenario_records)
        propagate_labels(graph)
        assert all(n.cluster is None for n in graph.nodes.values())

    def test_pass_limit_returns_last_assignment(self, scenario_records):
        with capture_logs() as logs:
            result = propagate_labels(build_graph(scenario_records), max_passes=1)

        assert result.converged is False
        assert result.passes == 1
        assert result.assignment == {"a.com": "b.com", "b.com": "b.com", "c.com": "b.com"}
        assert [e["log_level"] for e in logs if e["event"] == "label_propagation_not_converged"] == [
            "warning"
        ]

    def test_rejects_non_positive_pass_limit(self):
        with pytest.raises(ValueError):
            propagate_labels(Graph(), max_passes=0)

    def test_recent_history_sessions(self, recent_history):
        """Each browsing session becomes its own community."""
        graph = build_graph(recent_history[1:])
        result = propagate_labels(graph)

        assert result.assignment == {
            "docs.python.org": "stackoverflow.com",
            "stackoverflow.com": "stackoverflow.com",
            "news.ycombinator.com": "lobste.rs",
            "lobste.rs": "lobste.rs",
        }
        assert result.passes == 2
