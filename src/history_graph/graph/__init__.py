"""Domain graph model and its construction from history records."""

from history_graph.graph.builder import build_graph, get_domain
from history_graph.graph.model import Graph, Link, Node

__all__ = ["build_graph", "get_domain", "Graph", "Link", "Node"]
