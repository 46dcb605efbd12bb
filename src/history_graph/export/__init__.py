"""Graph export."""

from .service import graph_to_json, write_graph_export

__all__ = ["graph_to_json", "write_graph_export"]
