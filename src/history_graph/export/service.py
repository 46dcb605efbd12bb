"""Serialise a clustered graph to the JSON model renderers consume."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from history_graph.graph.model import Graph


def graph_to_json(graph: Graph) -> str:
    """Return ``{"nodes": [...], "links": [...]}`` as indented JSON."""
    return json.dumps(graph.to_dict(), ensure_ascii=False, indent=2)


def write_graph_export(graph: Graph, output_dir: Path) -> Path:
    """Write the graph to ``output_dir/history_graph_<timestamp>.json``."""
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"history_graph_{timestamp}.json"
    path.write_text(graph_to_json(graph), encoding="utf-8")
    return path
