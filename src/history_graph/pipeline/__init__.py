"""Pipeline configuration and orchestration."""

from history_graph.pipeline.config import PipelineConfig, load_pipeline_config
from history_graph.pipeline.orchestrator import (
    GraphSink,
    Orchestrator,
    PipelineResult,
    build_clustered_graph,
)

__all__ = [
    "build_clustered_graph",
    "GraphSink",
    "load_pipeline_config",
    "Orchestrator",
    "PipelineConfig",
    "PipelineResult",
]
