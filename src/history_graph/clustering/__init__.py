"""Community detection over the domain graph.

Label propagation assigns every domain a label; the quality helpers
summarise the resulting communities.
"""

from .label_propagation import ClusterResult, propagate_labels
from .quality import ClusterSummary, partition_modularity, summarize_clusters

__all__ = [
    "ClusterResult",
    "ClusterSummary",
    "partition_modularity",
    "propagate_labels",
    "summarize_clusters",
]
