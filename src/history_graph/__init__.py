"""Browser history to domain co-visitation graph, clustered by label propagation."""
