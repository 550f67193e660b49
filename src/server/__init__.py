"""HTTP serving layer for the aggregation engine."""
