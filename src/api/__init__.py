"""HTTP interface over the consensus aggregation engine."""
