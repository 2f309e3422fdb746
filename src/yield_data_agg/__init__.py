"""APR/APY yield aggregation service."""
