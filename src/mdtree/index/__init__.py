"""Content tree, full-text index and query engine."""
