"""Fuzzy indexing and querying of scoped records."""
