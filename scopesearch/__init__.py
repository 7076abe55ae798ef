"""Scoped entity search and graph reachability."""

from .graph.builder import build_graph
from .graph.scope import compute_scoped_dataset
from .graph.traversal import reachable
from .search.access import Actor
from .search.config import SearchConfig
from .search.engine import SearchEngine
from .search.index import SearchNotInitializedError
from .search.types import MatchProvenance, QueryOptions, QueryResult

__all__ = [
    "Actor",
    "MatchProvenance",
    "QueryOptions",
    "QueryResult",
    "SearchConfig",
    "SearchEngine",
    "SearchNotInitializedError",
    "build_graph",
    "compute_scoped_dataset",
    "reachable",
]
