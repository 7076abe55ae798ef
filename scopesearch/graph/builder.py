"""NetworkX graph builder for connected primary records."""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import networkx as nx

from .schema import DEFAULT_SCHEMA, DatasetSchema, iter_connections, record_id

log = logging.getLogger(__name__)


@dataclass
class GraphStats:
    """Statistics about the record graph."""

    nodes: int
    edges: int
    placeholders: int
    edge_types: dict[str, int]

    def __str__(self) -> str:
        edges_str = ", ".join(
            f"{k}: {v}" for k, v in sorted(self.edge_types.items(), key=lambda x: -x[1])
        )
        return (
            f"Graph Stats:\n"
            f"  Nodes: {self.nodes} ({self.placeholders} placeholders)\n"
            f"  Edges: {self.edges} ({edges_str})"
        )


def build_graph(
    records: Iterable[Mapping[str, Any]],
    *,
    schema: DatasetSchema = DEFAULT_SCHEMA,
) -> nx.MultiGraph:
    """Build an undirected adjacency graph from record connections.

    Each connection becomes one edge keyed by its type, so `a -> b` and
    `b -> a` declared with the same type collapse into a single edge.
    Targets missing from `records` are added as placeholder nodes.
    """
    graph = nx.MultiGraph()
    materialized = [r for r in records if record_id(r) is not None]

    for record in materialized:
        graph.add_node(record_id(record), placeholder=False)

    for record in materialized:
        source_id = record_id(record)
        for connection in iter_connections(record, schema.connections_field):
            target_id = connection.target_id
            if not graph.has_node(target_id):
                log.warning(
                    f"Record {source_id} connects to unknown record {target_id}; "
                    "edge will not be traversed"
                )
                graph.add_node(target_id, placeholder=True)
            graph.add_edge(
                source_id,
                target_id,
                key=connection.edge_type or "",
                type=connection.edge_type,
            )

    return graph


def graph_stats(graph: nx.MultiGraph) -> GraphStats:
    """Get statistics about the graph."""
    edge_types = Counter(
        data.get("type") or "untyped" for _, _, data in graph.edges(data=True)
    )
    placeholders = sum(
        1 for _, data in graph.nodes(data=True) if data.get("placeholder")
    )
    return GraphStats(
        nodes=graph.number_of_nodes(),
        edges=graph.number_of_edges(),
        placeholders=placeholders,
        edge_types=dict(edge_types),
    )
