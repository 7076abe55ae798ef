"""Bounded breadth-first reachability over the record graph."""

from collections import deque
from typing import Iterable

import networkx as nx


def _is_traversable(graph: nx.MultiGraph, node_id: str) -> bool:
    return not graph.nodes[node_id].get("placeholder", False)


def reachable(
    start_ids: Iterable[str],
    graph: nx.MultiGraph,
    max_depth: int = 1,
    allowed_edge_types: Iterable[str] | None = None,
) -> set[str]:
    """Return ids reachable from `start_ids` within `max_depth` hops.

    Start ids are always part of the result, even when absent from the graph.
    Nodes at `max_depth` are not expanded. When `allowed_edge_types` is given,
    only edges of those types are followed.
    """
    allowed = set(allowed_edge_types) if allowed_edge_types is not None else None

    visited: set[str] = set()
    queue: deque[tuple[str, int]] = deque()

    for start_id in start_ids or ():
        if not start_id or start_id in visited:
            continue
        visited.add(start_id)
        queue.append((start_id, 0))

    while queue:
        current_id, depth = queue.popleft()
        if depth >= max_depth:
            continue
        if current_id not in graph:
            continue
        if not _is_traversable(graph, current_id):
            continue

        for neighbor_id, edges in graph.adj[current_id].items():
            if neighbor_id in visited:
                continue
            if not _is_traversable(graph, neighbor_id):
                continue
            if allowed is not None and not any(
                data.get("type") in allowed for data in edges.values()
            ):
                continue
            visited.add(neighbor_id)
            queue.append((neighbor_id, depth + 1))

    return visited


def related_records(
    record_id: str,
    graph: nx.MultiGraph,
    *,
    max_depth: int = 1,
    allowed_edge_types: Iterable[str] | None = None,
) -> list[str]:
    """Ids near a record, excluding the record itself."""
    found = reachable(
        [record_id],
        graph,
        max_depth=max_depth,
        allowed_edge_types=allowed_edge_types,
    )
    found.discard(record_id)
    return sorted(found)
