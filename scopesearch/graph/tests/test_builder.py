"""Tests for record graph construction."""

import logging

import pytest

from scopesearch.graph.builder import build_graph, graph_stats


@pytest.fixture
def records():
    return [
        {"id": "E1", "connections": [{"id": "E2", "type": "owns"}]},
        {"id": "E2", "connections": [{"id": "E1", "type": "owns"}]},
        {"id": "E3", "connections": [{"id": "E1", "type": "advises"}]},
    ]


def test_connections_are_undirected(records):
    graph = build_graph(records)

    assert graph.has_edge("E1", "E2")
    assert graph.has_edge("E2", "E1")
    assert "E3" in graph.adj["E1"]


def test_same_typed_edge_declared_twice_collapses(records):
    graph = build_graph(records)

    assert graph.number_of_edges("E1", "E2") == 1
    assert graph.number_of_edges() == 2


def test_distinct_edge_types_are_kept(records):
    records.append({"id": "E4", "connections": [{"id": "E1", "type": "owns"}]})
    records[0]["connections"].append({"id": "E2", "type": "supplies"})

    graph = build_graph(records)

    types = {data["type"] for data in graph.get_edge_data("E1", "E2").values()}
    assert types == {"owns", "supplies"}


def test_forward_reference_is_not_a_placeholder():
    graph = build_graph(
        [
            {"id": "E1", "connections": [{"id": "E2"}]},
            {"id": "E2"},
        ]
    )

    assert graph.nodes["E2"]["placeholder"] is False


def test_dangling_connection_becomes_placeholder_and_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="scopesearch.graph.builder"):
        graph = build_graph([{"id": "E1", "connections": [{"id": "GHOST"}]}])

    assert graph.nodes["GHOST"]["placeholder"] is True
    assert "GHOST" in caplog.text


def test_malformed_records_and_connections_are_skipped():
    graph = build_graph(
        [
            {"name": "no id"},
            "not a record",
            {"id": "E1", "connections": [None, {"type": "owns"}, {"id": "  "}]},
            {"id": "E2", "connections": "E1"},
        ]
    )

    assert set(graph.nodes) == {"E1", "E2"}
    assert graph.number_of_edges() == 0


def test_graph_stats_counts_types_and_placeholders(records):
    records.append({"id": "E5", "connections": [{"id": "MISSING", "type": "owns"}]})

    stats = graph_stats(build_graph(records))

    assert stats.nodes == 5
    assert stats.placeholders == 1
    assert stats.edge_types == {"owns": 2, "advises": 1}
    assert "Nodes: 5" in str(stats)
