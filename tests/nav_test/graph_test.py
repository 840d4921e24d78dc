import logging

import pytest

from overlay_nav.geo_utils import distance
from overlay_nav.graph import GraphError, auto_connect, build_graph
from overlay_nav.nav_config import NavConfig

STEP = 0.0009


class TestBuildGraph:

    def test_bidirectional_edge_adds_both_directions(self, line_graph):
        assert line_graph.neighbors("A") == [("B", 100.0)]
        assert sorted(line_graph.neighbors("B")) == [("A", 100.0), ("C", 100.0)]
        assert line_graph.neighbors("C") == [("B", 100.0)]

    def test_one_way_edge(self, line_nodes, make_edge):
        graph = build_graph(line_nodes, [make_edge("A", "B", 100.0, bidirectional=False)])
        assert graph.neighbors("A") == [("B", 100.0)]
        assert graph.neighbors("B") == []
        assert graph.has_incoming("B")
        assert not graph.has_incoming("A")

    def test_inaccessible_edge_is_invisible(self, line_nodes, make_edge):
        graph = build_graph(line_nodes, [make_edge("A", "B", 100.0, accessible=False)])
        assert not graph.has_outgoing("A")
        assert not graph.has_outgoing("B")

    def test_edges_of_inaccessible_node_are_dropped(self, make_node, make_edge):
        nodes = [make_node("A", 0, 0), make_node("B", 0, STEP, accessible=False)]
        graph = build_graph(nodes, [make_edge("A", "B", 100.0)])
        assert "B" in graph
        assert graph.neighbors("A") == []
        assert [n.id for n in graph.accessible_nodes()] == ["A"]

    def test_parallel_edges_are_kept(self, line_nodes, make_edge):
        edges = [
            make_edge("A", "B", 120.0, edge_id="e1"),
            make_edge("A", "B", 100.0, edge_id="e2"),
        ]
        graph = build_graph(line_nodes, edges)
        assert graph.neighbors("A") == [("B", 120.0), ("B", 100.0)]
        assert graph.edge_distance("A", "B") == 100.0
        assert graph.edge_distance("A", "C") is None

    def test_unknown_node_fails_loudly(self, line_nodes, make_edge):
        with pytest.raises(GraphError):
            build_graph(line_nodes, [make_edge("A", "Z", 10.0)])

    def test_duplicate_node_id_fails_loudly(self, make_node):
        with pytest.raises(GraphError):
            build_graph([make_node("A", 0, 0), make_node("A", 1, 1)], [])

    def test_negative_distance_rejected(self, line_nodes, make_edge):
        with pytest.raises(GraphError):
            build_graph(line_nodes, [make_edge("A", "B", -1.0)])

    def test_edge_shorter_than_straight_line_warns(self, line_nodes, make_edge, caplog):
        edges = [make_edge("A", "B", 100.0), make_edge("A", "C", 10.0, edge_id="tunnel")]
        with caplog.at_level(logging.WARNING, logger="overlay_nav.graph"):
            graph = build_graph(line_nodes, edges)
        assert "tunnel" in caplog.text
        assert graph.edge_distance("A", "C") == 10.0

    def test_measured_edges_do_not_warn(self, line_nodes, make_edge, caplog):
        with caplog.at_level(logging.WARNING, logger="overlay_nav.graph"):
            build_graph(line_nodes, [make_edge("A", "B", 100.0), make_edge("B", "C", 100.0)])
        assert "straight-line" not in caplog.text

    def test_empty_graph(self):
        graph = build_graph([], [])
        assert len(graph) == 0
        assert graph.edge_count == 0


class TestAutoConnect:

    def test_connects_only_pairs_within_threshold(self, line_nodes):
        edges = auto_connect(line_nodes, threshold_m=150.0)
        pairs = {(e.from_node_id, e.to_node_id) for e in edges}
        assert pairs == {("A", "B"), ("B", "C")}

    def test_edges_are_bidirectional_and_accessible(self, line_nodes):
        for edge in auto_connect(line_nodes, threshold_m=500.0):
            assert edge.bidirectional
            assert edge.accessible

    def test_symmetric_costs_in_graph(self, line_nodes):
        graph = build_graph(line_nodes, auto_connect(line_nodes, threshold_m=500.0))
        for u in ("A", "B", "C"):
            for v in ("A", "B", "C"):
                if u != v:
                    assert graph.edge_distance(u, v) == graph.edge_distance(v, u)
                    assert graph.edge_distance(u, v) is not None

    def test_cost_is_great_circle_distance(self, line_nodes):
        edge = auto_connect(line_nodes, threshold_m=150.0)[0]
        expected = distance(line_nodes[0].position, line_nodes[1].position)
        assert edge.distance_m == pytest.approx(expected, rel=1e-9)

    def test_default_threshold_is_100_m(self, make_node):
        # 0.0008 deg ~ 89 m, 0.0010 deg ~ 111 m
        nodes = [make_node("A", 0, 0), make_node("B", 0, 0.0008), make_node("C", 0, 0.0018)]
        edges = auto_connect(nodes)
        assert [(e.from_node_id, e.to_node_id) for e in edges] == [("A", "B")]

    def test_threshold_from_config(self, line_nodes):
        edges = auto_connect(line_nodes, config=NavConfig(auto_connect_threshold_m=50.0))
        assert edges == []

    def test_one_edge_per_pair(self, line_nodes):
        edges = auto_connect(line_nodes, threshold_m=1000.0)
        assert len(edges) == 3

    def test_fewer_than_two_nodes(self, make_node):
        assert auto_connect([]) == []
        assert auto_connect([make_node("A", 0, 0)]) == []
