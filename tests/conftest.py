"""
Shared pytest fixtures for the navigation tests.

Coordinates sit on the equator where 0.0009 degrees of longitude is ~100 m,
which keeps expected distances easy to reason about.
"""

import pytest

from overlay_nav.graph import build_graph
from overlay_nav.models import Coord, NavEdge, NavNode
from overlay_nav.nav_config import NavConfig

# ~100 m of longitude at the equator
STEP = 0.0009


@pytest.fixture
def make_node():
    def _make(node_id, lat, lon, label=None, accessible=True):
        return NavNode(
            id=node_id,
            label=label or node_id,
            position=Coord(lat, lon),
            project_id="p1",
            accessible=accessible,
        )
    return _make


@pytest.fixture
def make_edge():
    def _make(u, v, dist, bidirectional=True, accessible=True, edge_id=None):
        return NavEdge(
            id=edge_id or f"{u}-{v}",
            from_node_id=u,
            to_node_id=v,
            distance_m=dist,
            project_id="p1",
            bidirectional=bidirectional,
            accessible=accessible,
        )
    return _make


@pytest.fixture
def line_nodes(make_node):
    """A(0,0) - B(0,0.0009) - C(0,0.0018), three collinear nodes ~100 m apart."""
    return [
        make_node("A", 0.0, 0.0, "Gate"),
        make_node("B", 0.0, STEP, "Hall"),
        make_node("C", 0.0, 2 * STEP, "Exit"),
    ]


@pytest.fixture
def line_graph(line_nodes, make_edge):
    return build_graph(line_nodes, [make_edge("A", "B", 100.0), make_edge("B", "C", 100.0)])


@pytest.fixture
def config():
    return NavConfig()
