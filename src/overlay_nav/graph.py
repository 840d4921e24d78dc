# graph.py
# In-memory navigation graph built from a project's nodes and edges.
# Depends only on: geo_utils, models, nav_config.

import logging
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from .geo_utils import EARTH_RADIUS_M, distance
from .models import Coord, NavEdge, NavNode
from .nav_config import NavConfig

logger = logging.getLogger(__name__)

# Slack allowed when an edge is shorter than its great-circle distance.
SHORTCUT_TOLERANCE_M = 1.0


class GraphError(ValueError):
    """Malformed graph input (duplicate node id, edge to an unknown node...)."""


# ---------------------------------------------------------------------------
# Routing graph
# ---------------------------------------------------------------------------

class NavigationGraph:
    """
    Node lookup plus directed adjacency lists of (neighbor id, distance).

    Parallel edges are kept as separate entries; the planner's relaxation
    step picks the cheaper one on its own.
    """

    def __init__(self) -> None:
        self.nodes: Dict[str, NavNode] = {}
        self.adjacency: Dict[str, List[Tuple[str, float]]] = {}
        self._inbound: Dict[str, int] = {}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def add_node(self, node: NavNode) -> None:
        if node.id in self.nodes:
            raise GraphError(f"Duplicate node id: {node.id!r}")
        self.nodes[node.id] = node
        self.adjacency[node.id] = []
        self._inbound[node.id] = 0

    def add_edge(self, u: str, v: str, distance_m: float) -> None:
        """Add a single directed entry u -> v."""
        if u not in self.nodes or v not in self.nodes:
            missing = u if u not in self.nodes else v
            raise GraphError(f"Edge {u!r} -> {v!r} references unknown node {missing!r}")
        self.adjacency[u].append((v, distance_m))
        self._inbound[v] += 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def neighbors(self, node_id: str) -> List[Tuple[str, float]]:
        return self.adjacency.get(node_id, [])

    def has_outgoing(self, node_id: str) -> bool:
        return bool(self.adjacency.get(node_id))

    def has_incoming(self, node_id: str) -> bool:
        return self._inbound.get(node_id, 0) > 0

    def edge_distance(self, u: str, v: str) -> Optional[float]:
        """Cheapest direct u -> v cost, or None when not adjacent."""
        costs = [d for nid, d in self.neighbors(u) if nid == v]
        return min(costs) if costs else None

    def position(self, node_id: str) -> Coord:
        return self.nodes[node_id].position

    def accessible_nodes(self) -> List[NavNode]:
        return [n for n in self.nodes.values() if n.accessible]

    @property
    def edge_count(self) -> int:
        return sum(len(v) for v in self.adjacency.values())


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def build_graph(nodes: Iterable[NavNode], edges: Iterable[NavEdge]) -> NavigationGraph:
    """
    Build a NavigationGraph in one pass over the project's records.

    Inaccessible edges are left out entirely, and so is every edge touching
    an inaccessible node: such a node stays addressable but unreachable.

    Args:
        nodes: All nodes of the project.
        edges: All edges of the project (explicit or from auto_connect()).

    Returns:
        NavigationGraph ready for route calculation.

    Raises:
        GraphError: On duplicate node ids, negative distances or edges
                    referencing nodes that do not exist.
    """
    graph = NavigationGraph()
    for node in nodes:
        graph.add_node(node)

    skipped = 0
    shortcuts: List[str] = []
    for edge in edges:
        for nid in (edge.from_node_id, edge.to_node_id):
            if nid not in graph:
                raise GraphError(f"Edge {edge.id!r} references unknown node {nid!r}")
        if edge.distance_m < 0:
            raise GraphError(f"Edge {edge.id!r} has negative distance {edge.distance_m}")

        straight = distance(graph.position(edge.from_node_id), graph.position(edge.to_node_id))
        if edge.distance_m < straight - SHORTCUT_TOLERANCE_M:
            shortcuts.append(edge.id)

        if (
            not edge.accessible
            or not graph.nodes[edge.from_node_id].accessible
            or not graph.nodes[edge.to_node_id].accessible
        ):
            skipped += 1
            continue

        graph.add_edge(edge.from_node_id, edge.to_node_id, edge.distance_m)
        if edge.bidirectional:
            graph.add_edge(edge.to_node_id, edge.from_node_id, edge.distance_m)

    if shortcuts:
        logger.warning(
            f"{len(shortcuts)} edge(s) shorter than the straight-line distance "
            f"between their nodes; routes may not be the shortest: {shortcuts[:5]}"
        )
    logger.debug(
        f"Graph built: {len(graph)} nodes, {graph.edge_count} adjacency entries, "
        f"{skipped} inaccessible edges skipped."
    )
    return graph


def auto_connect(
    nodes: List[NavNode],
    threshold_m: Optional[float] = None,
    config: Optional[NavConfig] = None,
) -> List[NavEdge]:
    """
    Connect every pair of nodes lying within threshold_m of each other.

    One bidirectional, accessible edge is produced per unordered pair, its
    cost being the great-circle distance between the two nodes.

    Args:
        nodes:       Nodes to connect, in a stable order.
        threshold_m: Maximum distance bridged; defaults to the config value.
        config:      NavConfig instance (defaults to NavConfig() if omitted).

    Returns:
        List of synthesized NavEdge objects.
    """
    if threshold_m is None:
        threshold_m = (config or NavConfig()).auto_connect_threshold_m
    if len(nodes) < 2:
        return []

    lat = np.radians(np.array([n.position.lat for n in nodes], dtype=float))
    lon = np.radians(np.array([n.position.lon for n in nodes], dtype=float))
    d_lat = lat[:, None] - lat[None, :]
    d_lon = lon[:, None] - lon[None, :]
    a = np.sin(d_lat / 2) ** 2 + np.cos(lat)[:, None] * np.cos(lat)[None, :] * np.sin(d_lon / 2) ** 2
    a = np.clip(a, 0.0, 1.0)
    dist = EARTH_RADIUS_M * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

    rows, cols = np.nonzero(np.triu(dist <= threshold_m, k=1))
    edges: List[NavEdge] = []
    for i, j in zip(rows.tolist(), cols.tolist()):
        a_node, b_node = nodes[i], nodes[j]
        edges.append(NavEdge(
            id=f"{a_node.id}_{b_node.id}",
            from_node_id=a_node.id,
            to_node_id=b_node.id,
            distance_m=float(dist[i, j]),
            project_id=a_node.project_id,
            bidirectional=True,
            accessible=True,
        ))

    logger.info(f"Auto-connected {len(nodes)} nodes with {len(edges)} edges (<= {threshold_m} m).")
    return edges
