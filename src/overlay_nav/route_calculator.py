# route_calculator.py
# A* pathfinding on a NavigationGraph.
# Returns a RouteResult, or a PlanningError value when no route exists.

import heapq
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from .geo_utils import distance
from .graph import NavigationGraph
from .instruction_builder import synthesize
from .models import Coord, NavNode, PlanningError, PlanningErrorKind, RouteResult
from .nav_config import NavConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _find_nearest_node(graph: NavigationGraph, coord: Coord) -> Tuple[Optional[NavNode], float]:
    """Return the closest accessible node to coord and its distance in metres."""
    best_node = None
    min_dist = float("inf")
    for node in graph.accessible_nodes():
        d = distance(coord, node.position)
        if d < min_dist:
            min_dist = d
            best_node = node
    return best_node, min_dist


def _reconstruct_path(
    came_from: Dict[str, Tuple[str, float]], start: str, end: str
) -> Tuple[List[str], List[float]]:
    """Walk predecessor pointers back to start; returns (node ids, leg costs)."""
    path = [end]
    legs: List[float] = []
    curr = end
    while curr != start:
        parent, cost = came_from[curr]
        path.append(parent)
        legs.append(cost)
        curr = parent
    path.reverse()
    legs.reverse()
    return path, legs


def _astar(
    graph: NavigationGraph, start: str, goal: str
) -> Optional[Tuple[List[str], List[float]]]:
    goal_pos = graph.position(goal)

    def heuristic(node_id: str) -> float:
        return distance(graph.position(node_id), goal_pos)

    counter = 0                                  # FIFO tie-break among equal f
    open_set: list = [(heuristic(start), counter, start)]
    came_from: Dict[str, Tuple[str, float]] = {}
    cost_so_far: Dict[str, float] = {start: 0.0}
    closed: set = set()

    while open_set:
        _, _, current = heapq.heappop(open_set)
        if current in closed:
            continue
        if current == goal:
            return _reconstruct_path(came_from, start, goal)
        closed.add(current)

        for neighbor, edge_cost in graph.neighbors(current):
            if neighbor in closed:
                continue
            new_cost = cost_so_far[current] + edge_cost
            if neighbor not in cost_so_far or new_cost < cost_so_far[neighbor]:
                cost_so_far[neighbor] = new_cost
                came_from[neighbor] = (current, edge_cost)
                counter += 1
                heapq.heappush(open_set, (new_cost + heuristic(neighbor), counter, neighbor))

    return None


def _route(graph: NavigationGraph, path: List[str], legs: List[float], config: NavConfig) -> RouteResult:
    total = sum(legs)
    return RouteResult(
        node_ids=tuple(path),
        total_distance_m=total,
        estimated_time_min=total / config.walking_speed_mps / 60,
        instructions=tuple(synthesize(path, graph, legs)),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def find_path(
    graph: NavigationGraph,
    start_id: str,
    goal_id: str,
    config: Optional[NavConfig] = None,
) -> Union[RouteResult, PlanningError]:
    """
    Lowest-cost route from start_id to goal_id.

    Checks run in order: unknown start, unknown goal, isolated start,
    isolated goal, then the search itself. A route to the start node itself
    is always valid, even for a node with no edges at all.

    The route is the shortest one only while no edge costs less than the
    great-circle distance between its nodes, since the heuristic is that
    distance. build_graph() warns about edges that break this.

    Args:
        graph:    Graph built by build_graph().
        start_id: Node id to leave from.
        goal_id:  Node id to reach.
        config:   NavConfig instance (walking speed).

    Returns:
        RouteResult on success, PlanningError otherwise.
    """
    config = config or NavConfig()

    if start_id not in graph:
        return PlanningError(PlanningErrorKind.UNKNOWN_NODE, f"Unknown start node {start_id!r}.", start_id)
    if goal_id not in graph:
        return PlanningError(PlanningErrorKind.UNKNOWN_NODE, f"Unknown goal node {goal_id!r}.", goal_id)

    if start_id == goal_id:
        return _route(graph, [start_id], [], config)

    if not graph.has_outgoing(start_id):
        logger.warning(f"Start node {start_id} has no connections.")
        return PlanningError(PlanningErrorKind.UNREACHABLE, f"Start node {start_id!r} is isolated.", start_id)
    if not graph.has_incoming(goal_id):
        logger.warning(f"Goal node {goal_id} has no connections.")
        return PlanningError(PlanningErrorKind.UNREACHABLE, f"Goal node {goal_id!r} is isolated.", goal_id)

    found = _astar(graph, start_id, goal_id)
    if found is None:
        logger.warning(f"No path between {start_id} and {goal_id}.")
        return PlanningError(
            PlanningErrorKind.NO_PATH_FOUND,
            f"No path between {start_id!r} and {goal_id!r}.",
        )

    path, legs = found
    route = _route(graph, path, legs, config)
    logger.info(
        f"Path found: {len(path)} nodes, {route.total_distance_m:.1f} m, "
        f"{route.estimated_time_min:.1f} min."
    )
    return route


@dataclass(frozen=True)
class DirectEstimate:
    """Straight-line distance/time between two coordinates."""
    distance_m: float
    estimated_time_min: float


def estimate_direct(origin: Coord, destination: Coord, config: Optional[NavConfig] = None) -> DirectEstimate:
    """As-the-crow-flies estimate, ignoring the graph entirely."""
    config = config or NavConfig()
    d = distance(origin, destination)
    return DirectEstimate(distance_m=d, estimated_time_min=d / config.walking_speed_mps / 60)


class RouteCalculator:
    """
    Calculates walking routes between nodes of one project graph.

    Args:
        graph:  Populated NavigationGraph from build_graph().
        config: NavConfig instance.
    """

    def __init__(self, graph: NavigationGraph, config: Optional[NavConfig] = None) -> None:
        self.graph = graph
        self.config = config or NavConfig()

    def calculate(self, start_id: str, goal_id: str) -> Union[RouteResult, PlanningError]:
        return find_path(self.graph, start_id, goal_id, self.config)

    def nearest_node(self, coord: Coord) -> Optional[NavNode]:
        """
        Accessible node closest to coord (first one wins on ties).

        No distance cut-off unless config.max_snap_distance_m is set.
        """
        node, dist = _find_nearest_node(self.graph, coord)
        limit = self.config.max_snap_distance_m
        if node is not None and limit is not None and dist > limit:
            logger.warning(f"Nearest node {node.id} is {dist:.1f} m away (limit {limit} m).")
            return None
        return node
