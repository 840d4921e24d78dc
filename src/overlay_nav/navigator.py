# navigator.py
# Public entry point for the navigation system.
# Owns no business logic, delegates everything to specialist modules.

import logging
from typing import List, Optional, Union

from .graph import NavigationGraph, auto_connect, build_graph
from .models import (
    Coord,
    NavEdge,
    NavigationSnapshot,
    NavNode,
    PlanningError,
    PositionSample,
    RouteResult,
    SessionState,
)
from .nav_config import NavConfig
from .nav_logger import NavLogger
from .points import PointRecords, nodes_from_points
from .position_feed import PositionFeed
from .route_calculator import RouteCalculator
from .route_tracker import RouteTracker

logger = logging.getLogger(__name__)


class NavigationSystem:
    """
    High-level navigation facade for one project.

    Typical lifecycle:
        nav = NavigationSystem.from_points(point_table)
        nav.start_navigation(Coord(41.0151, 28.9795), "entrance")

        # GPS loop:
        snapshot = nav.update(Coord(lat, lon))

    Args:
        nodes:  Navigation nodes of the project.
        edges:  Explicit edges; when None, nodes are auto-connected.
        config: Optional NavConfig; defaults to NavConfig().
        feed:   PositionFeed the tracker subscribes to while active. Defaults
                to one filtering at config.max_accuracy_m.
    """

    def __init__(
        self,
        nodes: List[NavNode],
        edges: Optional[List[NavEdge]] = None,
        config: Optional[NavConfig] = None,
        feed: Optional[PositionFeed] = None,
    ) -> None:
        self.config = config or NavConfig()

        if edges is None:
            edges = auto_connect(nodes, config=self.config)
        self._graph: NavigationGraph = build_graph(nodes, edges)

        if feed is None:
            feed = PositionFeed(max_accuracy_m=self.config.max_accuracy_m)
        self._feed = feed

        # Specialist modules
        self._calculator = RouteCalculator(self._graph, self.config)
        self._tracker    = RouteTracker(self._graph, self.config, feed)
        self._logger     = NavLogger(self.config)

        self._tracker.add_listener(self._on_snapshot)
        logger.info(f"Navigation ready: {len(self._graph)} nodes, {len(edges)} edges.")

    @classmethod
    def from_points(
        cls,
        records: PointRecords,
        project_id: Optional[str] = None,
        edges: Optional[List[NavEdge]] = None,
        config: Optional[NavConfig] = None,
        feed: Optional[PositionFeed] = None,
    ) -> "NavigationSystem":
        """Build the system straight from a project's point records."""
        config = config or NavConfig()
        nodes = nodes_from_points(records, project_id, config.non_navigational_markers)
        return cls(nodes, edges, config, feed)

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def plan(self, start_id: str, goal_id: str) -> Union[RouteResult, PlanningError]:
        """Compute a route between two nodes without starting a session."""
        return self._calculator.calculate(start_id, goal_id)

    # ------------------------------------------------------------------
    # Navigation control
    # ------------------------------------------------------------------

    def start_navigation(self, position: Optional[Coord], destination_id: str) -> NavigationSnapshot:
        """
        Snap to the nearest node, calculate a route and begin tracking.

        Args:
            position:       Current coordinate (None if no fix yet).
            destination_id: Target node id.

        Returns:
            Session snapshot; check .state / .failure for the outcome.
        """
        logger.info(f"Starting navigation: {position} → {destination_id}")
        snapshot = self._tracker.start(position, destination_id)

        if snapshot.state == SessionState.FAILED:
            logger.warning(f"Navigation could not start: {snapshot.failure.value}")
            return snapshot

        self._logger.save_route(snapshot.route)
        logger.info(f"First instruction: {snapshot.route.instructions[0].text}")
        return snapshot

    def stop_navigation(self) -> NavigationSnapshot:
        """Forcibly end the current navigation session."""
        return self._tracker.stop()

    # ------------------------------------------------------------------
    # GPS update: call this on every position fix
    # ------------------------------------------------------------------

    def update(self, position: Union[Coord, PositionSample]) -> NavigationSnapshot:
        """
        Process a new position fix and return the current navigation status.

        Args:
            position: Current geographic coordinate or raw feed sample.

        Returns:
            NavigationSnapshot with state, instruction and metrics.
        """
        return self._tracker.on_position_update(position)

    def _on_snapshot(self, snapshot: NavigationSnapshot) -> None:
        if snapshot.state in (SessionState.ACTIVE, SessionState.ARRIVED):
            self._logger.log_event(snapshot)

    # ------------------------------------------------------------------
    # Convenience read-only properties
    # ------------------------------------------------------------------

    @property
    def graph(self) -> NavigationGraph:
        return self._graph

    @property
    def tracker(self) -> RouteTracker:
        return self._tracker

    @property
    def feed(self) -> PositionFeed:
        return self._feed

    @property
    def snapshot(self) -> NavigationSnapshot:
        return self._tracker.snapshot()

    @property
    def is_active(self) -> bool:
        return self._tracker.is_active
