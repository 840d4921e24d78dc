# route_tracker.py
# State machine that tracks a user's position against a planned route.
# Call start() once, then feed positions through on_position_update() or a PositionFeed.

import logging
import threading
from typing import Callable, List, Optional, Union

from .geo_utils import calculate_bearing, distance
from .graph import NavigationGraph
from .models import (
    Coord,
    FailureReason,
    NavigationSnapshot,
    PlanningError,
    PlanningErrorKind,
    PositionSample,
    RouteResult,
    SessionState,
)
from .nav_config import NavConfig
from .position_feed import PositionFeed
from .route_calculator import RouteCalculator

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[NavigationSnapshot], None]
PositionLike = Union[Coord, PositionSample]


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_distance(metres: float) -> str:
    """'850 m' below one kilometre, '1.2 km' from there on."""
    if metres >= 1000:
        return f"{metres / 1000:.1f} km"
    return f"{metres:.0f} m"


def format_duration(minutes: float) -> str:
    """'12 min' below one hour (59.6 shows as '60 min'), '1h 5min' from there on."""
    total = int(max(0.0, minutes) + 0.5)
    if minutes >= 60:
        return f"{total // 60}h {total % 60}min"
    return f"{total} min"


def _as_coord(position: Optional[PositionLike]) -> Optional[Coord]:
    if isinstance(position, PositionSample):
        return position.coord
    return position


# ---------------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------------

class RouteTracker:
    """
    Stateful progress tracker for a single navigation session.

    Every mutation runs under one lock, so start()/stop() from a controller
    thread and updates from the position feed never interleave. Readers get
    immutable NavigationSnapshot objects. Listeners run after the lock is
    released; with several writer threads use .version to skip stale ones.

    Usage:
        tracker = RouteTracker(graph, config, feed)
        tracker.start(current_coord, destination_id)

        # Inside GPS loop (or let the feed call it):
        snapshot = tracker.on_position_update(current_coord)
    """

    def __init__(
        self,
        graph: NavigationGraph,
        config: Optional[NavConfig] = None,
        feed: Optional[PositionFeed] = None,
    ) -> None:
        self.graph = graph
        self.config = config or NavConfig()
        self._feed = feed
        self._calculator = RouteCalculator(graph, self.config)
        self._lock = threading.RLock()
        self._listeners: List[SnapshotListener] = []
        self._pending: List[NavigationSnapshot] = []
        self._subscribed = False
        self._version = 0
        self._clear()

    def _clear(self) -> None:
        self._state = SessionState.IDLE
        self._route: Optional[RouteResult] = None
        self._step_index = 0
        self._position: Optional[Coord] = None
        self._distance_to_next = 0.0
        self._failure: Optional[FailureReason] = None
        self._message = ""

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def add_listener(self, callback: SnapshotListener) -> None:
        with self._lock:
            if callback not in self._listeners:
                self._listeners.append(callback)

    def remove_listener(self, callback: SnapshotListener) -> None:
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    def _publish(self) -> None:
        """Queue a snapshot of the current state (lock held)."""
        self._version += 1
        self._pending.append(self._snapshot())

    def _notify(self) -> None:
        """Deliver queued snapshots to listeners. Never call with the lock held."""
        with self._lock:
            pending, self._pending = self._pending, []
            listeners = list(self._listeners)
        for snapshot in pending:
            for callback in listeners:
                try:
                    callback(snapshot)
                except Exception:
                    logger.exception("Navigation listener failed.")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self, start_position: Optional[PositionLike], goal_id: str) -> NavigationSnapshot:
        """
        Plan a route from the node nearest to start_position and begin tracking.

        A session already in progress is stopped first. Failures never
        raise; they leave the tracker in FAILED with a FailureReason.

        Args:
            start_position: Current location, None when no fix is available.
            goal_id:        Destination node id.

        Returns:
            Snapshot of the session after the attempt.
        """
        with self._lock:
            if self._state != SessionState.IDLE:
                logger.info(f"Restarting navigation (was {self._state.value}).")
                self._stop()

            self._state = SessionState.PLANNING
            self._publish()
            try:
                self._plan_and_activate(_as_coord(start_position), goal_id)
            except Exception as e:
                logger.exception("Unexpected error while starting navigation.")
                self._fail(FailureReason.UNKNOWN_ERROR, f"An unexpected error occurred: {e}")
            snapshot = self._snapshot()
        self._notify()
        return snapshot

    def stop(self) -> NavigationSnapshot:
        """Forcibly end navigation from any state. Safe to call repeatedly."""
        with self._lock:
            was_idle = self._state == SessionState.IDLE and self._route is None
            self._stop()
            if not was_idle:
                logger.info("Navigation stopped.")
                self._publish()
            snapshot = self._snapshot()
        self._notify()
        return snapshot

    def on_position_update(self, position: PositionLike) -> NavigationSnapshot:
        """
        Process one position fix. Ignored unless the session is ACTIVE.

        Args:
            position: Current geographic position.

        Returns:
            Snapshot of the session after the update.
        """
        with self._lock:
            if self._state != SessionState.ACTIVE:
                logger.debug(f"Ignoring position update in state {self._state.value}.")
                return self._snapshot()
            self._apply_position(_as_coord(position))
            self._publish()
            snapshot = self._snapshot()
        self._notify()
        return snapshot

    # ------------------------------------------------------------------
    # Internal transitions (lock held)
    # ------------------------------------------------------------------

    def _plan_and_activate(self, start_position: Optional[Coord], goal_id: str) -> None:
        if start_position is None:
            self._fail(
                FailureReason.NO_LOCATION,
                "Unable to determine your current location.",
            )
            return
        self._position = start_position

        if not self.graph.accessible_nodes():
            self._fail(FailureReason.NO_NODES, "No navigation points found for this map.")
            return

        start_node = self._calculator.nearest_node(start_position)
        if start_node is None:
            self._fail(
                FailureReason.NO_START_NODE,
                "Cannot find a navigation point near your current location.",
            )
            return
        logger.info(f"Start node: {start_node.id} ({start_node.label}), goal: {goal_id}.")

        result = self._calculator.calculate(start_node.id, goal_id)
        if isinstance(result, PlanningError):
            self._fail(self._reason_for(result, goal_id), result.message)
            return

        self._route = result
        self._step_index = 0

        if self._feed is not None and not self._subscribe():
            self._fail(
                FailureReason.TRACKING_FAILED,
                "Unable to start location tracking for navigation.",
            )
            return

        self._state = SessionState.ACTIVE
        logger.info(f"Route ready: {len(result.instructions)} steps, {format_distance(result.total_distance_m)}.")
        # The start fix is the first live sample of the session.
        self._apply_position(start_position)
        self._publish()

    @staticmethod
    def _reason_for(error: PlanningError, goal_id: str) -> FailureReason:
        if error.kind == PlanningErrorKind.UNKNOWN_NODE:
            if error.node_id == goal_id:
                return FailureReason.NO_DESTINATION_NODE
            return FailureReason.NO_START_NODE
        return FailureReason.NO_PATH

    def _apply_position(self, position: Coord) -> None:
        self._position = position
        instructions = self._route.instructions
        last = len(instructions) - 1

        target = self.graph.position(instructions[self._step_index].node_id)
        dist = distance(position, target)

        if dist < self.config.arrival_radius_m:
            if self._step_index < last:
                self._step_index += 1
                target = self.graph.position(instructions[self._step_index].node_id)
                dist = distance(position, target)
                logger.info(f"Waypoint reached: step {self._step_index}/{last}: {instructions[self._step_index].text}")
            else:
                self._state = SessionState.ARRIVED
                self._unsubscribe()
                logger.info("Destination reached.")

        self._distance_to_next = dist

    def _fail(self, reason: FailureReason, message: str) -> None:
        logger.warning(f"Navigation failed [{reason.value}]: {message}")
        self._unsubscribe()
        self._route = None
        self._step_index = 0
        self._distance_to_next = 0.0
        self._state = SessionState.FAILED
        self._failure = reason
        self._message = message
        self._publish()

    def _stop(self) -> None:
        self._unsubscribe()
        self._clear()

    # ------------------------------------------------------------------
    # Feed subscription
    # ------------------------------------------------------------------

    def _on_sample(self, sample: PositionSample) -> None:
        self.on_position_update(sample)

    def _subscribe(self) -> bool:
        try:
            self._subscribed = bool(self._feed.subscribe(self._on_sample))
        except Exception:
            logger.exception("Position feed subscription failed.")
            self._subscribed = False
        return self._subscribed

    def _unsubscribe(self) -> None:
        if self._subscribed and self._feed is not None:
            self._feed.unsubscribe(self._on_sample)
        self._subscribed = False

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    def _snapshot(self) -> NavigationSnapshot:
        route = self._route
        live = route is not None and self._state in (SessionState.ACTIVE, SessionState.ARRIVED)
        if not live:
            return NavigationSnapshot(
                state=self._state,
                version=self._version,
                position=self._position,
                failure=self._failure,
                message=self._message,
            )

        instruction = route.instructions[self._step_index]
        if self._state == SessionState.ARRIVED:
            remaining_m, remaining_min = 0.0, 0.0
        else:
            remaining_m = max(0.0, route.total_distance_m - instruction.distance_from_start)
            remaining_min = route.estimated_time_min * (1 - self._step_index / len(route.instructions))

        polyline = (self._position,) + tuple(
            self.graph.position(nid) for nid in route.node_ids[self._step_index:]
        )
        target = self.graph.position(instruction.node_id)
        bearing = calculate_bearing(self._position.lat, self._position.lon, target.lat, target.lon)

        return NavigationSnapshot(
            state=self._state,
            version=self._version,
            route=route,
            step_index=self._step_index,
            current_instruction=instruction,
            position=self._position,
            distance_to_next=self._distance_to_next,
            remaining_distance=format_distance(remaining_m),
            remaining_time=format_duration(remaining_min),
            polyline=polyline,
            bearing_to_next=bearing,
            message=instruction.text,
        )

    def snapshot(self) -> NavigationSnapshot:
        with self._lock:
            return self._snapshot()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == SessionState.ACTIVE

    @property
    def route(self) -> Optional[RouteResult]:
        return self._route
