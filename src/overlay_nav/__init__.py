"""Route planning and turn-by-turn guidance over map-overlay navigation points."""

from .graph import GraphError, NavigationGraph, auto_connect, build_graph
from .models import (
    Coord,
    FailureReason,
    Instruction,
    NavEdge,
    NavigationSnapshot,
    NavNode,
    PlanningError,
    PlanningErrorKind,
    PositionSample,
    RouteResult,
    SessionState,
    TurnDirection,
)
from .nav_config import NavConfig
from .navigator import NavigationSystem
from .position_feed import PositionFeed
from .route_calculator import RouteCalculator, estimate_direct, find_path
from .route_tracker import RouteTracker
