# models.py
# Shared data structures and enums used across all modules.

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


# ---------------------------------------------------------------------------
# Coordinate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Coord:
    """Immutable geographic coordinate."""
    lat: float
    lon: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lon": self.lon}


# ---------------------------------------------------------------------------
# Graph records
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class NavNode:
    """
    A navigable, geo-referenced point of a project.

    Identity is the id alone: two nodes with the same id compare equal
    whatever their label or position.
    """
    id: str
    label: str
    position: Coord
    image_offset: Tuple[float, float] = (0.0, 0.0)   # pixels in the overlay image
    project_id: str = ""
    accessible: bool = True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NavNode):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass
class NavEdge:
    """A traversable connection between two nodes."""
    id: str
    from_node_id: str
    to_node_id: str
    distance_m: float
    project_id: str = ""
    bidirectional: bool = True
    accessible: bool = True
    description: Optional[str] = None


# ---------------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------------

class TurnDirection(Enum):
    START        = "start"
    STRAIGHT     = "straight"
    SLIGHT_LEFT  = "turn-slight-left"
    LEFT         = "turn-left"
    SHARP_LEFT   = "turn-sharp-left"
    SLIGHT_RIGHT = "turn-slight-right"
    RIGHT        = "turn-right"
    SHARP_RIGHT  = "turn-sharp-right"
    U_TURN       = "u-turn"
    ARRIVE       = "arrive"


@dataclass(frozen=True)
class Instruction:
    """A single turn-by-turn step of a route."""
    node_id: str
    text: str
    distance_from_start: float   # metres
    direction: TurnDirection

    def to_dict(self) -> dict:
        return {
            "node_id": self.node_id,
            "text": self.text,
            "distance_from_start": self.distance_from_start,
            "direction": self.direction.value,
        }

    @staticmethod
    def from_dict(d: dict) -> "Instruction":
        return Instruction(
            node_id=d["node_id"],
            text=d["text"],
            distance_from_start=float(d["distance_from_start"]),
            direction=TurnDirection(d["direction"]),
        )


@dataclass(frozen=True)
class RouteResult:
    """Planner output: node sequence, cost and derived instructions."""
    node_ids: Tuple[str, ...]
    total_distance_m: float
    estimated_time_min: float
    instructions: Tuple[Instruction, ...]

    def to_dict(self) -> dict:
        return {
            "node_ids": list(self.node_ids),
            "total_distance_m": self.total_distance_m,
            "estimated_time_min": self.estimated_time_min,
            "instructions": [i.to_dict() for i in self.instructions],
        }

    @staticmethod
    def from_dict(d: dict) -> "RouteResult":
        return RouteResult(
            node_ids=tuple(d["node_ids"]),
            total_distance_m=float(d["total_distance_m"]),
            estimated_time_min=float(d["estimated_time_min"]),
            instructions=tuple(Instruction.from_dict(i) for i in d["instructions"]),
        )


class PlanningErrorKind(Enum):
    UNKNOWN_NODE  = "unknown_node"
    UNREACHABLE   = "unreachable"
    NO_PATH_FOUND = "no_path_found"


@dataclass(frozen=True)
class PlanningError:
    """Returned (not raised) by the planner when no route can be produced."""
    kind: PlanningErrorKind
    message: str
    node_id: Optional[str] = None


# ---------------------------------------------------------------------------
# Live position
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PositionSample:
    """One fix from the location feed."""
    lat: float
    lon: float
    accuracy: float = 0.0     # metres
    speed: float = 0.0        # m/s
    heading: float = 0.0      # degrees
    timestamp: float = 0.0    # unix seconds

    @property
    def coord(self) -> Coord:
        return Coord(self.lat, self.lon)


# ---------------------------------------------------------------------------
# Navigation session
# ---------------------------------------------------------------------------

class SessionState(Enum):
    IDLE     = "idle"
    PLANNING = "planning"
    ACTIVE   = "active"
    ARRIVED  = "arrived"
    FAILED   = "failed"


class FailureReason(Enum):
    NO_LOCATION         = "NO_LOCATION"
    NO_NODES            = "NO_NODES"
    NO_START_NODE       = "NO_START_NODE"
    NO_DESTINATION_NODE = "NO_DESTINATION_NODE"
    NO_PATH             = "NO_PATH"
    TRACKING_FAILED     = "TRACKING_FAILED"
    UNKNOWN_ERROR       = "UNKNOWN_ERROR"


@dataclass(frozen=True)
class NavigationSnapshot:
    """Read-only view of a navigation session, safe to hand to any reader."""
    state: SessionState
    version: int = 0
    route: Optional[RouteResult] = None
    step_index: int = 0
    current_instruction: Optional[Instruction] = None
    position: Optional[Coord] = None
    distance_to_next: float = 0.0                      # metres
    remaining_distance: str = "0 m"
    remaining_time: str = "0 min"
    polyline: Tuple[Coord, ...] = field(default_factory=tuple)
    bearing_to_next: Optional[float] = None            # degrees
    failure: Optional[FailureReason] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None
