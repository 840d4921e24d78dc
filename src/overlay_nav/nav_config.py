# nav_config.py
# All tuneable constants in one place.
# Pass a NavConfig instance to every module that needs settings.

import os
from dataclasses import dataclass
from typing import Optional, Tuple


# ---------------------------------------------------------------------------
# Point-label conventions (used when deriving nodes from project points)
# ---------------------------------------------------------------------------

# Labels reserved for overlay-image calibration, never walkable destinations.
NON_NAVIGATIONAL_MARKERS: Tuple[str, ...] = ("sw corner", "ne corner", "bound")

WALKING_SPEED_MPS: float = 1.4  # ~5 km/h


# ---------------------------------------------------------------------------
# Main config
# ---------------------------------------------------------------------------

@dataclass
class NavConfig:
    # Routing
    walking_speed_mps: float = WALKING_SPEED_MPS
    auto_connect_threshold_m: float = 100.0     # max gap bridged by auto_connect()
    max_snap_distance_m: Optional[float] = None  # None = always snap to the nearest node

    # Point records
    non_navigational_markers: Tuple[str, ...] = NON_NAVIGATIONAL_MARKERS

    # Progress tracking
    arrival_radius_m: float = 10.0               # distance to mark a waypoint as reached
    max_accuracy_m: Optional[float] = None       # feed drops fixes less accurate than this

    # Logging
    log_dir: Optional[str] = None                # None disables route / session files
    route_filename: str = "active_route.json"
    session_filename: str = "nav_session.jsonl"

    @property
    def route_filepath(self) -> Optional[str]:
        if self.log_dir is None:
            return None
        return os.path.join(self.log_dir, self.route_filename)

    @property
    def session_filepath(self) -> Optional[str]:
        if self.log_dir is None:
            return None
        return os.path.join(self.log_dir, self.session_filename)
