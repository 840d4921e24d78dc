# nav_logger.py
# Handles all file I/O for the navigation system.
# Saves planned routes and navigation events as JSON.

import json
import logging
import os
from datetime import datetime
from typing import Optional

from .models import NavigationSnapshot, RouteResult
from .nav_config import NavConfig

# Standard Python logger, configure at app entry point if needed
logger = logging.getLogger(__name__)


class NavLogger:
    """
    Persists route data and navigation events to JSON files.

    Does nothing when config.log_dir is None.

    Args:
        config: NavConfig instance for file paths and directories.
    """

    def __init__(self, config: Optional[NavConfig] = None) -> None:
        self.config = config or NavConfig()
        if self.enabled:
            os.makedirs(self.config.log_dir, exist_ok=True)

    @property
    def enabled(self) -> bool:
        return self.config.log_dir is not None

    # ------------------------------------------------------------------
    # Route persistence
    # ------------------------------------------------------------------

    def save_route(self, route: RouteResult) -> bool:
        """
        Serialize a route to JSON.

        Args:
            route: Planned RouteResult.

        Returns:
            True on success, False on failure or when logging is disabled.
        """
        filepath = self.config.route_filepath
        if filepath is None:
            return False
        try:
            data = {
                "saved_at": datetime.now().isoformat(),
                "step_count": len(route.instructions),
                "route": route.to_dict(),
            }
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            logger.info(f"Route saved to {filepath} ({len(route.instructions)} steps).")
            return True
        except OSError as e:
            logger.error(f"Failed to save route to {filepath}: {e}")
            return False

    def load_route(self, filepath: Optional[str] = None) -> Optional[RouteResult]:
        """
        Load a previously saved route from JSON.

        Args:
            filepath: Path override; uses config default if omitted.

        Returns:
            RouteResult, or None if loading failed.
        """
        path = filepath or self.config.route_filepath
        if path is None:
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            route = RouteResult.from_dict(data["route"])
            logger.info(f"Route loaded from {path} ({len(route.instructions)} steps).")
            return route
        except (OSError, KeyError, ValueError) as e:
            logger.error(f"Failed to load route from {path}: {e}")
            return None

    # ------------------------------------------------------------------
    # Session event logging
    # ------------------------------------------------------------------

    def log_event(self, snapshot: NavigationSnapshot) -> None:
        """
        Append a single navigation event to the session log file.

        Args:
            snapshot: Session state right after a position update.
        """
        event_file = self.config.session_filepath
        if event_file is None:
            return
        position = snapshot.position
        entry = {
            "timestamp": datetime.now().isoformat(),
            "lat": position.lat if position else None,
            "lon": position.lon if position else None,
            "state": snapshot.state.value,
            "step_index": snapshot.step_index,
            "message": snapshot.message,
            "distance_to_next": snapshot.distance_to_next,
        }
        try:
            with open(event_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except OSError as e:
            logger.error(f"Failed to write event log: {e}")
