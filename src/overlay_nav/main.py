# main.py
# Entry point: simulates a GPS loop feeding positions into NavigationSystem.
# In production, replace the test_locations loop with your real GPS source.
#
# Usage: python -m overlay_nav.main [--points points.csv] [--destination LABEL]

import argparse
import logging
import time

import pandas as pd

from .models import Coord, PositionSample, SessionState
from .nav_config import NavConfig
from .navigator import NavigationSystem
from .points import read_points_csv

# ------------------------------------------------------------------
# Logging setup. Configure once here, all modules inherit
# ------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

# ------------------------------------------------------------------
# Config: tweak thresholds or paths here, not inside the modules
# ------------------------------------------------------------------
config = NavConfig(
    arrival_radius_m=10.0,
    auto_connect_threshold_m=100.0,
    max_accuracy_m=25.0,
    log_dir="logs",
    route_filename="active_route.json",
)

# ------------------------------------------------------------------
# Demo site: four walkable points on a ~90 m grid plus two calibration corners
# ------------------------------------------------------------------
DEMO_POINTS = pd.DataFrame([
    {"id": "entrance", "label": "Entrance", "lat": 41.0000, "lng": 29.0000, "imageX": 40,  "imageY": 620, "projectId": "demo"},
    {"id": "lobby",    "label": "Lobby",    "lat": 41.0008, "lng": 29.0000, "imageX": 40,  "imageY": 320, "projectId": "demo"},
    {"id": "cafe",     "label": "Cafe",     "lat": 41.0008, "lng": 29.0010, "imageX": 360, "imageY": 320, "projectId": "demo"},
    {"id": "library",  "label": "Library",  "lat": 41.0016, "lng": 29.0010, "imageX": 360, "imageY": 20,  "projectId": "demo"},
    {"id": "sw",       "label": "SW corner", "lat": 40.9995, "lng": 28.9995, "imageX": 0,  "imageY": 640, "projectId": "demo"},
    {"id": "ne",       "label": "NE corner", "lat": 41.0020, "lng": 29.0015, "imageX": 400, "imageY": 0,   "projectId": "demo"},
])

test_locations = [
    Coord(41.00001, 29.00001),   # Start, at the entrance
    Coord(41.00040, 29.00000),   # Walking north
    Coord(41.00078, 29.00001),   # Lobby: turn right
    Coord(41.00080, 29.00050),   # Walking east
    Coord(41.00081, 29.00098),   # Cafe: turn left
    Coord(41.00120, 29.00100),   # Walking north
    Coord(41.00159, 29.00100),   # Library: arrival
]


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulated overlay navigation session.")
    parser.add_argument("--points", help="CSV of project points (label, lat, lng, imageX, imageY, projectId, id)")
    parser.add_argument("--destination", default="Library", help="Label of the destination point")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    points = read_points_csv(args.points) if args.points else DEMO_POINTS

    # 1. Boot system (builds the graph once)
    nav = NavigationSystem.from_points(points, config=config)
    feed = nav.feed

    destination = next(
        (n for n in nav.graph.nodes.values() if n.label.lower() == args.destination.lower()),
        None,
    )
    if destination is None:
        print(f"[Main] Unknown destination: {args.destination}")
        return

    # 2. Request a route
    snapshot = nav.start_navigation(test_locations[0], destination.id)
    if snapshot.state == SessionState.FAILED:
        print(f"[Main] Could not start navigation: {snapshot.failure.value}: {snapshot.message}")
        return

    for step in snapshot.route.instructions:
        print(f"  {step.distance_from_start:6.1f} m  {step.text}")
    print(f"[Main] {snapshot.remaining_distance}, about {snapshot.remaining_time}.")

    print("\n--- GPS Loop Active ---")

    # 3. GPS loop, replace with real GPS feed in production
    for i, position in enumerate(test_locations[1:], start=1):
        feed.publish(PositionSample(position.lat, position.lon, accuracy=5.0, timestamp=float(i)))
        snapshot = nav.snapshot

        print(
            f"  GPS {position} → [{snapshot.state.name}] {snapshot.message} "
            f"({snapshot.distance_to_next:.0f} m, {snapshot.remaining_distance} left)"
        )

        if snapshot.state == SessionState.ARRIVED:
            print("  ✓  Destination reached. Navigation ended.")
            break

        # Simulate GPS poll interval (remove in real use)
        time.sleep(0.05)

    nav.stop_navigation()
    print("\n--- Session complete ---")
    print(f"    Log files written to: {config.log_dir}/")


if __name__ == "__main__":
    main()
