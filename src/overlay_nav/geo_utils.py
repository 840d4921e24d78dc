# geo_utils.py
# Pure mathematical / geographic helper functions.
# No side effects; depends only on models for the Coord / TurnDirection types.

import math

from .models import Coord, TurnDirection


EARTH_RADIUS_M = 6_371_000.0

# Upper bound (inclusive) of |angle| for each turn band, smallest first.
STRAIGHT_MAX_DEG = 15.0
SLIGHT_MAX_DEG = 45.0
TURN_MAX_DEG = 135.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points in metres.

    Args:
        lat1, lon1: Origin in decimal degrees.
        lat2, lon2: Destination in decimal degrees.

    Returns:
        Distance in metres.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    # Rounding can push `a` a hair past 1.0 for antipodal points.
    a = min(1.0, a)
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance(a: Coord, b: Coord) -> float:
    """haversine_distance() for two Coord values."""
    return haversine_distance(a.lat, a.lon, b.lat, b.lon)


def calculate_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Forward azimuth (bearing) from point 1 to point 2 in degrees [0, 360).

    Args:
        lat1, lon1: Origin in decimal degrees.
        lat2, lon2: Destination in decimal degrees.

    Returns:
        Bearing in degrees.
    """
    rlat1, rlon1 = math.radians(lat1), math.radians(lon1)
    rlat2, rlon2 = math.radians(lat2), math.radians(lon2)
    d_lon = rlon2 - rlon1
    y = math.sin(d_lon) * math.cos(rlat2)
    x = math.cos(rlat1) * math.sin(rlat2) - math.sin(rlat1) * math.cos(rlat2) * math.cos(d_lon)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def turn_angle(prev: Coord, curr: Coord, nxt: Coord) -> float:
    """
    Signed turn angle at `curr` in degrees, range (-180, 180].

    Planar approximation on raw degree deltas, good enough for the short
    legs of a single site. Vectors are (east, north) so that a positive
    angle is a left turn and a negative angle a right turn.

    Args:
        prev: Point the walker comes from.
        curr: Point where the turn happens.
        nxt:  Point the walker heads to.

    Returns:
        Angle in degrees; 0 when either leg has zero length.
    """
    in_x, in_y = curr.lon - prev.lon, curr.lat - prev.lat
    out_x, out_y = nxt.lon - curr.lon, nxt.lat - curr.lat

    dot = in_x * out_x + in_y * out_y
    cross = in_x * out_y - in_y * out_x
    if dot == 0 and cross == 0:
        return 0.0

    angle = math.degrees(math.atan2(cross, dot))
    if angle <= -180.0:
        angle += 360.0
    return angle


def classify_turn(angle: float) -> TurnDirection:
    """
    Discretise a signed turn angle.

    Band edges belong to the smaller band: 15.0 is straight, 15.1 is slight.

    Args:
        angle: Signed angle from turn_angle(), positive = left.

    Returns:
        TurnDirection for the angle.
    """
    magnitude = abs(angle)
    if magnitude <= STRAIGHT_MAX_DEG:
        return TurnDirection.STRAIGHT

    left = angle > 0
    if magnitude <= SLIGHT_MAX_DEG:
        return TurnDirection.SLIGHT_LEFT if left else TurnDirection.SLIGHT_RIGHT
    elif magnitude <= TURN_MAX_DEG:
        return TurnDirection.LEFT if left else TurnDirection.RIGHT
    return TurnDirection.SHARP_LEFT if left else TurnDirection.SHARP_RIGHT
