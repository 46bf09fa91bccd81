"""Geometry primitives over the waypoint map.

Pure functions: distances, angle normalization and closest/next waypoint
lookup used by the Frenet transform.
"""

import math
from typing import TYPE_CHECKING, Union

import numpy as np

from .exceptions import EmptyWaypointMapError

if TYPE_CHECKING:
    from .waypoint_map import WaypointMap


def deg2rad(x: float) -> float:
    return x * math.pi / 180.0


def rad2deg(x: float) -> float:
    return x * 180.0 / math.pi


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Euclidean distance between (x1, y1) and (x2, y2)."""
    return math.hypot(x2 - x1, y2 - y1)


def normalize_angle(angle: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """Normalize angle to [-pi, pi] range.

    Args:
        angle: Input angle in radians

    Returns:
        Normalized angle in [-pi, pi]
    """
    two_pi = 2.0 * np.pi

    # x - n*y with n the nearest integer, as math.remainder
    n = np.round(angle / two_pi)
    a = angle - n * two_pi

    if np.isscalar(a):
        if abs(a + np.pi) < 1e-9 and angle > 0:
            return -np.pi
        return float(a)

    mask = (np.abs(a + np.pi) < 1e-9) & (angle > 0)
    if np.any(mask):
        a[mask] = -np.pi

    return a


def heading_difference(a: float, b: float) -> float:
    """Unsigned angle between two headings, in [0, pi].

    Same as ``min(2*pi - |a - b|, |a - b|)`` for ``|a - b| < 2*pi`` but also
    well defined for unnormalized inputs.
    """
    return abs(normalize_angle(a - b))


def speed_from_velocity(vx: float, vy: float) -> float:
    return math.hypot(vx, vy)


def heading_from_velocity(vx: float, vy: float) -> float:
    """Heading in [-pi, pi] of a velocity vector.

    A stationary vehicle has no direction of travel; it is given heading 0
    rather than the NaN that ``acos(vx / 0)`` would produce.
    """
    speed = speed_from_velocity(vx, vy)
    if speed == 0.0:
        return 0.0
    # Rounding can push |vx / speed| marginally above 1
    theta = math.acos(min(1.0, max(-1.0, vx / speed)))
    return theta if vy >= 0 else -theta


def closest_waypoint(x: float, y: float, waypoint_map: 'WaypointMap') -> int:
    """Index of the waypoint nearest to (x, y).

    Ties resolve to the lowest index.

    Raises:
        EmptyWaypointMapError: If the map has no waypoints
    """
    if len(waypoint_map) == 0:
        raise EmptyWaypointMapError("Cannot search an empty waypoint map")

    dists = np.hypot(waypoint_map.x - x, waypoint_map.y - y)
    # argmin returns the first occurrence of the minimum
    return int(np.argmin(dists))


def next_waypoint(x: float, y: float, heading: float, waypoint_map: 'WaypointMap') -> int:
    """Index of the next waypoint ahead of a vehicle.

    The closest waypoint is used unless it lies more than 90 degrees off the
    vehicle's heading, in which case its successor (wrapping to 0) is used.
    """
    closest = closest_waypoint(x, y, waypoint_map)

    map_x = waypoint_map.x[closest]
    map_y = waypoint_map.y[closest]
    direction = math.atan2(map_y - y, map_x - x)

    if heading_difference(heading, direction) > math.pi / 2:
        closest = (closest + 1) % len(waypoint_map)

    return closest
