"""Coordinate conversion between Cartesian and Frenet frames.

The reference path is the piecewise-linear waypoint loop, where:
- s: longitudinal distance along the path
- d: lateral offset from the path

Conversions are exact on straight segments and degrade with waypoint
spacing on curves.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from loguru import logger

from .data_structures import FrenetCoordinate, Pose
from .exceptions import DegenerateSegmentError
from .geometry import distance, next_waypoint
from .waypoint_map import WaypointMap


S_POLICIES = ('wrap', 'clamp')


@dataclass(frozen=True)
class LateralSignReference:
    """Fixed world point used to decide the sign of d.

    A pose that is closer to this point than its projection on the path gets
    a negative d. This is a heuristic tied to a map's geometry: it only gives
    a consistent side convention on segments that keep the point on the same
    side, and flips on segments where the point lies to the right of travel.
    The default matches the classic highway map, where the point is to the
    left of every segment and d grows to the right.

    Attributes:
        x: X coordinate in global frame [m]
        y: Y coordinate in global frame [m]
    """
    x: float = 1000.0
    y: float = 2000.0

    def sign(
        self,
        origin_x: float,
        origin_y: float,
        pos_x: float,
        pos_y: float,
        proj_x: float,
        proj_y: float
    ) -> float:
        """Return -1.0 or 1.0 for a pose and its projection.

        Args:
            origin_x, origin_y: Segment start the vectors are relative to
            pos_x, pos_y: Pose relative to the segment start
            proj_x, proj_y: Projection relative to the segment start
        """
        center_x = self.x - origin_x
        center_y = self.y - origin_y
        center_to_pos = distance(center_x, center_y, pos_x, pos_y)
        center_to_ref = distance(center_x, center_y, proj_x, proj_y)
        return -1.0 if center_to_pos < center_to_ref else 1.0


class WaypointFrenetConverter:
    """Converter between Cartesian and Frenet coordinates on a waypoint loop.

    Args:
        waypoint_map: Reference path
        sign_reference: Point deciding the sign of d (default highway anchor)
        s_policy: How get_xy treats s outside [0, loop_length]:
            'wrap' reduces s modulo the loop length,
            'clamp' pins it to the nearest end
    """

    def __init__(
        self,
        waypoint_map: WaypointMap,
        sign_reference: Optional[LateralSignReference] = None,
        s_policy: str = 'wrap'
    ):
        if s_policy not in S_POLICIES:
            raise ValueError(f"s_policy must be one of {list(S_POLICIES)}, got '{s_policy}'")

        self.waypoint_map = waypoint_map
        self.sign_reference = sign_reference or LateralSignReference()
        self.s_policy = s_policy
        logger.info(f"Frenet converter initialized with {waypoint_map}, "
                    f"sign_reference=({self.sign_reference.x}, {self.sign_reference.y}), "
                    f"s_policy={s_policy}")

    def get_frenet(self, x: float, y: float, heading: float) -> FrenetCoordinate:
        """Transform a Cartesian pose to Frenet coordinates.

        Args:
            x, y: Position in global coordinates
            heading: Heading angle [rad], used to pick the segment ahead

        Returns:
            Frenet coordinate of the pose

        Raises:
            DegenerateSegmentError: If the segment the pose projects on has zero length
        """
        wm = self.waypoint_map
        next_wp = next_waypoint(x, y, heading, wm)
        prev_wp = next_wp - 1 if next_wp > 0 else len(wm) - 1

        n_x = wm.x[next_wp] - wm.x[prev_wp]
        n_y = wm.y[next_wp] - wm.y[prev_wp]
        x_x = x - wm.x[prev_wp]
        x_y = y - wm.y[prev_wp]

        seg_len_sq = n_x * n_x + n_y * n_y
        if seg_len_sq == 0.0:
            raise DegenerateSegmentError(prev_wp, next_wp)

        # Projection of x onto n
        proj_norm = (x_x * n_x + x_y * n_y) / seg_len_sq
        proj_x = proj_norm * n_x
        proj_y = proj_norm * n_y

        frenet_d = distance(x_x, x_y, proj_x, proj_y)
        frenet_d *= self.sign_reference.sign(
            wm.x[prev_wp], wm.y[prev_wp], x_x, x_y, proj_x, proj_y
        )

        frenet_s = wm.cumulative_lengths[prev_wp] + distance(0.0, 0.0, proj_x, proj_y)

        return FrenetCoordinate(s=float(frenet_s), d=float(frenet_d))

    def get_frenet_pose(self, pose: Pose) -> FrenetCoordinate:
        return self.get_frenet(pose.x, pose.y, pose.heading)

    def get_xy(self, s: float, d: float) -> Tuple[float, float]:
        """Transform Frenet coordinates to a Cartesian position.

        Args:
            s: Longitudinal position [m]; out-of-range values follow s_policy
            d: Lateral offset [m], positive to the right of travel

        Returns:
            x, y: Position in global coordinates

        Raises:
            DegenerateSegmentError: If s falls on a zero-length segment
        """
        wm = self.waypoint_map
        n = len(wm)
        loop_length = wm.loop_length
        if loop_length <= 0.0:
            raise DegenerateSegmentError(n - 1, 0)

        s = self.resolve_s(s)

        # Last waypoint whose s is <= target
        prev_wp = int(np.searchsorted(wm.s, s, side='right')) - 1
        if prev_wp < 0:
            # Before the first waypoint: on the closing segment
            prev_wp = n - 1
            seg_s = s + loop_length - wm.s[prev_wp]
        else:
            seg_s = s - wm.s[prev_wp]
        wp2 = (prev_wp + 1) % n

        dx = wm.x[wp2] - wm.x[prev_wp]
        dy = wm.y[wp2] - wm.y[prev_wp]
        if dx == 0.0 and dy == 0.0:
            raise DegenerateSegmentError(prev_wp, wp2)

        heading = math.atan2(dy, dx)
        seg_x = wm.x[prev_wp] + seg_s * math.cos(heading)
        seg_y = wm.y[prev_wp] + seg_s * math.sin(heading)

        perp_heading = heading - math.pi / 2
        x = seg_x + d * math.cos(perp_heading)
        y = seg_y + d * math.sin(perp_heading)

        return float(x), float(y)

    def resolve_s(self, s: float) -> float:
        """Map any s onto [0, loop_length] according to s_policy."""
        loop_length = self.waypoint_map.loop_length
        if self.s_policy == 'wrap':
            return float(s % loop_length)
        return float(min(max(s, 0.0), loop_length))
