"""Lane traffic summaries and the left/right lane comparator."""

import math
from typing import Dict, List, Sequence

from loguru import logger

from ..core.coordinate_converter import WaypointFrenetConverter
from ..core.data_structures import LaneCondition, TrackedVehicle
from ..core.exceptions import FrenetError


FREE_FLOW_SPEED = 25.0  # Assumed speed of an empty lane [m/s]
MPS_TO_MPH = 2.237


def estimate_lane_condition(
    vehicles: Sequence[TrackedVehicle],
    free_flow_speed: float = FREE_FLOW_SPEED
) -> LaneCondition:
    """Summarize the traffic of one lane.

    Args:
        vehicles: Tracked vehicles already restricted to the lane
        free_flow_speed: Speed reported for an empty lane [m/s]

    Returns:
        Mean scalar speed and vehicle count of the lane
    """
    if vehicles:
        avg_speed = sum(v.speed for v in vehicles) / len(vehicles)
        condition = LaneCondition(avg_speed=avg_speed, vehicle_count=len(vehicles))
    else:
        condition = LaneCondition(avg_speed=free_flow_speed, vehicle_count=0)

    logger.debug(f"Lane speed: {condition.avg_speed:.2f}m/s "
                 f"({condition.avg_speed * MPS_TO_MPH:.1f}mph), "
                 f"vehicles: {condition.vehicle_count}")
    return condition


def prefer_left_lane(left: LaneCondition, right: LaneCondition) -> bool:
    """Compare two lanes; True means the left lane is the better pick.

    A faster lane and a lane with fewer vehicles both score higher. Ties go
    to the left lane.
    """
    score = (left.avg_speed - right.avg_speed) + (right.vehicle_count - left.vehicle_count)
    prefer_left = score >= 0.0
    logger.debug(f"Lane score {score:.2f}: pick {'left' if prefer_left else 'right'}")
    return prefer_left


def lane_index(d: float, lane_width: float) -> int:
    """Lane number for a lateral offset; lane 0 spans d in [0, lane_width)."""
    return int(math.floor(d / lane_width))


def group_vehicles_by_lane(
    vehicles: Sequence[TrackedVehicle],
    converter: WaypointFrenetConverter,
    lane_width: float
) -> Dict[int, List[TrackedVehicle]]:
    """Place every tracked vehicle in a lane by its Frenet d.

    Vehicles that cannot be placed (degenerate map segment) are left out.
    """
    lanes: Dict[int, List[TrackedVehicle]] = {}
    for vehicle in vehicles:
        try:
            frenet = converter.get_frenet(vehicle.x, vehicle.y, vehicle.heading)
        except FrenetError as e:
            logger.warning(f"Skipping vehicle {vehicle.id} in lane grouping: {e}")
            continue
        lanes.setdefault(lane_index(frenet.d, lane_width), []).append(vehicle)
    return lanes
