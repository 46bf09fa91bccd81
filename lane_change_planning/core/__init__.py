"""Core module for fundamental data structures and coordinate transforms."""

from .exceptions import (
    FrenetError,
    EmptyWaypointMapError,
    DegenerateSegmentError,
)
from .data_structures import (
    Verdict,
    Waypoint,
    Pose,
    FrenetCoordinate,
    TrackedVehicle,
    LaneCondition,
    VehicleAssessment,
    SafetyAssessment,
)
from .geometry import (
    distance,
    normalize_angle,
    heading_difference,
    closest_waypoint,
    next_waypoint,
    speed_from_velocity,
    heading_from_velocity,
)
from .waypoint_map import WaypointMap
from .coordinate_converter import (
    LateralSignReference,
    WaypointFrenetConverter,
)

__all__ = [
    'FrenetError',
    'EmptyWaypointMapError',
    'DegenerateSegmentError',
    'Verdict',
    'Waypoint',
    'Pose',
    'FrenetCoordinate',
    'TrackedVehicle',
    'LaneCondition',
    'VehicleAssessment',
    'SafetyAssessment',
    'distance',
    'normalize_angle',
    'heading_difference',
    'closest_waypoint',
    'next_waypoint',
    'speed_from_velocity',
    'heading_from_velocity',
    'WaypointMap',
    'LateralSignReference',
    'WaypointFrenetConverter',
]
