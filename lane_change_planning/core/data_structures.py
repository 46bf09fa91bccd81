"""Core data structures for the lane-change planning system.

Every value here is produced and consumed within a single planning cycle;
only the waypoint map (see ``waypoint_map.py``) outlives a cycle.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np
from dataclasses_json import config, dataclass_json

from .geometry import heading_from_velocity, speed_from_velocity


class Verdict(Enum):
    """Outcome of evaluating one tracked vehicle for a lane change."""
    SAFE = "safe"
    TTC_IN_HORIZON = "ttc_in_horizon"
    PROXIMITY_VETO = "proximity_veto"
    DEGENERATE_INPUT = "degenerate_input"


@dataclass(frozen=True)
class Waypoint:
    """Sample point of the reference path.

    Attributes:
        x: X coordinate in global frame [m]
        y: Y coordinate in global frame [m]
        s: Cumulative arc length from the first waypoint [m]
    """
    x: float
    y: float
    s: float


@dataclass(frozen=True)
class Pose:
    """Instantaneous planar vehicle pose.

    Attributes:
        x: X coordinate in global frame [m]
        y: Y coordinate in global frame [m]
        heading: Heading angle [rad]
    """
    x: float
    y: float
    heading: float = 0.0

    def to_array(self) -> np.ndarray:
        """Convert to numpy array [x, y, heading]."""
        return np.array([self.x, self.y, self.heading])


@dataclass_json
@dataclass(frozen=True)
class FrenetCoordinate:
    """Position in the road-aligned frame.

    Attributes:
        s: Longitudinal progress along the reference path [m]
        d: Signed lateral offset from the reference path [m]
    """
    s: float
    d: float


@dataclass(frozen=True)
class TrackedVehicle:
    """Sensed vehicle supplied by sensor fusion for the current cycle.

    Attributes:
        id: Track identifier
        x, y: Position in global frame [m]
        vx, vy: Velocity in global frame [m/s]
    """
    id: int
    x: float
    y: float
    vx: float
    vy: float

    @property
    def speed(self) -> float:
        """Scalar speed [m/s]."""
        return speed_from_velocity(self.vx, self.vy)

    @property
    def heading(self) -> float:
        """Heading derived from velocity; 0 for a stationary vehicle."""
        return heading_from_velocity(self.vx, self.vy)

    def to_pose(self) -> Pose:
        return Pose(x=self.x, y=self.y, heading=self.heading)

    @classmethod
    def from_array(cls, arr: Sequence[float]) -> 'TrackedVehicle':
        """Create from a sensor fusion row [id, x, y, vx, vy, (s, d)]."""
        if len(arr) < 5:
            raise ValueError(
                f"Sensor fusion row needs at least [id, x, y, vx, vy], got {len(arr)} values"
            )
        return cls(id=int(arr[0]), x=float(arr[1]), y=float(arr[2]),
                   vx=float(arr[3]), vy=float(arr[4]))


@dataclass_json
@dataclass(frozen=True)
class LaneCondition:
    """Traffic summary of one lane.

    Attributes:
        avg_speed: Mean scalar speed of the lane's vehicles [m/s]
        vehicle_count: Number of vehicles in the lane
    """
    avg_speed: float
    vehicle_count: int


def _finite_or_none(value: Optional[float]) -> Optional[float]:
    """JSON has no infinity; an infinite value is written as null."""
    if value is None or math.isinf(value):
        return None
    return value


@dataclass_json
@dataclass
class VehicleAssessment:
    """Per-vehicle trace of the lane-change safety check.

    Attributes:
        vehicle_id: Track identifier
        s: Vehicle's longitudinal position [m] (None if it could not be placed)
        relative_distance: other_s - ego_s the short way round the loop [m]
        relative_speed: ego_speed - other_speed [m/s]
        ttc: Time to collision [s]; inf when the gap is not closing, written
            as null in JSON
        verdict: Outcome for this vehicle
    """
    vehicle_id: int
    s: Optional[float]
    relative_distance: Optional[float]
    relative_speed: Optional[float]
    ttc: Optional[float] = field(metadata=config(encoder=_finite_or_none))
    verdict: Verdict

    @property
    def unsafe(self) -> bool:
        return self.verdict != Verdict.SAFE


@dataclass_json
@dataclass
class SafetyAssessment:
    """Result of one lane-change safety evaluation.

    Attributes:
        safe: Go/no-go verdict
        margin: Proximity veto distance used [m]
        horizon: TTC horizon used [s]
        vehicles: Assessments in evaluation order; stops after a proximity veto
        reason: Why the lane change is unsafe (None when safe)
    """
    safe: bool
    margin: float
    horizon: float
    vehicles: List[VehicleAssessment] = field(default_factory=list)
    reason: Optional[str] = None

    @property
    def min_ttc(self) -> float:
        """Smallest non-negative TTC among evaluated vehicles."""
        ttcs = [v.ttc for v in self.vehicles if v.ttc is not None and v.ttc >= 0]
        return min(ttcs) if ttcs else float('inf')
