"""Lane-change safety prediction.

Places every tracked vehicle of the target lane in the ego vehicle's Frenet
frame and vetoes the lane change when a vehicle is too close or will close
the gap within the prediction horizon.
"""

from typing import Optional, Sequence

from loguru import logger

from ..core.coordinate_converter import WaypointFrenetConverter
from ..core.data_structures import (
    SafetyAssessment,
    TrackedVehicle,
    VehicleAssessment,
    Verdict,
)
from ..core.exceptions import FrenetError


# Safety parameters
VEHICLE_LENGTH = 4.0  # [m]
SAFETY_BUFFER = 5.0  # Gap kept on top of one vehicle length [m]
REFERENCE_SPEED = 22.3  # Cruise speed the margin is tuned for, ~50mph [m/s]
PREDICTION_HORIZON = 3.0  # [s]


class LaneChangeSafetyPredictor:
    """Go/no-go check for moving into a neighbouring lane.

    Args:
        converter: Frenet converter of the reference path
        vehicle_length: Vehicle length [m]
        safety_buffer: Extra gap added to the proximity margin [m]
        reference_speed: Speed at which the margin is smallest [m/s]
        horizon: Default time-to-collision horizon [s]
        zero_relative_speed_safe: Whether a vehicle at exactly the ego speed
            counts as never colliding (True) or as colliding now (False)
    """

    def __init__(
        self,
        converter: WaypointFrenetConverter,
        vehicle_length: float = VEHICLE_LENGTH,
        safety_buffer: float = SAFETY_BUFFER,
        reference_speed: float = REFERENCE_SPEED,
        horizon: float = PREDICTION_HORIZON,
        zero_relative_speed_safe: bool = True
    ):
        self.converter = converter
        self.vehicle_length = vehicle_length
        self.safety_buffer = safety_buffer
        self.reference_speed = reference_speed
        self.horizon = horizon
        self.zero_relative_speed_safe = zero_relative_speed_safe

        logger.info(f"Safety predictor initialized with vehicle_length={vehicle_length}m, "
                    f"safety_buffer={safety_buffer}m, reference_speed={reference_speed}m/s, "
                    f"horizon={horizon}s")

    def safety_margin(self, ego_speed: float) -> float:
        """Separation below which a lane change is vetoed outright [m].

        The margin grows as the ego speed departs from the reference speed.
        """
        return self.vehicle_length + self.safety_buffer + abs(self.reference_speed - ego_speed)

    def time_to_collision(self, relative_distance: float, relative_speed: float) -> float:
        """Time until the bumpers meet at constant relative speed [s].

        Args:
            relative_distance: Signed gap, see ``relative_distance`` [m]
            relative_speed: ego_speed - other_speed [m/s]

        Returns:
            TTC; negative when the gap is opening, inf (or 0 when zero relative
            speed is configured unsafe) when the gap does not change
        """
        if relative_speed == 0.0:
            return float('inf') if self.zero_relative_speed_safe else 0.0

        if relative_distance >= 0:
            gap = relative_distance - self.vehicle_length
        else:
            gap = relative_distance + self.vehicle_length
        return gap / relative_speed

    def relative_distance(self, other_s: float, ego_s: float) -> float:
        """Signed along-road gap from the ego vehicle to another [m].

        The gap is taken the short way round the loop, so it lies in
        [-loop_length / 2, loop_length / 2).
        """
        loop_length = self.converter.waypoint_map.loop_length
        delta = other_s - ego_s
        if loop_length <= 0.0:
            return delta
        return (delta + loop_length / 2.0) % loop_length - loop_length / 2.0

    def assess(
        self,
        vehicles: Sequence[TrackedVehicle],
        ego_s: float,
        ego_speed: float,
        horizon: Optional[float] = None
    ) -> SafetyAssessment:
        """Evaluate a lane change against the vehicles of the target lane.

        A vehicle inside the safety margin ends the evaluation immediately.
        A vehicle with a TTC inside the horizon makes the change unsafe but
        the remaining vehicles are still evaluated. A vehicle that cannot be
        placed on the map is treated as unsafe.

        Args:
            vehicles: Tracked vehicles in the target lane
            ego_s: Ego longitudinal position [m]
            ego_speed: Ego speed [m/s]
            horizon: TTC horizon [s]; defaults to the predictor's horizon

        Returns:
            Verdict with one trace record per evaluated vehicle
        """
        horizon = self.horizon if horizon is None else horizon
        margin = self.safety_margin(ego_speed)
        assessment = SafetyAssessment(safe=True, margin=margin, horizon=horizon)

        for vehicle in vehicles:
            other_speed = vehicle.speed
            try:
                frenet = self.converter.get_frenet(vehicle.x, vehicle.y, vehicle.heading)
            except FrenetError as e:
                logger.warning(f"Vehicle {vehicle.id} could not be placed on the map ({e}); "
                               f"treating lane change as unsafe")
                assessment.vehicles.append(VehicleAssessment(
                    vehicle_id=vehicle.id, s=None, relative_distance=None,
                    relative_speed=None, ttc=None, verdict=Verdict.DEGENERATE_INPUT
                ))
                assessment.safe = False
                assessment.reason = assessment.reason or Verdict.DEGENERATE_INPUT.value
                continue

            relative_distance = self.relative_distance(frenet.s, ego_s)
            relative_speed = ego_speed - other_speed

            if abs(relative_distance) <= margin:
                logger.debug(f"Vehicle {vehicle.id}: relative position {relative_distance:.2f}m "
                             f"within margin {margin:.2f}m")
                assessment.vehicles.append(VehicleAssessment(
                    vehicle_id=vehicle.id, s=frenet.s, relative_distance=relative_distance,
                    relative_speed=relative_speed, ttc=None, verdict=Verdict.PROXIMITY_VETO
                ))
                assessment.safe = False
                assessment.reason = Verdict.PROXIMITY_VETO.value
                logger.info(f"Lane change unsafe: vehicle {vehicle.id} too close")
                return assessment

            ttc = self.time_to_collision(relative_distance, relative_speed)
            in_horizon = 0.0 <= ttc <= horizon
            verdict = Verdict.TTC_IN_HORIZON if in_horizon else Verdict.SAFE

            logger.debug(f"Vehicle {vehicle.id}: relative position {relative_distance:.2f}m, "
                         f"relative speed {relative_speed:.2f}m/s, TTC {ttc:.2f}s -> "
                         f"{'dangerous' if in_horizon else 'safe'}")

            assessment.vehicles.append(VehicleAssessment(
                vehicle_id=vehicle.id, s=frenet.s, relative_distance=relative_distance,
                relative_speed=relative_speed, ttc=ttc, verdict=verdict
            ))
            if in_horizon:
                assessment.safe = False
                assessment.reason = assessment.reason or Verdict.TTC_IN_HORIZON.value

        logger.info(f"Safety check done over {len(assessment.vehicles)} vehicles: "
                    f"{'safe' if assessment.safe else 'unsafe'}")
        return assessment

    def is_safe(
        self,
        vehicles: Sequence[TrackedVehicle],
        ego_s: float,
        ego_speed: float,
        horizon: Optional[float] = None
    ) -> bool:
        """Whether changing into the lane holding ``vehicles`` is safe now."""
        return self.assess(vehicles, ego_s, ego_speed, horizon).safe
