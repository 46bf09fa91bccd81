"""Lane-change recommendation for the trajectory generator.

Runs once per planning cycle: places the ego vehicle on the road, ranks the
adjacent lanes by traffic and picks the first one the safety predictor clears.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

from loguru import logger

from ..core.coordinate_converter import WaypointFrenetConverter
from ..core.data_structures import (
    FrenetCoordinate,
    LaneCondition,
    Pose,
    SafetyAssessment,
    TrackedVehicle,
)
from ..core.exceptions import FrenetError
from .lane_condition import (
    FREE_FLOW_SPEED,
    estimate_lane_condition,
    group_vehicles_by_lane,
    lane_index,
    prefer_left_lane,
)
from .safety_predictor import LaneChangeSafetyPredictor


LANE_WIDTH = 4.0  # [m]
NUM_LANES = 3


@dataclass
class LaneChangeDecision:
    """Advisor output consumed by the trajectory generator."""
    current_lane: Optional[int]
    target_lane: Optional[int]
    ego: Optional[FrenetCoordinate]
    reason: str
    lane_conditions: Dict[int, LaneCondition] = field(default_factory=dict)
    assessments: Dict[int, SafetyAssessment] = field(default_factory=dict)

    @property
    def change_lane(self) -> bool:
        return self.target_lane is not None and self.target_lane != self.current_lane


class LaneChangeAdvisor:
    """Chooses a target lane among the ego vehicle's neighbours.

    Lanes are numbered from 0 at d = 0 upwards; lane ``k - 1`` is the left
    neighbour of lane ``k`` under the default sign reference.

    Args:
        converter: Frenet converter of the reference path
        predictor: Safety predictor used to clear candidate lanes
        lane_width: Lane width [m]
        num_lanes: Number of lanes on the road
        free_flow_speed: Speed assumed for an empty lane [m/s]
    """

    def __init__(
        self,
        converter: WaypointFrenetConverter,
        predictor: LaneChangeSafetyPredictor,
        lane_width: float = LANE_WIDTH,
        num_lanes: int = NUM_LANES,
        free_flow_speed: float = FREE_FLOW_SPEED
    ):
        self.converter = converter
        self.predictor = predictor
        self.lane_width = lane_width
        self.num_lanes = num_lanes
        self.free_flow_speed = free_flow_speed

    def recommend(
        self,
        ego_pose: Pose,
        ego_speed: float,
        vehicles: Sequence[TrackedVehicle]
    ) -> LaneChangeDecision:
        """Recommend the lane to drive in next.

        Args:
            ego_pose: Ego pose in global coordinates
            ego_speed: Ego speed [m/s]
            vehicles: All tracked vehicles of this cycle

        Returns:
            Decision keeping the current lane unless an adjacent lane is safe
        """
        try:
            ego = self.converter.get_frenet_pose(ego_pose)
        except FrenetError as e:
            logger.warning(f"Ego pose could not be placed on the map ({e}); keeping lane")
            return LaneChangeDecision(current_lane=None, target_lane=None, ego=None,
                                      reason='degenerate_input')

        current = lane_index(ego.d, self.lane_width)
        lanes = group_vehicles_by_lane(vehicles, self.converter, self.lane_width)

        left, right = current - 1, current + 1
        candidates = [lane for lane in (left, right) if 0 <= lane < self.num_lanes]
        conditions = {
            lane: estimate_lane_condition(lanes.get(lane, []), self.free_flow_speed)
            for lane in candidates
        }
        if len(candidates) == 2 and not prefer_left_lane(conditions[left], conditions[right]):
            candidates.reverse()

        decision = LaneChangeDecision(current_lane=current, target_lane=current, ego=ego,
                                      reason='no_adjacent_lane', lane_conditions=conditions)
        for lane in candidates:
            assessment = self.predictor.assess(lanes.get(lane, []), ego.s, ego_speed)
            decision.assessments[lane] = assessment
            if assessment.safe:
                decision.target_lane = lane
                decision.reason = 'lane_change'
                break
        else:
            if candidates:
                decision.reason = 'no_safe_lane'

        logger.info(f"Ego at s={ego.s:.2f}m, d={ego.d:.2f}m in lane {current}: "
                    f"target lane {decision.target_lane} ({decision.reason})")
        return decision
