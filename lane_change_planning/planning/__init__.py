"""Lane selection and lane-change safety module."""

from .lane_condition import (
    estimate_lane_condition,
    prefer_left_lane,
    lane_index,
    group_vehicles_by_lane,
)
from .safety_predictor import LaneChangeSafetyPredictor
from .lane_change_advisor import LaneChangeAdvisor, LaneChangeDecision

__all__ = [
    'estimate_lane_condition',
    'prefer_left_lane',
    'lane_index',
    'group_vehicles_by_lane',
    'LaneChangeSafetyPredictor',
    'LaneChangeAdvisor',
    'LaneChangeDecision',
]
