"""Tests for the lane-change safety predictor."""

import json
import math
import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from lane_change_planning.core.coordinate_converter import WaypointFrenetConverter
from lane_change_planning.core.data_structures import TrackedVehicle, Verdict
from lane_change_planning.core.waypoint_map import WaypointMap
from lane_change_planning.planning.safety_predictor import LaneChangeSafetyPredictor


@pytest.fixture
def converter():
    """Straight 1km eastbound road, waypoints every 10m."""
    x = np.arange(0.0, 1010.0, 10.0)
    return WaypointFrenetConverter(WaypointMap.from_xy(x, np.zeros_like(x)))


@pytest.fixture
def predictor(converter):
    return LaneChangeSafetyPredictor(converter)


def vehicle(vehicle_id, x, speed, y=-2.0):
    """Eastbound vehicle in the lane right of the centreline."""
    return TrackedVehicle(id=vehicle_id, x=x, y=y, vx=speed, vy=0.0)


def test_safety_margin(predictor):
    assert predictor.safety_margin(22.3) == pytest.approx(9.0)
    assert predictor.safety_margin(20.0) == pytest.approx(11.3)
    assert predictor.safety_margin(30.0) == pytest.approx(16.7)


def test_time_to_collision(predictor):
    assert predictor.time_to_collision(30.0, 10.0) == pytest.approx(2.6)
    assert predictor.time_to_collision(-30.0, -10.0) == pytest.approx(2.6)
    # Gap opening
    assert predictor.time_to_collision(30.0, -10.0) < 0


def test_time_to_collision_zero_relative_speed(predictor):
    ttc = predictor.time_to_collision(10.0, 0.0)
    assert ttc == float('inf')
    assert not math.isnan(ttc)


def test_empty_lane_is_safe(predictor):
    assessment = predictor.assess([], ego_s=100.0, ego_speed=20.0)
    assert assessment.safe
    assert assessment.vehicles == []
    assert assessment.reason is None


@pytest.mark.parametrize("other_speed", [0.0, 10.0, 20.0, 40.0])
def test_vehicle_alongside_is_vetoed(predictor, other_speed):
    """Same s as the ego vehicle is unsafe whatever the speeds."""
    assessment = predictor.assess([vehicle(0, 100.0, other_speed)], ego_s=100.0, ego_speed=20.0)
    assert not assessment.safe
    assert assessment.reason == 'proximity_veto'
    assert assessment.vehicles[0].verdict == Verdict.PROXIMITY_VETO
    assert assessment.vehicles[0].relative_distance == pytest.approx(0.0)


def test_proximity_veto_short_circuits(predictor):
    vehicles = [vehicle(0, 100.0, 20.0), vehicle(1, 500.0, 20.0)]
    assessment = predictor.assess(vehicles, ego_s=100.0, ego_speed=20.0)
    assert not assessment.safe
    assert [a.vehicle_id for a in assessment.vehicles] == [0]


def test_far_vehicle_pulling_away_is_safe(predictor):
    assessment = predictor.assess([vehicle(0, 300.0, 25.0)], ego_s=100.0, ego_speed=20.0)
    assert assessment.safe
    record = assessment.vehicles[0]
    assert record.verdict == Verdict.SAFE
    assert record.relative_distance == pytest.approx(200.0)
    assert record.ttc < 0


def test_ttc_beyond_horizon_is_safe(predictor):
    assessment = predictor.assess([vehicle(0, 150.0, 15.0)], ego_s=100.0, ego_speed=25.0)
    assert assessment.safe
    assert assessment.vehicles[0].ttc == pytest.approx(4.6)


def test_ttc_in_horizon_does_not_short_circuit(predictor):
    vehicles = [vehicle(0, 130.0, 15.0), vehicle(1, 300.0, 30.0)]
    assessment = predictor.assess(vehicles, ego_s=100.0, ego_speed=25.0)
    assert not assessment.safe
    assert assessment.reason == 'ttc_in_horizon'
    assert [a.verdict for a in assessment.vehicles] == [Verdict.TTC_IN_HORIZON, Verdict.SAFE]
    assert assessment.min_ttc == pytest.approx(2.6)


def test_faster_vehicle_closing_from_behind_is_unsafe(predictor):
    assessment = predictor.assess([vehicle(0, 70.0, 25.0)], ego_s=100.0, ego_speed=15.0)
    assert not assessment.safe
    assert assessment.vehicles[0].ttc == pytest.approx(2.6)


def test_horizon_override(predictor):
    vehicles = [vehicle(0, 150.0, 15.0)]
    assert predictor.is_safe(vehicles, ego_s=100.0, ego_speed=25.0)
    assert not predictor.is_safe(vehicles, ego_s=100.0, ego_speed=25.0, horizon=5.0)


def test_zero_relative_speed_is_no_collision(converter):
    """Ego at s=100 and 20m/s, vehicle at s=110 and 20m/s."""
    predictor = LaneChangeSafetyPredictor(converter, reference_speed=20.0)
    assessment = predictor.assess([vehicle(0, 110.0, 20.0)], ego_s=100.0, ego_speed=20.0)
    assert assessment.safe
    assert assessment.vehicles[0].relative_speed == 0.0
    assert assessment.vehicles[0].ttc == float('inf')


def test_zero_relative_speed_can_be_configured_unsafe(converter):
    predictor = LaneChangeSafetyPredictor(converter, reference_speed=20.0,
                                          zero_relative_speed_safe=False)
    assert not predictor.is_safe([vehicle(0, 110.0, 20.0)], ego_s=100.0, ego_speed=20.0)


def test_stationary_vehicle_is_placed_without_nan(predictor):
    assessment = predictor.assess([vehicle(0, 200.0, 0.0)], ego_s=100.0, ego_speed=20.0)
    record = assessment.vehicles[0]
    assert record.s == pytest.approx(200.0)
    assert math.isfinite(record.ttc)
    assert record.ttc == pytest.approx(4.8)
    assert assessment.safe


def test_degenerate_map_defaults_to_unsafe():
    converter = WaypointFrenetConverter(WaypointMap([0.0], [0.0], [0.0]))
    predictor = LaneChangeSafetyPredictor(converter)
    assessment = predictor.assess([vehicle(7, 50.0, 20.0)], ego_s=0.0, ego_speed=20.0)
    assert not assessment.safe
    assert assessment.reason == 'degenerate_input'
    assert assessment.vehicles[0].verdict == Verdict.DEGENERATE_INPUT
    assert assessment.vehicles[0].vehicle_id == 7


def test_assessment_serializes_to_json(predictor):
    assessment = predictor.assess([vehicle(3, 100.0, 20.0)], ego_s=100.0, ego_speed=20.0)
    data = json.loads(assessment.to_json())
    assert data['safe'] is False
    assert data['vehicles'][0]['vehicle_id'] == 3
    assert data['vehicles'][0]['verdict'] == 'proximity_veto'


@pytest.fixture
def ring():
    """Counter-clockwise ring of radius 150m with 180 waypoints."""
    angles = np.linspace(0.0, 2.0 * np.pi, 180, endpoint=False)
    return WaypointFrenetConverter(WaypointMap.from_xy(150.0 * np.cos(angles),
                                                       150.0 * np.sin(angles)))


def on_ring(converter, vehicle_id, s, speed):
    """Vehicle on the ring centreline at ``s`` driving along the road."""
    x, y = converter.get_xy(s, 0.0)
    ahead_x, ahead_y = converter.get_xy(s + 1.0, 0.0)
    heading = np.arctan2(ahead_y - y, ahead_x - x)
    return TrackedVehicle(id=vehicle_id, x=x, y=y,
                          vx=speed * np.cos(heading), vy=speed * np.sin(heading))


def test_relative_distance_takes_short_way_round(ring):
    predictor = LaneChangeSafetyPredictor(ring)
    loop_length = ring.waypoint_map.loop_length
    assert predictor.relative_distance(loop_length - 3.0, 2.0) == pytest.approx(-5.0)
    assert predictor.relative_distance(4.0, loop_length - 3.0) == pytest.approx(7.0)
    assert predictor.relative_distance(60.0, 10.0) == pytest.approx(50.0)


def test_vehicle_behind_across_loop_start_is_vetoed(ring):
    """Ego just past s=0, other vehicle 5m behind it on the closing segment."""
    predictor = LaneChangeSafetyPredictor(ring)
    loop_length = ring.waypoint_map.loop_length
    other = on_ring(ring, 0, loop_length - 3.0, 20.0)

    assessment = predictor.assess([other], ego_s=2.0, ego_speed=20.0)

    assert not assessment.safe
    assert assessment.reason == 'proximity_veto'
    record = assessment.vehicles[0]
    assert record.s == pytest.approx(loop_length - 3.0)
    assert record.relative_distance == pytest.approx(-5.0)


def test_vehicle_ahead_across_loop_start_closes_in_horizon(ring):
    """Ego near the end of the loop, slow vehicle just past s=0."""
    predictor = LaneChangeSafetyPredictor(ring)
    loop_length = ring.waypoint_map.loop_length
    other = on_ring(ring, 0, 20.0, 10.0)

    assessment = predictor.assess([other], ego_s=loop_length - 10.0, ego_speed=20.0)

    record = assessment.vehicles[0]
    assert record.relative_distance == pytest.approx(30.0)
    assert record.ttc == pytest.approx(2.6)
    assert record.verdict == Verdict.TTC_IN_HORIZON
