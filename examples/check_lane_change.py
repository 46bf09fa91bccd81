#!/usr/bin/env python3
"""Example script evaluating a lane change on a ring road.

Places the ego vehicle and some traffic on the scenario's map, then prints
the Frenet position, adjacent lane conditions and the advisor's decision.
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
from loguru import logger

from lane_change_planning.config import build_planner, load_config
from lane_change_planning.core import Pose, TrackedVehicle, WaypointMap
from lane_change_planning.planning import LaneChangeDecision


def make_ring_map(radius: float, n_waypoints: int) -> WaypointMap:
    """Counter-clockwise circular centreline around the origin."""
    angles = np.linspace(0.0, 2.0 * np.pi, n_waypoints, endpoint=False)
    return WaypointMap.from_xy(radius * np.cos(angles), radius * np.sin(angles))


def log_summary(decision: LaneChangeDecision):
    """Log the advisor decision of one planning cycle."""
    logger.info("=" * 60)
    logger.info("LANE CHANGE SUMMARY")
    logger.info("=" * 60)
    if decision.ego is None:
        logger.warning(f"Ego vehicle could not be placed on the map ({decision.reason})")
        return

    logger.info(f"Ego Frenet position: s={decision.ego.s:.2f}m, d={decision.ego.d:.2f}m")
    for lane, condition in decision.lane_conditions.items():
        logger.info(f"Lane {lane}: avg speed {condition.avg_speed:.2f}m/s, "
                    f"{condition.vehicle_count} vehicles")
    for lane, assessment in decision.assessments.items():
        logger.info(f"Lane {lane} assessment: {assessment.to_json()}")

    if decision.change_lane:
        logger.success(f"Change to lane {decision.target_lane}")
    else:
        logger.warning(f"Keep lane {decision.current_lane} ({decision.reason})")


def main():
    """Main function."""
    parser = argparse.ArgumentParser(
        description='Evaluate a lane change on a ring road'
    )
    parser.add_argument(
        '--scenario',
        type=str,
        default='scenarios/ring_road.yaml',
        help='Path to scenario configuration file'
    )
    parser.add_argument(
        '--radius',
        type=float,
        default=150.0,
        help='Ring radius [m] when the scenario has no waypoint map file'
    )
    parser.add_argument(
        '--waypoints',
        type=int,
        default=180,
        help='Number of ring waypoints when the scenario has no waypoint map file'
    )
    parser.add_argument(
        '--ego-speed',
        type=float,
        default=20.0,
        help='Ego speed [m/s]'
    )
    parser.add_argument(
        '--plot',
        type=str,
        default=None,
        help='Save a scene plot to this path'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (overrides config)'
    )

    args = parser.parse_args()

    config = load_config(args.scenario)

    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=args.log_level or config.log_level
    )

    waypoint_map = None
    if not config.waypoint_map_path:
        logger.info(f"Building ring map (radius={args.radius}m, {args.waypoints} waypoints)")
        waypoint_map = make_ring_map(args.radius, args.waypoints)

    converter, predictor, advisor = build_planner(config, waypoint_map)

    def lane_center(lane: int) -> float:
        return (lane + 0.5) * config.lane_width

    # Ego in the middle lane, traffic ahead and behind in the outer lanes
    ego_s = 100.0
    ego_x, ego_y = converter.get_xy(ego_s, lane_center(1))
    next_x, next_y = converter.get_xy(ego_s + 1.0, lane_center(1))
    ego_pose = Pose(x=ego_x, y=ego_y, heading=float(np.arctan2(next_y - ego_y, next_x - ego_x)))

    traffic = [
        (0, ego_s + 8.0, 0, 18.0),
        (1, ego_s - 40.0, 0, 26.0),
        (2, ego_s + 60.0, 2, 22.0),
        (3, ego_s + 25.0, 1, 15.0),
    ]
    vehicles = []
    for vehicle_id, s, lane, speed in traffic:
        x, y = converter.get_xy(s, lane_center(lane))
        ahead_x, ahead_y = converter.get_xy(s + 1.0, lane_center(lane))
        heading = np.arctan2(ahead_y - y, ahead_x - x)
        vehicles.append(TrackedVehicle(id=vehicle_id, x=x, y=y,
                                       vx=speed * np.cos(heading), vy=speed * np.sin(heading)))

    decision = advisor.recommend(ego_pose, args.ego_speed, vehicles)
    log_summary(decision)

    if args.plot:
        from lane_change_planning.visualization import LaneScenePlotter
        plotter = LaneScenePlotter(converter)
        plotter.save(args.plot, ego_pose, vehicles, decision.assessments.get(decision.target_lane),
                     lane_width=config.lane_width, num_lanes=config.num_lanes)


if __name__ == '__main__':
    main()
