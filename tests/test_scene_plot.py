"""Tests for the lane scene plot."""

import matplotlib
matplotlib.use('Agg')

import matplotlib.pyplot as plt
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from lane_change_planning.core.coordinate_converter import (
    LateralSignReference,
    WaypointFrenetConverter,
)
from lane_change_planning.core.data_structures import Pose, TrackedVehicle
from lane_change_planning.core.waypoint_map import WaypointMap
from lane_change_planning.planning.safety_predictor import LaneChangeSafetyPredictor
from lane_change_planning.visualization import LaneScenePlotter


def ring_converter():
    angles = np.linspace(0.0, 2.0 * np.pi, 60, endpoint=False)
    wm = WaypointMap.from_xy(100.0 * np.cos(angles), 100.0 * np.sin(angles))
    return WaypointFrenetConverter(wm, sign_reference=LateralSignReference(0.0, 0.0))


def test_plot_draws_lanes_and_vehicles():
    converter = ring_converter()
    vehicles = [TrackedVehicle(id=0, x=0.0, y=106.0, vx=-20.0, vy=0.0)]
    assessment = LaneChangeSafetyPredictor(converter).assess(vehicles, ego_s=0.0, ego_speed=20.0)

    fig, ax = plt.subplots()
    LaneScenePlotter(converter, samples=50).plot(
        ax, Pose(x=106.0, y=0.0, heading=np.pi / 2), vehicles, assessment
    )
    # 4 lane boundaries, waypoints, one vehicle, ego
    assert len(ax.lines) == 7
    assert "Lane Scene" in ax.get_title()
    plt.close(fig)


def test_save_creates_image(tmp_path):
    converter = ring_converter()
    output = tmp_path / "plots" / "scene.png"
    LaneScenePlotter(converter, samples=50).save(
        str(output), Pose(x=106.0, y=0.0, heading=np.pi / 2), []
    )
    assert output.exists()
    assert output.stat().st_size > 0
