"""Static plot of one planning cycle: road, ego vehicle and tracked traffic."""

import matplotlib.pyplot as plt
import numpy as np
from pathlib import Path
from typing import Optional, Sequence
from loguru import logger

from ..core.coordinate_converter import WaypointFrenetConverter
from ..core.data_structures import Pose, SafetyAssessment, TrackedVehicle, Verdict

VERDICT_COLORS = {
    Verdict.SAFE: 'green',
    Verdict.TTC_IN_HORIZON: 'orange',
    Verdict.PROXIMITY_VETO: 'red',
    Verdict.DEGENERATE_INPUT: 'purple',
}


class LaneScenePlotter:
    """Draws the lanes of a waypoint loop with the vehicles of one cycle."""

    def __init__(self, converter: WaypointFrenetConverter, samples: int = 400):
        self.converter = converter
        self.samples = samples

    def plot(
        self,
        ax,
        ego_pose: Pose,
        vehicles: Sequence[TrackedVehicle],
        assessment: Optional[SafetyAssessment] = None,
        lane_width: float = 4.0,
        num_lanes: int = 3
    ):
        """Draw the scene on a matplotlib axis."""
        wm = self.converter.waypoint_map
        s_samples = np.linspace(0.0, wm.loop_length, self.samples)

        # Lane boundaries at d = k * lane_width; outer ones solid
        for k in range(num_lanes + 1):
            points = np.array([self.converter.get_xy(s, k * lane_width) for s in s_samples])
            style = 'k-' if k in (0, num_lanes) else 'k--'
            ax.plot(points[:, 0], points[:, 1], style,
                    linewidth=1.5 if style == 'k-' else 1.0, alpha=0.6, zorder=1)

        ax.plot(wm.x, wm.y, 'k.', markersize=3, alpha=0.5, label='Waypoints', zorder=1)

        verdicts = {}
        if assessment is not None:
            verdicts = {a.vehicle_id: a.verdict for a in assessment.vehicles}

        for vehicle in vehicles:
            color = VERDICT_COLORS.get(verdicts.get(vehicle.id), 'gray')
            ax.plot(vehicle.x, vehicle.y, 's', color=color, markersize=6, zorder=3)
            ax.annotate(str(vehicle.id), (vehicle.x, vehicle.y), fontsize=7,
                        xytext=(3, 3), textcoords='offset points')

        ax.plot(ego_pose.x, ego_pose.y, 'bo', markersize=8, label='Ego', zorder=4)
        ax.arrow(ego_pose.x, ego_pose.y, 5.0 * np.cos(ego_pose.heading),
                 5.0 * np.sin(ego_pose.heading), color='blue', width=0.3, zorder=4)

        title = "Lane Scene"
        if assessment is not None:
            title += f" (lane change {'safe' if assessment.safe else 'unsafe'})"
        ax.set_title(title)
        ax.set_aspect('equal')
        ax.grid(True, alpha=0.3)
        ax.legend(loc='upper right', fontsize=9)

    def save(
        self,
        output_path: str,
        ego_pose: Pose,
        vehicles: Sequence[TrackedVehicle],
        assessment: Optional[SafetyAssessment] = None,
        lane_width: float = 4.0,
        num_lanes: int = 3
    ):
        """Render the scene to an image file."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        fig = plt.figure(figsize=(10, 10))
        ax = fig.add_subplot(111)
        self.plot(ax, ego_pose, vehicles, assessment, lane_width, num_lanes)

        plt.savefig(output_path, dpi=100)
        plt.close(fig)
        logger.info(f"Lane scene saved to {output_path}")
