"""Configuration management module."""

import yaml
from pathlib import Path
from typing import List, Optional, Tuple
from dataclasses import dataclass, field
from loguru import logger

from ..core.coordinate_converter import (
    LateralSignReference,
    S_POLICIES,
    WaypointFrenetConverter,
)
from ..core.waypoint_map import WaypointMap
from ..planning.lane_change_advisor import LaneChangeAdvisor
from ..planning.safety_predictor import LaneChangeSafetyPredictor


@dataclass
class PlannerConfig:
    """Configuration for the lane-change planning components.

    Attributes:
        # Map
        waypoint_map_path: Path to the waypoint map file (x y s [dx dy])
        sign_reference: World point [x, y] deciding the sign of d
        s_policy: Out-of-range s handling for Frenet -> Cartesian ('wrap', 'clamp')

        # Road
        lane_width: Lane width [m]
        num_lanes: Number of lanes

        # Safety
        vehicle_length: Vehicle length [m]
        safety_buffer: Gap added to the proximity margin [m]
        reference_speed: Speed at which the proximity margin is smallest [m/s]
        prediction_horizon: Time-to-collision horizon [s]
        zero_relative_speed_safe: Treat a zero relative speed as no collision

        # Lane condition
        free_flow_speed: Speed assumed for an empty lane [m/s]

        # Logging
        log_level: Log level for the demo scripts
    """
    # Map
    waypoint_map_path: Optional[str] = None
    sign_reference: list = field(default_factory=lambda: [1000.0, 2000.0])
    s_policy: str = 'wrap'

    # Road
    lane_width: float = 4.0
    num_lanes: int = 3

    # Safety
    vehicle_length: float = 4.0
    safety_buffer: float = 5.0
    reference_speed: float = 22.3  # ~50 mph
    prediction_horizon: float = 3.0
    zero_relative_speed_safe: bool = True

    # Lane condition
    free_flow_speed: float = 25.0

    # Logging
    log_level: str = 'INFO'

    # Internal: loaded from
    config_path: Optional[str] = None


class ConfigValidationError(ValueError):
    """Raised when configuration validation fails."""
    pass


def validate_config(config: PlannerConfig) -> None:
    """Validate configuration values for consistency and correctness.

    Args:
        config: Configuration to validate

    Raises:
        ConfigValidationError: If validation fails
    """
    errors: List[str] = []

    # Map
    if config.waypoint_map_path and not Path(config.waypoint_map_path).exists():
        errors.append(f"waypoint_map_path does not exist: {config.waypoint_map_path}")
    if len(config.sign_reference) != 2:
        errors.append(f"sign_reference must have 2 elements [x, y], got {len(config.sign_reference)}")
    if config.s_policy not in S_POLICIES:
        errors.append(f"s_policy must be one of {list(S_POLICIES)}, got '{config.s_policy}'")

    # Road
    if config.lane_width <= 0:
        errors.append(f"lane_width must be positive, got {config.lane_width}")
    if config.num_lanes <= 0:
        errors.append(f"num_lanes must be positive, got {config.num_lanes}")

    # Safety
    if config.vehicle_length <= 0:
        errors.append(f"vehicle_length must be positive, got {config.vehicle_length}")
    if config.safety_buffer < 0:
        errors.append(f"safety_buffer must be non-negative, got {config.safety_buffer}")
    if config.reference_speed < 0:
        errors.append(f"reference_speed must be non-negative, got {config.reference_speed}")
    if config.prediction_horizon <= 0:
        errors.append(f"prediction_horizon must be positive, got {config.prediction_horizon}")

    # Lane condition
    if config.free_flow_speed < 0:
        errors.append(f"free_flow_speed must be non-negative, got {config.free_flow_speed}")

    if config.log_level not in ['DEBUG', 'INFO', 'WARNING', 'ERROR']:
        errors.append(f"log_level must be one of ['DEBUG', 'INFO', 'WARNING', 'ERROR'], got '{config.log_level}'")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigValidationError(error_msg)


def load_config(config_path: str) -> PlannerConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Loaded configuration
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML file {config_path}: {e}") from e

    if config_dict is None:
        raise ValueError(f"YAML file {config_path} is empty or contains no valid content")

    try:
        config = PlannerConfig(**config_dict)
    except TypeError as e:
        raise ValueError(f"Invalid configuration structure in {config_path}: {e}") from e

    config.config_path = str(config_path)

    try:
        validate_config(config)
    except ConfigValidationError:
        logger.error(f"Configuration validation failed for {config_path}")
        raise

    logger.info(f"Configuration loaded and validated from {config_path}")

    return config


def save_config(config: PlannerConfig, config_path: str):
    """Save configuration to YAML file.

    Args:
        config: Configuration to save
        config_path: Path to save YAML file
    """
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = {
        'waypoint_map_path': config.waypoint_map_path,
        'sign_reference': list(config.sign_reference),
        's_policy': config.s_policy,
        'lane_width': config.lane_width,
        'num_lanes': config.num_lanes,
        'vehicle_length': config.vehicle_length,
        'safety_buffer': config.safety_buffer,
        'reference_speed': config.reference_speed,
        'prediction_horizon': config.prediction_horizon,
        'zero_relative_speed_safe': config.zero_relative_speed_safe,
        'free_flow_speed': config.free_flow_speed,
        'log_level': config.log_level,
    }

    with open(config_path, 'w') as f:
        yaml.safe_dump(config_dict, f, default_flow_style=False, indent=2)

    logger.info(f"Configuration saved to {config_path}")


def build_planner(
    config: PlannerConfig,
    waypoint_map: Optional[WaypointMap] = None
) -> Tuple[WaypointFrenetConverter, LaneChangeSafetyPredictor, LaneChangeAdvisor]:
    """Wire the converter, safety predictor and advisor from a configuration.

    Args:
        config: Planner configuration
        waypoint_map: Map to use; loaded from ``config.waypoint_map_path`` if omitted

    Returns:
        converter, predictor, advisor
    """
    if waypoint_map is None:
        if not config.waypoint_map_path:
            raise ValueError("Either waypoint_map or config.waypoint_map_path is required")
        waypoint_map = WaypointMap.from_csv(config.waypoint_map_path)

    ref_x, ref_y = config.sign_reference
    converter = WaypointFrenetConverter(
        waypoint_map,
        sign_reference=LateralSignReference(x=float(ref_x), y=float(ref_y)),
        s_policy=config.s_policy,
    )
    predictor = LaneChangeSafetyPredictor(
        converter,
        vehicle_length=config.vehicle_length,
        safety_buffer=config.safety_buffer,
        reference_speed=config.reference_speed,
        horizon=config.prediction_horizon,
        zero_relative_speed_safe=config.zero_relative_speed_safe,
    )
    advisor = LaneChangeAdvisor(
        converter,
        predictor,
        lane_width=config.lane_width,
        num_lanes=config.num_lanes,
        free_flow_speed=config.free_flow_speed,
    )
    return converter, predictor, advisor
