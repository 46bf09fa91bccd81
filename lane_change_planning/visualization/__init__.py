"""Visualization module for lane-change planning."""

from .scene_plot import LaneScenePlotter

__all__ = ['LaneScenePlotter']
