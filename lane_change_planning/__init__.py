"""Frenet coordinate transforms and lane-change safety prediction for highway planning."""

__version__ = "0.1.0"
