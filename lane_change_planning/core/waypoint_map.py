"""Reference path waypoint map.

The map is an ordered, closed loop of centreline samples. It is loaded once
at startup and never mutated afterwards, so it can be shared between planning
cycles and threads without locking.
"""

from pathlib import Path
from typing import Iterator, Sequence, Union

import numpy as np
from loguru import logger

from .data_structures import Waypoint
from .exceptions import EmptyWaypointMapError


class WaypointMap:
    """Read-only closed-loop reference path.

    Args:
        x: X coordinates of waypoints
        y: Y coordinates of waypoints
        s: Cumulative arc length of each waypoint (non-decreasing)
    """

    def __init__(self, x: Sequence[float], y: Sequence[float], s: Sequence[float]):
        x = np.array(x, dtype=float)
        y = np.array(y, dtype=float)
        s = np.array(s, dtype=float)

        if x.size == 0:
            raise EmptyWaypointMapError("Waypoint map must contain at least one waypoint")
        if not (x.shape == y.shape == s.shape) or x.ndim != 1:
            raise ValueError(
                f"x, y and s must be 1-D and of equal length, got {x.shape}, {y.shape}, {s.shape}"
            )
        if np.any(np.diff(s) < 0):
            raise ValueError("Waypoint s values must be non-decreasing")

        # Segment i joins waypoint i to waypoint i + 1; the last one closes the loop
        next_x = np.roll(x, -1)
        next_y = np.roll(y, -1)
        segment_lengths = np.hypot(next_x - x, next_y - y)
        cumulative = np.concatenate(([0.0], np.cumsum(segment_lengths)[:-1]))

        for arr in (x, y, s, segment_lengths, cumulative):
            arr.setflags(write=False)

        self.x = x
        self.y = y
        self.s = s
        self.segment_lengths = segment_lengths
        self.cumulative_lengths = cumulative

    @property
    def loop_length(self) -> float:
        """Arc length of the full loop, closing segment included."""
        return float(self.s[-1] + self.segment_lengths[-1])

    def __len__(self) -> int:
        return int(self.x.size)

    def __getitem__(self, idx: int) -> Waypoint:
        return Waypoint(x=float(self.x[idx]), y=float(self.y[idx]), s=float(self.s[idx]))

    def __iter__(self) -> Iterator[Waypoint]:
        for i in range(len(self)):
            yield self[i]

    def __repr__(self) -> str:
        return f"WaypointMap(n={len(self)}, loop_length={self.loop_length:.2f})"

    @classmethod
    def from_xy(cls, x: Sequence[float], y: Sequence[float]) -> 'WaypointMap':
        """Build a map whose s values are the cumulative chord lengths."""
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        if x.size == 0:
            raise EmptyWaypointMapError("Waypoint map must contain at least one waypoint")
        if x.shape != y.shape:
            raise ValueError(f"x and y must have the same length, got {x.shape} and {y.shape}")
        s = np.concatenate(([0.0], np.cumsum(np.hypot(np.diff(x), np.diff(y)))))
        return cls(x, y, s)

    @classmethod
    def from_csv(cls, path: Union[str, Path]) -> 'WaypointMap':
        """Load a map file with rows ``x y s [dx dy]``.

        Whitespace and comma separated files are both accepted. Columns past
        ``s`` (the unit normal in highway map files) are ignored.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Waypoint map file not found: {path}")

        delimiter = ',' if ',' in path.read_text().split('\n', 1)[0] else None
        data = np.loadtxt(path, delimiter=delimiter, ndmin=2)
        if data.size == 0:
            raise EmptyWaypointMapError(f"Waypoint map file {path} contains no waypoints")
        if data.shape[1] < 3:
            raise ValueError(f"Waypoint map rows need x, y and s columns, got {data.shape[1]} columns")

        waypoint_map = cls(data[:, 0], data[:, 1], data[:, 2])
        logger.info(f"Loaded {len(waypoint_map)} waypoints from {path} "
                    f"(loop length {waypoint_map.loop_length:.2f}m)")
        return waypoint_map
