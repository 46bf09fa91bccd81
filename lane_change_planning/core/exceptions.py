"""Error taxonomy for the Frenet transform and lane-change components."""


class FrenetError(ValueError):
    """Base class for degenerate-input errors in the Frenet stack."""
    pass


class EmptyWaypointMapError(FrenetError):
    """Raised when an operation needs at least one waypoint and gets none."""
    pass


class DegenerateSegmentError(FrenetError):
    """Raised when a reference-path segment has zero length.

    Projection onto such a segment is undefined (division by zero), so the
    transform refuses to produce a coordinate instead of returning NaN.
    """

    def __init__(self, start_index: int, end_index: int):
        self.start_index = start_index
        self.end_index = end_index
        super().__init__(
            f"Zero-length segment between waypoints {start_index} and {end_index}"
        )
