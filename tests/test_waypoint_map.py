"""Tests for the waypoint map."""

import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from lane_change_planning.core.data_structures import Waypoint
from lane_change_planning.core.exceptions import EmptyWaypointMapError
from lane_change_planning.core.waypoint_map import WaypointMap


def test_empty_map_rejected():
    with pytest.raises(EmptyWaypointMapError):
        WaypointMap([], [], [])
    with pytest.raises(EmptyWaypointMapError):
        WaypointMap.from_xy([], [])


def test_mismatched_lengths_rejected():
    with pytest.raises(ValueError):
        WaypointMap([0.0, 1.0], [0.0], [0.0, 1.0])


def test_decreasing_s_rejected():
    with pytest.raises(ValueError):
        WaypointMap([0.0, 1.0, 2.0], [0.0, 0.0, 0.0], [0.0, 2.0, 1.0])


def test_map_is_read_only():
    wm = WaypointMap([0.0, 1.0], [0.0, 0.0], [0.0, 1.0])
    with pytest.raises(ValueError):
        wm.x[0] = 5.0


def test_loop_length_includes_closing_segment():
    wm = WaypointMap([0.0, 10.0, 10.0, 0.0], [0.0, 0.0, 10.0, 10.0], [0.0, 10.0, 20.0, 30.0])
    assert wm.loop_length == pytest.approx(40.0)
    assert np.allclose(wm.segment_lengths, [10.0, 10.0, 10.0, 10.0])
    assert np.allclose(wm.cumulative_lengths, [0.0, 10.0, 20.0, 30.0])


def test_indexing_and_iteration():
    wm = WaypointMap([0.0, 3.0], [0.0, 4.0], [0.0, 5.0])
    assert len(wm) == 2
    assert wm[1] == Waypoint(x=3.0, y=4.0, s=5.0)
    assert [wp.s for wp in wm] == [0.0, 5.0]


def test_from_xy_computes_arc_length():
    wm = WaypointMap.from_xy([0.0, 3.0, 3.0], [0.0, 4.0, 10.0])
    assert np.allclose(wm.s, [0.0, 5.0, 11.0])


def test_from_csv_whitespace(tmp_path):
    path = tmp_path / "highway_map.csv"
    path.write_text(
        "784.6001 1135.571 0 -0.02359831 -0.9997216\n"
        "815.2679 1134.93 30.6744785308838 -0.01099479 -0.9999396\n"
        "844.6398 1134.911 60.0463714599609 -0.002048373 -0.9999979\n"
    )
    wm = WaypointMap.from_csv(path)
    assert len(wm) == 3
    assert wm.x[0] == pytest.approx(784.6001)
    assert wm.s[2] == pytest.approx(60.0463714599609)


def test_from_csv_comma_separated(tmp_path):
    path = tmp_path / "map.csv"
    path.write_text("0,0,0\n10,0,10\n10,10,20\n")
    wm = WaypointMap.from_csv(path)
    assert len(wm) == 3
    assert wm.loop_length == pytest.approx(20.0 + np.hypot(10.0, 10.0))


def test_from_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        WaypointMap.from_csv(tmp_path / "missing.csv")


def test_from_csv_too_few_columns(tmp_path):
    path = tmp_path / "map.csv"
    path.write_text("0 0\n1 0\n")
    with pytest.raises(ValueError):
        WaypointMap.from_csv(path)
