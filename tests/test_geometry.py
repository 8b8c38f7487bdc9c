import math

import pytest

from zxplorer.geometry import (
    graph_to_screen, screen_to_graph, snap_to_grid, compute_perpendicular,
    create_curved_path, get_point_on_curve, distance_to_curve, layout_parallel_edges,
    self_loop_circle, distance_to_self_loop, edge_path, DisplayEdge, ROW_ORIGIN, COL_ORIGIN,
)
from zxplorer.graph import Edge, EdgeType


class TestTransforms:
    def test_graph_to_screen_applies_scale_origin_zoom_and_pan(self):
        x, y = graph_to_screen(1.0, 2.0, 80, 1.5, (10.0, -5.0))
        assert x == pytest.approx((80 + ROW_ORIGIN) * 1.5 + 10)
        assert y == pytest.approx((160 + COL_ORIGIN) * 1.5 - 5)

    @pytest.mark.parametrize("zoom, pan", [(1.0, (0, 0)), (0.2, (37.5, -12.0)), (5.0, (-400, 220))])
    def test_round_trip(self, zoom, pan):
        for row, col in [(0, 0), (3.25, -1.5), (-7.0, 12.75)]:
            x, y = graph_to_screen(row, col, 80, zoom, pan)
            assert screen_to_graph(x, y, 80, zoom, pan) == pytest.approx((row, col))

    def test_zero_zoom_is_rejected(self):
        with pytest.raises(ValueError):
            screen_to_graph(10, 10, 80, 0)


class TestSnap:
    def test_snaps_to_nearest_multiple(self):
        assert snap_to_grid(0.74, 0.5) == pytest.approx(0.5)
        assert snap_to_grid(0.76, 0.5) == pytest.approx(1.0)
        assert snap_to_grid(-1.3, 0.5) == pytest.approx(-1.5)

    def test_disabled_is_identity(self):
        assert snap_to_grid(0.74, 0.5, enabled=False) == 0.74


class TestCurves:
    def test_perpendicular_is_unit_normal(self):
        px, py = compute_perpendicular(0, 0, 3, 4)
        assert math.hypot(px, py) == pytest.approx(1.0)
        assert px * 3 + py * 4 == pytest.approx(0.0)

    def test_perpendicular_of_zero_length_segment(self):
        assert compute_perpendicular(5, 5, 5, 5) == (0.0, 1.0)

    def test_small_curvature_is_straight(self):
        path = create_curved_path(0, 0, 100, 0, 0.005, 80)
        assert path.is_straight
        assert path.svg() == "M 0,0 L 100,0"

    def test_control_point_offsets_midpoint_along_normal(self):
        path = create_curved_path(0, 0, 100, 0, 0.5, 80)
        assert path.control == pytest.approx((50.0, 40.0))
        assert path.svg().startswith("M 0,0 Q ")

    def test_point_on_curve_midpoint(self):
        # Quadratic Bezier at t=0.5 is a quarter of the way to the control point
        x, y = get_point_on_curve(0, 0, 100, 0, 0.5, 80)
        assert (x, y) == pytest.approx((50.0, 20.0))

    def test_point_on_straight_path_interpolates(self):
        assert get_point_on_curve(0, 0, 100, 50, 0.0, 80, t=0.25) == pytest.approx((25.0, 12.5))

    def test_cubic_controls_of_straight_path_lie_on_segment(self):
        path = create_curved_path(0, 0, 90, 0, 0.0, 80)
        c1, c2 = path.cubic_controls()
        assert c1 == pytest.approx((30.0, 0.0))
        assert c2 == pytest.approx((60.0, 0.0))

    def test_distance_to_curve(self):
        straight = create_curved_path(0, 0, 100, 0, 0.0, 80)
        assert distance_to_curve(50, 7, straight) == pytest.approx(7.0)
        curved = create_curved_path(0, 0, 100, 0, 0.5, 80)
        assert distance_to_curve(50, 20, curved) == pytest.approx(0.0, abs=0.5)


class TestParallelEdges:
    def test_three_parallel_edges_fan_out_symmetrically(self):
        edges = [Edge(0, 1), Edge(1, 0, EdgeType.HADAMARD), Edge(0, 1)]
        display = layout_parallel_edges(edges)
        assert [d.curve_distance for d in display] == pytest.approx([-0.5, 0.0, 0.5])
        assert [d.index for d in display] == [0, 1, 2]

    def test_single_edges_stay_straight(self):
        display = layout_parallel_edges([Edge(0, 1), Edge(1, 2)])
        assert [d.curve_distance for d in display] == [0.0, 0.0]

    def test_two_parallel_edges(self):
        display = layout_parallel_edges([Edge(2, 5), Edge(5, 2)])
        assert [d.curve_distance for d in display] == pytest.approx([-0.25, 0.25])

    def test_self_loops_are_not_curved(self):
        display = layout_parallel_edges([Edge(3, 3), Edge(3, 3)])
        assert [d.curve_distance for d in display] == [0.0, 0.0]
        assert [d.index for d in display] == [0, 1]

    def test_edge_path_runs_from_lower_to_higher_id(self):
        positions = {0: (0.0, 0.0), 1: (100.0, 0.0)}
        forward = edge_path(DisplayEdge(Edge(0, 1), 0.5), positions, 80)
        backward = edge_path(DisplayEdge(Edge(1, 0), 0.5), positions, 80)
        assert forward.control == pytest.approx(backward.control)
        assert backward.start == (0.0, 0.0)

    def test_edge_path_with_missing_endpoint(self):
        assert edge_path(DisplayEdge(Edge(0, 9)), {0: (0.0, 0.0)}, 80) is None


class TestSelfLoops:
    def test_loops_grow_with_index(self):
        _, _, r0 = self_loop_circle(0, 0, 0)
        _, _, r1 = self_loop_circle(0, 0, 1)
        assert r1 > r0

    def test_distance_is_zero_on_the_circle(self):
        cx, cy, radius = self_loop_circle(100, 100, 0)
        assert distance_to_self_loop(cx + radius, cy, 100, 100, 0) == pytest.approx(0.0)
        assert distance_to_self_loop(cx, cy, 100, 100, 0) == pytest.approx(radius)
