"""Shape projection of markers into 2D segments."""

import math

import pytest

from marker_display.core.geometry import Transform, quaternion_from_euler
from marker_display.core.projector import is_supported, project_marker
from marker_display.core.segment import Segment

RED = (1.0, 0.0, 0.0)


def _endpoints(segments):
    return [(round(s.x1, 6), round(s.y1, 6), round(s.x2, 6), round(s.y2, 6))
            for s in segments]


def _quat(roll=0.0, pitch=0.0, yaw=0.0):
    q = quaternion_from_euler(roll, pitch, yaw)
    return (q.x, q.y, q.z, q.w)


class TestArrow:

    def test_pose_arrow_has_shaft_and_two_wings(self, build_marker):
        marker = build_marker(type="ARROW", scale=(1.0, 0.2, 0.0), color=RED)
        segments = project_marker(marker, Transform.identity())

        assert len(segments) == 3
        shaft, left, right = segments
        assert shaft.start == pytest.approx((0.0, 0.0))
        assert shaft.end == pytest.approx((1.0, 0.0))
        assert left.start == pytest.approx((1.0, 0.0))
        assert right.start == pytest.approx((1.0, 0.0))
        assert all(s.color == (255, 0, 0) for s in segments)

    def test_pose_arrow_wings_are_mirrored(self, build_marker):
        marker = build_marker(type="ARROW", scale=(1.0, 0.2, 0.0))
        _, left, right = project_marker(marker, Transform.identity())

        # Half head width 0.1 at 45 degrees back from the tip
        assert left.end == pytest.approx((0.9, 0.1))
        assert right.end == pytest.approx((0.9, -0.1))

    def test_pose_arrow_follows_orientation(self, build_marker):
        marker = build_marker(type="ARROW", scale=(2.0, 0.2, 0.0),
                              orientation=_quat(yaw=math.pi / 2))
        shaft = project_marker(marker, Transform.identity())[0]

        assert shaft.start == pytest.approx((0.0, 0.0), abs=1e-9)
        assert shaft.end == pytest.approx((0.0, 2.0), abs=1e-9)

    def test_two_point_arrow(self, build_marker):
        marker = build_marker(type="ARROW", scale=(0.1, 0.2, 0.0),
                              points=[(0.0, 0.0, 0.0), (2.0, 0.0, 0.0)])
        shaft, left, right = project_marker(marker, Transform.identity())

        assert shaft.start == pytest.approx((0.0, 0.0))
        assert shaft.end == pytest.approx((2.0, 0.0))
        length = math.hypot(0.1, 0.2)
        assert math.hypot(left.x2 - 2.0, left.y2) == pytest.approx(length)
        assert left.x2 == pytest.approx(right.x2)
        assert left.y2 == pytest.approx(-right.y2)
        assert left.x2 < 2.0

    def test_two_point_arrow_is_offset_by_pose(self, build_marker):
        marker = build_marker(type="ARROW", position=(1.0, 0.0, 0.0),
                              points=[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)])
        shaft = project_marker(marker, Transform.identity())[0]

        assert shaft.start == pytest.approx((1.0, 0.0))
        assert shaft.end == pytest.approx((2.0, 0.0))

    @pytest.mark.parametrize("count", [1, 3])
    def test_other_point_counts_yield_nothing(self, build_marker, count):
        marker = build_marker(type="ARROW", points=[(float(i), 0.0, 0.0) for i in range(count)])
        assert project_marker(marker, Transform.identity()) == []


class TestCube:

    def test_flat_cube_draws_top_face(self, build_marker):
        marker = build_marker(type="CUBE", scale=(2.0, 1.0, 1.0))
        segments = project_marker(marker, Transform.identity())

        assert len(segments) == 4
        corners = {(round(s.x1, 6), round(s.y1, 6)) for s in segments}
        assert corners == {(1.0, 0.5), (1.0, -0.5), (-1.0, -0.5), (-1.0, 0.5)}
        # Closed loop
        assert segments[-1].end == pytest.approx(segments[0].start)

    def test_yawed_cube_is_still_flat(self, build_marker):
        marker = build_marker(type="CUBE", orientation=_quat(yaw=0.7))
        assert len(project_marker(marker, Transform.identity())) == 4

    def test_tilted_cube_draws_all_edges(self, build_marker):
        roll = 0.5
        marker = build_marker(type="CUBE", orientation=_quat(roll=roll))
        segments = project_marker(marker, Transform.identity())

        assert len(segments) == 12
        top, bottom, verticals = segments[:4], segments[4:8], segments[8:]

        for face in (top, bottom):
            for edge, following in zip(face, face[1:] + face[:1]):
                assert edge.end == pytest.approx(following.start)

        for edge, upper, lower in zip(verticals, top, bottom):
            assert edge.start == pytest.approx(upper.start)
            assert edge.end == pytest.approx(lower.start)
            # A unit cube rolled about x: bottom corner sits sin(roll) further along y
            assert edge.end[0] == pytest.approx(edge.start[0])
            assert edge.end[1] - edge.start[1] == pytest.approx(math.sin(roll))

    def test_tilt_from_frame_transform_counts(self, build_marker):
        marker = build_marker(type="CUBE")
        tilted = Transform(rotation=_quat(pitch=0.3))
        assert len(project_marker(marker, tilted)) == 12

    def test_tiny_tilt_below_threshold_is_flat(self, build_marker):
        marker = build_marker(type="CUBE", orientation=_quat(roll=1e-6))
        assert len(project_marker(marker, Transform.identity())) == 4

    def test_cube_follows_position(self, build_marker):
        marker = build_marker(type="CUBE", position=(3.0, -1.0, 0.0), scale=(2.0, 2.0, 2.0))
        segments = project_marker(marker, Transform.identity())

        xs = [s.x1 for s in segments]
        ys = [s.y1 for s in segments]
        assert min(xs) == pytest.approx(2.0)
        assert max(xs) == pytest.approx(4.0)
        assert min(ys) == pytest.approx(-2.0)
        assert max(ys) == pytest.approx(0.0)

    def test_cube_list_draws_one_box_per_point(self, build_marker):
        marker = build_marker(type="CUBE_LIST", scale=(1.0, 1.0, 1.0),
                              points=[(0.0, 0.0, 0.0), (5.0, 0.0, 0.0)])
        segments = project_marker(marker, Transform.identity())

        assert len(segments) == 8
        assert max(s.x1 for s in segments[:4]) == pytest.approx(0.5)
        assert min(s.x1 for s in segments[4:]) == pytest.approx(4.5)

    def test_empty_cube_list(self, build_marker):
        assert project_marker(build_marker(type="CUBE_LIST"), Transform.identity()) == []


class TestLines:

    def test_line_strip(self, build_marker):
        marker = build_marker(type="LINE_STRIP",
                              points=[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0)])
        segments = project_marker(marker, Transform.identity())

        assert _endpoints(segments) == [(0.0, 0.0, 1.0, 0.0), (1.0, 0.0, 1.0, 1.0)]

    @pytest.mark.parametrize("count", [0, 1])
    def test_short_line_strip_yields_nothing(self, build_marker, count):
        marker = build_marker(type="LINE_STRIP", points=[(0.0, 0.0, 0.0)] * count)
        assert project_marker(marker, Transform.identity()) == []

    def test_line_list_pairs_points(self, build_marker):
        marker = build_marker(type="LINE_LIST", points=[
            (0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 2.0, 0.0),
        ])
        segments = project_marker(marker, Transform.identity())

        assert _endpoints(segments) == [(0.0, 0.0, 1.0, 0.0), (0.0, 1.0, 0.0, 2.0)]

    def test_line_list_odd_count_drops_last_point(self, build_marker, caplog):
        marker = build_marker(type="LINE_LIST", points=[
            (0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 2.0, 0.0), (9.0, 9.0, 0.0),
        ])
        segments = project_marker(marker, Transform.identity())

        assert _endpoints(segments) == [(0.0, 0.0, 1.0, 0.0), (0.0, 1.0, 0.0, 2.0)]
        assert "odd number of points" in caplog.text

    def test_single_point_line_list_yields_nothing(self, build_marker):
        marker = build_marker(type="LINE_LIST", points=[(1.0, 1.0, 0.0)])
        assert project_marker(marker, Transform.identity()) == []

    def test_height_is_dropped(self, build_marker):
        marker = build_marker(type="LINE_STRIP", points=[(0.0, 0.0, 5.0), (1.0, 0.0, -3.0)])
        assert _endpoints(project_marker(marker, Transform.identity())) == [(0.0, 0.0, 1.0, 0.0)]


class TestComposition:

    def test_frame_transform_applies_after_pose(self, build_marker):
        marker = build_marker(type="LINE_STRIP", position=(1.0, 0.0, 0.0),
                              points=[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)])
        frame = Transform(translation=[0.0, 0.0, 0.0], rotation=_quat(yaw=math.pi / 2))
        segment = project_marker(marker, frame)[0]

        # Pose moves the strip to x=1..2, then the frame rotates it onto the y axis
        assert segment.start == pytest.approx((0.0, 1.0), abs=1e-9)
        assert segment.end == pytest.approx((0.0, 2.0), abs=1e-9)

    def test_color_is_truncated(self, build_marker):
        marker = build_marker(type="LINE_STRIP", color=(0.5, 1.0, 0.0),
                              points=[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)])
        assert project_marker(marker, Transform.identity())[0].color == (127, 255, 0)

    @pytest.mark.parametrize("marker_type", ["SPHERE", "CYLINDER", "POINTS", "TEXT_VIEW_FACING"])
    def test_unsupported_types_yield_nothing(self, build_marker, marker_type):
        marker = build_marker(type=marker_type, points=[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)])
        assert not is_supported(marker.type)
        assert project_marker(marker, Transform.identity()) == []

    def test_segments_are_values(self):
        assert Segment(0.0, 0.0, 1.0, 1.0) == Segment(0.0, 0.0, 1.0, 1.0)
        assert Segment(0.0, 0.0, 1.0, 1.0).to_dict()["color"] == [255, 255, 255]
