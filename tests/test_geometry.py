"""Rigid transforms."""

import math

import numpy as np
import pytest

from marker_display.core.geometry import (
    Pose,
    Quaternion,
    Transform,
    Vector3,
    quaternion_from_euler,
    rotation_matrix_to_quat,
)


def _yaw(angle):
    q = quaternion_from_euler(0.0, 0.0, angle)
    return [q.x, q.y, q.z, q.w]


def test_identity():
    t = Transform.identity()
    assert np.allclose(t.transform_point([1.0, 2.0, 3.0]), [1.0, 2.0, 3.0])


def test_rotation_then_translation():
    t = Transform([1.0, 0.0, 0.0], _yaw(math.pi / 2))
    assert np.allclose(t.transform_point([1.0, 0.0, 0.0]), [1.0, 1.0, 0.0])


def test_batch_matches_single_points():
    t = Transform([0.5, -1.0, 2.0], quaternion_from_euler(0.1, 0.2, 0.3).to_array())
    points = np.array([[0.0, 0.0, 0.0], [1.0, 2.0, 3.0], [-1.0, 0.5, 0.0]])

    batch = t.transform_points(points)

    for point, expected in zip(points, batch):
        assert np.allclose(t.transform_point(point), expected)


def test_composition_applies_right_first():
    shift = Transform([1.0, 0.0, 0.0])
    turn = Transform(rotation=_yaw(math.pi / 2))

    assert np.allclose((turn * shift).transform_point([0.0, 0.0, 0.0]), [0.0, 1.0, 0.0])
    assert np.allclose((shift * turn).transform_point([0.0, 0.0, 0.0]), [1.0, 0.0, 0.0])


def test_inverse():
    t = Transform([1.0, 2.0, 3.0], quaternion_from_euler(0.3, -0.2, 1.0).to_array())
    assert np.allclose((t * t.inverse()).matrix, np.eye(4))


def test_zero_quaternion_is_identity():
    t = Transform([0.0, 0.0, 0.0], [0.0, 0.0, 0.0, 0.0])
    assert np.allclose(t.rotation, [0.0, 0.0, 0.0, 1.0])


def test_from_pose():
    pose = Pose(Vector3(1.0, 2.0, 0.0), Quaternion(*_yaw(math.pi)))
    assert np.allclose(Transform.from_pose(pose).transform_point([1.0, 0.0, 0.0]),
                       [0.0, 2.0, 0.0])


@pytest.mark.parametrize("angles", [(0.0, 0.0, 0.0), (0.3, 0.0, 0.0), (0.0, -0.4, 0.0),
                                    (0.1, 0.2, 2.5), (-1.0, 0.5, -3.0)])
def test_euler_round_trip(angles):
    t = Transform(rotation=quaternion_from_euler(*angles).to_array())
    assert t.euler_angles() == pytest.approx(angles, abs=1e-9)


def test_rotation_matrix_to_quat_handles_half_turns():
    for axis in range(3):
        R = -np.eye(3)
        R[axis, axis] = 1.0
        q = rotation_matrix_to_quat(R)
        assert np.allclose(Transform(rotation=q).matrix[:3, :3], R)


def test_from_matrix_rejects_bad_shapes():
    with pytest.raises(ValueError):
        Transform.from_matrix(np.eye(3))
    bad = np.eye(4)
    bad[3, 0] = 1.0
    with pytest.raises(ValueError):
        Transform.from_matrix(bad)


def test_interpolate():
    a = Transform([0.0, 0.0, 0.0], _yaw(0.0))
    b = Transform([2.0, 0.0, 0.0], _yaw(math.pi / 2))

    mid = a.interpolate(b, 0.5)

    assert np.allclose(mid.translation, [1.0, 0.0, 0.0])
    assert mid.euler_angles()[2] == pytest.approx(math.pi / 4)
