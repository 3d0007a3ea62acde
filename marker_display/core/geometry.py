"""
Rigid 3D geometry for marker projection.

Transforms are stored as a translation vector plus a unit quaternion and
exposed as 4x4 homogeneous matrices for point batches.

Quaternion Convention:
    Quaternions are [x, y, z, w] arrays, the same order used on the wire
    (geometry_msgs/Quaternion).
"""

import math
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class Vector3:
    """Plain 3D vector (positions, scales, marker points)."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y, 'z': self.z}


@dataclass(frozen=True)
class Quaternion:
    """Orientation quaternion, [x, y, z, w] order."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z, self.w], dtype=np.float64)

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y, 'z': self.z, 'w': self.w}


@dataclass(frozen=True)
class Pose:
    """Position and orientation of a marker in its header frame."""
    position: Vector3 = Vector3()
    orientation: Quaternion = Quaternion()

    def to_dict(self) -> dict:
        return {
            'position': self.position.to_dict(),
            'orientation': self.orientation.to_dict(),
        }


def _normalize_quat(quat: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(quat)
    if norm < 1e-12:
        # Uninitialized orientation (all zeros) is read as identity
        return np.array([0.0, 0.0, 0.0, 1.0])
    return quat / norm


def quat_to_rotation_matrix(quat: Sequence[float]) -> np.ndarray:
    """
    Convert a [x, y, z, w] quaternion to a 3x3 rotation matrix.

    Args:
        quat: (4,) quaternion, need not be normalized.

    Returns:
        (3, 3) rotation matrix.
    """
    x, y, z, w = _normalize_quat(np.asarray(quat, dtype=np.float64))
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ])


def rotation_matrix_to_quat(R: np.ndarray) -> np.ndarray:
    """
    Convert a 3x3 rotation matrix to a [x, y, z, w] quaternion.

    Uses Shepperd's method for numerical stability.
    """
    trace = R[0, 0] + R[1, 1] + R[2, 2]
    if trace > 0:
        s = 2.0 * math.sqrt(trace + 1.0)
        w = 0.25 * s
        x = (R[2, 1] - R[1, 2]) / s
        y = (R[0, 2] - R[2, 0]) / s
        z = (R[1, 0] - R[0, 1]) / s
    elif R[0, 0] > R[1, 1] and R[0, 0] > R[2, 2]:
        s = 2.0 * math.sqrt(1.0 + R[0, 0] - R[1, 1] - R[2, 2])
        w = (R[2, 1] - R[1, 2]) / s
        x = 0.25 * s
        y = (R[0, 1] + R[1, 0]) / s
        z = (R[0, 2] + R[2, 0]) / s
    elif R[1, 1] > R[2, 2]:
        s = 2.0 * math.sqrt(1.0 + R[1, 1] - R[0, 0] - R[2, 2])
        w = (R[0, 2] - R[2, 0]) / s
        x = (R[0, 1] + R[1, 0]) / s
        y = 0.25 * s
        z = (R[1, 2] + R[2, 1]) / s
    else:
        s = 2.0 * math.sqrt(1.0 + R[2, 2] - R[0, 0] - R[1, 1])
        w = (R[1, 0] - R[0, 1]) / s
        x = (R[0, 2] + R[2, 0]) / s
        y = (R[1, 2] + R[2, 1]) / s
        z = 0.25 * s
    return _normalize_quat(np.array([x, y, z, w]))


def quaternion_from_euler(roll: float, pitch: float, yaw: float) -> Quaternion:
    """Build a quaternion from roll/pitch/yaw (R = Rz(yaw) * Ry(pitch) * Rx(roll))."""
    cr, sr = math.cos(roll / 2), math.sin(roll / 2)
    cp, sp = math.cos(pitch / 2), math.sin(pitch / 2)
    cy, sy = math.cos(yaw / 2), math.sin(yaw / 2)
    return Quaternion(
        x=sr * cp * cy - cr * sp * sy,
        y=cr * sp * cy + sr * cp * sy,
        z=cr * cp * sy - sr * sp * cy,
        w=cr * cp * cy + sr * sp * sy,
    )


def _slerp(q1: np.ndarray, q2: np.ndarray, t: float) -> np.ndarray:
    dot = float(np.dot(q1, q2))
    # Take the short way round
    if dot < 0.0:
        q2 = -q2
        dot = -dot
    if dot > 0.9995:
        return _normalize_quat(q1 + t * (q2 - q1))
    theta_0 = math.acos(dot)
    theta = theta_0 * t
    sin_theta_0 = math.sin(theta_0)
    s1 = math.cos(theta) - dot * math.sin(theta) / sin_theta_0
    s2 = math.sin(theta) / sin_theta_0
    return _normalize_quat(s1 * q1 + s2 * q2)


class Transform:
    """
    Rigid transform (rotation + translation).

    A transform from frame A to frame B maps point coordinates expressed in A
    into coordinates expressed in B: p_B = R @ p_A + t.
    """

    __slots__ = ('_translation', '_rotation', '_matrix')

    def __init__(self, translation: Sequence[float] = (0.0, 0.0, 0.0),
                 rotation: Sequence[float] = (0.0, 0.0, 0.0, 1.0)):
        self._translation = np.asarray(translation, dtype=np.float64).reshape(3)
        self._rotation = _normalize_quat(np.asarray(rotation, dtype=np.float64).reshape(4))
        matrix = np.eye(4)
        matrix[:3, :3] = quat_to_rotation_matrix(self._rotation)
        matrix[:3, 3] = self._translation
        self._matrix = matrix

    @classmethod
    def identity(cls) -> "Transform":
        return cls()

    @classmethod
    def from_pose(cls, pose: Pose) -> "Transform":
        """Transform taking pose-local coordinates into the pose's parent frame."""
        return cls(pose.position.to_array(), pose.orientation.to_array())

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> "Transform":
        """
        Build from a 4x4 homogeneous matrix.

        Raises:
            ValueError: If the matrix is not (4, 4) with a [0, 0, 0, 1] bottom row.
        """
        matrix = np.asarray(matrix, dtype=np.float64)
        if matrix.shape != (4, 4):
            raise ValueError(f"Transform matrix must be (4, 4), got {matrix.shape}")
        if not np.allclose(matrix[3, :], [0.0, 0.0, 0.0, 1.0], atol=1e-6):
            raise ValueError(
                f"Bottom row of transform matrix must be [0, 0, 0, 1], got {matrix[3, :]}"
            )
        return cls(matrix[:3, 3], rotation_matrix_to_quat(matrix[:3, :3]))

    @property
    def translation(self) -> np.ndarray:
        return self._translation.copy()

    @property
    def rotation(self) -> np.ndarray:
        """Unit quaternion [x, y, z, w]."""
        return self._rotation.copy()

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix.copy()

    def __mul__(self, other: "Transform") -> "Transform":
        if not isinstance(other, Transform):
            return NotImplemented
        return Transform.from_matrix(self._matrix @ other._matrix)

    def inverse(self) -> "Transform":
        R = self._matrix[:3, :3]
        inv = np.eye(4)
        inv[:3, :3] = R.T
        inv[:3, 3] = -R.T @ self._translation
        return Transform.from_matrix(inv)

    def transform_point(self, point: Iterable[float]) -> np.ndarray:
        p = np.asarray(list(point), dtype=np.float64).reshape(3)
        return self._matrix[:3, :3] @ p + self._translation

    def transform_points(self, points: np.ndarray) -> np.ndarray:
        """Apply to an (N, 3) batch: p' = p @ R^T + t."""
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        return points @ self._matrix[:3, :3].T + self._translation

    def euler_angles(self) -> Tuple[float, float, float]:
        """
        Roll, pitch and yaw of the rotation part.

        Convention R = Rz(yaw) * Ry(pitch) * Rx(roll). At gimbal lock
        (pitch = +-pi/2) roll is reported as 0.
        """
        R = self._matrix[:3, :3]
        sin_pitch = -R[2, 0]
        if abs(sin_pitch) >= 1.0 - 1e-12:
            pitch = math.copysign(math.pi / 2, sin_pitch)
            roll = 0.0
            yaw = math.atan2(-R[0, 1], R[1, 1])
        else:
            pitch = math.asin(sin_pitch)
            roll = math.atan2(R[2, 1], R[2, 2])
            yaw = math.atan2(R[1, 0], R[0, 0])
        return roll, pitch, yaw

    def interpolate(self, other: "Transform", ratio: float) -> "Transform":
        """Linear translation / spherical rotation blend; ratio 0 -> self, 1 -> other."""
        translation = self._translation + ratio * (other._translation - self._translation)
        rotation = _slerp(self._rotation, other._rotation, ratio)
        return Transform(translation, rotation)

    def __repr__(self) -> str:
        t = ', '.join(f"{v:.4g}" for v in self._translation)
        q = ', '.join(f"{v:.4g}" for v in self._rotation)
        return f"Transform(translation=[{t}], rotation=[{q}])"
