"""
Position / rotation / scale triple for placed meshes.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


def _vec3(values, default: float) -> np.ndarray:
    if values is None:
        return np.full(3, float(default), dtype=np.float64)
    arr = np.asarray(values, dtype=np.float64).reshape(-1)
    if arr.size != 3:
        raise ValueError(f"Expected 3 components, got {arr.size}")
    return arr.copy()


@dataclass
class Transform:
    """
    Local transform of a mesh.

    Attributes:
        position: (3,) translation
        rotation: (3,) Euler angles in radians, applied in XYZ order
        scale: (3,) per-axis scale
    """
    position: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    scale: np.ndarray = field(default_factory=lambda: np.ones(3, dtype=np.float64))

    def __post_init__(self):
        self.position = _vec3(self.position, 0.0)
        self.rotation = _vec3(self.rotation, 0.0)
        self.scale = _vec3(self.scale, 1.0)

    @classmethod
    def from_degrees(cls, position=None, rotation_deg=None, scale=None) -> "Transform":
        rot = None if rotation_deg is None else np.radians(np.asarray(rotation_deg, dtype=np.float64))
        return cls(position=position, rotation=rot, scale=scale)

    @classmethod
    def from_matrix(cls, matrix) -> "Transform":
        """
        4x4 TRS 행렬 분해 (shear 없음 가정)

        Inverse of ``to_matrix``. A negative determinant is folded into the
        x scale.
        """
        m = np.asarray(matrix, dtype=np.float64).reshape(4, 4)
        basis = m[:3, :3]
        scale = np.linalg.norm(basis, axis=0)
        if np.linalg.det(basis) < 0.0:
            scale[0] = -scale[0]
        safe = np.where(scale == 0.0, 1.0, scale)
        r = basis / safe[np.newaxis, :]

        # R = Rx @ Ry @ Rz  ->  r[0, 2] = sin(ry)
        ry = float(np.arcsin(np.clip(r[0, 2], -1.0, 1.0)))
        if abs(r[0, 2]) < 0.9999999:
            rx = float(np.arctan2(-r[1, 2], r[2, 2]))
            rz = float(np.arctan2(-r[0, 1], r[0, 0]))
        else:
            # gimbal lock: fold z into x
            rx = float(np.arctan2(r[2, 1], r[1, 1]))
            rz = 0.0
        return cls(position=m[:3, 3], rotation=[rx, ry, rz], scale=scale)

    def copy(self) -> "Transform":
        return Transform(
            position=self.position.copy(),
            rotation=self.rotation.copy(),
            scale=self.scale.copy(),
        )

    def rotation_matrix(self) -> np.ndarray:
        """3x3 rotation matrix for intrinsic XYZ Euler angles."""
        rx, ry, rz = (float(a) for a in self.rotation)
        cx, sx = np.cos(rx), np.sin(rx)
        cy, sy = np.cos(ry), np.sin(ry)
        cz, sz = np.cos(rz), np.sin(rz)

        mx = np.array([[1.0, 0.0, 0.0], [0.0, cx, -sx], [0.0, sx, cx]], dtype=np.float64)
        my = np.array([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]], dtype=np.float64)
        mz = np.array([[cz, -sz, 0.0], [sz, cz, 0.0], [0.0, 0.0, 1.0]], dtype=np.float64)
        return mx @ my @ mz

    def to_matrix(self) -> np.ndarray:
        """4x4 TRS matrix (translate * rotate * scale)."""
        m = np.eye(4, dtype=np.float64)
        m[:3, :3] = self.rotation_matrix() * self.scale[np.newaxis, :]
        m[:3, 3] = self.position
        return m

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transform):
            return NotImplemented
        return (
            np.array_equal(self.position, other.position)
            and np.array_equal(self.rotation, other.rotation)
            and np.array_equal(self.scale, other.scale)
        )
