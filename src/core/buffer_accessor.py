"""
Read-only typed view over an indexed mesh's vertex attributes and triangles.

All shape/index validation for segmentation happens here, before any output
buffer is built, so a rejected mesh is left exactly as the caller passed it.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .mesh_loader import IndexedMesh


class MalformedMeshError(ValueError):
    """Index out of range, missing index buffer, or attribute length mismatch."""


def _readonly(arr: Optional[np.ndarray]) -> Optional[np.ndarray]:
    if arr is None:
        return None
    view = arr.view()
    view.setflags(write=False)
    return view


class MeshBufferView:
    """
    Validated, read-only access to an :class:`IndexedMesh`.

    Arrays returned by this view share memory with the source mesh but are
    flagged non-writeable.
    """

    def __init__(self, mesh: IndexedMesh):
        label = mesh.name or "<unnamed>"

        if mesh.faces is None:
            raise MalformedMeshError(f"Mesh {label!r} has no index buffer")

        vertices = np.asarray(mesh.vertices)
        if vertices.ndim != 2 or vertices.shape[1] != 3:
            raise MalformedMeshError(
                f"Mesh {label!r}: positions must be (N, 3), got {vertices.shape}"
            )
        n = int(vertices.shape[0])

        faces = np.asarray(mesh.faces)
        if faces.size == 0:
            faces = faces.reshape(0, 3)
        if faces.ndim != 2 or faces.shape[1] != 3:
            raise MalformedMeshError(
                f"Mesh {label!r}: triangles must be (M, 3), got {faces.shape}"
            )
        if not np.issubdtype(faces.dtype, np.integer):
            raise MalformedMeshError(
                f"Mesh {label!r}: triangle indices must be integers, got {faces.dtype}"
            )
        if faces.size > 0:
            lo = int(faces.min())
            hi = int(faces.max())
            if lo < 0 or hi >= n:
                bad = lo if lo < 0 else hi
                raise MalformedMeshError(
                    f"Mesh {label!r}: triangle index {bad} out of range for {n} vertices"
                )

        normals = None
        if mesh.normals is not None:
            normals = np.asarray(mesh.normals)
            if normals.shape != (n, 3):
                raise MalformedMeshError(
                    f"Mesh {label!r}: normals shape {normals.shape} does not match {n} vertices"
                )

        uvs = None
        if mesh.uv_coords is not None:
            uvs = np.asarray(mesh.uv_coords)
            if uvs.shape != (n, 2):
                raise MalformedMeshError(
                    f"Mesh {label!r}: uv shape {uvs.shape} does not match {n} vertices"
                )

        self.name = mesh.name
        self._positions = _readonly(vertices)
        self._normals = _readonly(normals)
        self._uvs = _readonly(uvs)
        self._triangles = _readonly(faces)

    @property
    def vertex_count(self) -> int:
        return int(self._positions.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self._triangles.shape[0])

    @property
    def has_normals(self) -> bool:
        return self._normals is not None

    @property
    def has_uvs(self) -> bool:
        return self._uvs is not None

    @property
    def positions(self) -> np.ndarray:
        return self._positions

    @property
    def normals(self) -> Optional[np.ndarray]:
        return self._normals

    @property
    def uv_coords(self) -> Optional[np.ndarray]:
        return self._uvs

    @property
    def triangles(self) -> np.ndarray:
        """(M, 3) triangle index array, winding as authored."""
        return self._triangles

    def position(self, index: int) -> np.ndarray:
        return self._positions[self._check_index(index)]

    def normal(self, index: int) -> Optional[np.ndarray]:
        if self._normals is None:
            return None
        return self._normals[self._check_index(index)]

    def uv(self, index: int) -> Optional[np.ndarray]:
        if self._uvs is None:
            return None
        return self._uvs[self._check_index(index)]

    def _check_index(self, index: int) -> int:
        i = int(index)
        if i < 0 or i >= self.vertex_count:
            raise IndexError(f"Vertex index {i} out of range for {self.vertex_count} vertices")
        return i
