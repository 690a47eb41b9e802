"""
Rebuild one connected component as a standalone, densely indexed mesh.
컴포넌트 -> 독립 메쉬 재구성
"""

from __future__ import annotations

import logging

import numpy as np

from .buffer_accessor import MeshBufferView
from .mesh_loader import IndexedMesh

_LOGGER = logging.getLogger(__name__)


class EmptyComponentError(RuntimeError):
    """A retained component kept no triangle after the re-scan."""

    def __init__(self, part_name: str, vertex_count: int):
        self.part_name = part_name
        self.vertex_count = int(vertex_count)
        super().__init__(
            f"Component {part_name!r} ({self.vertex_count} vertices) has no triangle "
            "fully inside it"
        )


def component_index_map(component: np.ndarray) -> np.ndarray:
    """
    new -> old 정점 인덱스 매핑

    Entry k is the source vertex that became vertex k of the rebuilt piece.
    Duplicates in ``component`` keep their first position.
    """
    comp = np.asarray(component, dtype=np.int64).reshape(-1)
    if comp.size == 0:
        return comp
    _, first = np.unique(comp, return_index=True)
    return comp[np.sort(first)]


def extract_component_mesh(
    view: MeshBufferView,
    source: IndexedMesh,
    component: np.ndarray,
    name: str,
) -> IndexedMesh:
    """
    단일 컴포넌트로 새 메쉬 생성

    Args:
        view: validated view over ``source``
        source: mesh the component was found in (transform / render state donor)
        component: vertex indices in visitation order
        name: name of the new piece

    Returns:
        IndexedMesh with dense vertex buffers and only the source triangles whose
        three corners all belong to the component, winding unchanged.

    Raises:
        EmptyComponentError: no source triangle lies fully inside the component
    """
    new_to_old = component_index_map(component)

    old_to_new = np.full(view.vertex_count, -1, dtype=np.int64)
    old_to_new[new_to_old] = np.arange(new_to_old.size, dtype=np.int64)

    # 원본 삼각형 전체를 다시 스캔 (세 정점 모두 포함된 면만 유지)
    mapped = old_to_new[view.triangles]
    keep = np.all(mapped >= 0, axis=1)
    faces = mapped[keep]

    if faces.shape[0] == 0:
        raise EmptyComponentError(name, new_to_old.size)

    normals = view.normals[new_to_old] if view.has_normals else None
    uvs = view.uv_coords[new_to_old] if view.has_uvs else None

    _LOGGER.debug(
        "Rebuilt %s: %d vertices, %d faces", name, int(new_to_old.size), int(faces.shape[0])
    )

    return IndexedMesh(
        vertices=view.positions[new_to_old],
        faces=faces,
        normals=normals,
        uv_coords=uvs,
        render_state=source.render_state,  # 참조 공유 (복사 안 함)
        transform=source.transform.copy(),
        name=name,
        visible=True,
        cast_shadow=source.cast_shadow,
        receive_shadow=source.receive_shadow,
        unit=source.unit,
        filepath=source.filepath,
    )
