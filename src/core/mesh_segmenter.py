"""
Mesh Segmenter Module
병합된 메쉬를 연결되지 않은 파트별 메쉬로 분리

One exported mesh often carries several physical parts in a single buffer.
The segmenter finds the disconnected pieces, drops fragments below a vertex
threshold and rebuilds each surviving piece as its own mesh named
``{name}_part{k}``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional
import logging

from .buffer_accessor import MeshBufferView
from .mesh_loader import IndexedMesh
from .mesh_reconstructor import extract_component_mesh
from .mesh_topology import (
    build_vertex_adjacency,
    component_vertex_count,
    filter_components,
    find_connected_components,
)

_LOGGER = logging.getLogger(__name__)


def part_name(base_name: str, index: int) -> str:
    """1-based part name, e.g. ``part_name("Object_14", 1) == "Object_14_part1"``."""
    return f"{base_name}_part{int(index)}"


@dataclass
class SegmentationResult:
    """
    분리 결과

    Attributes:
        meshes: output meshes; ``[source]`` itself when no split happened
        split: True when ``meshes`` are newly built pieces
        component_sizes: vertex count of every component found, discovery order
        kept_sizes: vertex count of the retained components
        dropped_count: components removed by the size filter
        meta: extra diagnostics (threshold, reachable vertex count, status)
    """
    meshes: list[IndexedMesh]
    split: bool
    component_sizes: list[int] = field(default_factory=list)
    kept_sizes: list[int] = field(default_factory=list)
    dropped_count: int = 0
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def names(self) -> list[str]:
        return [m.name for m in self.meshes]


class MeshSegmenter:
    """
    연결 컴포넌트 기반 메쉬 분리기

    Stateless apart from the default-visibility set, so one instance may be
    shared between threads segmenting different meshes.
    """

    def __init__(self, hidden_parts: Optional[Iterable[str]] = None):
        """
        Args:
            hidden_parts: part names created with ``visible=False``
        """
        self.hidden_parts = frozenset(hidden_parts or ())

    def segment(self, mesh: IndexedMesh, name: str, min_vertices: int) -> SegmentationResult:
        """
        메쉬 분리 실행

        Args:
            mesh: source mesh (never modified)
            name: base name for the output parts
            min_vertices: components with fewer vertices are dropped

        Returns:
            SegmentationResult

        Raises:
            MalformedMeshError: bad indices or attribute lengths
            EmptyComponentError: a retained component has no triangle of its own
            ValueError: ``min_vertices`` is not an integer
        """
        view = MeshBufferView(mesh)

        adjacency = build_vertex_adjacency(view.triangles, view.vertex_count)
        components = find_connected_components(adjacency)
        kept = filter_components(components, min_vertices)

        component_sizes = [len(c) for c in components]
        kept_sizes = [len(c) for c in kept]
        dropped = len(components) - len(kept)
        meta: dict[str, Any] = {
            "min_vertices": int(min_vertices),
            "reachable_vertices": component_vertex_count(components),
            "source_vertices": view.vertex_count,
            "source_faces": view.triangle_count,
        }

        _LOGGER.info("Found %d total components in %s", len(components), name)
        _LOGGER.info(
            "Keeping %d components (filtered out %d small parts with < %d vertices)",
            len(kept), dropped, int(min_vertices),
        )

        # 유효 컴포넌트가 1개 이하이면 원본 그대로 반환
        if len(kept) <= 1:
            meta["status"] = "unsplit"
            return SegmentationResult(
                meshes=[mesh],
                split=False,
                component_sizes=component_sizes,
                kept_sizes=kept_sizes,
                dropped_count=dropped,
                meta=meta,
            )

        pieces: list[IndexedMesh] = []
        for idx, component in enumerate(kept, start=1):
            piece = extract_component_mesh(view, mesh, component, part_name(name, idx))
            if piece.name in self.hidden_parts:
                piece.visible = False
            pieces.append(piece)

        meta["status"] = "split"
        meta["hidden"] = [p.name for p in pieces if not p.visible]
        return SegmentationResult(
            meshes=pieces,
            split=True,
            component_sizes=component_sizes,
            kept_sizes=kept_sizes,
            dropped_count=dropped,
            meta=meta,
        )


def segment(
    mesh: IndexedMesh,
    name: str,
    min_vertices: int,
    *,
    hidden_parts: Optional[Iterable[str]] = None,
) -> list[IndexedMesh]:
    """
    Split ``mesh`` into its disconnected parts.

    Returns ``[mesh]`` unchanged (same object) when fewer than two components
    reach ``min_vertices``; otherwise one new mesh per retained component,
    named ``{name}_part1``, ``{name}_part2``, ... in discovery order.
    """
    return MeshSegmenter(hidden_parts=hidden_parts).segment(mesh, name, min_vertices).meshes
