"""
Scene assembly helpers: replace merged meshes in a node tree by their parts.
씬 트리에서 병합 메쉬를 분리된 파트로 교체

The segmentation core only returns meshes. Swapping the source node for the
part nodes, picking a threshold per mesh name and deciding what happens when
a mesh cannot be split all live here, on the caller side. Scene files are
turned into the same node tree, keeping their node names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional, Union
import logging

import trimesh

from .buffer_accessor import MalformedMeshError
from .logging_utils import log_once
from .material import RenderState
from .mesh_loader import IndexedMesh, MeshLoader
from .mesh_reconstructor import EmptyComponentError
from .mesh_segmenter import MeshSegmenter
from .runtime_defaults import DEFAULTS, EMPTY_COMPONENT_POLICIES
from .transform import Transform

_LOGGER = logging.getLogger(__name__)


class MeshNode:
    """
    A named node in a scene tree, optionally holding a mesh.

    Group nodes carry their local placement in ``transform``; mesh nodes
    keep it on ``mesh.transform``.
    """

    def __init__(self, name: str = "", mesh: Optional[IndexedMesh] = None,
                 transform: Optional[Transform] = None):
        self.name = name
        self.mesh = mesh
        self.transform = transform if transform is not None else Transform()
        self.parent: Optional["MeshNode"] = None
        self.children: list["MeshNode"] = []

    @classmethod
    def for_mesh(cls, mesh: IndexedMesh) -> "MeshNode":
        return cls(name=mesh.name, mesh=mesh)

    def add(self, child: "MeshNode", index: Optional[int] = None) -> "MeshNode":
        """Add a child node. Removes from previous parent if any."""
        if child.parent is not None:
            child.parent.remove(child)
        child.parent = self
        if index is None:
            self.children.append(child)
        else:
            self.children.insert(index, child)
        return self

    def remove(self, child: "MeshNode") -> "MeshNode":
        if child in self.children:
            self.children.remove(child)
            child.parent = None
        return self

    def replace(self, child: "MeshNode", replacements: Iterable["MeshNode"]) -> "MeshNode":
        """Swap ``child`` for ``replacements``, keeping its slot in ``children``."""
        pos = self.children.index(child)
        self.remove(child)
        for offset, node in enumerate(replacements):
            self.add(node, index=pos + offset)
        return self

    def traverse(self, callback: Callable[["MeshNode"], None]) -> None:
        """Visit this node and all descendants depth-first."""
        callback(self)
        for child in list(self.children):
            child.traverse(callback)

    def find(self, name: str) -> Optional["MeshNode"]:
        """Find first descendant with given name."""
        if self.name == name:
            return self
        for child in self.children:
            found = child.find(name)
            if found is not None:
                return found
        return None

    @property
    def visible(self) -> bool:
        return self.mesh.visible if self.mesh is not None else True


@dataclass
class SplitPolicy:
    """
    Which meshes to split and how.

    Attributes:
        thresholds: mesh name -> minimum vertex count of a kept part
        default_min_vertices: threshold for targeted names missing from ``thresholds``
        hidden_parts: part names that start hidden
        empty_component_policy: ``"keep_original"`` or ``"raise"``
    """
    thresholds: dict[str, int] = field(default_factory=dict)
    default_min_vertices: int = DEFAULTS.min_vertices
    hidden_parts: frozenset[str] = frozenset()
    empty_component_policy: str = DEFAULTS.empty_component_policy

    def __post_init__(self):
        self.hidden_parts = frozenset(self.hidden_parts)
        if self.empty_component_policy not in EMPTY_COMPONENT_POLICIES:
            raise ValueError(
                f"Unknown empty_component_policy {self.empty_component_policy!r}; "
                f"expected one of {EMPTY_COMPONENT_POLICIES}"
            )

    def min_vertices_for(self, name: str) -> int:
        return int(self.thresholds.get(name, self.default_min_vertices))


def split_named_meshes(
    root: MeshNode,
    policy: SplitPolicy,
    names: Optional[Iterable[str]] = None,
) -> dict[str, list[str]]:
    """
    Split mesh nodes below ``root`` and put the parts in their place.

    Args:
        root: scene tree root (the root itself is never split)
        policy: thresholds, default visibility and failure handling
        names: mesh names to split; defaults to ``policy.thresholds`` keys

    Returns:
        source name -> names of the nodes now standing for it (the source name
        alone when the mesh was kept unsplit)

    Raises:
        EmptyComponentError: only with ``empty_component_policy == "raise"``
    """
    targets = set(policy.thresholds if names is None else names)
    segmenter = MeshSegmenter(hidden_parts=policy.hidden_parts)

    # 순회 중 트리 변경 방지: 대상 수집 후 분리
    found: list[tuple[MeshNode, IndexedMesh, MeshNode]] = []
    seen: set[str] = set()

    def _collect(node: MeshNode) -> None:
        if node is root or node.parent is None or node.mesh is None:
            return
        if node.name not in targets:
            return
        if node.name in seen:
            _LOGGER.warning("Skipping duplicate mesh name %s: only the first node is split", node.name)
            return
        seen.add(node.name)
        found.append((node, node.mesh, node.parent))

    root.traverse(_collect)

    results: dict[str, list[str]] = {}
    for node, mesh, parent in found:
        name = node.name

        if not mesh.has_indices:
            log_once(
                _LOGGER, f"no-index:{name}", logging.WARNING,
                "Cannot separate %s: no index buffer", name,
            )
            results[name] = [name]
            continue

        min_vertices = policy.min_vertices_for(name)
        try:
            result = segmenter.segment(mesh, name, min_vertices)
        except MalformedMeshError:
            _LOGGER.warning("Keeping %s unsplit: malformed mesh", name, exc_info=True)
            results[name] = [name]
            continue
        except EmptyComponentError:
            if policy.empty_component_policy == "raise":
                raise
            _LOGGER.warning("Keeping %s unsplit: empty component", name, exc_info=True)
            results[name] = [name]
            continue

        if not result.split:
            _LOGGER.info("Added: %s - could not separate", name)
            results[name] = [name]
            continue

        part_nodes = [MeshNode.for_mesh(piece) for piece in result.meshes]
        parent.replace(node, part_nodes)

        for piece in result.meshes:
            _LOGGER.info(
                "Added separated: %s - %s", piece.name, "visible" if piece.visible else "HIDDEN by default"
            )
        results[name] = result.names

    return results


def build_scene_tree(
    scene: trimesh.Scene,
    name: str = "scene",
    *,
    filepath: Optional[Path] = None,
    unit: str = 'mm',
) -> MeshNode:
    """
    trimesh 씬 그래프를 MeshNode 트리로 변환

    Every graph node becomes a ``MeshNode`` named after the graph node, with
    its transform relative to its parent. Nodes that reference a mesh get an
    ``IndexedMesh`` of that geometry; nodes sharing one geometry share its
    render state.

    Args:
        scene: loaded scene
        name: name of the returned root node
        filepath: source file recorded on every mesh
        unit: coordinate unit recorded on every mesh
    """
    graph = scene.graph
    base = graph.base_frame
    children = graph.transforms.children
    states: dict[str, RenderState] = {}

    root = MeshNode(name)

    def _attach(parent: MeshNode, frame: str, parent_frame: str) -> None:
        matrix, geom_name = graph.get(frame_to=frame, frame_from=parent_frame)
        local = Transform.from_matrix(matrix)
        geometry = scene.geometry.get(geom_name) if geom_name is not None else None

        if isinstance(geometry, trimesh.Trimesh):
            mesh = IndexedMesh.from_trimesh(geometry, name=str(frame), filepath=filepath, unit=unit)
            mesh.render_state = states.setdefault(geom_name, mesh.render_state)
            mesh.transform = local
            node = MeshNode.for_mesh(mesh)
        else:
            node = MeshNode(str(frame), transform=local)

        parent.add(node)
        for child in children.get(frame, []):
            _attach(node, child, frame)

    for top in children.get(base, []):
        _attach(root, top, base)

    return root


def load_scene_tree(filepath: Union[str, Path], loader: Optional[MeshLoader] = None) -> MeshNode:
    """Load ``filepath`` keeping node names; the root is named after the file stem."""
    loader = loader or MeshLoader()
    filepath = Path(filepath)
    scene = loader.load_scene(filepath)
    return build_scene_tree(scene, filepath.stem, filepath=filepath, unit=loader.default_unit)
