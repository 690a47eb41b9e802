"""
Core processing modules for MeshPartSplit
"""

from .mesh_loader import MeshLoader, MeshProcessor, IndexedMesh
from .material import RenderState
from .transform import Transform
from .buffer_accessor import MeshBufferView, MalformedMeshError
from .mesh_topology import build_vertex_adjacency, find_connected_components, filter_components
from .mesh_reconstructor import extract_component_mesh, component_index_map, EmptyComponentError
from .mesh_segmenter import MeshSegmenter, SegmentationResult, segment, part_name
from .scene_assembly import (
    MeshNode, SplitPolicy, split_named_meshes, build_scene_tree, load_scene_tree,
)

__all__ = [
    # Mesh data / loading
    'MeshLoader',
    'MeshProcessor',
    'IndexedMesh',
    'RenderState',
    'Transform',
    # Buffer access
    'MeshBufferView',
    'MalformedMeshError',
    # Topology
    'build_vertex_adjacency',
    'find_connected_components',
    'filter_components',
    # Reconstruction
    'extract_component_mesh',
    'component_index_map',
    'EmptyComponentError',
    # Segmentation
    'MeshSegmenter',
    'SegmentationResult',
    'segment',
    'part_name',
    # Scene assembly
    'MeshNode',
    'SplitPolicy',
    'split_named_meshes',
    'build_scene_tree',
    'load_scene_tree',
]
