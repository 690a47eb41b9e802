"""
Mesh Topology Module
정점 인접 그래프 / 연결 컴포넌트 / 크기 필터

Vertex connectivity helpers used to split a merged mesh into its
disconnected parts.
"""

from __future__ import annotations

from typing import Iterator, Sequence

import numpy as np

# Neighbor sets are dicts used as insertion-ordered sets so traversal order
# only depends on the triangle order.
VertexAdjacency = list[dict[int, None]]


def build_vertex_adjacency(triangles: np.ndarray, vertex_count: int) -> VertexAdjacency:
    """
    삼각형 목록으로 무방향 정점 인접 그래프 구성

    Every triangle (a, b, c) links each corner to the other two, inserted as
    a:{b, c}, b:{a, c}, c:{a, b}. A repeated index is recorded as a
    self-neighbor, so a collapsed triangle [v, v, v] still gives v a degree.

    Args:
        triangles: (M, 3) index array, all indices < vertex_count
        vertex_count: number of vertices N

    Returns:
        list of length N; entry i is the ordered neighbor set of vertex i
    """
    n = int(vertex_count)
    adjacency: VertexAdjacency = [{} for _ in range(n)]

    tris = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    for a, b, c in tris.tolist():
        adjacency[a][b] = None
        adjacency[a][c] = None
        adjacency[b][a] = None
        adjacency[b][c] = None
        adjacency[c][a] = None
        adjacency[c][b] = None

    return adjacency


def find_connected_components(adjacency: VertexAdjacency) -> list[np.ndarray]:
    """
    연결 컴포넌트 탐색 (명시적 스택 DFS)

    Vertices are scanned in ascending order; the first unvisited vertex with
    at least one neighbor starts a new component. Each component lists its
    vertices in depth-first preorder. Degree-zero vertices are skipped.

    The traversal keeps a stack of neighbor iterators instead of recursing,
    so component size is not bounded by the interpreter recursion limit.
    """
    n = len(adjacency)
    visited = np.zeros(n, dtype=bool)
    components: list[np.ndarray] = []

    for start in range(n):
        if visited[start] or not adjacency[start]:
            continue

        order: list[int] = [start]
        visited[start] = True
        stack: list[Iterator[int]] = [iter(adjacency[start])]

        while stack:
            for neighbor in stack[-1]:
                if not visited[neighbor]:
                    visited[neighbor] = True
                    order.append(neighbor)
                    stack.append(iter(adjacency[neighbor]))
                    break
            else:
                stack.pop()

        components.append(np.asarray(order, dtype=np.int64))

    return components


def filter_components(components: Sequence[np.ndarray], min_vertices: int) -> list[np.ndarray]:
    """
    최소 정점 수 미만 컴포넌트 제거 (순서 유지)

    A component with exactly ``min_vertices`` vertices is kept.
    """
    if isinstance(min_vertices, bool) or not isinstance(min_vertices, (int, np.integer)):
        raise ValueError(f"min_vertices must be an integer, got {min_vertices!r}")
    threshold = int(min_vertices)
    return [comp for comp in components if len(comp) >= threshold]


def component_vertex_count(components: Sequence[np.ndarray]) -> int:
    """Number of vertices reachable through at least one triangle edge."""
    return int(sum(len(c) for c in components))
