"""
Mesh Loader Module
메쉬 파일 로딩 및 데이터 구조 정의

Supports: OBJ, PLY, STL, OFF, GLTF/GLB formats
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union
import logging
import numpy as np

try:
    import trimesh
except ImportError:
    raise ImportError("trimesh is required. Install with: pip install trimesh")

from .material import RenderState
from .transform import Transform

_LOGGER = logging.getLogger(__name__)


@dataclass(eq=False)
class IndexedMesh:
    """
    인덱스 삼각형 메쉬 컨테이너

    Attributes:
        vertices: (N, 3) 정점 좌표 배열
        faces: (M, 3) 삼각형 인덱스 배열 (None이면 non-indexed geometry)
        normals: (N, 3) 정점 법선 벡터 (선택)
        uv_coords: (N, 2) UV 좌표 (선택)
        render_state: 재질/셰이딩 설정 (분리된 파트들과 참조로 공유)
        transform: 위치/회전/스케일
        name: 메쉬 이름
        visible: 표시 여부
        cast_shadow / receive_shadow: 그림자 플래그
        unit: 좌표 단위 ('mm', 'cm', 'm')
        filepath: 원본 파일 경로
    """
    vertices: np.ndarray
    faces: Optional[np.ndarray]
    normals: Optional[np.ndarray] = None
    uv_coords: Optional[np.ndarray] = None
    render_state: RenderState = field(default_factory=RenderState)
    transform: Transform = field(default_factory=Transform)
    name: str = ""
    visible: bool = True
    cast_shadow: bool = False
    receive_shadow: bool = False
    unit: str = 'mm'
    filepath: Optional[Path] = None

    # Computed properties cache
    _bounds: Optional[np.ndarray] = field(default=None, repr=False)
    _centroid: Optional[np.ndarray] = field(default=None, repr=False)

    def __post_init__(self):
        """타입 변환 (형상 검증은 MeshBufferView 담당)"""
        self.vertices = np.asarray(self.vertices, dtype=np.float64)
        if self.faces is not None:
            self.faces = np.asarray(self.faces, dtype=np.int64)
        if self.normals is not None:
            self.normals = np.asarray(self.normals, dtype=np.float64)
        if self.uv_coords is not None:
            self.uv_coords = np.asarray(self.uv_coords, dtype=np.float64)

    @property
    def n_vertices(self) -> int:
        """정점 개수"""
        return len(self.vertices)

    @property
    def n_faces(self) -> int:
        """면 개수"""
        if self.faces is None:
            return 0
        return len(self.faces)

    @property
    def has_indices(self) -> bool:
        return self.faces is not None

    @property
    def bounds(self) -> np.ndarray:
        """경계 박스 [[min_x, min_y, min_z], [max_x, max_y, max_z]]"""
        if self._bounds is None:
            self._bounds = np.array([
                self.vertices.min(axis=0),
                self.vertices.max(axis=0)
            ])
        return self._bounds

    @property
    def extents(self) -> np.ndarray:
        """경계 박스 크기 [width, height, depth]"""
        return self.bounds[1] - self.bounds[0]

    @property
    def centroid(self) -> np.ndarray:
        """메쉬 중심점"""
        if self._centroid is None:
            self._centroid = self.vertices.mean(axis=0)
        assert self._centroid is not None
        return self._centroid

    def to_trimesh(self) -> 'trimesh.Trimesh':
        """trimesh 객체로 변환"""
        if self.faces is None:
            raise ValueError(f"Mesh {self.name!r} has no index buffer")

        visual = None
        if self.uv_coords is not None:
            visual = trimesh.visual.TextureVisuals(uv=self.uv_coords)

        mesh = trimesh.Trimesh(
            vertices=self.vertices,
            faces=self.faces,
            vertex_normals=self.normals,
            visual=visual,
            process=False
        )
        return mesh

    @classmethod
    def from_trimesh(cls, mesh: 'trimesh.Trimesh',
                     name: str = "",
                     filepath: Optional[Path] = None,
                     unit: str = 'mm',
                     with_normals: bool = False) -> 'IndexedMesh':
        """trimesh 객체에서 생성"""
        uv_coords = None
        texture = None

        visual = getattr(mesh, "visual", None)
        uv = getattr(visual, "uv", None) if visual is not None else None
        if uv is not None and len(uv) == len(mesh.vertices):
            uv_coords = np.asarray(uv, dtype=np.float64)

        material = getattr(visual, "material", None) if visual is not None else None
        image = getattr(material, "image", None) if material is not None else None
        if image is not None:
            texture = np.array(image)

        # NOTE: vertex_normals 계산은 대형 메쉬에서 느리므로 기본은 skip
        normals = np.asarray(mesh.vertex_normals, dtype=np.float64) if with_normals else None

        return cls(
            vertices=mesh.vertices,
            faces=mesh.faces,
            normals=normals,
            uv_coords=uv_coords,
            render_state=RenderState(texture=texture),
            name=name,
            unit=unit,
            filepath=filepath
        )


class MeshLoader:
    """
    다양한 3D 포맷의 메쉬 파일 로더

    Supported formats:
        - OBJ (Wavefront)
        - PLY (Polygon File Format)
        - STL (Stereolithography)
        - OFF (Object File Format)
        - GLTF/GLB (GL Transmission Format)
    """

    SUPPORTED_FORMATS = {
        '.obj': 'Wavefront OBJ',
        '.ply': 'Polygon File Format',
        '.stl': 'Stereolithography',
        '.off': 'Object File Format',
        '.gltf': 'GL Transmission Format',
        '.glb': 'GL Transmission Format (Binary)',
    }

    def __init__(self, default_unit: str = 'mm'):
        """
        Args:
            default_unit: 기본 좌표 단위 ('mm', 'cm', 'm')
        """
        self.default_unit = default_unit

    @classmethod
    def get_supported_formats(cls) -> dict:
        """지원 포맷 목록 반환"""
        return cls.SUPPORTED_FORMATS.copy()

    def _check_path(self, filepath: Union[str, Path]) -> Path:
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        ext = filepath.suffix.lower()
        if ext not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {ext}\n"
                f"Supported formats: {list(self.SUPPORTED_FORMATS.keys())}"
            )
        return filepath

    @staticmethod
    def _load_trimesh(filepath: Path):
        try:
            # 대용량 메쉬 로드 성능: 불필요한 후처리(process) 비활성화
            return trimesh.load(str(filepath), force='mesh', process=False, maintain_order=True)
        except TypeError:
            # 구버전 trimesh 호환
            return trimesh.load(str(filepath), force='mesh')

    def load(self, filepath: Union[str, Path], unit: Optional[str] = None,
             with_normals: bool = True) -> IndexedMesh:
        """
        메쉬 파일 로드

        Args:
            filepath: 메쉬 파일 경로
            unit: 좌표 단위 (None이면 default_unit 사용)
            with_normals: 정점 법선 포함 여부

        Returns:
            IndexedMesh: 로드된 메쉬 (이름은 파일명 stem)

        Raises:
            FileNotFoundError: 파일이 존재하지 않음
            ValueError: 지원하지 않는 포맷
        """
        filepath = self._check_path(filepath)
        unit = unit or self.default_unit
        mesh = self._load_trimesh(filepath)

        # Scene인 경우 단일 메쉬로 병합
        if isinstance(mesh, trimesh.Scene):
            meshes = [g for g in mesh.geometry.values() if isinstance(g, trimesh.Trimesh)]
            if len(meshes) == 0:
                raise ValueError(f"No valid mesh found in: {filepath}")
            mesh = trimesh.util.concatenate(meshes)

        if not isinstance(mesh, trimesh.Trimesh):
            raise TypeError(f"Expected trimesh.Trimesh, got {type(mesh).__name__}")

        _LOGGER.info("Loaded %s: %d vertices, %d faces", filepath, len(mesh.vertices), len(mesh.faces))
        return IndexedMesh.from_trimesh(
            mesh,
            name=filepath.stem,
            filepath=filepath,
            unit=unit,
            with_normals=with_normals,
        )

    def load_scene(self, filepath: Union[str, Path]) -> 'trimesh.Scene':
        """
        씬 그래프 그대로 로드 (노드 이름/계층 유지)

        Single-mesh formats come back as a one-node scene.

        Raises:
            FileNotFoundError: 파일이 존재하지 않음
            ValueError: 지원하지 않는 포맷 또는 메쉬 없음
        """
        filepath = self._check_path(filepath)
        try:
            scene = trimesh.load(str(filepath), force='scene', process=False, maintain_order=True)
        except TypeError:
            # 구버전 trimesh 호환
            scene = trimesh.load(str(filepath), force='scene')

        if not any(isinstance(g, trimesh.Trimesh) for g in scene.geometry.values()):
            raise ValueError(f"No valid mesh found in: {filepath}")

        _LOGGER.info("Loaded scene %s: %d nodes with geometry", filepath, len(scene.graph.nodes_geometry))
        return scene

    def get_file_info(self, filepath: Union[str, Path]) -> dict:
        """
        파일 정보 미리보기

        Args:
            filepath: 메쉬 파일 경로

        Returns:
            dict: 파일 정보 딕셔너리
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        ext = filepath.suffix.lower()
        file_size = filepath.stat().st_size

        info = {
            'filename': filepath.name,
            'format': self.SUPPORTED_FORMATS.get(ext, 'Unknown'),
            'extension': ext,
            'file_size_mb': round(file_size / (1024 * 1024), 2),
        }

        try:
            mesh = self._load_trimesh(filepath)
            if isinstance(mesh, trimesh.Scene):
                meshes = [g for g in mesh.geometry.values() if isinstance(g, trimesh.Trimesh)]
                total_verts = sum(m.vertices.shape[0] for m in meshes)
                total_faces = sum(m.faces.shape[0] for m in meshes)
            elif isinstance(mesh, trimesh.Trimesh):
                total_verts = mesh.vertices.shape[0]
                total_faces = mesh.faces.shape[0]
            else:
                total_verts = 0
                total_faces = 0

            info['n_vertices'] = total_verts
            info['n_faces'] = total_faces
            visual = getattr(mesh, "visual", None)
            uv = getattr(visual, "uv", None) if visual is not None else None
            info['has_uv'] = uv is not None

        except Exception as e:
            _LOGGER.debug("File info preview failed for %s", filepath, exc_info=True)
            info['error'] = str(e)

        return info


class MeshProcessor:
    """메쉬 저장 유틸리티"""

    def save_mesh(self, mesh_data: Union[IndexedMesh, 'trimesh.Trimesh'],
                  filepath: Union[str, Path]) -> str:
        """
        메쉬를 파일로 저장

        Args:
            mesh_data: IndexedMesh 또는 trimesh.Trimesh 객체
            filepath: 저장할 파일 경로
        """
        filepath = str(filepath)

        if isinstance(mesh_data, IndexedMesh):
            mesh = mesh_data.to_trimesh()
        else:
            mesh = mesh_data

        mesh.export(filepath)
        return filepath
