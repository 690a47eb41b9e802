"""
MeshPartSplit - split merged meshes into their disconnected parts
병합된 메쉬를 연결 컴포넌트별 파트로 분리

Main entry point
"""

import sys
import logging
from pathlib import Path

# Ensure repository root is on sys.path so "src" is importable.
ROOT_DIR = Path(__file__).resolve().parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.core.runtime_defaults import DEFAULTS
from src.core.output_paths import part_output_path

_LOGGER = logging.getLogger(__name__)
DEFAULT_MIN_VERTICES = DEFAULTS.min_vertices
DEFAULT_EXPORT_FORMAT = DEFAULTS.export_format
DEFAULT_MESH_UNIT = "mm"


def run_cli(argv=None) -> int:
    """커맨드라인 인터페이스 실행"""
    args = list(sys.argv[1:] if argv is None else argv)

    from src.core.logging_utils import setup_logging

    setup_logging(console=True)

    if not args or args[0] in ('--help', '-h'):
        print_help()
        return 0

    cmd = args[0]

    if cmd == '--info' and len(args) > 1:
        return show_file_info(args[1])

    if cmd == '--split' and len(args) > 1:
        min_vertices = DEFAULT_MIN_VERTICES
        if len(args) > 2:
            try:
                min_vertices = int(args[2])
            except ValueError:
                print(f"Error: min_vertices must be an integer, got {args[2]!r}")
                return 2
        out_dir = args[3] if len(args) > 3 else None
        return split_mesh(args[1], min_vertices=min_vertices, out_dir=out_dir)

    if cmd == '--split-named' and len(args) > 2:
        try:
            thresholds, hidden, out_dir = parse_named_args(args[2:])
        except ValueError as e:
            print(f"Error: {e}")
            return 2
        return split_named(args[1], thresholds, hidden_parts=hidden, out_dir=out_dir)

    print(f"Error: Unknown command: {cmd}")
    print("Use --help for usage information")
    return 2


def print_help():
    """도움말 출력"""
    from src.core.mesh_loader import MeshLoader

    print("=" * 60)
    print("MeshPartSplit - split merged meshes into parts")
    print("=" * 60)
    print()
    print("Usage:")
    print("  python main.py --info <mesh_file>                         # Show file info")
    print("  python main.py --split <mesh_file> [min_vertices] [out_dir]  # Split into parts")
    print("  python main.py --split-named <scene_file> NAME=MIN... [--hide PART,...] [--out DIR]")
    print("                                                            # Split named scene nodes")
    print()
    print(f"Supported formats: {list(MeshLoader.get_supported_formats().keys())}")
    print(f"Default min_vertices: {DEFAULT_MIN_VERTICES}, export format: {DEFAULT_EXPORT_FORMAT}")
    print()
    print("Examples:")
    print("  python main.py --split computer.glb")
    print("  python main.py --split computer.glb 50 parts/")
    print("  python main.py --split-named computer.glb Object_14=10 Object_15=50 --out parts/")


def show_file_info(filepath: str) -> int:
    """파일 정보 표시"""
    from src.core.mesh_loader import MeshLoader

    print(f"\nFile Info: {filepath}")
    print("-" * 40)

    try:
        loader = MeshLoader(default_unit=DEFAULT_MESH_UNIT)
        info = loader.get_file_info(filepath)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    for key, value in info.items():
        print(f"  {key}: {value}")
    return 0


def split_mesh(filepath: str, *, min_vertices: int, out_dir: str | None = None) -> int:
    """메쉬 분리 후 파트별 파일 저장"""
    from src.core.buffer_accessor import MalformedMeshError
    from src.core.mesh_loader import MeshLoader, MeshProcessor
    from src.core.mesh_reconstructor import EmptyComponentError
    from src.core.mesh_segmenter import MeshSegmenter

    print(f"\nSplitting: {filepath}")
    print("-" * 40)

    try:
        mesh = MeshLoader(default_unit=DEFAULT_MESH_UNIT).load(filepath)
    except (FileNotFoundError, ValueError, TypeError) as e:
        print(f"Error: {e}")
        return 1

    print(f"  Loaded: {mesh.n_vertices:,} vertices, {mesh.n_faces:,} faces")

    try:
        result = MeshSegmenter().segment(mesh, mesh.name, min_vertices)
    except (MalformedMeshError, EmptyComponentError) as e:
        _LOGGER.error("Segmentation failed for %s", filepath, exc_info=True)
        print(f"Error: {e}")
        return 1

    print(f"  Components: {len(result.component_sizes)} "
          f"(kept {len(result.kept_sizes)}, dropped {result.dropped_count} below {min_vertices} vertices)")

    if not result.split:
        print("  Nothing to split; mesh kept as a single part")
        return 0

    if out_dir:
        Path(out_dir).mkdir(parents=True, exist_ok=True)

    processor = MeshProcessor()
    for piece in result.meshes:
        out_path = part_output_path(filepath, piece.name, out_dir, DEFAULT_EXPORT_FORMAT)
        processor.save_mesh(piece, out_path)
        print(f"  Saved: {out_path} ({piece.n_vertices:,} vertices, {piece.n_faces:,} faces)")

    return 0


def parse_named_args(tokens) -> tuple[dict[str, int], list[str], str | None]:
    """
    ``NAME=MIN`` 쌍과 ``--hide``/``--out`` 옵션 파싱

    Raises:
        ValueError: malformed pair, non-integer threshold or missing option value
    """
    thresholds: dict[str, int] = {}
    hidden: list[str] = []
    out_dir = None

    it = iter(tokens)
    for token in it:
        if token in ('--hide', '--out'):
            value = next(it, None)
            if value is None:
                raise ValueError(f"{token} needs a value")
            if token == '--hide':
                hidden.extend(p for p in value.split(',') if p)
            else:
                out_dir = value
            continue

        name, sep, raw = token.rpartition('=')
        if not sep or not name:
            raise ValueError(f"Expected NAME=MIN, got {token!r}")
        try:
            thresholds[name] = int(raw)
        except ValueError:
            raise ValueError(f"min_vertices for {name} must be an integer, got {raw!r}") from None

    if not thresholds:
        raise ValueError("No NAME=MIN pairs given")
    return thresholds, hidden, out_dir


def split_named(filepath: str, thresholds: dict[str, int], *,
                hidden_parts=(), out_dir: str | None = None) -> int:
    """씬의 지정 노드만 분리 후 파트별 파일 저장"""
    from src.core.mesh_loader import MeshLoader, MeshProcessor
    from src.core.mesh_reconstructor import EmptyComponentError
    from src.core.scene_assembly import SplitPolicy, load_scene_tree, split_named_meshes

    print(f"\nSplitting named nodes: {filepath}")
    print("-" * 40)

    try:
        root = load_scene_tree(filepath, MeshLoader(default_unit=DEFAULT_MESH_UNIT))
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    policy = SplitPolicy(thresholds=thresholds, hidden_parts=frozenset(hidden_parts))
    try:
        results = split_named_meshes(root, policy)
    except EmptyComponentError as e:
        _LOGGER.error("Segmentation failed for %s", filepath, exc_info=True)
        print(f"Error: {e}")
        return 1

    for missing in sorted(set(thresholds) - set(results)):
        print(f"  Not found: {missing}")

    processor = MeshProcessor()
    made_dir = False
    for source, names in results.items():
        if names == [source]:
            print(f"  Kept: {source} (could not separate)")
            continue

        if out_dir and not made_dir:
            Path(out_dir).mkdir(parents=True, exist_ok=True)
            made_dir = True

        for name in names:
            node = root.find(name)
            if node is None or node.mesh is None:
                continue
            out_path = part_output_path(filepath, name, out_dir, DEFAULT_EXPORT_FORMAT)
            processor.save_mesh(node.mesh, out_path)
            state = "visible" if node.visible else "hidden"
            print(f"  Saved: {out_path} ({node.mesh.n_vertices:,} vertices, {state})")

    return 0


if __name__ == '__main__':
    sys.exit(run_cli())
