import contextlib
import io
import logging
import tempfile
import unittest
from pathlib import Path

import trimesh

import main
from src.core.logging_utils import log_once, reset_log_once
from src.core.mesh_loader import MeshLoader, MeshProcessor
from src.core.output_paths import part_output_path, safe_part_name
from tests.test_mesh_loader import _two_boxes


class TestPartOutputPath(unittest.TestCase):
    def test_default_folder_is_input_folder(self):
        out = part_output_path("assets/computer.glb", "Object_14_part2")
        self.assertEqual(out, Path("assets") / "computer.Object_14_part2.ply")

    def test_out_dir_and_format(self):
        out = part_output_path(Path("a/b.obj"), "b_part1", out_dir="parts", fmt=".STL")
        self.assertEqual(out, Path("parts") / "b.b_part1.stl")

    def test_unsafe_names_cleaned(self):
        self.assertEqual(safe_part_name("Desk Lamp/part 1"), "Desk_Lamp_part_1")
        self.assertEqual(safe_part_name("..."), "part")


class TestSplitCommand(unittest.TestCase):
    def test_split_writes_one_file_per_part(self):
        with tempfile.TemporaryDirectory() as td:
            src = Path(td) / "desk.ply"
            MeshProcessor().save_mesh(_two_boxes(), src)
            out_dir = Path(td) / "parts"

            code = main.split_mesh(str(src), min_vertices=4, out_dir=str(out_dir))

            self.assertEqual(code, 0)
            written = sorted(p.name for p in out_dir.iterdir())
            self.assertEqual(written, ["desk.desk_part1.ply", "desk.desk_part2.ply"])
            part = MeshLoader().load(out_dir / "desk.desk_part1.ply")
            self.assertEqual(part.n_vertices, 8)

    def test_split_single_part_writes_nothing(self):
        with tempfile.TemporaryDirectory() as td:
            src = Path(td) / "box.ply"
            MeshProcessor().save_mesh(trimesh.creation.box(), src)
            out_dir = Path(td) / "parts"

            code = main.split_mesh(str(src), min_vertices=1, out_dir=str(out_dir))

            self.assertEqual(code, 0)
            self.assertFalse(out_dir.exists())

    def test_split_missing_file(self):
        self.assertEqual(main.split_mesh("missing.ply", min_vertices=1), 1)

    def test_info_missing_file(self):
        self.assertEqual(main.show_file_info("missing.ply"), 1)

    def test_help_lists_formats(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main.run_cli(["--help"])
        self.assertEqual(code, 0)
        self.assertIn(".glb", out.getvalue())
        self.assertIn("--split-named", out.getvalue())


class TestSplitNamedCommand(unittest.TestCase):
    def _write_scene(self, folder: Path) -> Path:
        scene = trimesh.Scene()
        scene.add_geometry(trimesh.creation.box(), node_name="Object_14", geom_name="keyboard")
        scene.add_geometry(_two_boxes(), node_name="Object_15", geom_name="monitor")
        path = folder / "computer.glb"
        path.write_bytes(scene.export(file_type="glb"))
        return path

    def test_parse_named_args(self):
        thresholds, hidden, out_dir = main.parse_named_args(
            ["Object_14=10", "Object_15=50", "--hide", "Object_15_part1,Object_15_part2", "--out", "parts"]
        )
        self.assertEqual(thresholds, {"Object_14": 10, "Object_15": 50})
        self.assertEqual(hidden, ["Object_15_part1", "Object_15_part2"])
        self.assertEqual(out_dir, "parts")

    def test_parse_named_args_rejects_bad_pairs(self):
        for tokens in (["Object_14"], ["Object_14=ten"], ["=5"], ["--out"], ["--hide", "a"]):
            with self.assertRaises(ValueError):
                main.parse_named_args(tokens)

    def test_split_named_writes_parts_of_named_node(self):
        with tempfile.TemporaryDirectory() as td:
            src = self._write_scene(Path(td))
            out_dir = Path(td) / "parts"

            code = main.split_named(
                str(src), {"Object_14": 4, "Object_15": 4},
                hidden_parts=["Object_15_part2"], out_dir=str(out_dir),
            )

            self.assertEqual(code, 0)
            written = sorted(p.name for p in out_dir.iterdir())
            self.assertEqual(written, ["computer.Object_15_part1.ply", "computer.Object_15_part2.ply"])
            part = MeshLoader().load(out_dir / "computer.Object_15_part2.ply")
            self.assertEqual(part.n_vertices, 8)

    def test_run_cli_split_named(self):
        with tempfile.TemporaryDirectory() as td:
            src = self._write_scene(Path(td))
            out_dir = Path(td) / "parts"
            code = main.run_cli(["--split-named", str(src), "Object_15=4", "--out", str(out_dir)])
            self.assertEqual(code, 0)
            self.assertEqual(len(list(out_dir.iterdir())), 2)

    def test_run_cli_split_named_bad_pair(self):
        self.assertEqual(main.run_cli(["--split-named", "computer.glb", "Object_15"]), 2)

    def test_split_named_missing_file(self):
        self.assertEqual(main.split_named("missing.glb", {"Object_14": 1}), 1)


class TestLogOnce(unittest.TestCase):
    def test_logs_once_per_key(self):
        reset_log_once()
        logger = logging.getLogger("meshpartsplit.test")
        with self.assertLogs(logger, level=logging.INFO) as logs:
            self.assertTrue(log_once(logger, "k", logging.INFO, "hello %s", "a"))
            self.assertFalse(log_once(logger, "k", logging.INFO, "hello %s", "b"))
            self.assertTrue(log_once(logger, "other", logging.INFO, "bye"))
        self.assertEqual(len(logs.output), 2)


if __name__ == "__main__":
    unittest.main()
