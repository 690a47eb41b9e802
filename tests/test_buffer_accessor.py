import unittest

import numpy as np

from src.core.buffer_accessor import MalformedMeshError, MeshBufferView
from src.core.mesh_loader import IndexedMesh


def _quad_mesh(**kwargs) -> IndexedMesh:
    vertices = np.asarray(
        [
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [1.0, 1.0, 0.0],
            [0.0, 1.0, 0.0],
        ],
        dtype=np.float64,
    )
    faces = np.asarray([[0, 1, 2], [0, 2, 3]], dtype=np.int32)
    params = dict(vertices=vertices, faces=faces, name="quad")
    params.update(kwargs)
    return IndexedMesh(**params)


class TestMeshBufferView(unittest.TestCase):
    def test_counts_and_lookup(self):
        normals = np.tile([0.0, 0.0, 1.0], (4, 1))
        uvs = np.asarray([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=np.float64)
        view = MeshBufferView(_quad_mesh(normals=normals, uv_coords=uvs))

        self.assertEqual(view.vertex_count, 4)
        self.assertEqual(view.triangle_count, 2)
        self.assertTrue(view.has_normals)
        self.assertTrue(view.has_uvs)
        np.testing.assert_array_equal(view.position(2), [1.0, 1.0, 0.0])
        np.testing.assert_array_equal(view.normal(3), [0.0, 0.0, 1.0])
        np.testing.assert_array_equal(view.uv(1), [1.0, 0.0])
        np.testing.assert_array_equal(view.triangles, [[0, 1, 2], [0, 2, 3]])

    def test_optional_attributes_absent(self):
        view = MeshBufferView(_quad_mesh())
        self.assertFalse(view.has_normals)
        self.assertFalse(view.has_uvs)
        self.assertIsNone(view.normal(0))
        self.assertIsNone(view.uv(0))

    def test_arrays_are_read_only(self):
        mesh = _quad_mesh()
        view = MeshBufferView(mesh)
        with self.assertRaises(ValueError):
            view.positions[0, 0] = 5.0
        with self.assertRaises(ValueError):
            view.triangles[0, 0] = 3
        # source stays writeable and untouched
        self.assertTrue(mesh.vertices.flags.writeable)
        self.assertEqual(float(mesh.vertices[0, 0]), 0.0)

    def test_vertex_lookup_out_of_range(self):
        view = MeshBufferView(_quad_mesh())
        with self.assertRaises(IndexError):
            view.position(4)
        with self.assertRaises(IndexError):
            view.position(-1)

    def test_index_out_of_range_rejected(self):
        mesh = _quad_mesh(faces=np.asarray([[0, 1, 4]], dtype=np.int32))
        with self.assertRaises(MalformedMeshError):
            MeshBufferView(mesh)

    def test_negative_index_rejected(self):
        mesh = _quad_mesh(faces=np.asarray([[0, -1, 2]], dtype=np.int32))
        with self.assertRaises(MalformedMeshError):
            MeshBufferView(mesh)

    def test_attribute_length_mismatch_rejected(self):
        with self.assertRaises(MalformedMeshError):
            MeshBufferView(_quad_mesh(normals=np.zeros((3, 3))))
        with self.assertRaises(MalformedMeshError):
            MeshBufferView(_quad_mesh(uv_coords=np.zeros((5, 2))))
        with self.assertRaises(MalformedMeshError):
            MeshBufferView(_quad_mesh(uv_coords=np.zeros((4, 3))))

    def test_bad_triangle_shape_rejected(self):
        with self.assertRaises(MalformedMeshError):
            MeshBufferView(_quad_mesh(faces=np.asarray([[0, 1, 2, 3]], dtype=np.int32)))

    def test_missing_index_buffer_rejected(self):
        with self.assertRaises(MalformedMeshError):
            MeshBufferView(_quad_mesh(faces=None))

    def test_empty_triangle_list_is_valid(self):
        view = MeshBufferView(_quad_mesh(faces=np.zeros((0, 3), dtype=np.int32)))
        self.assertEqual(view.triangle_count, 0)

    def test_error_is_value_error(self):
        self.assertTrue(issubclass(MalformedMeshError, ValueError))


if __name__ == "__main__":
    unittest.main()
