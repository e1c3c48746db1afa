# tests/test_geometry.py

import numpy as np
import pytest

from planet_generator.geometry import compute_face_normals, compute_vertex_normals, icosphere


@pytest.mark.parametrize("subdivisions", [0, 1, 2, 3])
def test_icosphere_counts(subdivisions):
    vertices, triangles = icosphere(subdivisions)

    assert vertices.shape == (10 * 4 ** subdivisions + 2, 3)
    assert triangles.shape == (20 * 4 ** subdivisions, 3)


def test_negative_subdivisions_give_an_icosahedron():
    vertices, triangles = icosphere(-2)

    assert vertices.shape == (12, 3)
    assert triangles.shape == (20, 3)


def test_icosphere_vertices_are_unit_length():
    vertices, _ = icosphere(3)

    np.testing.assert_allclose(np.linalg.norm(vertices, axis=1), 1.0, atol=1e-12)


@pytest.mark.parametrize("subdivisions", [0, 2])
def test_icosphere_faces_wind_outward(subdivisions):
    vertices, triangles = icosphere(subdivisions)
    normals = compute_face_normals(vertices, triangles)
    centroids = vertices[triangles].mean(axis=1)

    assert np.all(np.einsum("ij,ij->i", normals, centroids) > 0.0)


def test_icosphere_is_closed():
    _, triangles = icosphere(2)
    edges = np.sort(np.concatenate([triangles[:, [0, 1]], triangles[:, [1, 2]], triangles[:, [2, 0]]]), axis=1)
    _, counts = np.unique(edges, axis=0, return_counts=True)

    assert np.all(counts == 2)


def test_vertex_normals_of_a_sphere_are_radial():
    vertices, triangles = icosphere(3)
    normals = compute_vertex_normals(vertices, triangles)

    np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0, atol=1e-12)
    assert np.all(np.einsum("ij,ij->i", normals, vertices) > 0.99)


def test_isolated_vertices_fall_back_to_radial_direction():
    vertices, triangles = icosphere(0)
    vertices = np.vstack([vertices, [[0.0, 0.0, 2.0], [0.0, 0.0, 0.0]]])
    normals = compute_vertex_normals(vertices, triangles)

    np.testing.assert_allclose(normals[-2], [0.0, 0.0, 1.0])
    np.testing.assert_array_equal(normals[-1], [0.0, 0.0, 0.0])


def test_vertex_normals_without_triangles():
    vertices = np.array([[2.0, 0.0, 0.0], [0.0, -3.0, 0.0]])
    normals = compute_vertex_normals(vertices, np.empty((0, 3), dtype=np.int64))

    np.testing.assert_allclose(normals, [[1.0, 0.0, 0.0], [0.0, -1.0, 0.0]])
