# planet_generator/geometry.py

"""
================================================================================
BASE MESH GEOMETRY
================================================================================
Helpers for the indexed triangle meshes consumed by the TerrainMeshBuilder:
an icosphere generator for hosts that do not supply their own base mesh, and
face / vertex normal computation for displaced meshes.

Data Contract:
---------------
- Vertices: (N, 3) float64 arrays. Triangles: (M, 3) int64 index arrays with
  counter-clockwise winding when viewed from outside the sphere.
- Side Effects: None. Input arrays are never modified.
================================================================================
"""

import numpy as np

_PHI = (1.0 + np.sqrt(5.0)) / 2.0

_ICOSAHEDRON_VERTICES = np.array([
    [-1.0, _PHI, 0.0], [1.0, _PHI, 0.0], [-1.0, -_PHI, 0.0], [1.0, -_PHI, 0.0],
    [0.0, -1.0, _PHI], [0.0, 1.0, _PHI], [0.0, -1.0, -_PHI], [0.0, 1.0, -_PHI],
    [_PHI, 0.0, -1.0], [_PHI, 0.0, 1.0], [-_PHI, 0.0, -1.0], [-_PHI, 0.0, 1.0],
])

_ICOSAHEDRON_TRIANGLES = np.array([
    [0, 11, 5], [0, 5, 1], [0, 1, 7], [0, 7, 10], [0, 10, 11],
    [1, 5, 9], [5, 11, 4], [11, 10, 2], [10, 7, 6], [7, 1, 8],
    [3, 9, 4], [3, 4, 2], [3, 2, 6], [3, 6, 8], [3, 8, 9],
    [4, 9, 5], [2, 4, 11], [6, 2, 10], [8, 6, 7], [9, 8, 1],
], dtype=np.int64)


def icosphere(subdivisions: int = 0) -> tuple[np.ndarray, np.ndarray]:
    """
    Builds a unit icosphere by recursive midpoint subdivision of an icosahedron.

    Args:
        subdivisions (int): Number of subdivision passes. Negative values are
            treated as 0.

    Returns:
        tuple: (vertices (N, 3), triangles (M, 3)) with N = 10 * 4**n + 2 and
        M = 20 * 4**n.
    """
    vertices = [tuple(v / np.linalg.norm(v)) for v in _ICOSAHEDRON_VERTICES]
    triangles = [tuple(int(i) for i in tri) for tri in _ICOSAHEDRON_TRIANGLES]

    for _ in range(max(0, int(subdivisions))):
        midpoints = {}

        def midpoint(a, b):
            key = (a, b) if a < b else (b, a)
            index = midpoints.get(key)
            if index is None:
                mid = (np.asarray(vertices[a]) + np.asarray(vertices[b])) * 0.5
                vertices.append(tuple(mid / np.linalg.norm(mid)))
                index = len(vertices) - 1
                midpoints[key] = index
            return index

        refined = []
        for a, b, c in triangles:
            ab = midpoint(a, b)
            bc = midpoint(b, c)
            ca = midpoint(c, a)
            refined.extend([(a, ab, ca), (b, bc, ab), (c, ca, bc), (ab, bc, ca)])
        triangles = refined

    return np.array(vertices, dtype=np.float64), np.array(triangles, dtype=np.int64)


def compute_face_normals(vertices: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Unnormalized face normals; their length is twice the triangle area."""
    v0 = vertices[triangles[:, 0]]
    v1 = vertices[triangles[:, 1]]
    v2 = vertices[triangles[:, 2]]
    return np.cross(v1 - v0, v2 - v0)


def compute_vertex_normals(vertices: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """
    Smooth, area-weighted vertex normals. Vertices that belong to no triangle
    (or only to degenerate ones) take their radial direction instead.
    """
    vertices = np.asarray(vertices, dtype=np.float64)
    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)

    normals = np.zeros_like(vertices)
    if triangles.shape[0] > 0:
        face_normals = compute_face_normals(vertices, triangles)
        for corner in range(3):
            np.add.at(normals, triangles[:, corner], face_normals)

    lengths = np.linalg.norm(normals, axis=1)
    isolated = lengths <= 0.0
    normals[isolated] = vertices[isolated]
    lengths[isolated] = np.linalg.norm(vertices[isolated], axis=1)

    # A vertex at the origin with no faces keeps a zero normal.
    lengths[lengths == 0.0] = 1.0
    return normals / lengths[:, np.newaxis]
