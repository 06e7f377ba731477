"""Hand-built terrains shared by the test modules."""

import pytest

from py_watershed.core.tin_mesh import build_tin_mesh, compute_facet_planes


def make_mesh(points, triangles):
    mesh = build_tin_mesh(points, triangles)
    compute_facet_planes(mesh)
    return mesh


@pytest.fixture
def tilted_triangle():
    """z = (x + y) / 2 on one triangle; lowest corner at the origin."""
    points = [(0, 0, 0), (2, 0, 1), (0, 2, 1)]
    return make_mesh(points, [(0, 1, 2)])


@pytest.fixture
def flat_triangle():
    """A level triangle at height 1."""
    points = [(0, 0, 1), (1, 0, 1), (0, 1, 1)]
    return make_mesh(points, [(0, 1, 2)])


@pytest.fixture
def plus_saddle():
    """
    Interior vertex 0 with four neighbours alternating high and low.

        A = (1, 0, 1), B = (0, 1, -1), C = (-1, 0, 1), D = (0, -1, -1)
    """
    points = [(0, 0, 0), (1, 0, 1), (0, 1, -1), (-1, 0, 1), (0, -1, -1)]
    triangles = [(0, 1, 2), (0, 2, 3), (0, 3, 4), (0, 4, 1)]
    return make_mesh(points, triangles)


@pytest.fixture
def inclined_plane():
    """
    The plane z = x: interior vertex V at the origin, ring N0..N3 on the
    diagonals and a wing vertex S to the left.

    Vertex ids: V=0, N0=1 (1, 1), N1=2 (-1, 1), N2=3 (-1, -1),
    N3=4 (1, -1), S=5 (-2, 0).
    """
    points = [(0, 0, 0), (1, 1, 1), (-1, 1, -1), (-1, -1, -1), (1, -1, 1), (-2, 0, -2)]
    triangles = [
        (0, 1, 2),  # F0
        (0, 2, 3),  # F1
        (0, 3, 4),  # F2
        (0, 4, 1),  # F3
        (5, 3, 2),  # wing
    ]
    return make_mesh(points, triangles)


@pytest.fixture
def square_incline():
    """Square split along its diagonal, z = (x + y) / 2 on both facets."""
    points = [(0, 0, 0), (4, 0, 2), (4, 4, 4), (0, 4, 2)]
    return make_mesh(points, [(0, 1, 3), (1, 2, 3)])


@pytest.fixture
def square_ridge():
    """Square whose diagonal is a ridge: the far corner drops back to 0."""
    points = [(0, 0, 0), (4, 0, 2), (4, 4, 0), (0, 4, 2)]
    return make_mesh(points, [(0, 1, 3), (1, 2, 3)])
