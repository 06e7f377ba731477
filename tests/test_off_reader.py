"""Tests for the OFF reader."""

from fractions import Fraction

import pytest

from py_watershed.core.errors import MeshError
from py_watershed.io.off_reader import read_off

TILTED_OFF = """OFF
# one tilted triangle
3 1 0
0 0 0
2 0 1
0 2 1
3 0 1 2
"""


@pytest.fixture
def write_off(tmp_path):
    def write(text, name="terrain.off"):
        path = tmp_path / name
        path.write_text(text)
        return path
    return write


class TestReadOff:
    """Test reading OFF files."""

    def test_basic(self, write_off):
        mesh = read_off(write_off(TILTED_OFF))
        assert mesh.n_vertices == 3
        assert mesh.n_facets == 1
        assert mesh.planes is not None
        assert tuple(mesh.point(1)) == (2, 0, 1)

    def test_without_planes(self, write_off):
        assert read_off(write_off(TILTED_OFF), with_planes=False).planes is None

    def test_any_file_name(self, write_off):
        mesh = read_off(str(write_off(TILTED_OFF, name="terrain.txt")))
        assert mesh.n_facets == 1

    def test_float_coordinates_are_kept_exactly(self, write_off):
        text = "OFF\n3 1 0\n0 0 0.1\n1 0 0.2\n0 1 0.3\n3 0 1 2\n"
        mesh = read_off(write_off(text))
        assert mesh.point(0).z == Fraction(0.1)
        assert mesh.point(2).z == Fraction(0.3)
        assert isinstance(mesh.point(1).z, Fraction)

    def test_square_terrain(self, write_off):
        text = "OFF\n4 2 0\n0 0 0\n4 0 2\n4 4 0\n0 4 2\n3 0 1 3\n3 1 2 3\n"
        mesh = read_off(write_off(text))
        assert mesh.n_facets == 2
        assert mesh.border_vertices() == [0, 1, 2, 3]

    def test_non_triangle_face(self, write_off):
        text = "OFF\n4 1 0\n0 0 0\n1 0 0\n1 1 0\n0 1 0\n4 0 1 2 3\n"
        with pytest.raises(MeshError):
            read_off(write_off(text))

    def test_truncated(self, write_off):
        with pytest.raises(MeshError):
            read_off(write_off("OFF\n3 1 0\n0 0 0\n2 0 1\n"))

    def test_missing_header(self, write_off):
        with pytest.raises(MeshError):
            read_off(write_off(TILTED_OFF.replace("OFF\n", "", 1)))

    def test_unsupported_variant(self, write_off):
        with pytest.raises(MeshError):
            read_off(write_off(TILTED_OFF.replace("OFF", "COFF", 1)))

    def test_missing_file(self, tmp_path):
        with pytest.raises(MeshError):
            read_off(tmp_path / "missing.off")
