"""
Reader for triangulated terrains in OFF (Object File Format).

The file is read with meshio; coordinates arrive as doubles and are
converted to exact rationals holding the same binary values.
"""

from pathlib import Path
from typing import Union

import meshio
import numpy as np
import structlog

from ..core.errors import MeshError
from ..core.tin_mesh import TinMesh, build_tin_mesh, compute_facet_planes

logger = structlog.get_logger()


def read_off(path: Union[str, Path], with_planes: bool = True) -> TinMesh:
    """
    Read a triangulated terrain from an OFF file.

    Args:
        path: OFF file to read
        with_planes: Attach facet planes after building the mesh

    Returns:
        TinMesh built from the vertices and triangular faces

    Raises:
        MeshError: If the file is missing, malformed or has non-triangular faces
    """
    path = Path(path)
    logger.info("Reading mesh", path=str(path))

    try:
        data = meshio.read(path, file_format="off")
    except (meshio.ReadError, ValueError) as e:
        raise MeshError(f"cannot read OFF file {path}: {e}") from e

    blocks = [cells.data for cells in data.cells if cells.type == "triangle"]
    if not blocks:
        raise MeshError(f"no triangular faces in {path}")
    triangles = np.concatenate(blocks)

    mesh = build_tin_mesh(data.points, triangles)
    if with_planes:
        compute_facet_planes(mesh)
    logger.info("Mesh read", vertices=mesh.n_vertices, facets=mesh.n_facets)
    return mesh
