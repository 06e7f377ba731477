"""Half-edge triangulated irregular network (TIN) for watershed extraction."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import structlog
from scipy.spatial import Delaunay

from .errors import MeshError
from .geometry import Plane3, Point3, Vector2

logger = structlog.get_logger()

NO_FACET = -1


@dataclass
class TinMesh:
    """Half-edge mesh of a terrain surface.

    Every handle is an integer index into the arrays below. Facet
    half-edges come first (``3 * facet + i``) and border half-edges, which
    have no facet on their left, are appended after them.
    """
    # Vertex data
    points: List[Point3]
    vertex_fans: List[Tuple[int, ...]]  # incoming half-edges around each vertex

    # Facet data
    triangles: np.ndarray        # (n_facets, 3) vertex ids, counter-clockwise
    facet_halfedge: np.ndarray   # one boundary half-edge per facet

    # Half-edge connectivity
    halfedge_source: np.ndarray
    halfedge_target: np.ndarray
    halfedge_opposite: np.ndarray
    halfedge_next: np.ndarray
    halfedge_prev: np.ndarray
    halfedge_facet: np.ndarray   # NO_FACET on the border

    # Attached by compute_facet_planes()
    planes: Optional[List[Plane3]] = field(default=None)

    @classmethod
    def from_points(cls, points) -> "TinMesh":
        """
        Delaunay-triangulate scattered terrain samples.

        Args:
            points: (n, 3) array-like of x, y, z samples

        Returns:
            TinMesh with planes attached
        """
        coords = np.asarray(points, dtype=float)
        if coords.ndim != 2 or coords.shape[1] != 3:
            raise MeshError(f"expected (n, 3) points, got shape {coords.shape}")

        exact = [Point3.from_coords(row) for row in points]
        triangulation = Delaunay(coords[:, :2])
        triangles = []
        for simplex in triangulation.simplices:
            i, j, k = (int(v) for v in simplex)
            ab = Vector2.between(exact[i].xy(), exact[j].xy())
            ac = Vector2.between(exact[i].xy(), exact[k].xy())
            if ab.cross(ac) < 0:
                j, k = k, j
            triangles.append((i, j, k))

        mesh = build_tin_mesh(exact, triangles)
        compute_facet_planes(mesh)
        return mesh

    @property
    def n_vertices(self) -> int:
        return len(self.points)

    @property
    def n_facets(self) -> int:
        return len(self.triangles)

    @property
    def n_halfedges(self) -> int:
        return len(self.halfedge_target)

    def source(self, h: int) -> int:
        return int(self.halfedge_source[h])

    def target(self, h: int) -> int:
        return int(self.halfedge_target[h])

    def opposite(self, h: int) -> int:
        return int(self.halfedge_opposite[h])

    def next(self, h: int) -> int:
        return int(self.halfedge_next[h])

    def prev(self, h: int) -> int:
        return int(self.halfedge_prev[h])

    def facet(self, h: int) -> int:
        return int(self.halfedge_facet[h])

    def is_border(self, h: int) -> bool:
        return bool(self.halfedge_facet[h] == NO_FACET)

    def point(self, v: int) -> Point3:
        return self.points[v]

    def fan(self, v: int) -> Tuple[int, ...]:
        """Half-edges pointing at v, in circular order."""
        return self.vertex_fans[v]

    def halfedge(self, u: int, w: int) -> int:
        """Directed half-edge from u to w."""
        for h in self.fan(w):
            if self.source(h) == u:
                return h
        raise MeshError(f"vertices {u} and {w} are not adjacent")

    def facet_halfedges(self, f: int) -> Tuple[int, int, int]:
        h = int(self.facet_halfedge[f])
        return h, self.next(h), self.next(self.next(h))

    def plane(self, f: int) -> Plane3:
        if self.planes is None:
            raise MeshError("facet planes missing; call compute_facet_planes() first")
        return self.planes[f]

    def border_vertices(self) -> List[int]:
        return [v for v, fan in enumerate(self.vertex_fans)
                if any(self.is_border(h) for h in fan)]

    def describe_halfedge(self, h: int) -> Dict[str, object]:
        """Diagnostic context for log events and error messages."""
        return {
            "halfedge": h,
            "source": tuple(str(c) for c in self.point(self.source(h))),
            "target": tuple(str(c) for c in self.point(self.target(h))),
            "border": self.is_border(h),
        }

    def describe_facet(self, f: int) -> List[Tuple[str, ...]]:
        return [tuple(str(c) for c in self.point(self.target(h)))
                for h in self.facet_halfedges(f)]


def build_tin_mesh(points: Sequence, triangles) -> TinMesh:
    """
    Build the half-edge structure of a triangulated surface.

    Args:
        points: Sequence of (x, y, z) coordinates, converted exactly
        triangles: (n, 3) vertex indices, counter-clockwise seen from above

    Returns:
        TinMesh without planes (see compute_facet_planes)

    Raises:
        MeshError: For bad indices, non-manifold input or isolated vertices
    """
    exact_points = [p if isinstance(p, Point3) else Point3.from_coords(p)
                    for p in points]
    n_vertices = len(exact_points)

    tris = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if len(tris) == 0:
        raise MeshError("mesh has no facets")
    if tris.min() < 0 or tris.max() >= n_vertices:
        raise MeshError("triangle references a vertex index out of range")

    n_facets = len(tris)
    source: List[int] = []
    target: List[int] = []
    facet: List[int] = []
    nxt: List[int] = []
    directed: Dict[Tuple[int, int], int] = {}

    for f, tri in enumerate(tris):
        corners = [int(v) for v in tri]
        if len(set(corners)) != 3:
            raise MeshError(f"facet {f} repeats a vertex: {corners}")
        for i in range(3):
            u, w = corners[i], corners[(i + 1) % 3]
            h = 3 * f + i
            if (u, w) in directed:
                raise MeshError(
                    f"directed edge {u}->{w} used twice "
                    "(non-manifold edge or inconsistent orientation)")
            directed[(u, w)] = h
            source.append(u)
            target.append(w)
            facet.append(f)
            nxt.append(3 * f + (i + 1) % 3)

    opposite = [NO_FACET] * len(source)
    border_out: Dict[int, int] = {}

    # Pair interior half-edges and create border half-edges for the rest
    for h in range(3 * n_facets):
        if opposite[h] != NO_FACET:
            continue
        u, w = source[h], target[h]
        twin = directed.get((w, u))
        if twin is not None:
            opposite[h] = twin
            opposite[twin] = h
            continue
        b = len(source)
        source.append(w)
        target.append(u)
        facet.append(NO_FACET)
        nxt.append(NO_FACET)
        opposite.append(h)
        opposite[h] = b
        if w in border_out:
            raise MeshError(f"vertex {w} is non-manifold (two border loops)")
        border_out[w] = b

    # A border half-edge w->u continues with the border half-edge leaving u
    for v, b in border_out.items():
        u = target[b]
        if u not in border_out:
            raise MeshError(f"border of vertex {u} is not closed")
        nxt[b] = border_out[u]

    halfedge_next = np.array(nxt, dtype=np.int64)
    halfedge_prev = np.empty_like(halfedge_next)
    halfedge_prev[halfedge_next] = np.arange(len(nxt))

    mesh = TinMesh(
        points=exact_points,
        vertex_fans=[],
        triangles=tris,
        facet_halfedge=np.arange(n_facets, dtype=np.int64) * 3,
        halfedge_source=np.array(source, dtype=np.int64),
        halfedge_target=np.array(target, dtype=np.int64),
        halfedge_opposite=np.array(opposite, dtype=np.int64),
        halfedge_next=halfedge_next,
        halfedge_prev=halfedge_prev,
        halfedge_facet=np.array(facet, dtype=np.int64),
    )
    mesh.vertex_fans = build_vertex_fans(mesh, border_out)

    logger.debug("Built TIN mesh", vertices=n_vertices, facets=n_facets,
                 halfedges=mesh.n_halfedges, border_halfedges=len(border_out))
    return mesh


def build_vertex_fans(mesh: TinMesh, border_out: Dict[int, int]) -> List[Tuple[int, ...]]:
    """
    Collect the circular fan of incoming half-edges around every vertex.

    Consecutive entries share a facet: ``fan[i + 1] == opposite(next(fan[i]))``.
    Border vertices start their fan at the incoming border half-edge.
    """
    incoming: List[List[int]] = [[] for _ in range(mesh.n_vertices)]
    for h in range(mesh.n_halfedges):
        incoming[mesh.target(h)].append(h)

    fans = []
    for v in range(mesh.n_vertices):
        if not incoming[v]:
            raise MeshError(f"vertex {v} is isolated")
        if v in border_out:
            start = mesh.prev(border_out[v])
        else:
            start = incoming[v][0]

        fan = [start]
        h = mesh.opposite(mesh.next(start))
        while h != start:
            fan.append(h)
            h = mesh.opposite(mesh.next(h))

        if len(fan) != len(incoming[v]):
            raise MeshError(f"vertex {v} is non-manifold")
        fans.append(tuple(fan))
    return fans


def compute_facet_planes(mesh: TinMesh) -> List[Plane3]:
    """
    Attach the plane equation of every facet.

    Raises:
        MeshError: If a facet is clockwise or vertical seen from above
    """
    planes = []
    for f, (i, j, k) in enumerate(mesh.triangles):
        plane = Plane3.through(mesh.points[int(i)], mesh.points[int(j)],
                               mesh.points[int(k)])
        if plane.c <= 0:
            raise MeshError(
                f"facet {f} is not counter-clockwise seen from above: "
                f"{mesh.describe_facet(f)}")
        planes.append(plane)
    mesh.planes = planes
    logger.debug("Facet planes computed", facets=len(planes))
    return planes
