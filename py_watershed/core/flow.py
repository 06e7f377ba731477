"""
Flow classification of directed mesh edges.

This module implements:
- The per-edge "slopes into" test on exact orientation
- The IN/OUT label table filled by a single classification pass
- Ridge, channel and transverse types derived from an edge and its opposite
- Generalized ridges and channels running through a facet corner
"""

from enum import IntEnum
from typing import Dict

import numpy as np
import structlog

from .errors import ClassificationError, MeshError
from .geometry import Orientation, Plane3, Point2, Vector3, orientation
from .tin_mesh import TinMesh

logger = structlog.get_logger()


class EdgeType(IntEnum):
    """Label of a directed edge."""
    NO_TYPE = 0      # Not yet classified
    IN = 1           # The left facet drains across this edge
    OUT = 2          # The left facet drains away from this edge
    RIDGE = 3        # Neither side drains across
    CHANNEL = 4      # Both sides drain across
    TRANSVERSE = 5   # Exactly one side drains across


# Flow direction used on perfectly level facets
CANONICAL_FLOW = Vector3(-1, 0, 0)


def is_flat_plane(plane: Plane3) -> bool:
    """Check if a plane has no horizontal gradient."""
    return plane.a == 0 and plane.b == 0


def flow_vector(plane: Plane3) -> Vector3:
    """
    Direction water takes on a facet.

    For an upward normal the horizontal part of the normal points
    downslope. Level facets use CANONICAL_FLOW.
    """
    if is_flat_plane(plane):
        return CANONICAL_FLOW
    return plane.orthogonal_vector()


class FlowClassifier:
    """Labels directed edges by how water crosses them."""

    def __init__(self, mesh: TinMesh):
        """
        Initialize the classifier.

        Args:
            mesh: TinMesh with facet planes attached
        """
        if mesh.planes is None:
            raise MeshError("facet planes missing; call compute_facet_planes() first")
        self.mesh = mesh
        self.edge_types = np.full(mesh.n_halfedges, EdgeType.NO_TYPE, dtype=np.int8)
        self.frozen = False

    def slopes_into(self, h: int) -> bool:
        """
        Determine whether the facet left of h drains across h.

        Border half-edges have no facet and never drain. Once the
        classification pass has run the stored label is returned.
        """
        label = self.edge_types[h]
        if label == EdgeType.IN:
            return True
        if label == EdgeType.OUT:
            return False
        return self._drains_across(h)

    def _drains_across(self, h: int) -> bool:
        mesh = self.mesh
        if mesh.is_border(h):
            return False

        flow = flow_vector(mesh.plane(mesh.facet(h)))
        origin = mesh.point(mesh.source(h))
        dest = mesh.point(mesh.target(h))
        displaced = Point2(origin.x + flow.x, origin.y + flow.y)

        turn = orientation(origin.xy(), dest.xy(), displaced)
        return turn == Orientation.RIGHT_TURN

    def classify_edge(self, h: int) -> EdgeType:
        """Compute the IN/OUT label of an edge that has none yet."""
        if self.edge_types[h] != EdgeType.NO_TYPE:
            raise ClassificationError(
                f"edge already labelled {EdgeType(int(self.edge_types[h])).name}: "
                f"{self.mesh.describe_halfedge(h)}")
        if self.slopes_into(h):
            return EdgeType.IN
        return EdgeType.OUT

    def label_all_edges(self) -> np.ndarray:
        """
        Label every directed edge exactly once.

        Returns:
            The frozen label table, indexed by half-edge
        """
        logger.info("Labelling edges", halfedges=self.mesh.n_halfedges)
        if self.frozen:
            raise ClassificationError("edges are already labelled")

        self.edge_types[:] = EdgeType.NO_TYPE
        for h in range(self.mesh.n_halfedges):
            self.edge_types[h] = self.classify_edge(h)
        self.edge_types.flags.writeable = False
        self.frozen = True

        logger.info("Edges labelled", **self.label_counts())
        return self.edge_types

    def edge_type(self, h: int) -> EdgeType:
        return EdgeType(int(self.edge_types[h]))

    def is_ridge(self, h: int) -> bool:
        return not (self.slopes_into(h) or self.slopes_into(self.mesh.opposite(h)))

    def is_channel(self, h: int) -> bool:
        return self.slopes_into(h) and self.slopes_into(self.mesh.opposite(h))

    def is_transverse(self, h: int) -> bool:
        return self.slopes_into(h) != self.slopes_into(self.mesh.opposite(h))

    def undirected_type(self, h: int) -> EdgeType:
        """RIDGE, CHANNEL or TRANSVERSE for the undirected edge of h."""
        if self.is_ridge(h):
            return EdgeType.RIDGE
        if self.is_channel(h):
            return EdgeType.CHANNEL
        return EdgeType.TRANSVERSE

    def _check_border_corner(self, h: int) -> None:
        if not self.mesh.is_border(self.mesh.next(h)):
            raise MeshError(f"border half-edge followed by a facet edge: "
                            f"{self.mesh.describe_halfedge(h)}")

    def is_generalized_ridge(self, h: int) -> bool:
        """
        Is there a generalized ridge up the facet left of h from h's target?

        Water drains across both edges of the facet meeting at the target,
        so the steepest ascent from that vertex runs inside the facet.
        """
        if self.mesh.is_border(h):
            self._check_border_corner(h)
            return False
        return self.slopes_into(h) and self.slopes_into(self.mesh.next(h))

    def is_generalized_channel(self, h: int) -> bool:
        """
        Is there a generalized channel down the facet left of h to h's target?

        Water drains across neither edge meeting at the target.
        """
        if self.mesh.is_border(h):
            self._check_border_corner(h)
            return False
        return not (self.slopes_into(h) or self.slopes_into(self.mesh.next(h)))

    def label_counts(self) -> Dict[str, int]:
        """Count stored labels and undirected edge types."""
        counts = np.bincount(self.edge_types, minlength=len(EdgeType))
        result = {EdgeType(i).name.lower(): int(counts[i])
                  for i in (EdgeType.NO_TYPE, EdgeType.IN, EdgeType.OUT)}

        undirected = {EdgeType.RIDGE: 0, EdgeType.CHANNEL: 0, EdgeType.TRANSVERSE: 0}
        for h in range(self.mesh.n_halfedges):
            if h < self.mesh.opposite(h):
                undirected[self.undirected_type(h)] += 1
        result.update({t.name.lower(): n for t, n in undirected.items()})
        return result
