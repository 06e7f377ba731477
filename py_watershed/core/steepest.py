"""Selection of the steepest ascent direction leaving a vertex."""

from fractions import Fraction
from typing import Optional

import structlog

from .errors import GeometryError
from .flow import FlowClassifier, is_flat_plane
from .geometry import Vector3

logger = structlog.get_logger()

# Level reference direction every real ascent must beat
FLAT_REFERENCE = Vector3(1, 0, 0)


def is_steeper(u: Vector3, v: Vector3) -> bool:
    """True if u is steeper than v. Compares squared slopes to avoid sqrt."""
    u_run = u.xy().squared_length()
    v_run = v.xy().squared_length()
    if u_run == 0 or v_run == 0:
        raise GeometryError(f"slope of a vertical vector is undefined: {u}, {v}")
    return Fraction(u.z * u.z) / u_run > Fraction(v.z * v.z) / v_run


def ascent_vector(classifier: FlowClassifier, h: int) -> Optional[Vector3]:
    """
    Upslope direction offered by a fan half-edge, if any.

    h points at the fan vertex. An ordinary ridge climbing to h's source
    offers the edge itself; a generalized ridge offers the upslope vector
    lying in h's left facet.

    Returns:
        The ascent vector, or None if h offers no way up
    """
    mesh = classifier.mesh
    vertex = mesh.point(mesh.target(h))
    other = mesh.point(mesh.source(h))

    if classifier.is_ridge(h) and other.z > vertex.z:
        return Vector3.between(vertex, other)

    if classifier.is_generalized_ridge(h):
        plane = mesh.plane(mesh.facet(h))
        if is_flat_plane(plane):
            return FLAT_REFERENCE
        a, b, c = plane.orthogonal_vector()
        return Vector3(-a, -b, Fraction(a * a + b * b) / c)

    return None


def is_ridge_climb(classifier: FlowClassifier, h: int) -> bool:
    """Check if h is an ordinary ridge rising from its target to its source."""
    mesh = classifier.mesh
    return (classifier.is_ridge(h)
            and mesh.point(mesh.source(h)).z > mesh.point(mesh.target(h)).z)


def find_steepest_path(classifier: FlowClassifier, v: int) -> int:
    """
    Find the fan half-edge of v offering the steepest ascent.

    Only upslope ridges and generalized ridges qualify. If none beats a
    level direction the first half-edge of the fan is returned.

    Returns:
        Half-edge pointing at v; the ascent runs along it or through the
        facet on its left
    """
    fan = classifier.mesh.fan(v)
    steepest_vector = FLAT_REFERENCE
    steepest_halfedge = fan[0]

    for h in fan:
        candidate = ascent_vector(classifier, h)
        if candidate is None:
            continue
        if is_steeper(candidate, steepest_vector):
            steepest_vector = candidate
            steepest_halfedge = h

    logger.debug("Steepest path selected", vertex=v,
                 vector=tuple(str(c) for c in steepest_vector),
                 **classifier.mesh.describe_halfedge(steepest_halfedge))
    return steepest_halfedge
