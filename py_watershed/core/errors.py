"""Exceptions raised by the watershed extraction core.

Every error here is fatal for the current run; nothing in the package
catches them except the command line, which reports and exits.
"""


class WatershedError(Exception):
    """Base class for all watershed extraction errors."""


class MeshError(WatershedError):
    """The input mesh is malformed (non-manifold, bad indices, wrong orientation)."""


class GeometryError(WatershedError):
    """A geometric precondition does not hold for a facet or ray."""


class ClassificationError(WatershedError):
    """An edge was classified twice."""


class InvariantError(WatershedError):
    """Ridge and channel counts disagree around an interior vertex."""


class TraceError(WatershedError):
    """An upslope trace was started or continued illegally, or did not terminate."""
