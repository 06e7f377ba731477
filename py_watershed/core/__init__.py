"""
Core watershed extraction functionality.
"""

from .errors import (WatershedError, MeshError, GeometryError, ClassificationError,
                     InvariantError, TraceError)
from .tin_mesh import TinMesh, build_tin_mesh, compute_facet_planes
from .flow import EdgeType, FlowClassifier, is_flat_plane
from .saddles import FanCounts, count_fan, is_saddle, find_saddles
from .steepest import find_steepest_path, is_steeper
from .tracing import TraceFlag, Termination, TracedPath, UpslopeTracer
from .watershed import WatershedExtractor, WatershedNetwork, WatershedOptions

__all__ = ['WatershedError', 'MeshError', 'GeometryError', 'ClassificationError',
           'InvariantError', 'TraceError',
           'TinMesh', 'build_tin_mesh', 'compute_facet_planes',
           'EdgeType', 'FlowClassifier', 'is_flat_plane',
           'FanCounts', 'count_fan', 'is_saddle', 'find_saddles',
           'find_steepest_path', 'is_steeper',
           'TraceFlag', 'Termination', 'TracedPath', 'UpslopeTracer',
           'WatershedExtractor', 'WatershedNetwork', 'WatershedOptions']
