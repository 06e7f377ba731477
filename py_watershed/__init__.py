"""
Drainage-divide (watershed) network extraction from triangulated terrains.
"""

from .core import (TinMesh, build_tin_mesh, compute_facet_planes, EdgeType,
                   FlowClassifier, WatershedExtractor, WatershedNetwork,
                   WatershedOptions)

__version__ = "0.1.0"

__all__ = ['TinMesh', 'build_tin_mesh', 'compute_facet_planes', 'EdgeType',
           'FlowClassifier', 'WatershedExtractor', 'WatershedNetwork',
           'WatershedOptions', '__version__']
