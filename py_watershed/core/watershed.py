"""
Watershed network extraction pipeline.

This module runs the stages in order:
- Facet plane computation (when the mesh has none yet)
- Edge labelling
- Saddle detection
- Upslope tracing from every saddle
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import structlog

from .flow import FlowClassifier
from .saddles import find_saddles
from .tin_mesh import TinMesh, compute_facet_planes
from .tracing import DEFAULT_MAX_STEPS, Termination, TracedPath, UpslopeTracer

logger = structlog.get_logger()


@dataclass
class WatershedOptions:
    """Watershed extraction options."""
    max_trace_steps: int = DEFAULT_MAX_STEPS  # Facet crossings allowed per trace
    trace_paths: bool = True  # False stops after saddle detection


@dataclass
class WatershedNetwork:
    """Result of a watershed extraction."""
    mesh: TinMesh
    edge_types: np.ndarray
    saddles: List[int]
    paths: Dict[int, List[TracedPath]] = field(default_factory=dict)

    @property
    def path_count(self) -> int:
        return sum(len(paths) for paths in self.paths.values())

    def all_paths(self) -> List[TracedPath]:
        return [path for saddle in self.saddles for path in self.paths.get(saddle, [])]

    def summary(self) -> Dict[str, int]:
        """Counts for reporting."""
        result = {
            "vertices": self.mesh.n_vertices,
            "facets": self.mesh.n_facets,
            "saddles": len(self.saddles),
            "paths": self.path_count,
        }
        for reason in Termination:
            result[f"ended_at_{reason.value}"] = sum(
                1 for path in self.all_paths() if path.termination == reason)
        return result


class WatershedExtractor:
    """Extracts the drainage-divide network of a TIN."""

    def __init__(self, mesh: TinMesh, options: Optional[WatershedOptions] = None):
        """
        Initialize the extractor.

        Args:
            mesh: TinMesh to analyse
            options: Extraction options
        """
        self.mesh = mesh
        self.options = options or WatershedOptions()

        self.classifier = None
        self.tracer = None
        self.saddles = None
        self.paths = None

    def prepare(self):
        """Attach facet planes if the mesh has none."""
        if self.mesh.planes is None:
            start = time.time()
            compute_facet_planes(self.mesh)
            logger.info("Planes computed", facets=self.mesh.n_facets,
                        seconds=round(time.time() - start, 4))
        self.classifier = FlowClassifier(self.mesh)

    def label_edges(self) -> np.ndarray:
        if self.classifier is None:
            self.prepare()
        start = time.time()
        edge_types = self.classifier.label_all_edges()
        logger.info("Labelling time", seconds=round(time.time() - start, 4))
        return edge_types

    def find_saddles(self) -> List[int]:
        if self.classifier is None or not self.classifier.frozen:
            self.label_edges()
        start = time.time()
        self.saddles = find_saddles(self.classifier)
        logger.info("Saddle finding time", seconds=round(time.time() - start, 4))
        return self.saddles

    def trace_saddles(self) -> Dict[int, List[TracedPath]]:
        """
        Trace every upslope path from every saddle.

        Returns:
            Mapping of saddle vertex to its traced paths
        """
        if self.saddles is None:
            self.find_saddles()

        self.tracer = UpslopeTracer(self.classifier, self.options.max_trace_steps)
        start = time.time()
        self.paths = {}
        for v in self.saddles:
            self.paths[v] = self.tracer.trace_from_saddle(v)

        logger.info("Tracing time", saddles=len(self.saddles),
                    paths=sum(len(p) for p in self.paths.values()),
                    seconds=round(time.time() - start, 4))
        return self.paths

    def run(self) -> WatershedNetwork:
        """Run all stages and collect the network."""
        logger.info("Extracting watershed network", vertices=self.mesh.n_vertices,
                    facets=self.mesh.n_facets)
        self.prepare()
        self.label_edges()
        self.find_saddles()
        if self.options.trace_paths:
            self.trace_saddles()

        network = WatershedNetwork(
            mesh=self.mesh,
            edge_types=self.classifier.edge_types,
            saddles=list(self.saddles),
            paths=dict(self.paths or {}),
        )
        logger.info("Watershed network extracted", **network.summary())
        return network
