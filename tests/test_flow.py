"""Tests for edge flow classification."""

import numpy as np
import pytest

from py_watershed.core.errors import ClassificationError, MeshError
from py_watershed.core.flow import CANONICAL_FLOW, EdgeType, FlowClassifier, flow_vector
from py_watershed.core.geometry import Plane3
from py_watershed.core.tin_mesh import build_tin_mesh


class TestFlowVector:
    """Test the per-facet flow direction."""

    def test_sloped_facet_uses_normal(self, tilted_triangle):
        plane = tilted_triangle.plane(0)
        assert flow_vector(plane) == plane.orthogonal_vector()

    def test_level_facet_uses_canonical_flow(self):
        assert flow_vector(Plane3(0, 0, 1, -1)) == CANONICAL_FLOW


class TestSlopesInto:
    """Test the drainage test on single half-edges."""

    def test_tilted_triangle_labels(self, tilted_triangle):
        classifier = FlowClassifier(tilted_triangle)
        assert classifier.slopes_into(0)       # 0 -> 1
        assert not classifier.slopes_into(1)   # 1 -> 2, the high edge
        assert classifier.slopes_into(2)       # 2 -> 0

    def test_border_never_drains(self, inclined_plane):
        classifier = FlowClassifier(inclined_plane)
        for h in range(inclined_plane.n_halfedges):
            if inclined_plane.is_border(h):
                assert not classifier.slopes_into(h)

    def test_level_facet(self, flat_triangle):
        """Water on a level facet runs along -x."""
        classifier = FlowClassifier(flat_triangle)
        assert not classifier.slopes_into(0)
        assert not classifier.slopes_into(1)
        assert classifier.slopes_into(2)

    def test_requires_planes(self):
        mesh = build_tin_mesh([(0, 0, 0), (1, 0, 0), (0, 1, 0)], [(0, 1, 2)])
        with pytest.raises(MeshError):
            FlowClassifier(mesh)


class TestLabelling:
    """Test the single classification pass."""

    def test_every_edge_labelled(self, inclined_plane):
        classifier = FlowClassifier(inclined_plane)
        labels = classifier.label_all_edges()
        assert len(labels) == inclined_plane.n_halfedges
        assert not np.any(labels == EdgeType.NO_TYPE)
        assert set(np.unique(labels)) <= {EdgeType.IN, EdgeType.OUT}

    def test_level_facet_fully_labelled(self, flat_triangle):
        classifier = FlowClassifier(flat_triangle)
        labels = classifier.label_all_edges()
        assert not np.any(labels == EdgeType.NO_TYPE)
        assert [classifier.edge_type(h) for h in range(3)] == [
            EdgeType.OUT, EdgeType.OUT, EdgeType.IN,
        ]
        for h in range(3, flat_triangle.n_halfedges):
            assert classifier.edge_type(h) == EdgeType.OUT

    def test_labels_match_direct_test(self, plus_saddle):
        classifier = FlowClassifier(plus_saddle)
        expected = [classifier.slopes_into(h) for h in range(plus_saddle.n_halfedges)]
        classifier.label_all_edges()
        for h, drains in enumerate(expected):
            assert (classifier.edge_type(h) == EdgeType.IN) == drains
            assert classifier.slopes_into(h) == drains

    def test_table_frozen_after_pass(self, tilted_triangle):
        classifier = FlowClassifier(tilted_triangle)
        labels = classifier.label_all_edges()
        assert classifier.frozen
        with pytest.raises(ValueError):
            labels[0] = EdgeType.OUT
        with pytest.raises(ClassificationError):
            classifier.label_all_edges()

    def test_classify_labelled_edge_rejected(self, tilted_triangle):
        classifier = FlowClassifier(tilted_triangle)
        classifier.label_all_edges()
        with pytest.raises(ClassificationError):
            classifier.classify_edge(0)

    def test_label_counts(self, tilted_triangle):
        classifier = FlowClassifier(tilted_triangle)
        classifier.label_all_edges()
        counts = classifier.label_counts()
        assert counts == {
            "no_type": 0,
            "in": 2,
            "out": 4,
            "ridge": 1,
            "channel": 0,
            "transverse": 2,
        }


class TestEdgeTypes:
    """Test ridge, channel and transverse edges."""

    def test_tilted_triangle_types(self, tilted_triangle):
        classifier = FlowClassifier(tilted_triangle)
        assert classifier.undirected_type(0) == EdgeType.TRANSVERSE
        assert classifier.undirected_type(1) == EdgeType.RIDGE
        assert classifier.undirected_type(2) == EdgeType.TRANSVERSE

    def test_types_are_symmetric(self, inclined_plane):
        classifier = FlowClassifier(inclined_plane)
        classifier.label_all_edges()
        for h in range(inclined_plane.n_halfedges):
            twin = inclined_plane.opposite(h)
            assert classifier.undirected_type(h) == classifier.undirected_type(twin)

    def test_exactly_one_type(self, plus_saddle):
        classifier = FlowClassifier(plus_saddle)
        for h in range(plus_saddle.n_halfedges):
            flags = [classifier.is_ridge(h), classifier.is_channel(h),
                     classifier.is_transverse(h)]
            assert sum(flags) == 1

    def test_plus_saddle_spokes(self, plus_saddle):
        classifier = FlowClassifier(plus_saddle)
        classifier.label_all_edges()
        assert classifier.is_ridge(plus_saddle.halfedge(1, 0))
        assert classifier.is_ridge(plus_saddle.halfedge(3, 0))
        assert classifier.is_channel(plus_saddle.halfedge(2, 0))
        assert classifier.is_channel(plus_saddle.halfedge(4, 0))

    def test_level_facet_edges(self, flat_triangle):
        classifier = FlowClassifier(flat_triangle)
        assert classifier.is_ridge(0)
        assert classifier.is_ridge(1)
        assert classifier.is_transverse(2)


class TestGeneralizedEdges:
    """Test generalized ridges and channels through facet corners."""

    def test_generalized_ridge_at_low_corner(self, tilted_triangle):
        classifier = FlowClassifier(tilted_triangle)
        assert classifier.is_generalized_ridge(2)      # up from vertex 0
        assert not classifier.is_generalized_ridge(0)  # vertex 1
        assert not classifier.is_generalized_ridge(1)  # vertex 2

    def test_generalized_channel(self, flat_triangle):
        """Neither edge meeting at vertex 1 drains."""
        classifier = FlowClassifier(flat_triangle)
        assert classifier.is_generalized_channel(0)
        assert not classifier.is_generalized_channel(1)
        assert not classifier.is_generalized_channel(2)

    def test_tilted_triangle_has_no_generalized_channel(self, tilted_triangle):
        classifier = FlowClassifier(tilted_triangle)
        assert not any(classifier.is_generalized_channel(h) for h in range(3))

    def test_plus_saddle_centre_has_none(self, plus_saddle):
        classifier = FlowClassifier(plus_saddle)
        for h in plus_saddle.fan(0):
            assert not classifier.is_generalized_ridge(h)
            assert not classifier.is_generalized_channel(h)

    def test_border_edges_are_never_generalized(self, inclined_plane):
        classifier = FlowClassifier(inclined_plane)
        for h in range(inclined_plane.n_halfedges):
            if inclined_plane.is_border(h):
                assert not classifier.is_generalized_ridge(h)
                assert not classifier.is_generalized_channel(h)

    def test_broken_border_rejected(self, tilted_triangle, monkeypatch):
        """A border half-edge must be followed by another border half-edge."""
        classifier = FlowClassifier(tilted_triangle)
        border = tilted_triangle.opposite(0)
        monkeypatch.setattr(tilted_triangle, "next", lambda h: 0)
        with pytest.raises(MeshError):
            classifier.is_generalized_ridge(border)
