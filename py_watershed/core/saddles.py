"""Saddle detection over vertex edge fans."""

from typing import List, NamedTuple

import structlog

from .errors import InvariantError
from .flow import FlowClassifier

logger = structlog.get_logger()


class FanCounts(NamedTuple):
    """Ridge and channel crossings found around a vertex."""
    ridges: int
    channels: int
    border: bool  # walk stopped at a border half-edge


def count_fan(classifier: FlowClassifier, v: int) -> FanCounts:
    """
    Walk the fan of v once, counting ridges and channels.

    Ordinary and generalized ridges are counted independently, likewise
    channels. The walk stops at the first border half-edge.

    Raises:
        InvariantError: If an interior vertex has unequal counts
    """
    mesh = classifier.mesh
    ridges = 0
    channels = 0
    for h in mesh.fan(v):
        if mesh.is_border(h):
            return FanCounts(ridges, channels, True)
        if classifier.is_ridge(h):
            ridges += 1
        elif classifier.is_channel(h):
            channels += 1
        if classifier.is_generalized_ridge(h):
            ridges += 1
        elif classifier.is_generalized_channel(h):
            channels += 1

    if ridges != channels:
        raise InvariantError(
            f"vertex {v} at {tuple(str(c) for c in mesh.point(v))} has "
            f"{ridges} ridges but {channels} channels")
    return FanCounts(ridges, channels, False)


def is_saddle(classifier: FlowClassifier, v: int) -> bool:
    """
    Determine whether v is a saddle.

    A vertex is a saddle if a border half-edge reaches it or if more than
    one ridge or channel meets there.
    """
    counts = count_fan(classifier, v)
    if counts.border:
        return True
    return counts.ridges > 1 or counts.channels > 1


def find_saddles(classifier: FlowClassifier) -> List[int]:
    """Return all saddle vertices in index order."""
    logger.info("Finding saddles", vertices=classifier.mesh.n_vertices)
    saddles = [v for v in range(classifier.mesh.n_vertices) if is_saddle(classifier, v)]
    logger.info("Saddles found", saddles=len(saddles))
    return saddles
