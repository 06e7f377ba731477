"""
Upslope tracing of ridge lines.

Starting at a saddle, a trace climbs either along an ordinary ridge edge or
across facets along their steepest ascent, facet by facet, until it reaches
a ridge edge, another saddle or the mesh border. The points where the path
leaves each facet form the traced polyline.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

import structlog

from .errors import GeometryError, TraceError
from .flow import FlowClassifier, flow_vector
from .geometry import Point2, Point3, Ray2, Segment2, Vector2, intersect_ray_segment
from .saddles import is_saddle
from .steepest import find_steepest_path, is_ridge_climb

logger = structlog.get_logger()

DEFAULT_MAX_STEPS = 100000


class TraceFlag(Enum):
    CONTINUE = "continue"    # inside the mesh, between vertices
    AT_POINT = "at_point"    # arrived at an existing vertex
    FINISHED = "finished"


class Termination(Enum):
    SADDLE = "saddle"
    RIDGE = "ridge"
    BORDER = "border"
    NO_ASCENT = "no_ascent"  # summit or level ground, nowhere higher to go


class ExitPoint(NamedTuple):
    point: Point2
    halfedge: int  # boundary half-edge of the facet containing the point


@dataclass
class TraceState:
    """Mutable position of a trace in progress."""
    edge: int
    point: Point3
    flag: TraceFlag = TraceFlag.CONTINUE
    points: List[Point3] = field(default_factory=list)
    steps: int = 0
    termination: Optional[Termination] = None


@dataclass(frozen=True)
class TracedPath:
    """A ridge polyline traced up from one fan direction of a vertex."""
    start_vertex: int
    start_edge: int
    points: Tuple[Point3, ...]
    terminal_edge: int
    flag: TraceFlag
    termination: Termination

    @property
    def start(self) -> Point3:
        return self.points[0]

    @property
    def end(self) -> Point3:
        return self.points[-1]

    def coordinates(self) -> List[Tuple[float, float, float]]:
        return [(float(p.x), float(p.y), float(p.z)) for p in self.points]

    def terminal_state(self) -> TraceState:
        """Rebuild the state the trace stopped in."""
        termination = self.termination if self.flag == TraceFlag.FINISHED else None
        return TraceState(edge=self.terminal_edge, point=self.end, flag=self.flag,
                          points=list(self.points), termination=termination)


class UpslopeTracer:
    """Traces steepest-ascent paths over a classified mesh."""

    def __init__(self, classifier: FlowClassifier, max_steps: int = DEFAULT_MAX_STEPS):
        """
        Initialize the tracer.

        Args:
            classifier: FlowClassifier whose edges are labelled
            max_steps: Maximum facet crossings per trace
        """
        self.classifier = classifier
        self.mesh = classifier.mesh
        self.max_steps = max_steps

    def find_exit(self, h: int, upslope_ray: Ray2, start_point: Point2) -> ExitPoint:
        """
        Find where upslope_ray leaves the facet left of h.

        start_point lies on the facet boundary, so the ray meets the
        boundary there and at exactly one other point, or overlaps a
        boundary edge. In the overlap case the endpoint that is not
        start_point is the exit.

        Raises:
            GeometryError: If no boundary edge yields an exit
        """
        mesh = self.mesh
        f = mesh.facet(h)
        plane = mesh.plane(f)

        for current in mesh.facet_halfedges(f):
            seg = Segment2(plane.to_2d(mesh.point(mesh.source(current))),
                           plane.to_2d(mesh.point(mesh.target(current))))
            hit = intersect_ray_segment(upslope_ray, seg)
            if hit is None:
                continue
            if isinstance(hit, Segment2):
                if hit.source == start_point:
                    return ExitPoint(hit.target, current)
                return ExitPoint(hit.source, current)
            if hit != start_point:
                return ExitPoint(hit, current)

        raise GeometryError(
            f"no exit from facet {f} {mesh.describe_facet(f)} for ray "
            f"from {tuple(str(c) for c in upslope_ray.source)} along "
            f"{tuple(str(c) for c in upslope_ray.direction)} "
            f"starting at {tuple(str(c) for c in start_point)}")

    def find_upslope_intersection(self, state: TraceState) -> Point3:
        """
        Cross the facet left of state.edge along its steepest ascent.

        Updates state to the exit point. If the exit is a facet corner the
        flag becomes AT_POINT and state.edge points at that vertex;
        otherwise the flag is CONTINUE and state.edge is the opposite of
        the crossed edge, ready for the next facet.
        """
        mesh = self.mesh
        f = mesh.facet(state.edge)
        plane = mesh.plane(f)
        flow = flow_vector(plane)
        start = plane.to_2d(state.point)
        upslope_ray = Ray2(start, Vector2(-flow.x, -flow.y))

        exit_point = self.find_exit(state.edge, upslope_ray, start)
        crossed = exit_point.halfedge

        if exit_point.point == mesh.point(mesh.target(crossed)).xy():
            state.flag = TraceFlag.AT_POINT
            state.edge = crossed
            exit_3 = mesh.point(mesh.target(crossed))
        elif exit_point.point == mesh.point(mesh.source(crossed)).xy():
            state.flag = TraceFlag.AT_POINT
            state.edge = mesh.prev(crossed)
            exit_3 = mesh.point(mesh.source(crossed))
        else:
            state.flag = TraceFlag.CONTINUE
            state.edge = mesh.opposite(crossed)
            exit_3 = plane.to_3d(exit_point.point)

        state.point = exit_3
        state.points.append(exit_3)
        logger.debug("Crossed facet", facet=f, flag=state.flag.value,
                     exit=tuple(str(c) for c in exit_3))
        return exit_3

    def climb_ridge(self, state: TraceState) -> Point3:
        """Follow the ridge edge state.edge up to its source vertex."""
        mesh = self.mesh
        top = mesh.point(mesh.source(state.edge))
        state.edge = mesh.opposite(state.edge)
        state.flag = TraceFlag.AT_POINT
        state.point = top
        state.points.append(top)
        logger.debug("Climbed ridge edge", **mesh.describe_halfedge(state.edge))
        return top

    def at_vertex(self, state: TraceState) -> bool:
        return state.point == self.mesh.point(self.mesh.target(state.edge))

    def trace_up_once(self, state: TraceState) -> None:
        """
        Advance the trace by one facet or ridge edge.

        state.edge must have the next facet to trace on its left, and
        state.point must lie on that facet's boundary.
        """
        if state.flag == TraceFlag.AT_POINT:
            v = self.mesh.target(state.edge)
            if is_saddle(self.classifier, v):
                raise TraceError(f"trace reached saddle {v} without finishing")
            state.edge = find_steepest_path(self.classifier, v)

        if not self.at_vertex(state):
            self.find_upslope_intersection(state)
        elif is_ridge_climb(self.classifier, state.edge):
            self.climb_ridge(state)
        elif self.classifier.is_generalized_ridge(state.edge):
            self.find_upslope_intersection(state)
        else:
            state.flag = TraceFlag.FINISHED
            state.termination = Termination.NO_ASCENT

    def termination(self, state: TraceState) -> Optional[Termination]:
        """Why the trace is finished, or None if it must go on."""
        if state.flag == TraceFlag.FINISHED:
            return state.termination
        if state.flag == TraceFlag.AT_POINT and is_saddle(
                self.classifier, self.mesh.target(state.edge)):
            return Termination.SADDLE
        if self.mesh.is_border(state.edge):
            return Termination.BORDER
        if self.classifier.is_ridge(state.edge):
            return Termination.RIDGE
        return None

    def trace_finished(self, state: TraceState) -> bool:
        """
        Determine whether a trace has finished.

        A trace is finished when it reaches a saddle, a ridge or the border.
        """
        return self.termination(state) is not None

    def trace_up(self, h: int) -> TracedPath:
        """
        Trace up from h's target along the facet to its left and onward.

        Raises:
            TraceError: If the trace exceeds max_steps
        """
        mesh = self.mesh
        start = mesh.point(mesh.target(h))
        state = TraceState(edge=h, point=start, points=[start])

        while True:
            self.trace_up_once(state)
            state.steps += 1
            reason = self.termination(state)
            if reason is not None:
                break
            if state.steps >= self.max_steps:
                raise TraceError(
                    f"trace from vertex {mesh.target(h)} did not finish "
                    f"after {self.max_steps} steps")

        state.termination = reason
        logger.debug("Trace finished", vertex=mesh.target(h), steps=state.steps,
                     points=len(state.points), termination=reason.value)
        return TracedPath(
            start_vertex=mesh.target(h),
            start_edge=h,
            points=tuple(state.points),
            terminal_edge=state.edge,
            flag=state.flag,
            termination=reason,
        )

    def trace_from_saddle(self, v: int) -> List[TracedPath]:
        """
        Trace all upslope paths from a saddle vertex.

        One independent trace runs for every half-edge of the fan, in fan
        order. Directions that do not rise end at once with termination
        NO_ASCENT and a single-point polyline.

        Raises:
            TraceError: If v is not a saddle
        """
        if not is_saddle(self.classifier, v):
            raise TraceError(f"vertex {v} is not a saddle")
        return [self.trace_up(h) for h in self.mesh.fan(v)]
