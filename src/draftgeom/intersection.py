"""Pairwise intersection of drafting entities.

Everything here is a pure function of its inputs. Straight-edged and sampled
entities are reduced to line segments; circles and arcs are kept analytic.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator, NamedTuple

from . import tolerances
from .entity import DraftEntity, EntityKind
from .geometry import Segment, Vec2, normalize_angle, polyline_segments

EPS = tolerances.INTERSECTION_EPS


@dataclass(slots=True)
class IntersectionResult:
    points: list[Vec2] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Vec2]:
        return iter(self.points)

    def __bool__(self) -> bool:
        return bool(self.points)


def _in_unit_range(t: float) -> bool:
    return -EPS <= t <= 1.0 + EPS


def angle_in_arc_range(angle: float, start_angle: float, end_angle: float) -> bool:
    """True when ``angle`` lies on the CCW sweep start -> end, with EPS slack."""
    angle = normalize_angle(angle)
    start_angle = normalize_angle(start_angle)
    end_angle = normalize_angle(end_angle)
    if start_angle <= end_angle:
        return start_angle - EPS <= angle <= end_angle + EPS
    return angle >= start_angle - EPS or angle <= end_angle + EPS


def intersect_line_line(p1: Vec2, p2: Vec2, p3: Vec2, p4: Vec2) -> list[Vec2]:
    """Intersection of segments p1-p2 and p3-p4; parallel or collinear gives none."""
    d1 = p2 - p1
    d2 = p4 - p3
    denom = d1.cross(d2)
    if abs(denom) < EPS:
        return []
    d3 = p3 - p1
    t = d3.cross(d2) / denom
    s = d3.cross(d1) / denom
    if _in_unit_range(t) and _in_unit_range(s):
        return [p1 + d1 * t]
    return []


def intersect_line_circle(p1: Vec2, p2: Vec2, center: Vec2, radius: float) -> list[Vec2]:
    d = p2 - p1
    f = p1 - center
    a = d.dot(d)
    if a < tolerances.ZERO_LENGTH_SQ:
        return []
    b = 2.0 * f.dot(d)
    c = f.dot(f) - radius * radius

    disc = b * b - 4.0 * a * c
    if disc < -EPS:
        return []
    if disc < EPS:
        # tangent
        t = -b / (2.0 * a)
        return [p1 + d * t] if _in_unit_range(t) else []

    root = math.sqrt(disc)
    result = []
    for t in ((-b - root) / (2.0 * a), (-b + root) / (2.0 * a)):
        if _in_unit_range(t):
            result.append(p1 + d * t)
    return result


def intersect_circle_circle(c1: Vec2, r1: float, c2: Vec2, r2: float) -> list[Vec2]:
    delta = c2 - c1
    d = delta.length()
    if d < EPS:
        # concentric: coincident or disjoint, never a finite point set
        return []
    if d > r1 + r2 + EPS or d < abs(r1 - r2) - EPS:
        return []

    a = (r1 * r1 - r2 * r2 + d * d) / (2.0 * d)
    h = math.sqrt(max(r1 * r1 - a * a, 0.0))
    direction = delta / d
    mid = c1 + direction * a
    if h < EPS:
        return [mid]
    perp = direction.perpendicular()
    return [mid + perp * h, mid - perp * h]


def intersect_line_arc(
    p1: Vec2,
    p2: Vec2,
    center: Vec2,
    radius: float,
    start_angle: float,
    end_angle: float,
) -> list[Vec2]:
    return [
        pt
        for pt in intersect_line_circle(p1, p2, center, radius)
        if angle_in_arc_range((pt - center).angle(), start_angle, end_angle)
    ]


def extract_segments(entity: DraftEntity) -> list[Segment]:
    """Line segments that represent ``entity`` for intersection purposes.

    Circles, arcs, text and dimensions yield nothing; block references yield
    their definition's segments mapped into world space.
    """
    kind = entity.kind
    if kind is EntityKind.LINE:
        return [(entity.start, entity.end)]
    if kind is EntityKind.RECTANGLE:
        return entity.edges()
    if kind is EntityKind.POLYLINE:
        return polyline_segments(entity.points, entity.closed)
    if kind is EntityKind.SPLINE:
        return polyline_segments(entity.evaluate())
    if kind is EntityKind.HATCH:
        return polyline_segments(entity.boundary, closed=True)
    if kind is EntityKind.ELLIPSE:
        return polyline_segments(entity.evaluate())
    if kind is EntityKind.BLOCK_REFERENCE:
        segments = []
        for sub in entity.definition.entities:
            segments.extend(
                (entity.transform_point(s), entity.transform_point(e)) for s, e in extract_segments(sub)
            )
        return segments
    return []


class _Circular(NamedTuple):
    center: Vec2
    radius: float
    # None for a full circle, (start, end) for an arc
    sweep: tuple[float, float] | None


def _circular(entity: DraftEntity) -> _Circular | None:
    if entity.kind is EntityKind.CIRCLE:
        return _Circular(entity.center, entity.radius, None)
    if entity.kind is EntityKind.ARC:
        return _Circular(entity.center, entity.radius, (entity.start_angle, entity.end_angle))
    return None


def _segments_vs_circular(segments: list[Segment], circ: _Circular) -> list[Vec2]:
    points = []
    for s, e in segments:
        if circ.sweep is None:
            points.extend(intersect_line_circle(s, e, circ.center, circ.radius))
        else:
            points.extend(intersect_line_arc(s, e, circ.center, circ.radius, *circ.sweep))
    return points


def _on_sweep(point: Vec2, circ: _Circular) -> bool:
    return circ.sweep is None or angle_in_arc_range((point - circ.center).angle(), *circ.sweep)


def _dedupe(points: list[Vec2], eps: float = tolerances.LINEAR) -> list[Vec2]:
    unique: list[Vec2] = []
    for p in points:
        if not any(p.almost_equals(q, eps) for q in unique):
            unique.append(p)
    return unique


def intersect(a: DraftEntity, b: DraftEntity) -> IntersectionResult:
    """All intersection points between two entities.

    Points shared by adjacent segments (a circle through a rectangle corner)
    are reported once.
    """
    segs_a = extract_segments(a)
    segs_b = extract_segments(b)
    circ_a = _circular(a)
    circ_b = _circular(b)

    points: list[Vec2] = []
    if segs_a and segs_b:
        for a1, a2 in segs_a:
            for b1, b2 in segs_b:
                points.extend(intersect_line_line(a1, a2, b1, b2))
    if segs_a and circ_b is not None:
        points.extend(_segments_vs_circular(segs_a, circ_b))
    if segs_b and circ_a is not None:
        points.extend(_segments_vs_circular(segs_b, circ_a))
    if circ_a is not None and circ_b is not None:
        for pt in intersect_circle_circle(circ_a.center, circ_a.radius, circ_b.center, circ_b.radius):
            if _on_sweep(pt, circ_a) and _on_sweep(pt, circ_b):
                points.append(pt)

    return IntersectionResult(_dedupe(points))
