from __future__ import annotations

import math
from typing import Iterable

from . import tolerances
from .entity import DraftEntity, EntityKind, PointField, to_points
from .geometry import (
    TWO_PI,
    BoundingBox,
    PointLike,
    Segment,
    Vec2,
    axis_angle,
    mirror_point,
    near_any_segment,
    normalize_angle,
    polyline_segments,
    rotate_point,
    scale_point,
)


def bspline_point(p0: Vec2, p1: Vec2, p2: Vec2, p3: Vec2, t: float) -> Vec2:
    """Evaluate one uniform cubic B-spline span at t in [0, 1].

    B(t) = 1/6 [(1-t)^3 P0 + (3t^3 - 6t^2 + 4) P1 + (-3t^3 + 3t^2 + 3t + 1) P2 + t^3 P3]
    """
    t2 = t * t
    t3 = t2 * t
    omt = 1.0 - t
    b0 = omt * omt * omt
    b1 = 3.0 * t3 - 6.0 * t2 + 4.0
    b2 = -3.0 * t3 + 3.0 * t2 + 3.0 * t + 1.0
    b3 = t3
    return Vec2(
        (b0 * p0.x + b1 * p1.x + b2 * p2.x + b3 * p3.x) / 6.0,
        (b0 * p0.y + b1 * p1.y + b2 * p2.y + b3 * p3.y) / 6.0,
    )


class Spline(DraftEntity):
    """Uniform cubic B-spline through a control polygon.

    The curve is never stored; ``evaluate`` samples it on demand and every
    geometric query works on that polyline approximation.
    """

    kind = EntityKind.SPLINE

    def __init__(self, control_points: Iterable[PointLike], closed: bool = False, **attrs) -> None:
        super().__init__(**attrs)
        self._control_points = to_points(control_points)
        self.closed = closed

    @property
    def control_points(self) -> list[Vec2]:
        return self._control_points

    @control_points.setter
    def control_points(self, value: Iterable[PointLike]) -> None:
        self._control_points = to_points(value)

    def add_control_point(self, point: PointLike) -> None:
        self._control_points.append(Vec2.of(point))

    def evaluate(self, segments_per_span: int = tolerances.SPLINE_SEGMENTS_PER_SPAN) -> list[Vec2]:
        cps = self._control_points
        n = len(cps)
        if n == 0:
            return []
        if n == 1:
            return [cps[0]]
        if (not self.closed and n < 4) or (self.closed and n < 3):
            return list(cps)

        sps = max(segments_per_span, 2)
        spans = n if self.closed else n - 3
        points: list[Vec2] = []
        for span in range(spans):
            if self.closed:
                window = [cps[(span + k) % n] for k in range(4)]
            else:
                window = cps[span : span + 4]
            # the last span also emits t = 1 so the curve ends exactly
            count = sps if span + 1 < spans else sps + 1
            for j in range(count):
                points.append(bspline_point(*window, j / sps))
        return points

    def segments(self) -> list[Segment]:
        return polyline_segments(self.evaluate())

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self.evaluate())

    def hit_test(self, point: PointLike, tolerance: float) -> bool:
        segments = self.segments()
        if not segments:
            return False
        return near_any_segment(Vec2.of(point), segments, tolerance)

    def snap_points(self) -> list[Vec2]:
        result = list(self._control_points)
        curve = self.evaluate()
        if curve:
            result.append(curve[0])
            if len(curve) > 1:
                result.append(curve[-1])
        return result

    def translate(self, delta: PointLike) -> None:
        d = Vec2.of(delta)
        self._control_points = [p + d for p in self._control_points]

    def mirror(self, axis_p1: PointLike, axis_p2: PointLike) -> None:
        a1, a2 = Vec2.of(axis_p1), Vec2.of(axis_p2)
        self._control_points = [mirror_point(p, a1, a2) for p in self._control_points]

    def rotate(self, center: PointLike, angle: float) -> None:
        c = Vec2.of(center)
        self._control_points = [rotate_point(p, c, angle) for p in self._control_points]

    def scale(self, center: PointLike, factor: float) -> None:
        c = Vec2.of(center)
        self._control_points = [scale_point(p, c, factor) for p in self._control_points]

    def clone(self) -> Spline:
        return self.copy_attributes_to(Spline(self._control_points, self.closed, ids=self.ids))


class Ellipse(DraftEntity):
    kind = EntityKind.ELLIPSE

    center = PointField()

    def __init__(
        self,
        center: PointLike,
        semi_major: float,
        semi_minor: float,
        rotation: float = 0.0,
        **attrs,
    ) -> None:
        super().__init__(**attrs)
        self.center = center
        self.semi_major = float(semi_major)
        self.semi_minor = float(semi_minor)
        self.rotation = rotation

    @property
    def rotation(self) -> float:
        return self._rotation

    @rotation.setter
    def rotation(self, value: float) -> None:
        self._rotation = normalize_angle(value)

    def point_at(self, t: float) -> Vec2:
        """Point at eccentric-anomaly parameter t, measured from the major axis."""
        cos_r, sin_r = math.cos(self.rotation), math.sin(self.rotation)
        lx = self.semi_major * math.cos(t)
        ly = self.semi_minor * math.sin(t)
        return Vec2(self.center.x + lx * cos_r - ly * sin_r, self.center.y + lx * sin_r + ly * cos_r)

    def evaluate(self, segments: int = tolerances.ELLIPSE_SEGMENTS) -> list[Vec2]:
        return [self.point_at(TWO_PI * i / segments) for i in range(segments + 1)]

    def segments(self) -> list[Segment]:
        return polyline_segments(self.evaluate())

    def bounding_box(self) -> BoundingBox:
        cos_r, sin_r = math.cos(self.rotation), math.sin(self.rotation)
        a, b = self.semi_major, self.semi_minor
        dx = math.sqrt(a * a * cos_r * cos_r + b * b * sin_r * sin_r)
        dy = math.sqrt(a * a * sin_r * sin_r + b * b * cos_r * cos_r)
        c = self.center
        return BoundingBox(c.x - dx, c.y - dy, c.x + dx, c.y + dy)

    def hit_test(self, point: PointLike, tolerance: float) -> bool:
        a, b = self.semi_major, self.semi_minor
        if a < tolerances.DEGENERATE_AXIS or b < tolerances.DEGENERATE_AXIS:
            return False
        local = rotate_point(Vec2.of(point) - self.center, Vec2(), -self.rotation)
        nx, ny = local.x / a, local.y / b
        d = math.hypot(nx, ny)
        if d < tolerances.DEGENERATE_AXIS:
            return tolerance >= min(a, b)
        # radial projection onto the ellipse, close to the true foot point
        # for moderate eccentricity
        on_curve = Vec2(a * nx / d, b * ny / d)
        return local.distance_to(on_curve) <= tolerance

    def snap_points(self) -> list[Vec2]:
        major = Vec2.from_angle(self.rotation, self.semi_major)
        minor = Vec2.from_angle(self.rotation, self.semi_minor).perpendicular()
        c = self.center
        return [c, c + major, c - major, c + minor, c - minor]

    def translate(self, delta: PointLike) -> None:
        self.center += Vec2.of(delta)

    def mirror(self, axis_p1: PointLike, axis_p2: PointLike) -> None:
        a1, a2 = Vec2.of(axis_p1), Vec2.of(axis_p2)
        self.center = mirror_point(self.center, a1, a2)
        self.rotation = 2.0 * axis_angle(a1, a2) - self._rotation

    def rotate(self, center: PointLike, angle: float) -> None:
        self.center = rotate_point(self.center, Vec2.of(center), angle)
        self.rotation = self._rotation + angle

    def scale(self, center: PointLike, factor: float) -> None:
        self.center = scale_point(self.center, Vec2.of(center), factor)
        self.semi_major *= abs(factor)
        self.semi_minor *= abs(factor)

    def clone(self) -> Ellipse:
        copy = Ellipse(self.center, self.semi_major, self.semi_minor, self.rotation, ids=self.ids)
        return self.copy_attributes_to(copy)
