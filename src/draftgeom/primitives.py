from __future__ import annotations

import math
from typing import Iterable

from .entity import DraftEntity, EntityKind, PointField, to_points
from .geometry import (
    HALF_PI,
    TWO_PI,
    BoundingBox,
    PointLike,
    Segment,
    Vec2,
    midpoint,
    mirror_point,
    near_any_segment,
    normalize_angle,
    polyline_segments,
    rotate_point,
    scale_point,
    segment_distance,
)


class Line(DraftEntity):
    kind = EntityKind.LINE

    start = PointField()
    end = PointField()

    def __init__(self, start: PointLike, end: PointLike, **attrs) -> None:
        super().__init__(**attrs)
        self.start = start
        self.end = end

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def midpoint(self) -> Vec2:
        return midpoint(self.start, self.end)

    @property
    def direction(self) -> Vec2:
        return (self.end - self.start).normalized()

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points((self.start, self.end))

    def hit_test(self, point: PointLike, tolerance: float) -> bool:
        return segment_distance(Vec2.of(point), self.start, self.end) <= tolerance

    def snap_points(self) -> list[Vec2]:
        return [self.start, self.end]

    def translate(self, delta: PointLike) -> None:
        d = Vec2.of(delta)
        self.start += d
        self.end += d

    def mirror(self, axis_p1: PointLike, axis_p2: PointLike) -> None:
        a1, a2 = Vec2.of(axis_p1), Vec2.of(axis_p2)
        self.start = mirror_point(self.start, a1, a2)
        self.end = mirror_point(self.end, a1, a2)

    def rotate(self, center: PointLike, angle: float) -> None:
        c = Vec2.of(center)
        self.start = rotate_point(self.start, c, angle)
        self.end = rotate_point(self.end, c, angle)

    def scale(self, center: PointLike, factor: float) -> None:
        c = Vec2.of(center)
        self.start = scale_point(self.start, c, factor)
        self.end = scale_point(self.end, c, factor)

    def clone(self) -> Line:
        return self.copy_attributes_to(Line(self.start, self.end, ids=self.ids))


class Circle(DraftEntity):
    kind = EntityKind.CIRCLE

    center = PointField()

    def __init__(self, center: PointLike, radius: float, **attrs) -> None:
        super().__init__(**attrs)
        self.center = center
        self.radius = float(radius)

    def point_at(self, angle: float) -> Vec2:
        return self.center + Vec2.from_angle(angle, self.radius)

    def bounding_box(self) -> BoundingBox:
        r = self.radius
        return BoundingBox(self.center.x - r, self.center.y - r, self.center.x + r, self.center.y + r)

    def hit_test(self, point: PointLike, tolerance: float) -> bool:
        return abs(Vec2.of(point).distance_to(self.center) - self.radius) <= tolerance

    def snap_points(self) -> list[Vec2]:
        c, r = self.center, self.radius
        return [
            c,
            Vec2(c.x + r, c.y),
            Vec2(c.x, c.y + r),
            Vec2(c.x - r, c.y),
            Vec2(c.x, c.y - r),
        ]

    def translate(self, delta: PointLike) -> None:
        self.center += Vec2.of(delta)

    def mirror(self, axis_p1: PointLike, axis_p2: PointLike) -> None:
        self.center = mirror_point(self.center, Vec2.of(axis_p1), Vec2.of(axis_p2))

    def rotate(self, center: PointLike, angle: float) -> None:
        self.center = rotate_point(self.center, Vec2.of(center), angle)

    def scale(self, center: PointLike, factor: float) -> None:
        self.center = scale_point(self.center, Vec2.of(center), factor)
        self.radius *= abs(factor)

    def clone(self) -> Circle:
        return self.copy_attributes_to(Circle(self.center, self.radius, ids=self.ids))


class Arc(DraftEntity):
    """Circular arc swept counter-clockwise from start_angle to end_angle.

    Both angles are stored in radians, normalized to [0, 2*pi) on every write.
    The sweep may pass through zero (start 350 deg, end 10 deg).
    """

    kind = EntityKind.ARC

    center = PointField()

    def __init__(
        self,
        center: PointLike,
        radius: float,
        start_angle: float,
        end_angle: float,
        **attrs,
    ) -> None:
        super().__init__(**attrs)
        self.center = center
        self.radius = float(radius)
        self.start_angle = start_angle
        self.end_angle = end_angle

    @property
    def start_angle(self) -> float:
        return self._start_angle

    @start_angle.setter
    def start_angle(self, value: float) -> None:
        self._start_angle = normalize_angle(value)

    @property
    def end_angle(self) -> float:
        return self._end_angle

    @end_angle.setter
    def end_angle(self, value: float) -> None:
        self._end_angle = normalize_angle(value)

    @property
    def start_point(self) -> Vec2:
        return self.point_at(self._start_angle)

    @property
    def end_point(self) -> Vec2:
        return self.point_at(self._end_angle)

    @property
    def sweep_angle(self) -> float:
        sweep = self._end_angle - self._start_angle
        if sweep <= 0.0:
            sweep += TWO_PI
        return sweep

    @property
    def mid_point(self) -> Vec2:
        return self.point_at(self._start_angle + self.sweep_angle * 0.5)

    def point_at(self, angle: float) -> Vec2:
        return self.center + Vec2.from_angle(angle, self.radius)

    def contains_angle(self, angle: float) -> bool:
        angle = normalize_angle(angle)
        if self._start_angle <= self._end_angle:
            return self._start_angle <= angle <= self._end_angle
        return angle >= self._start_angle or angle <= self._end_angle

    def bounding_box(self) -> BoundingBox:
        box = BoundingBox.from_points((self.start_point, self.end_point))
        c, r = self.center, self.radius
        if self.contains_angle(0.0):
            box.max_x = c.x + r
        if self.contains_angle(HALF_PI):
            box.max_y = c.y + r
        if self.contains_angle(math.pi):
            box.min_x = c.x - r
        if self.contains_angle(math.pi * 1.5):
            box.min_y = c.y - r
        return box

    def hit_test(self, point: PointLike, tolerance: float) -> bool:
        p = Vec2.of(point)
        if abs(p.distance_to(self.center) - self.radius) > tolerance:
            return False
        return self.contains_angle((p - self.center).angle())

    def snap_points(self) -> list[Vec2]:
        return [self.start_point, self.end_point, self.center, self.mid_point]

    def translate(self, delta: PointLike) -> None:
        self.center += Vec2.of(delta)

    def mirror(self, axis_p1: PointLike, axis_p2: PointLike) -> None:
        a1, a2 = Vec2.of(axis_p1), Vec2.of(axis_p2)
        start = mirror_point(self.start_point, a1, a2)
        end = mirror_point(self.end_point, a1, a2)
        self.center = mirror_point(self.center, a1, a2)
        # reflection reverses winding: the old end becomes the new start
        self.start_angle = (end - self.center).angle()
        self.end_angle = (start - self.center).angle()

    def rotate(self, center: PointLike, angle: float) -> None:
        self.center = rotate_point(self.center, Vec2.of(center), angle)
        self.start_angle = self._start_angle + angle
        self.end_angle = self._end_angle + angle

    def scale(self, center: PointLike, factor: float) -> None:
        self.center = scale_point(self.center, Vec2.of(center), factor)
        self.radius *= abs(factor)
        if factor < 0.0:
            # a negative factor is a point reflection through the scale center
            self.start_angle = self._start_angle + math.pi
            self.end_angle = self._end_angle + math.pi

    def clone(self) -> Arc:
        copy = Arc(self.center, self.radius, self._start_angle, self._end_angle, ids=self.ids)
        return self.copy_attributes_to(copy)


class Rectangle(DraftEntity):
    """Axis-aligned rectangle stored as two opposite corners in any order."""

    kind = EntityKind.RECTANGLE

    corner1 = PointField()
    corner2 = PointField()

    def __init__(self, corner1: PointLike, corner2: PointLike, **attrs) -> None:
        super().__init__(**attrs)
        self.corner1 = corner1
        self.corner2 = corner2

    def corners(self) -> list[Vec2]:
        """Bottom-left, bottom-right, top-right, top-left."""
        min_x = min(self.corner1.x, self.corner2.x)
        min_y = min(self.corner1.y, self.corner2.y)
        max_x = max(self.corner1.x, self.corner2.x)
        max_y = max(self.corner1.y, self.corner2.y)
        return [Vec2(min_x, min_y), Vec2(max_x, min_y), Vec2(max_x, max_y), Vec2(min_x, max_y)]

    def edges(self) -> list[Segment]:
        return polyline_segments(self.corners(), closed=True)

    @property
    def width(self) -> float:
        return abs(self.corner2.x - self.corner1.x)

    @property
    def height(self) -> float:
        return abs(self.corner2.y - self.corner1.y)

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points((self.corner1, self.corner2))

    def hit_test(self, point: PointLike, tolerance: float) -> bool:
        return near_any_segment(Vec2.of(point), self.edges(), tolerance)

    def snap_points(self) -> list[Vec2]:
        bl, br, tr, tl = self.corners()
        return [
            bl,
            br,
            tr,
            tl,
            midpoint(bl, br),
            midpoint(br, tr),
            midpoint(tr, tl),
            midpoint(tl, bl),
            midpoint(self.corner1, self.corner2),
        ]

    def translate(self, delta: PointLike) -> None:
        d = Vec2.of(delta)
        self.corner1 += d
        self.corner2 += d

    def mirror(self, axis_p1: PointLike, axis_p2: PointLike) -> None:
        a1, a2 = Vec2.of(axis_p1), Vec2.of(axis_p2)
        self.corner1 = mirror_point(self.corner1, a1, a2)
        self.corner2 = mirror_point(self.corner2, a1, a2)

    def rotate(self, center: PointLike, angle: float) -> None:
        # only the two stored corners move; corners() re-squares the result
        c = Vec2.of(center)
        self.corner1 = rotate_point(self.corner1, c, angle)
        self.corner2 = rotate_point(self.corner2, c, angle)

    def scale(self, center: PointLike, factor: float) -> None:
        c = Vec2.of(center)
        self.corner1 = scale_point(self.corner1, c, factor)
        self.corner2 = scale_point(self.corner2, c, factor)

    def clone(self) -> Rectangle:
        return self.copy_attributes_to(Rectangle(self.corner1, self.corner2, ids=self.ids))


class Polyline(DraftEntity):
    kind = EntityKind.POLYLINE

    def __init__(self, points: Iterable[PointLike], closed: bool = False, **attrs) -> None:
        super().__init__(**attrs)
        self._points = to_points(points)
        self.closed = closed

    @property
    def points(self) -> list[Vec2]:
        return self._points

    @points.setter
    def points(self, value: Iterable[PointLike]) -> None:
        self._points = to_points(value)

    def add_point(self, point: PointLike) -> None:
        self._points.append(Vec2.of(point))

    def segments(self) -> list[Segment]:
        return polyline_segments(self._points, self.closed)

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self._points)

    def hit_test(self, point: PointLike, tolerance: float) -> bool:
        if len(self._points) < 2:
            return False
        return near_any_segment(Vec2.of(point), self.segments(), tolerance)

    def snap_points(self) -> list[Vec2]:
        return list(self._points) + [midpoint(a, b) for a, b in self.segments()]

    def translate(self, delta: PointLike) -> None:
        d = Vec2.of(delta)
        self._points = [p + d for p in self._points]

    def mirror(self, axis_p1: PointLike, axis_p2: PointLike) -> None:
        a1, a2 = Vec2.of(axis_p1), Vec2.of(axis_p2)
        self._points = [mirror_point(p, a1, a2) for p in self._points]

    def rotate(self, center: PointLike, angle: float) -> None:
        c = Vec2.of(center)
        self._points = [rotate_point(p, c, angle) for p in self._points]

    def scale(self, center: PointLike, factor: float) -> None:
        c = Vec2.of(center)
        self._points = [scale_point(p, c, factor) for p in self._points]

    def clone(self) -> Polyline:
        return self.copy_attributes_to(Polyline(self._points, self.closed, ids=self.ids))
