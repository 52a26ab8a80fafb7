from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence, TypeAlias

from . import tolerances

TWO_PI = math.tau
HALF_PI = math.pi / 2.0


@dataclass(frozen=True, slots=True)
class Vec2:
    x: float = 0.0
    y: float = 0.0

    @classmethod
    def of(cls, point: PointLike) -> Vec2:
        if isinstance(point, Vec2):
            return point
        x, y = point
        return cls(float(x), float(y))

    @classmethod
    def from_angle(cls, angle: float, length: float = 1.0) -> Vec2:
        return cls(length * math.cos(angle), length * math.sin(angle))

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vec2:
        return Vec2(self.x / scalar, self.y / scalar)

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    def dot(self, other: Vec2) -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: Vec2) -> float:
        return self.x * other.y - self.y * other.x

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def length_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def normalized(self) -> Vec2:
        """Unit vector in the same direction; the zero vector stays zero."""
        length = self.length()
        if length < tolerances.LINEAR:
            return Vec2(0.0, 0.0)
        return Vec2(self.x / length, self.y / length)

    def perpendicular(self) -> Vec2:
        return Vec2(-self.y, self.x)

    def angle(self) -> float:
        return math.atan2(self.y, self.x)

    def distance_to(self, other: Vec2) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def almost_equals(self, other: Vec2, eps: float = tolerances.LINEAR) -> bool:
        return almost_equal_points(self, other, eps)


PointLike: TypeAlias = Vec2 | Sequence[float]
Segment: TypeAlias = tuple[Vec2, Vec2]


@dataclass(slots=True)
class BoundingBox:
    """Axis-aligned box; a default-constructed box is empty (invalid)."""

    min_x: float = math.inf
    min_y: float = math.inf
    max_x: float = -math.inf
    max_y: float = -math.inf

    @classmethod
    def from_points(cls, points: Iterable[PointLike]) -> BoundingBox:
        box = cls()
        for point in points:
            box.expand(point)
        return box

    @classmethod
    def from_corners(cls, lo: PointLike, hi: PointLike) -> BoundingBox:
        lo_v, hi_v = Vec2.of(lo), Vec2.of(hi)
        return cls(lo_v.x, lo_v.y, hi_v.x, hi_v.y)

    @property
    def is_valid(self) -> bool:
        return self.min_x <= self.max_x and self.min_y <= self.max_y

    @property
    def min(self) -> Vec2:
        return Vec2(self.min_x, self.min_y)

    @property
    def max(self) -> Vec2:
        return Vec2(self.max_x, self.max_y)

    def expand(self, point: PointLike) -> None:
        x, y = point
        self.min_x = min(self.min_x, x)
        self.min_y = min(self.min_y, y)
        self.max_x = max(self.max_x, x)
        self.max_y = max(self.max_y, y)

    def union(self, other: BoundingBox) -> BoundingBox:
        result = BoundingBox(self.min_x, self.min_y, self.max_x, self.max_y)
        if other.is_valid:
            result.expand(other.min)
            result.expand(other.max)
        return result

    def corners(self) -> list[Vec2]:
        return [
            Vec2(self.min_x, self.min_y),
            Vec2(self.max_x, self.min_y),
            Vec2(self.max_x, self.max_y),
            Vec2(self.min_x, self.max_y),
        ]

    def contains(self, point: PointLike, eps: float = 0.0) -> bool:
        if not self.is_valid:
            return False
        x, y = point
        return (
            self.min_x - eps <= x <= self.max_x + eps
            and self.min_y - eps <= y <= self.max_y + eps
        )

    def intersects(self, other: BoundingBox) -> bool:
        if not self.is_valid or not other.is_valid:
            return False
        return (
            self.min_x <= other.max_x
            and self.max_x >= other.min_x
            and self.min_y <= other.max_y
            and self.max_y >= other.min_y
        )

    @property
    def center(self) -> Vec2:
        return Vec2((self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0)

    @property
    def size(self) -> Vec2:
        return Vec2(self.max_x - self.min_x, self.max_y - self.min_y)

    @property
    def diagonal(self) -> float:
        return self.size.length()

    def almost_equals(self, other: BoundingBox, eps: float = tolerances.LINEAR) -> bool:
        return almost_equal_points(self.min, other.min, eps) and almost_equal_points(
            self.max, other.max, eps
        )


def normalize_angle(radians: float) -> float:
    """Wrap an angle into [0, 2*pi)."""
    radians = math.fmod(radians, TWO_PI)
    if radians < 0.0:
        radians += TWO_PI
    if radians >= TWO_PI:
        radians = 0.0
    return radians


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def lerp(a: float, b: float, t: float) -> float:
    return a + t * (b - a)


def mirror_point(point: Vec2, axis_p1: Vec2, axis_p2: Vec2) -> Vec2:
    d = (axis_p2 - axis_p1).normalized()
    v = point - axis_p1
    return axis_p1 + d * (2.0 * v.dot(d)) - v


def axis_angle(axis_p1: Vec2, axis_p2: Vec2) -> float:
    return (axis_p2 - axis_p1).angle()


def rotate_point(point: Vec2, center: Vec2, angle: float) -> Vec2:
    c, s = math.cos(angle), math.sin(angle)
    vx, vy = point.x - center.x, point.y - center.y
    return Vec2(center.x + vx * c - vy * s, center.y + vx * s + vy * c)


def scale_point(point: Vec2, center: Vec2, factor: float) -> Vec2:
    return center + (point - center) * factor


def segment_distance(point: Vec2, a: Vec2, b: Vec2) -> float:
    ab = b - a
    length_sq = ab.length_squared()
    if length_sq < tolerances.ZERO_LENGTH_SQ:
        return point.distance_to(a)
    t = clamp((point - a).dot(ab) / length_sq, 0.0, 1.0)
    return point.distance_to(a + ab * t)


def polyline_segments(points: Sequence[Vec2], closed: bool = False) -> list[Segment]:
    segments = [(points[i], points[i + 1]) for i in range(len(points) - 1)]
    if closed and len(points) >= 2:
        segments.append((points[-1], points[0]))
    return segments


def near_any_segment(point: Vec2, segments: Iterable[Segment], tolerance: float) -> bool:
    return any(segment_distance(point, a, b) <= tolerance for a, b in segments)


def midpoint(a: Vec2, b: Vec2) -> Vec2:
    return (a + b) * 0.5


def almost_equal_points(a: PointLike, b: PointLike, eps: float = tolerances.LINEAR) -> bool:
    ax, ay = a
    bx, by = b
    return math.isclose(ax, bx, abs_tol=eps) and math.isclose(ay, by, abs_tol=eps)
