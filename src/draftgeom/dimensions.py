from __future__ import annotations

import enum
import math
from abc import abstractmethod
from dataclasses import dataclass
from typing import Iterable

from . import tolerances
from .entity import E, DraftEntity, EntityKind, PointField, to_points
from .geometry import (
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
)

DIAMETER_SIGN = "⌀"
DEGREE_SIGN = "°"


@dataclass(slots=True)
class DimensionStyle:
    text_height: float = 2.5
    arrow_size: float = 1.5
    # half-angle of the arrowhead wings, radians
    arrow_angle: float = 0.3
    extension_gap: float = 0.5
    extension_overshoot: float = 1.0
    precision: int = 2
    show_units: bool = False


DEFAULT_STYLE = DimensionStyle()


def _format_value(value: float, style: DimensionStyle) -> str:
    return f"{value:.{style.precision}f}"


class DraftDimension(DraftEntity):
    """Annotation that measures geometry and renders as line segments.

    Subclasses supply the measurement and the three segment groups
    (extension lines, dimension lines, arrowheads); the text override, when
    set, replaces the formatted measurement.
    """

    def __init__(self, **attrs) -> None:
        super().__init__(**attrs)
        self.text_override = ""

    @property
    def has_text_override(self) -> bool:
        return bool(self.text_override)

    def display_text(self, style: DimensionStyle = DEFAULT_STYLE) -> str:
        if self.has_text_override:
            return self.text_override
        return _format_value(self.computed_value(), style)

    @abstractmethod
    def computed_value(self) -> float: ...

    @abstractmethod
    def text_position(self) -> Vec2: ...

    @abstractmethod
    def extension_lines(self, style: DimensionStyle = DEFAULT_STYLE) -> list[Segment]: ...

    @abstractmethod
    def dimension_lines(self, style: DimensionStyle = DEFAULT_STYLE) -> list[Segment]: ...

    @abstractmethod
    def arrowhead_lines(self, style: DimensionStyle = DEFAULT_STYLE) -> list[Segment]: ...

    @staticmethod
    def make_arrowhead(tip: Vec2, direction: Vec2, size: float, half_angle: float) -> list[Segment]:
        """Two wing segments from ``tip``; ``direction`` points into the arrow."""
        base = direction.angle() + math.pi
        return [
            (tip, tip + Vec2.from_angle(base - half_angle, size)),
            (tip, tip + Vec2.from_angle(base + half_angle, size)),
        ]

    def copy_attributes_to(self, other: E) -> E:
        other = super().copy_attributes_to(other)
        other.text_override = self.text_override
        return other


class DimensionOrientation(enum.Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    ALIGNED = "aligned"


class LinearDimension(DraftDimension):
    kind = EntityKind.LINEAR_DIMENSION

    def_point1 = PointField()
    def_point2 = PointField()
    dim_line_point = PointField()

    def __init__(
        self,
        def_point1: PointLike,
        def_point2: PointLike,
        dim_line_point: PointLike,
        orientation: DimensionOrientation = DimensionOrientation.ALIGNED,
        **attrs,
    ) -> None:
        super().__init__(**attrs)
        self.def_point1 = def_point1
        self.def_point2 = def_point2
        self.dim_line_point = dim_line_point
        self.orientation = orientation

    def computed_value(self) -> float:
        if self.orientation is DimensionOrientation.HORIZONTAL:
            return abs(self.def_point2.x - self.def_point1.x)
        if self.orientation is DimensionOrientation.VERTICAL:
            return abs(self.def_point2.y - self.def_point1.y)
        return self.def_point1.distance_to(self.def_point2)

    def dim_line_endpoints(self) -> Segment:
        """Projections of both definition points onto the dimension line."""
        p1, p2, dl = self.def_point1, self.def_point2, self.dim_line_point
        if self.orientation is DimensionOrientation.HORIZONTAL:
            return Vec2(p1.x, dl.y), Vec2(p2.x, dl.y)
        if self.orientation is DimensionOrientation.VERTICAL:
            return Vec2(dl.x, p1.y), Vec2(dl.x, p2.y)
        perp = (p2 - p1).normalized().perpendicular()
        offset = (dl - p1).dot(perp)
        return p1 + perp * offset, p2 + perp * offset

    def text_position(self) -> Vec2:
        return midpoint(*self.dim_line_endpoints())

    def extension_lines(self, style: DimensionStyle = DEFAULT_STYLE) -> list[Segment]:
        lines = []
        for def_pt, dl_pt in zip((self.def_point1, self.def_point2), self.dim_line_endpoints()):
            d = dl_pt - def_pt
            length = d.length()
            if length < tolerances.LINEAR:
                continue
            d = d / length
            lines.append((def_pt + d * style.extension_gap, dl_pt + d * style.extension_overshoot))
        return lines

    def dimension_lines(self, style: DimensionStyle = DEFAULT_STYLE) -> list[Segment]:
        return [self.dim_line_endpoints()]

    def arrowhead_lines(self, style: DimensionStyle = DEFAULT_STYLE) -> list[Segment]:
        a, b = self.dim_line_endpoints()
        direction = (b - a).normalized()
        return self.make_arrowhead(a, direction, style.arrow_size, style.arrow_angle) + self.make_arrowhead(
            b, -direction, style.arrow_size, style.arrow_angle
        )

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points((self.def_point1, self.def_point2, *self.dim_line_endpoints()))

    def hit_test(self, point: PointLike, tolerance: float) -> bool:
        p = Vec2.of(point)
        return near_any_segment(p, self.dimension_lines() + self.extension_lines(), tolerance)

    def snap_points(self) -> list[Vec2]:
        a, b = self.dim_line_endpoints()
        return [self.def_point1, self.def_point2, a, b, self.text_position()]

    def translate(self, delta: PointLike) -> None:
        d = Vec2.of(delta)
        self.def_point1 += d
        self.def_point2 += d
        self.dim_line_point += d

    def mirror(self, axis_p1: PointLike, axis_p2: PointLike) -> None:
        a1, a2 = Vec2.of(axis_p1), Vec2.of(axis_p2)
        self.def_point1 = mirror_point(self.def_point1, a1, a2)
        self.def_point2 = mirror_point(self.def_point2, a1, a2)
        self.dim_line_point = mirror_point(self.dim_line_point, a1, a2)

    def rotate(self, center: PointLike, angle: float) -> None:
        c = Vec2.of(center)
        self.def_point1 = rotate_point(self.def_point1, c, angle)
        self.def_point2 = rotate_point(self.def_point2, c, angle)
        self.dim_line_point = rotate_point(self.dim_line_point, c, angle)

    def scale(self, center: PointLike, factor: float) -> None:
        c = Vec2.of(center)
        self.def_point1 = scale_point(self.def_point1, c, factor)
        self.def_point2 = scale_point(self.def_point2, c, factor)
        self.dim_line_point = scale_point(self.dim_line_point, c, factor)

    def clone(self) -> LinearDimension:
        copy = LinearDimension(
            self.def_point1,
            self.def_point2,
            self.dim_line_point,
            self.orientation,
            ids=self.ids,
        )
        return self.copy_attributes_to(copy)


class RadialDimension(DraftDimension):
    kind = EntityKind.RADIAL_DIMENSION

    center = PointField()
    text_point = PointField()

    def __init__(
        self,
        center: PointLike,
        radius: float,
        text_point: PointLike,
        is_diameter: bool = False,
        **attrs,
    ) -> None:
        super().__init__(**attrs)
        self.center = center
        self.radius = float(radius)
        self.text_point = text_point
        self.is_diameter = is_diameter

    def computed_value(self) -> float:
        return self.radius * 2.0 if self.is_diameter else self.radius

    def display_text(self, style: DimensionStyle = DEFAULT_STYLE) -> str:
        if self.has_text_override:
            return self.text_override
        prefix = DIAMETER_SIGN if self.is_diameter else "R"
        return prefix + _format_value(self.computed_value(), style)

    def _direction(self) -> Vec2:
        direction = (self.text_point - self.center).normalized()
        if direction.length() < tolerances.LINEAR:
            return Vec2(1.0, 0.0)
        return direction

    def boundary_point(self) -> Vec2:
        return self.center + self._direction() * self.radius

    def opposite_point(self) -> Vec2:
        return self.center - self._direction() * self.radius

    def text_position(self) -> Vec2:
        return self.text_point

    def extension_lines(self, style: DimensionStyle = DEFAULT_STYLE) -> list[Segment]:
        return []

    def dimension_lines(self, style: DimensionStyle = DEFAULT_STYLE) -> list[Segment]:
        if self.is_diameter:
            return [(self.opposite_point(), self.text_point)]
        return [(self.center, self.text_point)]

    def arrowhead_lines(self, style: DimensionStyle = DEFAULT_STYLE) -> list[Segment]:
        direction = self._direction()
        arrows = self.make_arrowhead(self.boundary_point(), -direction, style.arrow_size, style.arrow_angle)
        if self.is_diameter:
            arrows += self.make_arrowhead(self.opposite_point(), direction, style.arrow_size, style.arrow_angle)
        return arrows

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points((self.center, self.boundary_point(), self.text_point))

    def hit_test(self, point: PointLike, tolerance: float) -> bool:
        (a, b), = self.dimension_lines()
        if (b - a).length_squared() < tolerances.ZERO_LENGTH_SQ:
            return False
        return near_any_segment(Vec2.of(point), [(a, b)], tolerance)

    def snap_points(self) -> list[Vec2]:
        return [self.center, self.boundary_point(), self.text_point]

    def translate(self, delta: PointLike) -> None:
        d = Vec2.of(delta)
        self.center += d
        self.text_point += d

    def mirror(self, axis_p1: PointLike, axis_p2: PointLike) -> None:
        a1, a2 = Vec2.of(axis_p1), Vec2.of(axis_p2)
        self.center = mirror_point(self.center, a1, a2)
        self.text_point = mirror_point(self.text_point, a1, a2)

    def rotate(self, center: PointLike, angle: float) -> None:
        c = Vec2.of(center)
        self.center = rotate_point(self.center, c, angle)
        self.text_point = rotate_point(self.text_point, c, angle)

    def scale(self, center: PointLike, factor: float) -> None:
        c = Vec2.of(center)
        self.center = scale_point(self.center, c, factor)
        self.text_point = scale_point(self.text_point, c, factor)
        self.radius *= abs(factor)

    def clone(self) -> RadialDimension:
        copy = RadialDimension(self.center, self.radius, self.text_point, self.is_diameter, ids=self.ids)
        return self.copy_attributes_to(copy)


class AngularDimension(DraftDimension):
    """Angle at ``vertex`` between the rays through two points.

    Always measures the smaller of the two angles the rays form, so the
    value lies in [0, 180] degrees.
    """

    kind = EntityKind.ANGULAR_DIMENSION

    vertex = PointField()
    line1_point = PointField()
    line2_point = PointField()

    def __init__(
        self,
        vertex: PointLike,
        line1_point: PointLike,
        line2_point: PointLike,
        arc_radius: float,
        **attrs,
    ) -> None:
        super().__init__(**attrs)
        self.vertex = vertex
        self.line1_point = line1_point
        self.line2_point = line2_point
        self.arc_radius = float(arc_radius)

    def start_angle(self) -> float:
        return (self.line1_point - self.vertex).angle()

    def end_angle(self) -> float:
        return (self.line2_point - self.vertex).angle()

    def _minor_sweep(self) -> tuple[float, float]:
        """(start, sweep) of the smaller arc between the two rays."""
        a1 = normalize_angle(self.start_angle())
        a2 = normalize_angle(self.end_angle())
        sweep = a2 - a1
        if sweep < 0.0:
            sweep += TWO_PI
        if sweep > math.pi:
            return a2, TWO_PI - sweep
        return a1, sweep

    def _arc_point(self, angle: float) -> Vec2:
        return self.vertex + Vec2.from_angle(angle, self.arc_radius)

    def computed_value(self) -> float:
        return math.degrees(self._minor_sweep()[1])

    def display_text(self, style: DimensionStyle = DEFAULT_STYLE) -> str:
        if self.has_text_override:
            return self.text_override
        return _format_value(self.computed_value(), style) + DEGREE_SIGN

    def text_position(self) -> Vec2:
        start, sweep = self._minor_sweep()
        return self._arc_point(start + sweep * 0.5)

    def extension_lines(self, style: DimensionStyle = DEFAULT_STYLE) -> list[Segment]:
        lines = []
        for target in (self.line1_point, self.line2_point):
            d = (target - self.vertex).normalized()
            lines.append(
                (
                    self.vertex + d * style.extension_gap,
                    self.vertex + d * (self.arc_radius + style.extension_overshoot),
                )
            )
        return lines

    def dimension_lines(self, style: DimensionStyle = DEFAULT_STYLE) -> list[Segment]:
        start, sweep = self._minor_sweep()
        count = max(8, int(32 * sweep / TWO_PI))
        step = sweep / count
        arc = [self._arc_point(start + step * i) for i in range(count + 1)]
        return polyline_segments(arc)

    def arrowhead_lines(self, style: DimensionStyle = DEFAULT_STYLE) -> list[Segment]:
        start, sweep = self._minor_sweep()
        end = start + sweep
        ccw_tangent = Vec2(-math.sin(start), math.cos(start))
        cw_tangent = Vec2(math.sin(end), -math.cos(end))
        return self.make_arrowhead(
            self._arc_point(start), ccw_tangent, style.arrow_size, style.arrow_angle
        ) + self.make_arrowhead(self._arc_point(end), cw_tangent, style.arrow_size, style.arrow_angle)

    def bounding_box(self) -> BoundingBox:
        start, sweep = self._minor_sweep()
        samples = 8
        points = [self.vertex]
        points.extend(self._arc_point(start + sweep * i / samples) for i in range(samples + 1))
        return BoundingBox.from_points(points)

    def hit_test(self, point: PointLike, tolerance: float) -> bool:
        p = Vec2.of(point)
        if abs(p.distance_to(self.vertex) - self.arc_radius) <= tolerance:
            start, sweep = self._minor_sweep()
            if normalize_angle((p - self.vertex).angle() - start) <= sweep:
                return True
        return near_any_segment(p, self.extension_lines(), tolerance)

    def snap_points(self) -> list[Vec2]:
        return [self.vertex, self.text_position()]

    def translate(self, delta: PointLike) -> None:
        d = Vec2.of(delta)
        self.vertex += d
        self.line1_point += d
        self.line2_point += d

    def mirror(self, axis_p1: PointLike, axis_p2: PointLike) -> None:
        a1, a2 = Vec2.of(axis_p1), Vec2.of(axis_p2)
        self.vertex = mirror_point(self.vertex, a1, a2)
        self.line1_point = mirror_point(self.line1_point, a1, a2)
        self.line2_point = mirror_point(self.line2_point, a1, a2)

    def rotate(self, center: PointLike, angle: float) -> None:
        c = Vec2.of(center)
        self.vertex = rotate_point(self.vertex, c, angle)
        self.line1_point = rotate_point(self.line1_point, c, angle)
        self.line2_point = rotate_point(self.line2_point, c, angle)

    def scale(self, center: PointLike, factor: float) -> None:
        c = Vec2.of(center)
        self.vertex = scale_point(self.vertex, c, factor)
        self.line1_point = scale_point(self.line1_point, c, factor)
        self.line2_point = scale_point(self.line2_point, c, factor)
        self.arc_radius *= abs(factor)

    def clone(self) -> AngularDimension:
        copy = AngularDimension(
            self.vertex,
            self.line1_point,
            self.line2_point,
            self.arc_radius,
            ids=self.ids,
        )
        return self.copy_attributes_to(copy)


class Leader(DraftDimension):
    """Polyline callout with an arrow at the first point and text at the last."""

    kind = EntityKind.LEADER

    def __init__(self, points: Iterable[PointLike], text: str = "", **attrs) -> None:
        super().__init__(**attrs)
        self._points = to_points(points)
        self.text = text

    @property
    def points(self) -> list[Vec2]:
        return self._points

    @points.setter
    def points(self, value: Iterable[PointLike]) -> None:
        self._points = to_points(value)

    def computed_value(self) -> float:
        return 0.0

    def display_text(self, style: DimensionStyle = DEFAULT_STYLE) -> str:
        return self.text

    def text_position(self) -> Vec2:
        return self._points[-1] if self._points else Vec2()

    def extension_lines(self, style: DimensionStyle = DEFAULT_STYLE) -> list[Segment]:
        return []

    def dimension_lines(self, style: DimensionStyle = DEFAULT_STYLE) -> list[Segment]:
        return polyline_segments(self._points)

    def arrowhead_lines(self, style: DimensionStyle = DEFAULT_STYLE) -> list[Segment]:
        if len(self._points) < 2:
            return []
        direction = (self._points[1] - self._points[0]).normalized()
        return self.make_arrowhead(self._points[0], direction, style.arrow_size, style.arrow_angle)

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self._points)

    def hit_test(self, point: PointLike, tolerance: float) -> bool:
        segments = [
            (a, b)
            for a, b in self.dimension_lines()
            if (b - a).length_squared() >= tolerances.ZERO_LENGTH_SQ
        ]
        return near_any_segment(Vec2.of(point), segments, tolerance)

    def snap_points(self) -> list[Vec2]:
        return list(self._points)

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

    def clone(self) -> Leader:
        return self.copy_attributes_to(Leader(self._points, self.text, ids=self.ids))
