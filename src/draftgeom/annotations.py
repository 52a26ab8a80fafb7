from __future__ import annotations

import enum
import math
from typing import Iterable

from . import tolerances
from .entity import DraftEntity, EntityKind, PointField, to_points
from .geometry import (
    HALF_PI,
    BoundingBox,
    PointLike,
    Segment,
    Vec2,
    axis_angle,
    midpoint,
    mirror_point,
    near_any_segment,
    normalize_angle,
    polyline_segments,
    rotate_point,
    scale_point,
)

# average glyph advance as a fraction of text height
CHAR_WIDTH_FACTOR = 0.6


class TextAlignment(enum.Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class Text(DraftEntity):
    kind = EntityKind.TEXT

    position = PointField()

    def __init__(
        self,
        position: PointLike,
        text: str,
        height: float,
        rotation: float = 0.0,
        alignment: TextAlignment = TextAlignment.LEFT,
        **attrs,
    ) -> None:
        super().__init__(**attrs)
        self.position = position
        self.text = text
        self.height = float(height)
        self.rotation = rotation
        self.alignment = alignment

    @property
    def rotation(self) -> float:
        return self._rotation

    @rotation.setter
    def rotation(self, value: float) -> None:
        self._rotation = normalize_angle(value)

    def approx_width(self) -> float:
        return max(1, len(self.text)) * self.height * CHAR_WIDTH_FACTOR

    def _local_extents(self) -> tuple[float, float, float, float]:
        w = self.approx_width()
        if self.alignment is TextAlignment.CENTER:
            x0, x1 = -w * 0.5, w * 0.5
        elif self.alignment is TextAlignment.RIGHT:
            x0, x1 = -w, 0.0
        else:
            x0, x1 = 0.0, w
        # baseline sits a quarter height above the box bottom
        return x0, -self.height * 0.25, x1, self.height * 0.75

    def outline(self) -> list[Vec2]:
        x0, y0, x1, y1 = self._local_extents()
        origin = Vec2()
        return [
            self.position + rotate_point(Vec2(x, y), origin, self._rotation)
            for x, y in ((x0, y0), (x1, y0), (x1, y1), (x0, y1))
        ]

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self.outline())

    def hit_test(self, point: PointLike, tolerance: float) -> bool:
        local = rotate_point(Vec2.of(point) - self.position, Vec2(), -self._rotation)
        x0, y0, x1, y1 = self._local_extents()
        return (
            x0 - tolerance <= local.x <= x1 + tolerance
            and y0 - tolerance <= local.y <= y1 + tolerance
        )

    def snap_points(self) -> list[Vec2]:
        return [self.position]

    def translate(self, delta: PointLike) -> None:
        self.position += Vec2.of(delta)

    def mirror(self, axis_p1: PointLike, axis_p2: PointLike) -> None:
        a1, a2 = Vec2.of(axis_p1), Vec2.of(axis_p2)
        self.position = mirror_point(self.position, a1, a2)
        self.rotation = 2.0 * axis_angle(a1, a2) - self._rotation
        if self.alignment is TextAlignment.LEFT:
            self.alignment = TextAlignment.RIGHT
        elif self.alignment is TextAlignment.RIGHT:
            self.alignment = TextAlignment.LEFT

    def rotate(self, center: PointLike, angle: float) -> None:
        self.position = rotate_point(self.position, Vec2.of(center), angle)
        self.rotation = self._rotation + angle

    def scale(self, center: PointLike, factor: float) -> None:
        self.position = scale_point(self.position, Vec2.of(center), factor)
        self.height *= abs(factor)

    def clone(self) -> Text:
        copy = Text(
            self.position,
            self.text,
            self.height,
            self._rotation,
            self.alignment,
            ids=self.ids,
        )
        return self.copy_attributes_to(copy)


class HatchPattern(enum.Enum):
    SOLID = "solid"
    ANSI31 = "ansi31"
    CROSS_HATCH = "cross_hatch"


class Hatch(DraftEntity):
    """Closed boundary polygon filled with a line pattern.

    The boundary is always treated as closed; the last vertex connects back
    to the first.
    """

    kind = EntityKind.HATCH

    def __init__(
        self,
        boundary: Iterable[PointLike],
        pattern: HatchPattern = HatchPattern.ANSI31,
        angle: float = math.pi / 4.0,
        spacing: float = 1.0,
        **attrs,
    ) -> None:
        super().__init__(**attrs)
        self._boundary = to_points(boundary)
        self.pattern = pattern
        self.angle = angle
        self.spacing = max(float(spacing), tolerances.MIN_HATCH_SPACING)

    @property
    def angle(self) -> float:
        return self._angle

    @angle.setter
    def angle(self, value: float) -> None:
        self._angle = normalize_angle(value)

    @property
    def boundary(self) -> list[Vec2]:
        return self._boundary

    @boundary.setter
    def boundary(self, value: Iterable[PointLike]) -> None:
        self._boundary = to_points(value)

    def edges(self) -> list[Segment]:
        return polyline_segments(self._boundary, closed=True)

    def point_in_polygon(self, point: PointLike) -> bool:
        p = Vec2.of(point)
        inside = False
        pts = self._boundary
        j = len(pts) - 1
        for i in range(len(pts)):
            xi, yi = pts[i].x, pts[i].y
            xj, yj = pts[j].x, pts[j].y
            if (yi > p.y) != (yj > p.y) and p.x < (xj - xi) * (p.y - yi) / (yj - yi) + xi:
                inside = not inside
            j = i
        return inside

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self._boundary)

    def hit_test(self, point: PointLike, tolerance: float) -> bool:
        if len(self._boundary) < 3:
            return False
        p = Vec2.of(point)
        return self.point_in_polygon(p) or near_any_segment(p, self.edges(), tolerance)

    def snap_points(self) -> list[Vec2]:
        return list(self._boundary) + [midpoint(a, b) for a, b in self.edges()]

    def scan_lines(self, scan_angle: float, scan_spacing: float) -> list[Segment]:
        """Clip parallel lines at ``scan_angle`` against the boundary (even-odd)."""
        if len(self._boundary) < 3 or scan_spacing < 0.001:
            return []

        direction = Vec2.from_angle(scan_angle)
        perp = direction.perpendicular()
        offsets = [perp.dot(p) for p in self._boundary]
        min_proj, max_proj = min(offsets), max(offsets)
        if (max_proj - min_proj) / scan_spacing > tolerances.MAX_HATCH_LINES:
            return []

        result: list[Segment] = []
        edges = self.edges()
        offset = min_proj + scan_spacing * 0.5
        while offset < max_proj:
            crossings: list[float] = []
            for a, b in edges:
                pa, pb = perp.dot(a), perp.dot(b)
                if (pa - offset) * (pb - offset) > 0.0:
                    continue
                if abs(pb - pa) < tolerances.ZERO_LENGTH_SQ:
                    continue
                t = (offset - pa) / (pb - pa)
                crossings.append(direction.dot(a + (b - a) * t))
            crossings.sort()
            base = perp * offset
            for k in range(0, len(crossings) - 1, 2):
                result.append((base + direction * crossings[k], base + direction * crossings[k + 1]))
            offset += scan_spacing
        return result

    def generate_hatch_lines(self) -> list[Segment]:
        if len(self._boundary) < 3:
            return []
        spacing = self.spacing
        if self.pattern is HatchPattern.SOLID:
            spacing = max(self.spacing * 0.1, 0.05)
        lines = self.scan_lines(self.angle, spacing)
        if self.pattern is HatchPattern.CROSS_HATCH:
            lines.extend(self.scan_lines(self.angle + HALF_PI, spacing))
        return lines

    def translate(self, delta: PointLike) -> None:
        d = Vec2.of(delta)
        self._boundary = [p + d for p in self._boundary]

    def mirror(self, axis_p1: PointLike, axis_p2: PointLike) -> None:
        a1, a2 = Vec2.of(axis_p1), Vec2.of(axis_p2)
        self._boundary = [mirror_point(p, a1, a2) for p in self._boundary]
        self.angle = 2.0 * axis_angle(a1, a2) - self._angle

    def rotate(self, center: PointLike, angle: float) -> None:
        c = Vec2.of(center)
        self._boundary = [rotate_point(p, c, angle) for p in self._boundary]
        self.angle = self._angle + angle

    def scale(self, center: PointLike, factor: float) -> None:
        c = Vec2.of(center)
        self._boundary = [scale_point(p, c, factor) for p in self._boundary]
        self.spacing *= abs(factor)

    def clone(self) -> Hatch:
        copy = Hatch(self._boundary, self.pattern, self.angle, self.spacing, ids=self.ids)
        return self.copy_attributes_to(copy)
