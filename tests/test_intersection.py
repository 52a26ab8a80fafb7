import math

from ezdxf.math import ConstructionArc, ConstructionCircle, ConstructionLine
from ezdxf.math import Vec2 as DxfVec2
from ezdxf.math import intersection_line_line_2d

from draftgeom.annotations import Hatch, Text
from draftgeom.blocks import BlockDefinition, BlockReference
from draftgeom.curves import Ellipse, Spline
from draftgeom.dimensions import LinearDimension
from draftgeom.entity import IdAllocator
from draftgeom.geometry import Vec2
from draftgeom.intersection import (
    angle_in_arc_range,
    extract_segments,
    intersect,
    intersect_circle_circle,
    intersect_line_arc,
    intersect_line_circle,
    intersect_line_line,
)
from draftgeom.primitives import Arc, Circle, Line, Polyline, Rectangle


def _sorted(points) -> list[tuple[float, float]]:
    return sorted((round(p.x, 9), round(p.y, 9)) for p in points)


def _assert_same_points(ours, theirs) -> None:
    ours = sorted((p.x, p.y) for p in ours)
    theirs = sorted((p.x, p.y) for p in theirs)
    assert len(ours) == len(theirs)
    for (ax, ay), (bx, by) in zip(ours, theirs):
        assert abs(ax - bx) < 1e-9
        assert abs(ay - by) < 1e-9


def test_line_line_crossing() -> None:
    pts = intersect_line_line(Vec2(0, 0), Vec2(10, 0), Vec2(5, -5), Vec2(5, 5))
    assert len(pts) == 1
    assert pts[0].almost_equals(Vec2(5, 0))


def test_line_line_parallel_and_disjoint() -> None:
    assert intersect_line_line(Vec2(0, 0), Vec2(10, 0), Vec2(0, 1), Vec2(10, 1)) == []
    assert intersect_line_line(Vec2(0, 0), Vec2(10, 0), Vec2(0, 0), Vec2(10, 0)) == []
    assert intersect_line_line(Vec2(0, 0), Vec2(1, 0), Vec2(5, -5), Vec2(5, 5)) == []


def test_line_line_matches_ezdxf() -> None:
    cases = [
        ((0.3, 1.7), (8.1, -2.2), (1.0, -4.0), (6.5, 3.3)),
        ((-2.0, -2.0), (4.0, 5.0), (4.0, -1.0), (-3.0, 2.5)),
    ]
    for a1, a2, b1, b2 in cases:
        ours = intersect_line_line(Vec2.of(a1), Vec2.of(a2), Vec2.of(b1), Vec2.of(b2))
        theirs = intersection_line_line_2d(
            (DxfVec2(a1), DxfVec2(a2)), (DxfVec2(b1), DxfVec2(b2)), virtual=False
        )
        assert theirs is not None
        assert len(ours) == 1
        assert abs(ours[0].x - theirs.x) < 1e-9
        assert abs(ours[0].y - theirs.y) < 1e-9


def test_line_circle_secant_tangent_miss() -> None:
    center = Vec2(0, 0)
    secant = intersect_line_circle(Vec2(-10, 0), Vec2(10, 0), center, 5)
    assert _sorted(secant) == [(-5.0, 0.0), (5.0, 0.0)]
    tangent = intersect_line_circle(Vec2(-10, 5), Vec2(10, 5), center, 5)
    assert len(tangent) == 1
    assert tangent[0].almost_equals(Vec2(0, 5))
    assert intersect_line_circle(Vec2(-10, 6), Vec2(10, 6), center, 5) == []
    # segment stops inside the circle
    assert len(intersect_line_circle(Vec2(0, 0), Vec2(10, 0), center, 5)) == 1


def test_line_circle_matches_ezdxf() -> None:
    start, end = (-7.0, -3.0), (6.0, 4.5)
    ours = intersect_line_circle(Vec2.of(start), Vec2.of(end), Vec2(1.0, 0.5), 4.0)
    circle = ConstructionCircle((1.0, 0.5), 4.0)
    theirs = circle.intersect_line(ConstructionLine(start, end))
    _assert_same_points(ours, theirs)


def test_circle_circle() -> None:
    pts = intersect_circle_circle(Vec2(0, 0), 5, Vec2(8, 0), 5)
    assert _sorted(pts) == [(4.0, -3.0), (4.0, 3.0)]
    assert intersect_circle_circle(Vec2(0, 0), 5, Vec2(0, 0), 5) == []
    assert intersect_circle_circle(Vec2(0, 0), 1, Vec2(10, 0), 1) == []
    assert intersect_circle_circle(Vec2(0, 0), 10, Vec2(1, 0), 1) == []
    touching = intersect_circle_circle(Vec2(0, 0), 2, Vec2(5, 0), 3)
    assert len(touching) == 1
    assert touching[0].almost_equals(Vec2(2, 0))


def test_circle_circle_matches_ezdxf() -> None:
    ours = intersect_circle_circle(Vec2(1.5, -0.5), 3.0, Vec2(4.0, 2.0), 2.5)
    theirs = ConstructionCircle((1.5, -0.5), 3.0).intersect_circle(ConstructionCircle((4.0, 2.0), 2.5))
    _assert_same_points(ours, theirs)


def test_angle_in_arc_range_wraps() -> None:
    start, end = math.radians(350), math.radians(10)
    assert angle_in_arc_range(0.0, start, end)
    assert angle_in_arc_range(math.radians(355), start, end)
    assert not angle_in_arc_range(math.radians(180), start, end)
    assert angle_in_arc_range(start - 1e-11, start, end)


def test_line_arc_filters_by_sweep() -> None:
    pts = intersect_line_arc(Vec2(-10, 0), Vec2(10, 0), Vec2(0, 0), 5, -math.pi / 2, math.pi / 2)
    assert len(pts) == 1
    assert pts[0].almost_equals(Vec2(5, 0))


def test_extract_segments_per_kind(ids: IdAllocator) -> None:
    assert len(extract_segments(Line((0, 0), (1, 1), ids=ids))) == 1
    assert len(extract_segments(Rectangle((0, 0), (2, 1), ids=ids))) == 4
    assert len(extract_segments(Polyline([(0, 0), (1, 0), (1, 1)], closed=True, ids=ids))) == 3
    assert len(extract_segments(Polyline([(0, 0), (1, 0), (1, 1)], ids=ids))) == 2
    assert len(extract_segments(Hatch([(0, 0), (1, 0), (1, 1)], ids=ids))) == 3
    spline = Spline([(0, 0), (1, 2), (3, 2), (4, 0)], ids=ids)
    assert len(extract_segments(spline)) == len(spline.evaluate()) - 1
    assert len(extract_segments(Ellipse((0, 0), 2, 1, ids=ids))) == 64
    assert extract_segments(Circle((0, 0), 1, ids=ids)) == []
    assert extract_segments(Arc((0, 0), 1, 0, 1, ids=ids)) == []
    assert extract_segments(Text((0, 0), "A", 1, ids=ids)) == []
    assert extract_segments(LinearDimension((0, 0), (1, 0), (0, 1), ids=ids)) == []


def test_extract_segments_through_block_reference(ids: IdAllocator) -> None:
    block = BlockDefinition("tick", Vec2(0, 0), [Line((0, 0), (1, 0), ids=ids)])
    ref = BlockReference(block, (5, 5), math.pi / 2, 2.0, ids=ids)
    (a, b), = extract_segments(ref)
    assert a.almost_equals(Vec2(5, 5))
    assert b.almost_equals(Vec2(5, 7))


def test_intersect_line_with_line(ids: IdAllocator) -> None:
    result = intersect(Line((0, 0), (10, 0), ids=ids), Line((5, -5), (5, 5), ids=ids))
    assert len(result) == 1
    assert result.points[0].almost_equals(Vec2(5, 0))


def test_intersect_circles(ids: IdAllocator) -> None:
    result = intersect(Circle((0, 0), 5, ids=ids), Circle((8, 0), 5, ids=ids))
    assert _sorted(result) == [(4.0, -3.0), (4.0, 3.0)]


def test_intersect_arc_with_circle_filters_both_ranges(ids: IdAllocator) -> None:
    upper = Arc((0, 0), 5, 0.0, math.pi, ids=ids)
    result = intersect(upper, Circle((8, 0), 5, ids=ids))
    assert _sorted(result) == [(4.0, 3.0)]
    right = Arc((8, 0), 5, math.pi / 2, 1.5 * math.pi, ids=ids)
    lower = Arc((0, 0), 5, math.pi, 2 * math.pi - 1e-3, ids=ids)
    assert _sorted(intersect(lower, right)) == [(4.0, -3.0)]


def test_intersect_rectangle_with_circle_both_orders(ids: IdAllocator) -> None:
    rect = Rectangle((0, 0), (10, 10), ids=ids)
    circle = Circle((0, 0), 5, ids=ids)
    forward = _sorted(intersect(rect, circle))
    backward = _sorted(intersect(circle, rect))
    assert forward == backward == [(0.0, 5.0), (5.0, 0.0)]


def test_intersect_reports_shared_corner_once(ids: IdAllocator) -> None:
    rect = Rectangle((0, 0), (4, 4), ids=ids)
    circle = Circle((4, 0), 4 * math.sqrt(2), ids=ids)
    # passes exactly through the top-left corner (0, 4)
    points = _sorted(intersect(rect, circle))
    assert points.count((0.0, 4.0)) == 1


def test_intersect_without_segments_or_circles_is_empty(ids: IdAllocator) -> None:
    result = intersect(Text((0, 0), "A", 1, ids=ids), Circle((0, 0), 1, ids=ids))
    assert not result
    assert list(result) == []


def test_arc_bbox_matches_ezdxf(ids: IdAllocator) -> None:
    for start, end in [(30.0, 120.0), (300.0, 45.0), (100.0, 280.0)]:
        ours = Arc((2, -1), 3, math.radians(start), math.radians(end), ids=ids).bounding_box()
        theirs = ConstructionArc((2, -1), 3, start, end).bounding_box
        assert abs(ours.min_x - theirs.extmin.x) < 1e-9
        assert abs(ours.min_y - theirs.extmin.y) < 1e-9
        assert abs(ours.max_x - theirs.extmax.x) < 1e-9
        assert abs(ours.max_y - theirs.extmax.y) < 1e-9
