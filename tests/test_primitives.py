import math

from draftgeom.entity import IdAllocator, LineType
from draftgeom.geometry import Vec2
from draftgeom.primitives import Arc, Circle, Line, Polyline, Rectangle


def test_ids_are_allocated_in_order(ids: IdAllocator) -> None:
    a = Line((0, 0), (1, 0), ids=ids)
    b = Circle((0, 0), 1, ids=ids)
    assert (a.id, b.id) == (1, 2)
    assert ids.peek == 3


def test_assign_id_advances_allocator(ids: IdAllocator) -> None:
    line = Line((0, 0), (1, 0), ids=ids)
    line.assign_id(40)
    assert line.id == 40
    assert Line((0, 0), (1, 0), ids=ids).id == 41


def test_clone_copies_attributes_with_new_id(ids: IdAllocator) -> None:
    line = Line((0, 0), (3, 4), ids=ids, layer="walls", color=0xFF00FF00, line_type=LineType.DASHED)
    line.group_id = 7
    copy = line.clone()
    assert copy.id != line.id
    assert copy.start == line.start and copy.end == line.end
    assert copy.same_attributes(line)
    copy.translate((1, 1))
    assert line.start == Vec2(0.0, 0.0)


def test_line_hit_and_snaps(ids: IdAllocator) -> None:
    line = Line((0, 0), (10, 0), ids=ids)
    assert line.hit_test((5, 0.05), 0.1)
    assert not line.hit_test((11, 0), 0.5)
    assert line.snap_points() == [Vec2(0, 0), Vec2(10, 0)]
    assert abs(line.length - 10.0) < 1e-12


def test_translate_round_trip(ids: IdAllocator) -> None:
    entities = [
        Line((0, 0), (1, 2), ids=ids),
        Circle((1, 1), 2, ids=ids),
        Arc((0, 0), 1, 0.2, 1.4, ids=ids),
        Rectangle((0, 0), (3, 2), ids=ids),
        Polyline([(0, 0), (1, 1), (2, 0)], ids=ids),
    ]
    for entity in entities:
        before = entity.bounding_box()
        entity.translate((2.5, -1.0))
        entity.translate((-2.5, 1.0))
        assert entity.bounding_box().almost_equals(before)


def test_mirror_twice_restores_geometry(ids: IdAllocator) -> None:
    a1, a2 = Vec2(0.0, 1.0), Vec2(2.0, 3.0)
    entities = [
        Line((0, 0), (1, 2), ids=ids),
        Circle((1, 1), 2, ids=ids),
        Arc((5, 0), 2, math.radians(20), math.radians(110), ids=ids),
        Rectangle((0, 0), (3, 2), ids=ids),
        Polyline([(0, 0), (1, 1), (2, 0)], closed=True, ids=ids),
    ]
    for entity in entities:
        snaps = entity.snap_points()
        entity.mirror(a1, a2)
        entity.mirror(a1, a2)
        for p, q in zip(snaps, entity.snap_points()):
            assert p.almost_equals(q, 1e-9)


def test_circle_snaps_and_scale(ids: IdAllocator) -> None:
    circle = Circle((1, 1), 2, ids=ids)
    assert circle.snap_points()[1:] == [Vec2(3, 1), Vec2(1, 3), Vec2(-1, 1), Vec2(1, -1)]
    circle.scale((0, 0), -2)
    assert circle.radius == 4.0
    assert circle.center == Vec2(-2, -2)


def test_arc_wraparound_containment(ids: IdAllocator) -> None:
    arc = Arc((0, 0), 1, math.radians(350), math.radians(10), ids=ids)
    assert arc.contains_angle(0.0)
    assert arc.contains_angle(math.radians(355))
    assert not arc.contains_angle(math.radians(180))
    assert abs(arc.sweep_angle - math.radians(20)) < 1e-12
    box = arc.bounding_box()
    assert abs(box.max_x - 1.0) < 1e-12
    assert box.max_y < 0.2


def test_arc_angles_normalized_on_write(ids: IdAllocator) -> None:
    arc = Arc((0, 0), 1, -math.pi / 2, 5 * math.pi, ids=ids)
    assert abs(arc.start_angle - 1.5 * math.pi) < 1e-12
    assert abs(arc.end_angle - math.pi) < 1e-12
    arc.rotate((0, 0), 2 * math.pi)
    assert 0.0 <= arc.start_angle < 2 * math.pi


def test_arc_mirror_reverses_winding(ids: IdAllocator) -> None:
    arc = Arc((0, 0), 1, 0.0, math.pi / 2, ids=ids)
    arc.mirror((0, 0), (0, 1))
    # quarter arc in Q1 mirrored across the y axis lands in Q2
    assert abs(arc.start_angle - math.pi / 2) < 1e-9
    assert abs(arc.end_angle - math.pi) < 1e-9
    assert arc.hit_test((-math.sqrt(0.5), math.sqrt(0.5)), 1e-6)


def test_arc_hit_requires_sweep(ids: IdAllocator) -> None:
    arc = Arc((0, 0), 2, 0.0, math.pi / 2, ids=ids)
    assert arc.hit_test((0, 2), 1e-6)
    assert not arc.hit_test((0, -2), 1e-6)


def test_rectangle_corners_order_for_any_input(ids: IdAllocator) -> None:
    rect = Rectangle((5, 5), (1, 1), ids=ids)
    assert rect.corners() == [Vec2(1, 1), Vec2(5, 1), Vec2(5, 5), Vec2(1, 5)]
    assert len(rect.snap_points()) == 9
    assert rect.snap_points()[-1] == Vec2(3, 3)
    assert rect.hit_test((3, 1.05), 0.1)
    assert not rect.hit_test((3, 3), 0.1)


def test_polyline_closing_segment(ids: IdAllocator) -> None:
    poly = Polyline([(0, 0), (4, 0), (4, 4)], closed=True, ids=ids)
    assert len(poly.segments()) == 3
    assert poly.hit_test((2, 2), 0.01)
    assert Vec2(2, 2) in poly.snap_points()
    poly.closed = False
    assert not poly.hit_test((2, 2), 0.01)


def test_polyline_degenerate_cases(ids: IdAllocator) -> None:
    empty = Polyline([], ids=ids)
    assert not empty.bounding_box().is_valid
    single = Polyline([(1, 1)], ids=ids)
    assert not single.hit_test((1, 1), 1.0)
