import math

from draftgeom.dimensions import (
    AngularDimension,
    DimensionOrientation,
    DimensionStyle,
    DraftDimension,
    Leader,
    LinearDimension,
    RadialDimension,
)
from draftgeom.entity import IdAllocator
from draftgeom.geometry import Vec2


def test_linear_dimension_values(ids: IdAllocator) -> None:
    horizontal = LinearDimension((0, 0), (30, 40), (0, -10), DimensionOrientation.HORIZONTAL, ids=ids)
    vertical = LinearDimension((0, 0), (30, 40), (-10, 0), DimensionOrientation.VERTICAL, ids=ids)
    aligned = LinearDimension((0, 0), (30, 40), (0, 10), ids=ids)
    assert horizontal.computed_value() == 30.0
    assert vertical.computed_value() == 40.0
    assert aligned.computed_value() == 50.0
    assert horizontal.display_text() == "30.00"
    assert aligned.display_text(DimensionStyle(precision=0)) == "50"


def test_text_override_wins(ids: IdAllocator) -> None:
    dim = LinearDimension((0, 0), (10, 0), (0, 5), ids=ids)
    dim.text_override = "TYP"
    assert dim.display_text() == "TYP"
    assert dim.clone().display_text() == "TYP"


def test_linear_dimension_line_projection(ids: IdAllocator) -> None:
    dim = LinearDimension((0, 0), (10, 3), (4, 8), DimensionOrientation.HORIZONTAL, ids=ids)
    a, b = dim.dim_line_endpoints()
    assert a == Vec2(0, 8) and b == Vec2(10, 8)
    assert dim.text_position() == Vec2(5, 8)
    ext = dim.extension_lines()
    assert len(ext) == 2
    start, end = ext[0]
    assert start.almost_equals(Vec2(0, 0.5))
    assert end.almost_equals(Vec2(0, 9))
    assert dim.hit_test((5, 8.05), 0.1)
    assert len(dim.arrowhead_lines()) == 4


def test_aligned_extension_lines_skip_zero_length(ids: IdAllocator) -> None:
    dim = LinearDimension((0, 0), (10, 0), (5, 0), ids=ids)
    assert dim.extension_lines() == []


def test_make_arrowhead_wings() -> None:
    wings = DraftDimension.make_arrowhead(Vec2(0, 0), Vec2(1, 0), 2.0, math.radians(30))
    assert len(wings) == 2
    for tip, wing in wings:
        assert tip == Vec2(0, 0)
        assert abs(wing.length() - 2.0) < 1e-12
        assert wing.x < 0.0


def test_radial_dimension(ids: IdAllocator) -> None:
    radius = RadialDimension((0, 0), 5, (10, 0), ids=ids)
    diameter = RadialDimension((0, 0), 5, (10, 0), is_diameter=True, ids=ids)
    assert radius.display_text() == "R5.00"
    assert diameter.display_text() == "⌀10.00"
    assert radius.boundary_point() == Vec2(5, 0)
    assert diameter.dimension_lines() == [(Vec2(-5, 0), Vec2(10, 0))]
    assert len(radius.arrowhead_lines()) == 2
    assert len(diameter.arrowhead_lines()) == 4
    assert radius.extension_lines() == []
    assert not radius.hit_test((-3, 0), 0.1)
    assert diameter.hit_test((-3, 0), 0.1)


def test_radial_dimension_text_on_center(ids: IdAllocator) -> None:
    dim = RadialDimension((2, 2), 3, (2, 2), ids=ids)
    assert dim.boundary_point() == Vec2(5, 2)


def test_angular_dimension_measures_smaller_angle(ids: IdAllocator) -> None:
    dim = AngularDimension((0, 0), (1, 0), (0, -1), 5, ids=ids)
    assert abs(dim.computed_value() - 90.0) < 1e-9
    assert dim.display_text() == "90.00°"
    mid = dim.text_position()
    assert mid.almost_equals(Vec2.from_angle(-math.pi / 4, 5))


def test_angular_dimension_geometry(ids: IdAllocator) -> None:
    dim = AngularDimension((0, 0), (1, 0), (0, 1), 10, ids=ids)
    arc = dim.dimension_lines()
    assert len(arc) == 8
    assert arc[0][0].almost_equals(Vec2(10, 0))
    assert arc[-1][1].almost_equals(Vec2(0, 10))
    box = dim.bounding_box()
    assert abs(box.max_x - 10.0) < 1e-9
    assert abs(box.max_y - 10.0) < 1e-9
    assert dim.hit_test(Vec2.from_angle(math.pi / 4, 10), 0.01)
    assert not dim.hit_test(Vec2.from_angle(math.pi, 10), 0.01)
    # along the first extension line, away from the arc
    assert dim.hit_test((5, 0), 0.01)


def test_angular_dimension_scale(ids: IdAllocator) -> None:
    dim = AngularDimension((0, 0), (1, 0), (0, 1), 10, ids=ids)
    dim.scale((0, 0), -2)
    assert dim.arc_radius == 20.0
    assert abs(dim.computed_value() - 90.0) < 1e-9


def test_leader(ids: IdAllocator) -> None:
    leader = Leader([(0, 0), (5, 5), (10, 5)], "NOTE", ids=ids)
    assert leader.computed_value() == 0.0
    assert leader.display_text() == "NOTE"
    assert leader.text_position() == Vec2(10, 5)
    assert len(leader.dimension_lines()) == 2
    wings = leader.arrowhead_lines()
    assert len(wings) == 2
    assert all(tip == Vec2(0, 0) for tip, _ in wings)
    assert leader.hit_test((7, 5), 0.01)
    assert Leader([(1, 1)], ids=ids).arrowhead_lines() == []
    assert Leader([], ids=ids).text_position() == Vec2(0, 0)
