import math

from draftgeom.blocks import BlockDefinition, BlockReference, BlockTable
from draftgeom.entity import IdAllocator
from draftgeom.geometry import Vec2
from draftgeom.primitives import Circle, Line


def _square_block(ids: IdAllocator) -> BlockDefinition:
    block = BlockDefinition("square", Vec2(1.0, 1.0))
    block.add_entity(Line((0, 0), (2, 0), ids=ids))
    block.add_entity(Line((2, 0), (2, 2), ids=ids))
    return block


def test_block_table_rejects_duplicates_and_empty_names(ids: IdAllocator) -> None:
    table = BlockTable()
    assert table.add_block(_square_block(ids))
    assert not table.add_block(BlockDefinition("square"))
    assert not table.add_block(BlockDefinition(""))
    table.add_block(BlockDefinition("bolt"))
    assert table.block_names() == ["bolt", "square"]
    assert "bolt" in table
    assert table.remove_block("bolt")
    assert not table.remove_block("bolt")
    assert table.find_block("bolt") is None
    assert len(table) == 1


def test_transform_and_inverse(ids: IdAllocator) -> None:
    ref = BlockReference(_square_block(ids), (10, 5), math.pi / 2, 2.0, ids=ids)
    world = ref.transform_point((2, 1))
    # (2, 1) - base = (1, 0) -> scaled (2, 0) -> rotated (0, 2)
    assert world.almost_equals(Vec2(10, 7))
    assert ref.inverse_transform_point(world).almost_equals(Vec2(2, 1))


def test_inverse_with_zero_scale_collapses_to_base(ids: IdAllocator) -> None:
    ref = BlockReference(_square_block(ids), (0, 0), 0.0, 0.0, ids=ids)
    assert ref.inverse_transform_point((3, 3)) == Vec2(1, 1)


def test_bbox_and_hit_test(ids: IdAllocator) -> None:
    ref = BlockReference(_square_block(ids), (0, 0), 0.0, 3.0, ids=ids)
    box = ref.bounding_box()
    assert box.min.almost_equals(Vec2(-3, -3))
    assert box.max.almost_equals(Vec2(3, 3))
    assert ref.hit_test((0, -3.2), 0.3)
    assert not ref.hit_test((0, 0), 0.3)


def test_snaps_start_with_insert_point(ids: IdAllocator) -> None:
    ref = BlockReference(_square_block(ids), (4, 4), ids=ids)
    snaps = ref.snap_points()
    assert snaps[0] == Vec2(4, 4)
    assert len(snaps) == 1 + 2 + 2
    assert snaps[1].almost_equals(Vec2(3, 3))


def test_definition_edits_are_shared(ids: IdAllocator) -> None:
    block = _square_block(ids)
    a = BlockReference(block, (0, 0), ids=ids)
    b = a.clone()
    assert b.definition is a.definition
    block.add_entity(Circle((1, 1), 5, ids=ids))
    assert a.bounding_box().max_x > 4.0
    assert b.bounding_box().max_x > 4.0


def test_mirror_twice_restores_reference(ids: IdAllocator) -> None:
    ref = BlockReference(_square_block(ids), (3, 1), 0.3, 1.5, ids=ids)
    before = [ref.transform_point(p) for p in [(0, 0), (2, 2)]]
    ref.mirror((0, 0), (1, 2))
    assert ref.uniform_scale == -1.5
    ref.mirror((0, 0), (1, 2))
    assert ref.uniform_scale == 1.5
    after = [ref.transform_point(p) for p in [(0, 0), (2, 2)]]
    for p, q in zip(before, after):
        assert p.almost_equals(q, 1e-9)


def test_rotate_and_scale_update_placement(ids: IdAllocator) -> None:
    ref = BlockReference(_square_block(ids), (2, 0), ids=ids)
    ref.rotate((0, 0), math.pi / 2)
    assert ref.insert_pos.almost_equals(Vec2(0, 2))
    assert abs(ref.rotation - math.pi / 2) < 1e-12
    ref.scale((0, 0), 2)
    assert ref.insert_pos.almost_equals(Vec2(0, 4))
    assert ref.uniform_scale == 2.0
