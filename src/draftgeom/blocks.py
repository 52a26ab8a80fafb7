from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from . import tolerances
from .entity import DraftEntity, EntityKind, PointField
from .geometry import (
    BoundingBox,
    PointLike,
    Vec2,
    axis_angle,
    mirror_point,
    normalize_angle,
    rotate_point,
    scale_point,
)

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class BlockDefinition:
    """Named group of entities in definition-local space.

    A definition is shared, not owned: every BlockReference pointing at it
    sees edits to ``entities`` immediately, and it lives as long as any
    holder keeps a reference.
    """

    name: str
    base_point: Vec2 = field(default_factory=Vec2)
    entities: list[DraftEntity] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.base_point = Vec2.of(self.base_point)

    def add_entity(self, entity: DraftEntity) -> None:
        self.entities.append(entity)


class BlockTable:
    def __init__(self) -> None:
        self._blocks: dict[str, BlockDefinition] = {}

    def add_block(self, block: BlockDefinition) -> bool:
        """Store a definition; False when the name is empty or already taken."""
        if not block.name or block.name in self._blocks:
            logger.debug("Rejected block definition %r", block.name)
            return False
        self._blocks[block.name] = block
        logger.debug("Added block definition %r (%d entities)", block.name, len(block.entities))
        return True

    def remove_block(self, name: str) -> bool:
        return self._blocks.pop(name, None) is not None

    def find_block(self, name: str) -> BlockDefinition | None:
        return self._blocks.get(name)

    def block_names(self) -> list[str]:
        return sorted(self._blocks)

    def clear(self) -> None:
        self._blocks.clear()

    def __len__(self) -> int:
        return len(self._blocks)

    def __contains__(self, name: object) -> bool:
        return name in self._blocks


class BlockReference(DraftEntity):
    """Placed instance of a BlockDefinition.

    World geometry is always derived from (definition, insert_pos, rotation,
    uniform_scale); nothing is cached:

        world = insert_pos + rotate(uniform_scale * (p - base_point), rotation)
    """

    kind = EntityKind.BLOCK_REFERENCE

    insert_pos = PointField()

    def __init__(
        self,
        definition: BlockDefinition,
        insert_pos: PointLike,
        rotation: float = 0.0,
        uniform_scale: float = 1.0,
        **attrs,
    ) -> None:
        super().__init__(**attrs)
        self.definition = definition
        self.insert_pos = insert_pos
        self.rotation = float(rotation)
        self.uniform_scale = float(uniform_scale)

    @property
    def block_name(self) -> str:
        return self.definition.name

    def transform_point(self, def_point: PointLike) -> Vec2:
        local = (Vec2.of(def_point) - self.definition.base_point) * self.uniform_scale
        c, s = math.cos(self.rotation), math.sin(self.rotation)
        return Vec2(
            self.insert_pos.x + local.x * c - local.y * s,
            self.insert_pos.y + local.x * s + local.y * c,
        )

    def inverse_transform_point(self, world_point: PointLike) -> Vec2:
        d = Vec2.of(world_point) - self.insert_pos
        c, s = math.cos(-self.rotation), math.sin(-self.rotation)
        rotated = Vec2(d.x * c - d.y * s, d.x * s + d.y * c)
        inv_scale = 1.0 / self.uniform_scale if abs(self.uniform_scale) > tolerances.SCALE_EPS else 0.0
        return rotated * inv_scale + self.definition.base_point

    def bounding_box(self) -> BoundingBox:
        box = BoundingBox()
        for entity in self.definition.entities:
            sub = entity.bounding_box()
            if not sub.is_valid:
                continue
            for corner in sub.corners():
                box.expand(self.transform_point(corner))
        return box

    def hit_test(self, point: PointLike, tolerance: float) -> bool:
        def_point = self.inverse_transform_point(point)
        scale = abs(self.uniform_scale)
        def_tolerance = tolerance / scale if scale > tolerances.SCALE_EPS else tolerance
        return any(e.hit_test(def_point, def_tolerance) for e in self.definition.entities)

    def snap_points(self) -> list[Vec2]:
        points = [self.insert_pos]
        for entity in self.definition.entities:
            points.extend(self.transform_point(p) for p in entity.snap_points())
        return points

    def translate(self, delta: PointLike) -> None:
        self.insert_pos += Vec2.of(delta)

    def mirror(self, axis_p1: PointLike, axis_p2: PointLike) -> None:
        a1, a2 = Vec2.of(axis_p1), Vec2.of(axis_p2)
        self.insert_pos = mirror_point(self.insert_pos, a1, a2)
        self.rotation = normalize_angle(2.0 * axis_angle(a1, a2) - self.rotation)
        self.uniform_scale = -self.uniform_scale

    def rotate(self, center: PointLike, angle: float) -> None:
        self.insert_pos = rotate_point(self.insert_pos, Vec2.of(center), angle)
        self.rotation = normalize_angle(self.rotation + angle)

    def scale(self, center: PointLike, factor: float) -> None:
        self.insert_pos = scale_point(self.insert_pos, Vec2.of(center), factor)
        self.uniform_scale *= factor

    def clone(self) -> BlockReference:
        copy = BlockReference(
            self.definition,
            self.insert_pos,
            self.rotation,
            self.uniform_scale,
            ids=self.ids,
        )
        return self.copy_attributes_to(copy)
