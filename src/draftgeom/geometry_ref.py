from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterable

from .entity import DraftEntity, EntityKind
from .errors import InvalidFeatureError
from .geometry import Segment, Vec2


class FeatureType(enum.Enum):
    POINT = "point"
    LINE = "line"
    CIRCLE = "circle"


@dataclass(frozen=True, slots=True)
class GeometryRef:
    """Pointer to one feature of one entity.

    Feature indices per entity kind:

    ========= ======================= =========================== ==========
    kind      POINT                   LINE                        CIRCLE
    ========= ======================= =========================== ==========
    line      0 start, 1 end          0 whole line                -
    circle    0 center                -                           0
    arc       0 center, 1 start,      -                           0
              2 end
    rectangle 0 BL, 1 BR, 2 TR, 3 TL  i = corner i -> corner i+1  -
    polyline  i = vertex i            i = vertex i -> i+1         -
    ========= ======================= =========================== ==========
    """

    entity_id: int
    feature_type: FeatureType = FeatureType.POINT
    feature_index: int = 0

    @property
    def is_valid(self) -> bool:
        return self.entity_id != 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "feature_type": self.feature_type.value,
            "feature_index": self.feature_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GeometryRef:
        return cls(
            entity_id=int(data["entity_id"]),
            feature_type=FeatureType(data.get("feature_type", FeatureType.POINT.value)),
            feature_index=int(data.get("feature_index", 0)),
        )


def _invalid(what: str, ref: GeometryRef, entity: DraftEntity) -> InvalidFeatureError:
    return InvalidFeatureError(
        f"{what}: {ref.feature_type.value} feature {ref.feature_index} "
        f"not available on {entity.kind.value} {ref.entity_id}"
    )


def extract_point(ref: GeometryRef, entity: DraftEntity) -> Vec2:
    i = ref.feature_index
    kind = entity.kind
    if kind is EntityKind.LINE and i in (0, 1):
        return entity.start if i == 0 else entity.end
    if kind is EntityKind.CIRCLE and i == 0:
        return entity.center
    if kind is EntityKind.ARC and 0 <= i <= 2:
        return (entity.center, entity.start_point, entity.end_point)[i]
    if kind is EntityKind.RECTANGLE and 0 <= i < 4:
        return entity.corners()[i]
    if kind is EntityKind.POLYLINE and 0 <= i < len(entity.points):
        return entity.points[i]
    raise _invalid("extract_point", ref, entity)


def extract_line(ref: GeometryRef, entity: DraftEntity) -> Segment:
    i = ref.feature_index
    kind = entity.kind
    if kind is EntityKind.LINE and i == 0:
        return entity.start, entity.end
    if kind is EntityKind.RECTANGLE and 0 <= i < 4:
        corners = entity.corners()
        return corners[i], corners[(i + 1) % 4]
    if kind is EntityKind.POLYLINE:
        pts = entity.points
        n = len(pts)
        if 0 <= i < n - 1:
            return pts[i], pts[i + 1]
        if entity.closed and n >= 2 and i == n - 1:
            return pts[-1], pts[0]
    raise _invalid("extract_line", ref, entity)


def extract_circle(ref: GeometryRef, entity: DraftEntity) -> tuple[Vec2, float]:
    if entity.kind in (EntityKind.CIRCLE, EntityKind.ARC) and ref.feature_index == 0:
        return entity.center, entity.radius
    raise _invalid("extract_circle", ref, entity)


def find_entity(entity_id: int, entities: Iterable[DraftEntity]) -> DraftEntity | None:
    for entity in entities:
        if entity.id == entity_id:
            return entity
    return None
