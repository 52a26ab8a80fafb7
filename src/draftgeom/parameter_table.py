"""Flat parameter vector over the constrained entities of one solve session.

Each registered entity owns a fixed-layout block of float64 slots:

    line       [sx, sy, ex, ey]
    circle     [cx, cy, r]
    arc        [cx, cy, r, start_angle, end_angle]
    rectangle  [c1x, c1y, c2x, c2y]
    polyline   [x0, y0, x1, y1, ...]

Blocks are appended in registration order and never move. A table is meant
to be built, solved and discarded; start indices mean nothing outside the
table that issued them.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable

import numpy as np

from .constraints import ConstraintSource
from .entity import DraftEntity, EntityKind
from .errors import EntityNotRegisteredError, InvalidFeatureError
from .geometry import Segment, Vec2
from .geometry_ref import FeatureType, GeometryRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TableEntry:
    entity_id: int
    start_index: int
    param_count: int
    kind: EntityKind
    closed: bool = False

    @property
    def stop_index(self) -> int:
        return self.start_index + self.param_count


class RegistrationStatus(enum.Enum):
    REGISTERED = "registered"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class Registration:
    status: RegistrationStatus
    start_index: int | None = None

    @property
    def registered(self) -> bool:
        return self.status is RegistrationStatus.REGISTERED


class LookupStatus(enum.Enum):
    # the feature maps onto its own slots
    DIRECT = "direct"
    # the feature is computed from other slots; index points at the block base
    DERIVED = "derived"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True, slots=True)
class ParameterLookup:
    status: LookupStatus
    index: int | None = None


def _line_params(e: DraftEntity) -> list[float]:
    return [e.start.x, e.start.y, e.end.x, e.end.y]


def _circle_params(e: DraftEntity) -> list[float]:
    return [e.center.x, e.center.y, e.radius]


def _arc_params(e: DraftEntity) -> list[float]:
    return [e.center.x, e.center.y, e.radius, e.start_angle, e.end_angle]


def _rectangle_params(e: DraftEntity) -> list[float]:
    return [e.corner1.x, e.corner1.y, e.corner2.x, e.corner2.y]


def _polyline_params(e: DraftEntity) -> list[float]:
    return [c for p in e.points for c in p]


_LAYOUTS: dict[EntityKind, Callable[[DraftEntity], list[float]]] = {
    EntityKind.LINE: _line_params,
    EntityKind.CIRCLE: _circle_params,
    EntityKind.ARC: _arc_params,
    EntityKind.RECTANGLE: _rectangle_params,
    EntityKind.POLYLINE: _polyline_params,
}


def _direct(index: int) -> ParameterLookup:
    return ParameterLookup(LookupStatus.DIRECT, index)


def _derived(index: int) -> ParameterLookup:
    return ParameterLookup(LookupStatus.DERIVED, index)


_OUT_OF_RANGE = ParameterLookup(LookupStatus.OUT_OF_RANGE)


class ParameterTable:
    def __init__(self) -> None:
        self._values = np.zeros(0, dtype=np.float64)
        self._entries: list[TableEntry] = []
        self._by_id: dict[int, TableEntry] = {}

    @classmethod
    def build_from_entities(
        cls,
        entities: Iterable[DraftEntity],
        constraints: ConstraintSource,
    ) -> ParameterTable:
        """Register only the entities that active constraints reference.

        Registration follows ``entities`` order, not constraint order.
        """
        needed: set[int] = set()
        for constraint in constraints.active_constraints():
            needed.update(constraint.referenced_entity_ids())

        table = cls()
        for entity in entities:
            if entity.id in needed:
                table.register_entity(entity)
        logger.debug(
            "Built parameter table: %d entities, %d parameters",
            len(table._entries),
            table.parameter_count,
        )
        return table

    @property
    def values(self) -> np.ndarray:
        """The live parameter vector; a solver writes its result here."""
        return self._values

    @property
    def parameter_count(self) -> int:
        return int(self._values.shape[0])

    @property
    def entries(self) -> list[TableEntry]:
        return list(self._entries)

    def has_entity(self, entity_id: int) -> bool:
        return entity_id in self._by_id

    def entry_for(self, entity_id: int) -> TableEntry:
        try:
            return self._by_id[entity_id]
        except KeyError:
            raise EntityNotRegisteredError(entity_id) from None

    def register_entity(self, entity: DraftEntity) -> Registration:
        existing = self._by_id.get(entity.id)
        if existing is not None:
            return Registration(RegistrationStatus.REGISTERED, existing.start_index)

        layout = _LAYOUTS.get(entity.kind)
        if layout is None:
            logger.debug("Skipping %s %d: no constrainable parameters", entity.kind.value, entity.id)
            return Registration(RegistrationStatus.UNSUPPORTED)

        params = np.asarray(layout(entity), dtype=np.float64)
        start = self.parameter_count
        entry = TableEntry(
            entity_id=entity.id,
            start_index=start,
            param_count=int(params.shape[0]),
            kind=entity.kind,
            closed=entity.kind is EntityKind.POLYLINE and entity.closed,
        )
        self._values = np.concatenate((self._values, params))
        self._entries.append(entry)
        self._by_id[entity.id] = entry
        logger.debug(
            "Registered %s %d at [%d:%d]",
            entity.kind.value,
            entity.id,
            entry.start_index,
            entry.stop_index,
        )
        return Registration(RegistrationStatus.REGISTERED, start)

    def lookup(self, ref: GeometryRef) -> ParameterLookup:
        """Classify ``ref`` and resolve it to a slot index.

        DERIVED features (arc start/end points, the BR and TL rectangle
        corners, rectangle edges) have no slots of their own; their index is
        the entity's block base and the caller has to work from the owning
        independent feature instead.
        """
        entry = self.entry_for(ref.entity_id)
        base = entry.start_index
        kind = entry.kind
        i = ref.feature_index
        if i < 0:
            return _OUT_OF_RANGE

        if ref.feature_type is FeatureType.POINT:
            if kind is EntityKind.LINE and i <= 1:
                return _direct(base + 2 * i)
            if kind is EntityKind.CIRCLE and i == 0:
                return _direct(base)
            if kind is EntityKind.ARC:
                if i == 0:
                    return _direct(base)
                if i <= 2:
                    return _derived(base)
            if kind is EntityKind.RECTANGLE:
                if i in (0, 2):
                    return _direct(base + i)
                if i in (1, 3):
                    return _derived(base)
            if kind is EntityKind.POLYLINE and i < entry.param_count // 2:
                return _direct(base + 2 * i)

        elif ref.feature_type is FeatureType.LINE:
            if kind is EntityKind.LINE and i == 0:
                return _direct(base)
            if kind is EntityKind.RECTANGLE and i < 4:
                return _derived(base)
            if kind is EntityKind.POLYLINE:
                n = entry.param_count // 2
                if i < n - 1:
                    return _direct(base + 2 * i)
                if entry.closed and n >= 2 and i == n - 1:
                    # closing edge spans the last and first vertex blocks
                    return _derived(base + 2 * i)

        elif ref.feature_type is FeatureType.CIRCLE:
            if kind in (EntityKind.CIRCLE, EntityKind.ARC) and i == 0:
                return _direct(base)

        return _OUT_OF_RANGE

    def parameter_index(self, ref: GeometryRef) -> int:
        result = self.lookup(ref)
        if result.status is LookupStatus.OUT_OF_RANGE or result.index is None:
            raise InvalidFeatureError(
                f"{ref.feature_type.value} feature {ref.feature_index} is not "
                f"available on entity {ref.entity_id}"
            )
        return result.index

    def _point(self, index: int) -> Vec2:
        return Vec2(float(self._values[index]), float(self._values[index + 1]))

    def _rectangle_corners(self, base: int) -> list[Vec2]:
        c1x, c1y, c2x, c2y = (float(v) for v in self._values[base : base + 4])
        min_x, max_x = min(c1x, c2x), max(c1x, c2x)
        min_y, max_y = min(c1y, c2y), max(c1y, c2y)
        return [Vec2(min_x, min_y), Vec2(max_x, min_y), Vec2(max_x, max_y), Vec2(min_x, max_y)]

    def _unsupported(self, what: str, ref: GeometryRef, entry: TableEntry) -> InvalidFeatureError:
        return InvalidFeatureError(
            f"{what}: {ref.feature_type.value} feature {ref.feature_index} "
            f"not available on {entry.kind.value} {entry.entity_id}"
        )

    def point_position(self, ref: GeometryRef) -> Vec2:
        entry = self.entry_for(ref.entity_id)
        base, kind, i = entry.start_index, entry.kind, ref.feature_index
        if ref.feature_type is FeatureType.POINT and i >= 0:
            if kind is EntityKind.LINE and i <= 1:
                return self._point(base + 2 * i)
            if kind is EntityKind.CIRCLE and i == 0:
                return self._point(base)
            if kind is EntityKind.ARC and i <= 2:
                center = self._point(base)
                if i == 0:
                    return center
                radius = float(self._values[base + 2])
                angle = float(self._values[base + 2 + i])
                return Vec2(center.x + radius * math.cos(angle), center.y + radius * math.sin(angle))
            if kind is EntityKind.RECTANGLE and i < 4:
                return self._rectangle_corners(base)[i]
            if kind is EntityKind.POLYLINE and i < entry.param_count // 2:
                return self._point(base + 2 * i)
        raise self._unsupported("point_position", ref, entry)

    def line_endpoints(self, ref: GeometryRef) -> Segment:
        entry = self.entry_for(ref.entity_id)
        base, kind, i = entry.start_index, entry.kind, ref.feature_index
        if ref.feature_type is FeatureType.LINE and i >= 0:
            if kind is EntityKind.LINE and i == 0:
                return self._point(base), self._point(base + 2)
            if kind is EntityKind.RECTANGLE and i < 4:
                corners = self._rectangle_corners(base)
                return corners[i], corners[(i + 1) % 4]
            if kind is EntityKind.POLYLINE:
                n = entry.param_count // 2
                if i < n - 1:
                    return self._point(base + 2 * i), self._point(base + 2 * i + 2)
                if entry.closed and n >= 2 and i == n - 1:
                    return self._point(base + 2 * i), self._point(base)
        raise self._unsupported("line_endpoints", ref, entry)

    def circle_data(self, ref: GeometryRef) -> tuple[Vec2, float]:
        entry = self.entry_for(ref.entity_id)
        if (
            ref.feature_type is FeatureType.CIRCLE
            and ref.feature_index == 0
            and entry.kind in (EntityKind.CIRCLE, EntityKind.ARC)
        ):
            base = entry.start_index
            return self._point(base), float(self._values[base + 2])
        raise self._unsupported("circle_data", ref, entry)

    def apply_to_entities(self, entities: Iterable[DraftEntity]) -> int:
        """Write buffer values back into the matching live entities.

        Returns the number of entities updated. Entities whose kind no longer
        matches their table entry are left untouched.
        """
        by_id = {e.id: e for e in entities}
        updated = 0
        for entry in self._entries:
            entity = by_id.get(entry.entity_id)
            if entity is None:
                continue
            if entity.kind is not entry.kind:
                logger.warning(
                    "Entity %d is now %s, registered as %s; not applied",
                    entry.entity_id,
                    entity.kind.value,
                    entry.kind.value,
                )
                continue

            v = [float(x) for x in self._values[entry.start_index : entry.stop_index]]
            if entry.kind is EntityKind.LINE:
                entity.start = v[0:2]
                entity.end = v[2:4]
            elif entry.kind is EntityKind.CIRCLE:
                entity.center = v[0:2]
                entity.radius = v[2]
            elif entry.kind is EntityKind.ARC:
                entity.center = v[0:2]
                entity.radius = v[2]
                entity.start_angle = v[3]
                entity.end_angle = v[4]
            elif entry.kind is EntityKind.RECTANGLE:
                entity.corner1 = v[0:2]
                entity.corner2 = v[2:4]
            elif entry.kind is EntityKind.POLYLINE:
                entity.points = [v[k : k + 2] for k in range(0, len(v), 2)]
            updated += 1
        return updated

    def snapshot(self) -> np.ndarray:
        return self._values.copy()

    def restore(self, values: np.ndarray | Iterable[float]) -> None:
        restored = np.asarray(values, dtype=np.float64)
        if restored.shape != self._values.shape:
            raise ValueError(f"expected {self.parameter_count} parameters, got {restored.size}")
        self._values[:] = restored

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._by_id
