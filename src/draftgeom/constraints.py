"""Constraint records as seen by parameter-table construction.

Only bookkeeping lives here. Residual evaluation and the numeric solve
consume these records elsewhere.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from .entity import IdAllocator
from .geometry_ref import GeometryRef

logger = logging.getLogger(__name__)


class ConstraintType(enum.Enum):
    COINCIDENT = "coincident"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    PERPENDICULAR = "perpendicular"
    PARALLEL = "parallel"
    TANGENT = "tangent"
    EQUAL = "equal"
    FIXED = "fixed"
    DISTANCE = "distance"
    ANGLE = "angle"

    @property
    def equation_count(self) -> int:
        # point-on-point constraints pin both coordinates
        if self in (ConstraintType.COINCIDENT, ConstraintType.FIXED):
            return 2
        return 1

    @property
    def has_dimensional_value(self) -> bool:
        return self in (ConstraintType.DISTANCE, ConstraintType.ANGLE)


@dataclass(slots=True)
class Constraint:
    id: int
    type: ConstraintType
    refs: tuple[GeometryRef, ...]
    value: float = 0.0
    enabled: bool = True

    @property
    def equation_count(self) -> int:
        return self.type.equation_count

    def referenced_entity_ids(self) -> list[int]:
        """Distinct entity ids in reference order."""
        ids: list[int] = []
        for ref in self.refs:
            if ref.entity_id not in ids:
                ids.append(ref.entity_id)
        return ids


class ReferencesEntities(Protocol):
    def referenced_entity_ids(self) -> Iterable[int]: ...


class ConstraintSource(Protocol):
    """Anything that can list its currently active constraints."""

    def active_constraints(self) -> Iterable[ReferencesEntities]: ...


@dataclass
class ConstraintSystem:
    ids: IdAllocator = field(default_factory=IdAllocator)
    _constraints: list[Constraint] = field(default_factory=list, init=False, repr=False)

    def create(
        self,
        type: ConstraintType,
        *refs: GeometryRef,
        value: float = 0.0,
    ) -> Constraint:
        constraint = Constraint(self.ids.allocate(), type, tuple(refs), value)
        self.add(constraint)
        return constraint

    def add(self, constraint: Constraint) -> int:
        self.ids.advance(constraint.id)
        self._constraints.append(constraint)
        logger.debug("Added %s constraint %d", constraint.type.value, constraint.id)
        return constraint.id

    def remove(self, constraint_id: int) -> Constraint | None:
        for i, constraint in enumerate(self._constraints):
            if constraint.id == constraint_id:
                return self._constraints.pop(i)
        return None

    def get(self, constraint_id: int) -> Constraint | None:
        for constraint in self._constraints:
            if constraint.id == constraint_id:
                return constraint
        return None

    @property
    def constraints(self) -> list[Constraint]:
        return self._constraints

    def active_constraints(self) -> list[Constraint]:
        return [c for c in self._constraints if c.enabled]

    def constraints_for_entity(self, entity_id: int) -> list[Constraint]:
        return [c for c in self._constraints if entity_id in c.referenced_entity_ids()]

    def remove_constraints_for_entity(self, entity_id: int) -> list[Constraint]:
        removed = self.constraints_for_entity(entity_id)
        if removed:
            self._constraints = [c for c in self._constraints if c not in removed]
            logger.debug("Removed %d constraints referencing entity %d", len(removed), entity_id)
        return removed

    def total_equations(self) -> int:
        return sum(c.equation_count for c in self.active_constraints())

    @property
    def empty(self) -> bool:
        return not self._constraints

    def __len__(self) -> int:
        return len(self._constraints)

    def clear(self) -> None:
        self._constraints.clear()
