from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import ClassVar, Iterable, TypeVar

from .geometry import BoundingBox, PointLike, Vec2


class LineType(enum.IntEnum):
    BY_LAYER = 0
    CONTINUOUS = 1
    DASHED = 2
    DOTTED = 3
    DASH_DOT = 4
    CENTER = 5
    HIDDEN = 6
    PHANTOM = 7

    @property
    def display_name(self) -> str:
        return _LINE_TYPE_NAMES[self]

    @property
    def dxf_name(self) -> str:
        if self is LineType.BY_LAYER:
            return "BYLAYER"
        return _LINE_TYPE_NAMES[self].upper()


_LINE_TYPE_NAMES = {
    LineType.BY_LAYER: "ByLayer",
    LineType.CONTINUOUS: "Continuous",
    LineType.DASHED: "Dashed",
    LineType.DOTTED: "Dotted",
    LineType.DASH_DOT: "DashDot",
    LineType.CENTER: "Center",
    LineType.HIDDEN: "Hidden",
    LineType.PHANTOM: "Phantom",
}


def line_type_from_name(name: str) -> LineType:
    for line_type, display in _LINE_TYPE_NAMES.items():
        if display == name:
            return line_type
    return LineType.BY_LAYER


def line_type_from_dxf_name(dxf_name: str) -> LineType:
    wanted = dxf_name.strip().upper()
    for line_type in LineType:
        if line_type is not LineType.BY_LAYER and line_type.dxf_name == wanted:
            return line_type
    return LineType.CONTINUOUS


class EntityKind(enum.Enum):
    LINE = "line"
    CIRCLE = "circle"
    ARC = "arc"
    RECTANGLE = "rectangle"
    POLYLINE = "polyline"
    SPLINE = "spline"
    ELLIPSE = "ellipse"
    TEXT = "text"
    HATCH = "hatch"
    BLOCK_REFERENCE = "block_reference"
    LINEAR_DIMENSION = "linear_dimension"
    RADIAL_DIMENSION = "radial_dimension"
    ANGULAR_DIMENSION = "angular_dimension"
    LEADER = "leader"


class IdAllocator:
    """Monotonic entity id source owned by one document or session.

    Id 0 is reserved to mean "no entity", so allocation starts at 1.
    """

    def __init__(self, start: int = 1) -> None:
        if start < 1:
            raise ValueError(f"id allocation must start at 1 or above, got {start}")
        self._next = start

    def allocate(self) -> int:
        value = self._next
        self._next += 1
        return value

    def advance(self, min_id: int) -> None:
        """Ensure the next allocated id is greater than ``min_id``."""
        if self._next <= min_id:
            self._next = min_id + 1

    @property
    def peek(self) -> int:
        return self._next


class PointField:
    """Instance attribute that stores any 2-sequence as a Vec2."""

    def __set_name__(self, owner: type, name: str) -> None:
        self._slot = f"_{name}"

    def __get__(self, obj: object, objtype: type | None = None) -> Vec2:
        if obj is None:
            return self  # type: ignore[return-value]
        return getattr(obj, self._slot)

    def __set__(self, obj: object, value: PointLike) -> None:
        setattr(obj, self._slot, Vec2.of(value))


def to_points(points: Iterable[PointLike]) -> list[Vec2]:
    return [Vec2.of(p) for p in points]


E = TypeVar("E", bound="DraftEntity")


class DraftEntity(ABC):
    kind: ClassVar[EntityKind]

    def __init__(
        self,
        *,
        ids: IdAllocator,
        layer: str = "0",
        color: int = 0x00000000,
        line_width: float = 0.0,
        line_type: LineType = LineType.BY_LAYER,
        group_id: int = 0,
    ) -> None:
        self._ids = ids
        self._id = ids.allocate()
        self.layer = layer
        self.color = color
        self.line_width = line_width
        self.line_type = LineType(line_type)
        self.group_id = group_id

    @property
    def id(self) -> int:
        return self._id

    @property
    def ids(self) -> IdAllocator:
        return self._ids

    def assign_id(self, new_id: int) -> None:
        """Override the allocated id (used when loading saved drawings)."""
        self._id = new_id
        self._ids.advance(new_id)

    def copy_attributes_to(self, other: E) -> E:
        other.layer = self.layer
        other.color = self.color
        other.line_width = self.line_width
        other.line_type = self.line_type
        other.group_id = self.group_id
        return other

    def same_attributes(self, other: DraftEntity) -> bool:
        return (
            self.layer == other.layer
            and self.color == other.color
            and self.line_width == other.line_width
            and self.line_type == other.line_type
            and self.group_id == other.group_id
        )

    @abstractmethod
    def bounding_box(self) -> BoundingBox: ...

    @abstractmethod
    def hit_test(self, point: PointLike, tolerance: float) -> bool: ...

    @abstractmethod
    def snap_points(self) -> list[Vec2]: ...

    @abstractmethod
    def translate(self, delta: PointLike) -> None: ...

    @abstractmethod
    def mirror(self, axis_p1: PointLike, axis_p2: PointLike) -> None: ...

    @abstractmethod
    def rotate(self, center: PointLike, angle: float) -> None: ...

    @abstractmethod
    def scale(self, center: PointLike, factor: float) -> None: ...

    @abstractmethod
    def clone(self) -> DraftEntity: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id}, layer={self.layer!r})"
