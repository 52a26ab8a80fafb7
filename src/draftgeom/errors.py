from __future__ import annotations


class DraftGeomError(Exception):
    """Base class for errors raised by the drafting kernel."""


class EntityNotRegisteredError(DraftGeomError, KeyError):
    def __init__(self, entity_id: int) -> None:
        super().__init__(entity_id)
        self.entity_id = entity_id

    def __str__(self) -> str:
        return f"entity {self.entity_id} not registered"


class InvalidFeatureError(DraftGeomError, ValueError):
    """A GeometryRef names a feature the entity does not have."""


class DuplicateBlockError(DraftGeomError, ValueError):
    pass
