from __future__ import annotations

import logging
from typing import Iterator

from .blocks import BlockDefinition, BlockTable
from .entity import DraftEntity, IdAllocator
from .errors import DuplicateBlockError

logger = logging.getLogger(__name__)


class DraftDocument:
    """Ordered entity collection plus the block table of one drawing.

    The document owns the id allocator; build entities with
    ``ids=document.ids`` so their ids never collide.
    """

    def __init__(self, ids: IdAllocator | None = None) -> None:
        self.ids = ids or IdAllocator()
        self.blocks = BlockTable()
        self._entities: list[DraftEntity] = []
        self._next_group_id = 1

    @property
    def entities(self) -> list[DraftEntity]:
        return self._entities

    def __iter__(self) -> Iterator[DraftEntity]:
        return iter(self._entities)

    def __len__(self) -> int:
        return len(self._entities)

    def add_entity(self, entity: DraftEntity) -> DraftEntity:
        self.ids.advance(entity.id)
        self._entities.append(entity)
        logger.debug("Added %s %d on layer %r", entity.kind.value, entity.id, entity.layer)
        return entity

    def remove_entity(self, entity_id: int) -> bool:
        before = len(self._entities)
        self._entities = [e for e in self._entities if e.id != entity_id]
        removed = len(self._entities) != before
        if removed:
            logger.debug("Removed entity %d", entity_id)
        return removed

    def find_entity(self, entity_id: int) -> DraftEntity | None:
        for entity in self._entities:
            if entity.id == entity_id:
                return entity
        return None

    def next_group_id(self) -> int:
        value = self._next_group_id
        self._next_group_id += 1
        return value

    def define_block(self, block: BlockDefinition) -> BlockDefinition:
        if not self.blocks.add_block(block):
            raise DuplicateBlockError(f"block name {block.name!r} is empty or already defined")
        return block

    def clear(self) -> None:
        self._entities.clear()
        self.blocks.clear()
        self._next_group_id = 1
        logger.debug("Cleared document")
