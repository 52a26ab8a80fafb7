import pytest

from draftgeom.entity import IdAllocator


@pytest.fixture
def ids() -> IdAllocator:
    return IdAllocator()
