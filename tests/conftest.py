"""Shared fixtures for bookmark manager tests."""

from pathlib import Path

import pytest

from bookmark_manager.container import Container
from bookmark_manager.datastore import Datastore
from bookmark_manager.storage import MemoryKeyValueStore
from bookmark_manager.stores import KeyValueRawStore

WORKSPACE_ROOT = Path("/workspace")


@pytest.fixture
def store() -> MemoryKeyValueStore:
    """Create an empty host slot."""
    return MemoryKeyValueStore()


@pytest.fixture
def root(store: MemoryKeyValueStore) -> Container:
    """Create a global root container over `store`."""
    return Container("Global", "global", Datastore(KeyValueRawStore(store)), workspace_root=WORKSPACE_ROOT)
