"""Tests for legacy format upgrade."""

from unittest.mock import MagicMock

from bookmark_manager import migration
from bookmark_manager.datastore import Datastore
from bookmark_manager.migration import V0_KEY_NAME, V1_KEY_NAME
from bookmark_manager.storage import MemoryKeyValueStore
from bookmark_manager.stores import KeyValueRawStore


def test_upgrade_nothing_to_do() -> None:
    """Test that an empty store is not upgraded."""
    store = MagicMock(wraps=MemoryKeyValueStore())

    assert migration.upgrade(store) is False
    store.update.assert_not_called()


def test_upgrade_v0_without_v1() -> None:
    """Test that V0 URIs are copied to V1 with default line numbers."""
    store = MemoryKeyValueStore({V0_KEY_NAME: ["a", "b"]})

    assert migration.upgrade(store) is True

    assert store.get(V1_KEY_NAME) == {"a#L1": {}, "b#L1": {}}
    assert store.get(V0_KEY_NAME) is None


def test_upgrade_twice_is_noop() -> None:
    """Test that a second upgrade returns False and makes no writes."""
    store = MemoryKeyValueStore({V0_KEY_NAME: ["file:///workspace/test1.txt", "file:///workspace/test2.txt#L10"]})
    assert migration.upgrade(store) is True
    assert store.get(V1_KEY_NAME) == {
        "file:///workspace/test1.txt#L1": {},
        "file:///workspace/test2.txt#L10": {},
    }

    spy = MagicMock(wraps=store)
    assert migration.upgrade(spy) is False
    spy.update.assert_not_called()


def test_upgrade_v0_already_copied() -> None:
    """Test that entries copied by an earlier upgrade are not overwritten."""
    uri = "file:///workspace/test1.txt#L4"
    store = MagicMock(
        wraps=MemoryKeyValueStore(
            {
                V0_KEY_NAME: [uri],
                V1_KEY_NAME: {uri: {"notes": "kept"}},
            }
        )
    )

    assert migration.upgrade(store) is True

    store.update.assert_called_once_with(V0_KEY_NAME, None)
    assert store.get(V1_KEY_NAME) == {uri: {"notes": "kept"}}


def test_upgrade_v0_does_not_clobber_defaulted_entry() -> None:
    """Test that a V0 URI without fragment keeps the metadata of its upgraded entry."""
    store = MemoryKeyValueStore(
        {
            V0_KEY_NAME: ["file:///workspace/a.txt"],
            V1_KEY_NAME: {"file:///workspace/a.txt#L1": {"notes": "kept"}},
        }
    )

    assert migration.upgrade(store) is True

    assert store.get(V1_KEY_NAME) == {"file:///workspace/a.txt#L1": {"notes": "kept"}}


def test_upgrade_adds_missing_line_numbers() -> None:
    """Test that V1 URIs without fragment get the default line number."""
    store = MemoryKeyValueStore(
        {
            V1_KEY_NAME: {
                "file:///workspace/a.txt": {"notes": "n"},
                "file:///workspace/b.txt#L5": {},
                "bookmark-container:global/Folder": {},
            }
        }
    )

    assert migration.upgrade(store) is True

    assert store.get(V1_KEY_NAME) == {
        "file:///workspace/a.txt#L1": {"notes": "n"},
        "file:///workspace/b.txt#L5": {},
        "bookmark-container:global/Folder": {},
    }
    assert store.get(V0_KEY_NAME) is None


def test_upgrade_current_format_is_noop() -> None:
    """Test that data in the current format is left alone."""
    store = MagicMock(
        wraps=MemoryKeyValueStore({V1_KEY_NAME: {"file:///a#L2": {}, "bookmark-container:global/F": {}}})
    )

    assert migration.upgrade(store) is False
    store.update.assert_not_called()


def test_datastore_upgrade_uses_host_slot() -> None:
    """Test that a datastore over a host slot runs the upgrade."""
    store = MemoryKeyValueStore({V0_KEY_NAME: ["file:///workspace/a.txt"]})
    datastore = Datastore(KeyValueRawStore(store))

    assert datastore.upgrade() is True
    assert datastore.get_all() == {"file:///workspace/a.txt#L1": {}}
    assert datastore.upgrade() is False
