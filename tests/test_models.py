"""Tests for data models."""

import pytest

from bookmark_manager.container import Container
from bookmark_manager.datastore import Datastore
from bookmark_manager.models import Bookmark
from bookmark_manager.storage import MemoryKeyValueStore
from bookmark_manager.stores import KeyValueRawStore


def test_bookmark_defaults_line_number(root: Container) -> None:
    """Test that bookmark URIs always carry a line number."""
    bookmark = Bookmark(root, "file:///workspace/a.py")

    assert bookmark.uri == "file:///workspace/a.py#L1"
    assert bookmark.line_number == 1
    assert bookmark.metadata == {}
    assert bookmark.kind == "global"


def test_bookmark_rejects_container_uri(root: Container) -> None:
    """Test that containers cannot be bookmarks."""
    with pytest.raises(ValueError):
        Bookmark(root, "bookmark-container:global/Work")


def test_bookmark_names(root: Container) -> None:
    """Test default and custom display names."""
    bookmark = Bookmark(root, "file:///workspace/src/a.py#L12")

    assert bookmark.default_name == "src/a.py:12"
    assert bookmark.display_name == "src/a.py:12"
    assert not bookmark.has_display_name

    named = Bookmark(root, "file:///workspace/src/a.py#L12", {"displayName": "Entry point", "notes": "check"})
    assert named.display_name == "Entry point"
    assert named.has_display_name
    assert named.notes == "check"


def test_bookmark_identity(root: Container) -> None:
    """Test that identity is container and URI, not metadata."""
    first = Bookmark(root, "file:///workspace/a.py#L2", {"notes": "one"})
    second = Bookmark(root, "file:///workspace/a.py#L2", {"notes": "two"})
    other_line = Bookmark(root, "file:///workspace/a.py#L3")

    assert first == second
    assert hash(first) == hash(second)
    assert first != other_line


def test_bookmark_identity_depends_on_kind() -> None:
    """Test that equal URIs in different roots are different bookmarks."""
    global_root = Container("Global", "global", Datastore(KeyValueRawStore(MemoryKeyValueStore())))
    workspace_root = Container("Workspace", "workspace", Datastore(KeyValueRawStore(MemoryKeyValueStore())))

    assert Bookmark(global_root, "file:///a.py#L1") != Bookmark(workspace_root, "file:///a.py#L1")


def test_with_changes_noop_returns_same(root: Container) -> None:
    """Test that no-op changes return the same instance."""
    bookmark = Bookmark(root, "file:///workspace/a.py#L4", {"notes": "n"})

    assert bookmark.with_changes() is bookmark
    assert bookmark.with_changes(line_number=4) is bookmark
    assert bookmark.with_changes(notes="n") is bookmark
    assert bookmark.with_changes(container=root) is bookmark


def test_with_changes_line_number(root: Container) -> None:
    """Test that changing the line number creates a new bookmark."""
    bookmark = Bookmark(root, "file:///workspace/a.py#L4", {"notes": "n"})
    assert bookmark.default_name == "a.py:4"

    moved = bookmark.with_changes(line_number=10)

    assert moved is not bookmark
    assert moved.uri == "file:///workspace/a.py#L10"
    assert moved.default_name == "a.py:10"
    assert moved.metadata == {"notes": "n"}
    assert bookmark.uri == "file:///workspace/a.py#L4"


def test_with_changes_metadata(root: Container) -> None:
    """Test setting and clearing metadata values."""
    bookmark = Bookmark(root, "file:///workspace/a.py#L4", {"displayName": "old"})

    renamed = bookmark.with_changes(display_name="new", notes="todo")
    assert renamed.metadata == {"displayName": "new", "notes": "todo"}
    assert bookmark.metadata == {"displayName": "old"}

    cleared = renamed.with_changes(display_name="")
    assert cleared.metadata == {"notes": "todo"}
    assert cleared.display_name == "a.py:4"


def test_ordering(root: Container) -> None:
    """Test ordering by kind, name and line number."""
    workspace = Container("Workspace", "workspace", Datastore(KeyValueRawStore(MemoryKeyValueStore())))
    bookmarks = [
        Bookmark(workspace, "file:///workspace/a.py#L1"),
        Bookmark(root, "file:///workspace/b.py#L1", {"displayName": "banana"}),
        Bookmark(root, "file:///workspace/a.py#L1", {"displayName": "Apple"}),
        Bookmark(root, "file:///workspace/c.py#L9", {"displayName": "cherry"}),
        Bookmark(root, "file:///workspace/c.py#L2", {"displayName": "cherry"}),
    ]

    ordered = sorted(bookmarks, key=lambda b: b.sort_key)

    assert [(b.kind, b.display_name, b.line_number) for b in ordered] == [
        ("global", "Apple", 1),
        ("global", "banana", 1),
        ("global", "cherry", 2),
        ("global", "cherry", 9),
        ("workspace", "/workspace/a.py:1", 1),
    ]


def test_compare(root: Container) -> None:
    """Test three-way comparison."""
    first = Bookmark(root, "file:///workspace/a.py#L1")
    second = Bookmark(root, "file:///workspace/a.py#L2")

    assert first.compare(second) < 0
    assert second.compare(first) > 0
    assert first.compare(Bookmark(root, "file:///workspace/a.py#L1")) == 0
