"""Tests for export and import."""

import json
from pathlib import Path

import pytest

from bookmark_manager.container import Container
from bookmark_manager.exchange import (
    EXPORT_VERSION,
    InvalidExportError,
    export_container,
    export_to_file,
    import_into,
    load_export,
)
from bookmark_manager.migration import V1_KEY_NAME
from bookmark_manager.storage import MemoryKeyValueStore

URI_1 = "file:///workspace/a.py#L3"
URI_2 = "file:///workspace/b.py#L8"


def populate(root: Container) -> None:
    """Add a bookmark and a folder holding another bookmark."""
    root.add((URI_1, {"displayName": "A"}))
    folder = root.add((Container.create_uri_for_name("Work", root), None))[0]
    assert isinstance(folder, Container)
    folder.add((URI_2, {"notes": "n"}))


def test_export_container(root: Container) -> None:
    """Test the structure of an export document."""
    populate(root)

    export = export_container(root)

    assert export["version"] == EXPORT_VERSION
    assert isinstance(export["timestamp"], int)
    assert export["data"] == {
        URI_1: {"displayName": "A"},
        "bookmark-container:Work": {URI_2: {"notes": "n"}},
    }


def test_import_into_new_folders(root: Container) -> None:
    """Test that every import lands in a fresh Import_<n> folder."""
    export = {
        "version": EXPORT_VERSION,
        "timestamp": 0,
        "data": {
            URI_1: {},
            "bookmark-container:Work": {"bookmark-container:Sub": {URI_2: {"notes": "n"}}},
        },
    }

    first = import_into(root, export)
    second = import_into(root, export)

    assert first.id == "global/Import_1"
    assert second.id == "global/Import_2"
    assert [item.uri for item in first.get_items()] == [URI_1, "bookmark-container:global/Import_1/Work"]
    sub = root.find_container("global/Import_2/Work/Sub")
    assert sub is not None
    assert sub.get_item(URI_2).metadata == {"notes": "n"}


def test_import_skips_malformed_entries(root: Container) -> None:
    """Test that entries without metadata objects are skipped."""
    export = {"version": EXPORT_VERSION, "timestamp": 0, "data": {URI_1: "oops", URI_2: {}}}

    folder = import_into(root, export)

    assert [item.uri for item in folder.get_items()] == [URI_2]


@pytest.mark.parametrize(
    "export",
    [
        {"version": "0.2", "timestamp": 0, "data": {}},
        {"timestamp": 0, "data": {}},
        {"version": EXPORT_VERSION, "data": []},
        ["not", "an", "object"],
    ],
)
def test_import_rejects_unsupported_data(root: Container, store: MemoryKeyValueStore, export: object) -> None:
    """Test that unsupported documents leave the store untouched."""
    with pytest.raises(InvalidExportError, match="Unsupported data format or version."):
        import_into(root, export)  # type: ignore[arg-type]

    assert store.get(V1_KEY_NAME) is None


def test_export_and_load_file(root: Container, tmp_path: Path) -> None:
    """Test writing an export file and loading it back."""
    populate(root)
    path = tmp_path / "bookmarks.json"

    export = export_to_file(root, path)

    assert load_export(path) == export
    assert json.loads(path.read_text())["version"] == EXPORT_VERSION


def test_load_invalid_json(tmp_path: Path) -> None:
    """Test that unreadable files raise InvalidExportError."""
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    with pytest.raises(InvalidExportError):
        load_export(path)
    with pytest.raises(InvalidExportError):
        load_export(tmp_path / "missing.json")


@pytest.mark.parametrize(
    "data",
    [
        {URI_1: {}, "bookmark-container:a/b": {URI_2: {}}},
        {URI_1: {}, "bookmark-container:": {}},
        {URI_1: {}, "bookmark-container:Work": {"bookmark-container:Sub": "oops"}},
    ],
)
def test_import_rejects_malformed_folders(root: Container, store: MemoryKeyValueStore, data: dict) -> None:
    """Test that invalid folders anywhere in the tree abort the import before any write."""
    export = {"version": EXPORT_VERSION, "timestamp": 0, "data": data}

    with pytest.raises(InvalidExportError):
        import_into(root, export)

    assert store.get(V1_KEY_NAME) is None
