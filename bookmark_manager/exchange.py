"""Export and import of bookmark trees as versioned JSON documents.

Document format::

    {
        "version": "0.1",
        "timestamp": <epoch ms>,
        "data": {
            "bookmark-container:<name>": {<nested data>},
            "<bookmark uri>": {<metadata>}
        }
    }
"""

import json
import time
from pathlib import Path
from typing import Any, cast

import structlog

from bookmark_manager.container import Container
from bookmark_manager.uri import container_path, container_uri, is_container_uri

logger = structlog.get_logger()

EXPORT_VERSION = "0.1"
IMPORT_FOLDER_PREFIX = "Import_"


class InvalidExportError(ValueError):
    """Raised when export data cannot be parsed or has an unsupported version."""


def _export_items(container: Container) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for item in container.get_items():
        if isinstance(item, Container):
            # The full container URI carries the kind, only the name is exported
            data[container_uri(item.display_name)] = _export_items(item)
        else:
            data[item.uri] = dict(item.metadata)
    return data


def export_container(container: Container) -> dict[str, Any]:
    """Export the subtree of `container`."""
    export = {
        "version": EXPORT_VERSION,
        "timestamp": int(time.time() * 1000),
        "data": _export_items(container),
    }
    logger.info("Bookmarks exported", container=container.id, count=len(export["data"]))
    return export


def export_to_file(container: Container, path: Path) -> dict[str, Any]:
    """Export the subtree of `container` into the JSON file at `path`."""
    export = export_container(container)
    with open(path, "w") as f:
        json.dump(export, f, indent=2)
    logger.debug("Export written", path=str(path))
    return export


def load_export(path: Path) -> dict[str, Any]:
    """Load and check an export document.

    Raises:
        InvalidExportError: If the file is not valid JSON or has an unsupported version
    """
    try:
        with open(path, "r") as f:
            export = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Failed to read export", path=str(path), error=str(e))
        raise InvalidExportError(f"Failed to read {path}: {e}") from e

    check_export(export)
    return export


def check_export(export: Any) -> None:
    """Check the format and version of an export document."""
    if not isinstance(export, dict) or export.get("version") != EXPORT_VERSION:
        raise InvalidExportError("Unsupported data format or version.")
    if not isinstance(export.get("data"), dict):
        raise InvalidExportError("Unsupported data format or version.")
    _check_folders(export["data"])


def _check_folders(data: dict[str, Any]) -> None:
    for uri, value in data.items():
        if not is_container_uri(uri):
            continue
        name = container_path(uri)
        if not name.strip() or "/" in name:
            raise InvalidExportError(f"Invalid folder name in export data: {name!r}")
        if not isinstance(value, dict):
            raise InvalidExportError(f"Invalid contents of folder {name!r} in export data")
        _check_folders(value)


def _create_import_folder(parent: Container) -> Container:
    existing = {item.display_name for item in parent.get_items() if isinstance(item, Container)}
    index = 1
    while f"{IMPORT_FOLDER_PREFIX}{index}" in existing:
        index += 1

    name = f"{IMPORT_FOLDER_PREFIX}{index}"
    added = parent.add((Container.create_uri_for_name(name, parent), None))
    return cast(Container, added[0])


def _import_items(data: dict[str, Any], parent: Container) -> int:
    count = 0
    for uri, value in data.items():
        if not isinstance(value, dict):
            logger.warning("Skipping malformed entry", uri=uri)
            continue

        if is_container_uri(uri):
            child_uri = Container.create_uri_for_name(container_path(uri), parent)
            folder = parent.get_item(child_uri) or parent.add((child_uri, None))[0]
            count += _import_items(value, cast(Container, folder))
        else:
            count += len(parent.add((uri, dict(value))))
    return count


def import_into(parent: Container, export: dict[str, Any]) -> Container:
    """Import an export document into a new `Import_<n>` folder under `parent`.

    Returns:
        The folder holding the imported data
    """
    check_export(export)
    folder = _create_import_folder(parent)
    count = _import_items(export["data"], folder)
    logger.info("Bookmarks imported", folder=folder.id, count=count)
    return folder
