"""CLI for bookmark manager."""

from pathlib import Path
from typing import Annotated, Literal

import structlog
from cyclopts import App, Parameter

from bookmark_manager.config import get_config
from bookmark_manager.config_commands import config_app
from bookmark_manager.container import Container
from bookmark_manager.exchange import InvalidExportError, export_to_file, import_into, load_export
from bookmark_manager.folder_commands import folder_app
from bookmark_manager.manager import BookmarkManager
from bookmark_manager.models import DISPLAY_NAME_METADATA_KEY, KINDS, NOTES_METADATA_KEY, Bookmark, BookmarkKind
from bookmark_manager.storage import YamlKeyValueStore
from bookmark_manager.uri import path_to_uri
from bookmark_manager.validation import validate_line_number, validate_not_empty

logger = structlog.get_logger()

app = App(
    help="Bookmark Manager - Line bookmarks organized in folders",
)

app.command(folder_app)
app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def get_manager() -> BookmarkManager:
    """Get an opened bookmark manager over the configured state files."""
    config = get_config()
    manager = BookmarkManager(
        global_store=YamlKeyValueStore(config.global_state_file),
        workspace_store=YamlKeyValueStore(config.workspace_state_file),
        workspace_root=config.workspace_root,
    )
    return manager.open()


def resolve_kind(kind: BookmarkKind | None) -> BookmarkKind:
    """Use `kind` or the configured default kind."""
    if kind is not None:
        return kind
    default = get_config().get("default.kind")
    if default not in KINDS:
        raise ValueError(f"Unsupported default.kind: {default}")
    return default


def resolve_folder(manager: BookmarkManager, kind: BookmarkKind, folder: str | None) -> Container:
    """Find the container at `folder` (a `/`-separated path) under the root of `kind`."""
    root = manager.get_root_container(kind)
    if not folder:
        return root

    container = root.find_container(f"{root.id}/{folder.strip('/')}")
    if container is None:
        raise ValueError(f"Folder not found: {folder}")
    return container


def find_bookmark(container: Container, path: str, line: int) -> Bookmark:
    uri = path_to_uri(path, line)
    item = container.get_item(uri)
    if not isinstance(item, Bookmark):
        raise ValueError(f"Bookmark not found: {path}:{line} in {container.id}")
    return item


def print_tree(container: Container, indent: int = 0) -> None:
    """Print the items of `container` recursively."""
    items = container.get_items()
    folders = sorted((i for i in items if isinstance(i, Container)), key=lambda c: c.display_name.casefold())
    bookmarks = sorted((i for i in items if isinstance(i, Bookmark)), key=lambda b: b.sort_key)

    prefix = "  " * indent
    for folder in folders:
        print(f"{prefix}▸ {folder.display_name}/")
        print_tree(folder, indent + 1)
    for bookmark in bookmarks:
        notes = f"  # {bookmark.notes}" if bookmark.notes else ""
        print(f"{prefix}• {bookmark.display_name}{notes}")


@app.command
def add(
    path: str,
    line: int = 1,
    kind: BookmarkKind | None = None,
    folder: str | None = None,
    name: str | None = None,
    notes: str | None = None,
) -> None:
    """Bookmark a line of a file."""
    errors = [
        validate_line_number(line),
        validate_not_empty(name) if name is not None else None,
        validate_not_empty(notes, "Notes") if notes is not None else None,
    ]
    error = next((e for e in errors if e), None)
    if error:
        print(error)
        return

    manager = get_manager()
    container = resolve_folder(manager, resolve_kind(kind), folder)

    metadata: dict[str, str] = {}
    if name:
        metadata[DISPLAY_NAME_METADATA_KEY] = name.strip()
    if notes:
        metadata[NOTES_METADATA_KEY] = notes.strip()

    added = manager.add_bookmarks(container, path_to_uri(path, line), metadata=metadata)
    if added:
        print(f"Added bookmark {added[0].display_name} to {container.id}")
    else:
        print(f"Bookmark already exists in {container.id}")


@app.command
def list(kind: BookmarkKind | None = None) -> None:
    """List bookmarks as a tree."""
    manager = get_manager()
    kinds = KINDS if kind is None else (kind,)
    for k in kinds:
        root = manager.get_root_container(k)
        print(f"{root.display_name} ({root.count} item(s))")
        print_tree(root, indent=1)


@app.command
def remove(
    path: str,
    line: int = 1,
    kind: BookmarkKind | None = None,
    folder: str | None = None,
) -> None:
    """Remove a bookmark."""
    manager = get_manager()
    container = resolve_folder(manager, resolve_kind(kind), folder)
    removed = manager.remove_items(find_bookmark(container, path, line))
    print(f"Removed {len(removed)} bookmark(s)")


@app.command
def update(
    path: str,
    line: int = 1,
    kind: BookmarkKind | None = None,
    folder: str | None = None,
    new_line: int | None = None,
    name: str | None = None,
    notes: str | None = None,
) -> None:
    """Update the line number, display name or notes of a bookmark."""
    manager = get_manager()
    container = resolve_folder(manager, resolve_kind(kind), folder)
    bookmark = find_bookmark(container, path, line)

    try:
        updated = manager.update_bookmark(bookmark, display_name=name, line_number=new_line, notes=notes)
    except ValueError as e:
        print(str(e))
        return

    if updated is None:
        print("Bookmark could not be updated")
    else:
        print(f"Updated bookmark {updated.display_name}")


@app.command
def search(text: str, kind: BookmarkKind | None = None) -> None:
    """Search bookmarks by name, notes or folder."""
    manager = get_manager()
    bookmarks = manager.search(text, kind)

    print(f"Found {len(bookmarks)} bookmark(s):\n")
    for bookmark in bookmarks:
        print(f"{bookmark.display_name}  line {bookmark.line_number}  [{bookmark.container.id}]")


@app.command
def reset(kind: BookmarkKind | None = None, yes: bool = False) -> None:
    """Delete all bookmarks of a kind (or of every kind)."""
    manager = get_manager()
    if not manager.has_bookmarks(kind):
        print("No bookmarks to delete")
        return

    scope = f"'{kind}' " if kind else ""
    if not yes:
        answer = input(f"Are you sure you want to delete all {scope}bookmarks? This action is irreversible. [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            return

    manager.remove_all(kind)
    print(f"Deleted all {scope}bookmarks")


@app.command
def export(file: Path, kind: BookmarkKind | None = None) -> None:
    """Export bookmarks of a kind to a JSON file."""
    manager = get_manager()
    k = resolve_kind(kind)
    root = manager.get_root_container(k)
    if not root.count:
        print(f"No '{k}' bookmarks to export.")
        return

    export_to_file(root, file)
    print(f"Exported '{k}' bookmarks to {file}")


@app.command(name="import")
def import_(file: Path, kind: BookmarkKind | None = None) -> None:
    """Import bookmarks from a JSON file into a new folder."""
    try:
        data = load_export(file)
    except InvalidExportError as e:
        logger.warning("Import aborted", path=str(file), error=str(e))
        print(str(e))
        return

    manager = get_manager()
    folder = import_into(manager.get_root_container(resolve_kind(kind)), data)
    print(f"Imported {folder.count} item(s) into {folder.id}")


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    app(tokens)


if __name__ == "__main__":
    app.meta()
