"""Folder management commands for bookmark manager CLI."""

from cyclopts import App

from bookmark_manager.container import Container
from bookmark_manager.models import BookmarkKind

folder_app = App(name="folder", help="Manage bookmark folders")


@folder_app.command
def add(path: str, kind: BookmarkKind | None = None) -> None:
    """Create a folder. Use `/` to create it inside an existing folder."""
    from bookmark_manager.cli import get_manager, resolve_folder, resolve_kind

    manager = get_manager()
    parent_path, _, name = path.strip("/").rpartition("/")
    parent = resolve_folder(manager, resolve_kind(kind), parent_path)

    try:
        folder = manager.add_folder(parent, name)
    except ValueError as e:
        print(str(e))
        return
    print(f"Created folder {folder.id}")


@folder_app.command
def rename(path: str, name: str, kind: BookmarkKind | None = None) -> None:
    """Rename a folder."""
    from bookmark_manager.cli import get_manager, resolve_folder, resolve_kind

    manager = get_manager()
    folder = resolve_folder(manager, resolve_kind(kind), path)

    try:
        renamed = manager.rename_folder(folder, name)
    except ValueError as e:
        print(str(e))
        return

    if renamed is None:
        print(f"Folder {folder.id} could not be renamed")
    else:
        print(f"Renamed folder {folder.id} to {renamed.id}")


@folder_app.command
def remove(path: str, kind: BookmarkKind | None = None) -> None:
    """Remove a folder and everything in it."""
    from bookmark_manager.cli import get_manager, resolve_folder, resolve_kind

    manager = get_manager()
    folder = resolve_folder(manager, resolve_kind(kind), path)
    removed = manager.remove_items(folder)
    print(f"Removed {len(removed)} folder(s)")


@folder_app.command
def move(path: str, target: str = "", kind: BookmarkKind | None = None) -> None:
    """Move a folder into another folder (empty target means the root)."""
    from bookmark_manager.cli import get_manager, resolve_folder, resolve_kind

    manager = get_manager()
    k = resolve_kind(kind)
    folder = resolve_folder(manager, k, path)
    destination = resolve_folder(manager, k, target)

    try:
        moved = manager.move(folder, destination)
    except ValueError as e:
        print(str(e))
        return

    if moved is None:
        print(f"Folder {folder.id} could not be moved")
    else:
        print(f"Moved folder {folder.id} to {destination.id}")


@folder_app.command(name="list")
def list_folders(kind: BookmarkKind | None = None) -> None:
    """List folders with their number of items."""
    from bookmark_manager.cli import get_manager, resolve_kind

    manager = get_manager()
    root = manager.get_root_container(resolve_kind(kind))

    pending = [root]
    while pending:
        container = pending.pop(0)
        print(f"{container.id} ({container.count} item(s))")
        children = [item for item in container.get_items() if isinstance(item, Container)]
        pending[0:0] = children
