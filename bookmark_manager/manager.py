"""Bookmark manager: owns the root containers for the lifetime of a session."""

from pathlib import Path
from types import TracebackType

import structlog

from bookmark_manager.container import Container, Item
from bookmark_manager.datastore import Datastore
from bookmark_manager.models import KINDS, Bookmark, BookmarkKind
from bookmark_manager.raw_store import Metadata
from bookmark_manager.storage import KeyValueStore
from bookmark_manager.stores import KeyValueRawStore
from bookmark_manager.uri import ensure_line_number, strip_fragment
from bookmark_manager.validation import validate_folder_name, validate_line_number

logger = structlog.get_logger()

ROOT_NAMES: dict[BookmarkKind, str] = {
    "global": "Global",
    "workspace": "Workspace",
}


class BookmarkManager:
    """Entry point over the global and workspace bookmark stores.

    `open` upgrades legacy data once and builds the root containers; `close`
    drops them. Use as a context manager to scope both.
    """

    def __init__(
        self,
        global_store: KeyValueStore,
        workspace_store: KeyValueStore,
        workspace_root: Path | None = None,
    ) -> None:
        """Initialize bookmark manager.

        Args:
            global_store: Host slot for `global` bookmarks
            workspace_store: Host slot for `workspace` bookmarks
            workspace_root: Root bookmark names are made relative to
        """
        self.stores: dict[BookmarkKind, KeyValueStore] = {
            "global": global_store,
            "workspace": workspace_store,
        }
        self.workspace_root = workspace_root
        self._roots: dict[BookmarkKind, Container] = {}

    def __enter__(self) -> "BookmarkManager":
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return bool(self._roots)

    def open(self) -> "BookmarkManager":
        """Upgrade stored data and create the root containers."""
        if self.is_open:
            return self

        for kind in KINDS:
            datastore = Datastore(KeyValueRawStore(self.stores[kind]))
            if datastore.upgrade():
                logger.info("Upgraded bookmark store", kind=kind)
            self._roots[kind] = Container(ROOT_NAMES[kind], kind, datastore, self.workspace_root)

        logger.debug("Bookmark manager opened", workspace_root=str(self.workspace_root))
        return self

    def close(self) -> None:
        self._roots.clear()
        logger.debug("Bookmark manager closed")

    def _kinds(self, kind: BookmarkKind | None) -> tuple[BookmarkKind, ...]:
        if kind is None:
            return KINDS
        if kind not in KINDS:
            raise ValueError(f"Unsupported bookmark kind: {kind}")
        return (kind,)

    def get_root_container(self, kind: BookmarkKind) -> Container:
        """Get the root container for `kind`."""
        if not self.is_open:
            raise ValueError("Bookmark manager is not open")
        self._kinds(kind)
        return self._roots[kind]

    def has_bookmarks(self, kind: BookmarkKind | None = None) -> bool:
        """Check if any root of `kind` (or any root) has children."""
        return any(self.get_root_container(k).count for k in self._kinds(kind))

    def get_bookmarks(
        self,
        kind: BookmarkKind | None = None,
        uri: str | None = None,
        ignore_line_number: bool = False,
    ) -> list[Bookmark]:
        """Get bookmarks across all containers, sorted.

        Args:
            kind: Restrict to one kind
            uri: Restrict to bookmarks of this URI
            ignore_line_number: Match `uri` regardless of line number
        """
        bookmarks = []
        for k in self._kinds(kind):
            for bookmark in self.get_root_container(k).walk_bookmarks():
                if uri is not None:
                    if ignore_line_number:
                        if strip_fragment(bookmark.uri) != strip_fragment(uri):
                            continue
                    elif bookmark.uri != ensure_line_number(uri):
                        continue
                bookmarks.append(bookmark)
        return sorted(bookmarks, key=lambda b: b.sort_key)

    def add_bookmarks(self, container: Container, *uris: str, metadata: Metadata | None = None) -> list[Bookmark]:
        """Add bookmarks for `uris` to `container`.

        Returns:
            Added bookmarks (existing ones are skipped)
        """
        added = container.add(*((uri, dict(metadata) if metadata else None) for uri in uris))
        return [item for item in added if isinstance(item, Bookmark)]

    def add_folder(self, parent: Container, name: str) -> Container:
        """Create a folder named `name` under `parent`.

        Raises:
            ValueError: If the name is invalid or already used
        """
        error = validate_folder_name(parent, name)
        if error:
            raise ValueError(error)

        added = parent.add((Container.create_uri_for_name(name.strip(), parent), None))
        folder = added[0]
        if not isinstance(folder, Container):
            raise ValueError(f"Failed to create folder {name}")
        return folder

    def remove_items(self, *items: Item) -> list[Item]:
        """Remove bookmarks and folders from their containers.

        Returns:
            Removed items
        """
        by_container: dict[str, tuple[Container, list[Item]]] = {}
        for item in items:
            container = item.container if isinstance(item, Bookmark) else item.parent
            if container is None:
                logger.warning("Cannot remove a root container", container=item.id)
                continue
            by_container.setdefault(container.id, (container, []))[1].append(item)

        removed: list[Item] = []
        for container, container_items in by_container.values():
            removed.extend(container.remove(*container_items))
        return removed

    def remove_all(self, kind: BookmarkKind | None = None) -> None:
        """Remove all bookmarks and folders of `kind` (or of every kind)."""
        for k in self._kinds(kind):
            self.get_root_container(k).remove_all()

    def rename_folder(self, folder: Container, name: str) -> Container | None:
        """Rename `folder`.

        Raises:
            ValueError: If `folder` is a root or the name is invalid
        """
        if folder.parent is None:
            raise ValueError("Cannot rename a root container")
        error = validate_folder_name(folder.parent, name, current=folder.display_name)
        if error:
            raise ValueError(error)
        return folder.parent.rename(folder, name.strip())

    def update_bookmark(
        self,
        bookmark: Bookmark,
        display_name: str | None = None,
        line_number: int | None = None,
        notes: str | None = None,
    ) -> Bookmark | None:
        """Update a bookmark's name, line number or notes.

        Raises:
            ValueError: If `line_number` is invalid or used by another bookmark of the same file
        """
        if line_number is not None and line_number != bookmark.line_number:
            taken = [
                b.line_number
                for b in self.get_bookmarks(bookmark.kind, bookmark.uri, ignore_line_number=True)
                if b.container.id == bookmark.container.id
            ]
            error = validate_line_number(line_number, taken)
            if error:
                raise ValueError(error)

        return bookmark.container.update_bookmark(
            bookmark,
            display_name=display_name,
            line_number=line_number,
            notes=notes,
        )

    def move(self, item: Item, target: Container) -> Item | None:
        """Move a bookmark or folder into `target`."""
        source = item.container if isinstance(item, Bookmark) else item.parent
        if source is None:
            raise ValueError("Cannot move a root container")
        if source.kind != target.kind:
            logger.info("Moving item across kinds", uri=item.uri, kind=source.kind, target_kind=target.kind)
        return source.move(item, target)

    def search(self, text: str, kind: BookmarkKind | None = None) -> list[Bookmark]:
        """Find bookmarks whose name, notes or folder contain `text` (case-insensitive)."""
        needle = text.casefold()
        return [
            bookmark
            for bookmark in self.get_bookmarks(kind)
            if needle in bookmark.display_name.casefold()
            or needle in (bookmark.notes or "").casefold()
            or needle in bookmark.container.id.casefold()
        ]
