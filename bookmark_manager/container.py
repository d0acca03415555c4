"""Bookmark containers (folders) and their hierarchy."""

import copy
from collections.abc import Iterator
from pathlib import Path
from typing import Union

import structlog

from bookmark_manager.datastore import Datastore, Entry
from bookmark_manager.models import KINDS, Bookmark, BookmarkKind
from bookmark_manager.raw_store import Metadata
from bookmark_manager.stores.metadata import CONTAINER_METADATA_KEY
from bookmark_manager.uri import container_name, container_path, container_uri, ensure_line_number, is_container_uri

logger = structlog.get_logger()

Item = Union[Bookmark, "Container"]


def rebase_metadata(metadata: Metadata, uri: str, new_uri: str) -> Metadata:
    """Copy container metadata, rewriting nested container URIs from `uri` to `new_uri`."""
    rebased = copy.deepcopy(metadata)
    children = rebased.get(CONTAINER_METADATA_KEY)
    if not isinstance(children, dict):
        return rebased

    rewritten = {}
    for child_uri, child_metadata in children.items():
        if is_container_uri(child_uri) and child_uri.startswith(f"{uri}/"):
            new_child_uri = f"{new_uri}{child_uri[len(uri) :]}"
            rewritten[new_child_uri] = rebase_metadata(child_metadata, child_uri, new_child_uri)
        else:
            rewritten[child_uri] = child_metadata
    rebased[CONTAINER_METADATA_KEY] = rewritten
    return rebased


class Container:
    """A folder of bookmarks and other containers.

    Roots (one per kind) wrap the host store directly. Every other container
    keeps its children nested inside its own entry in the parent's datastore.
    """

    def __init__(
        self,
        display_name: str,
        kind_or_parent: Union[BookmarkKind, "Container"],
        datastore: Datastore,
        workspace_root: Path | None = None,
    ) -> None:
        """Initialize container.

        Args:
            display_name: User-visible name
            kind_or_parent: Kind for roots, parent container otherwise
            datastore: Datastore holding this container's children
            workspace_root: Root used to derive bookmark names (inherited from the parent)
        """
        self.display_name = display_name
        self.datastore = datastore
        if isinstance(kind_or_parent, Container):
            self.parent: Container | None = kind_or_parent
            self.kind: BookmarkKind = kind_or_parent.kind
            self.workspace_root = kind_or_parent.workspace_root
        else:
            if kind_or_parent not in KINDS:
                raise ValueError(f"Unsupported bookmark kind: {kind_or_parent}")
            self.parent = None
            self.kind = kind_or_parent
            self.workspace_root = workspace_root

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Container):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"Container(id={self.id!r})"

    @property
    def id(self) -> str:
        """Chain of names from the kind down to this container, joined by `/`."""
        if self.parent is None:
            return self.kind
        return f"{self.parent.id}/{self.display_name}"

    @property
    def uri(self) -> str:
        return container_uri(self.id)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def count(self) -> int:
        """Number of direct children."""
        return self.datastore.count

    @property
    def metadata(self) -> Metadata:
        """Metadata of this container's entry in its parent (empty for roots)."""
        if self.parent is None:
            return {}
        return self.parent.datastore.get_metadata(self.uri) or {}

    @staticmethod
    def create_uri_for_name(name: str, parent: "Container") -> str:
        """Create the URI of a child container named `name` under `parent`."""
        return container_uri(f"{parent.id}/{name}")

    def _create_item(self, uri: str, metadata: Metadata | None) -> Item:
        if is_container_uri(uri):
            return Container(container_name(uri), self, self.datastore.nested(uri))
        return Bookmark(container=self, uri=uri, metadata=metadata or {})

    def _check_child_uri(self, uri: str) -> None:
        if not is_container_uri(uri):
            return
        parent_id, separator, name = container_path(uri).rpartition("/")
        if not separator or parent_id != self.id or not name:
            raise ValueError(f"Container {uri} is not a direct child of {self.uri}")

    def get_item(self, uri: str) -> Item | None:
        """Get the child stored under `uri` (line data is significant)."""
        metadata = self.datastore.get_metadata(uri)
        return None if metadata is None else self._create_item(uri, metadata)

    def get_items(self) -> list[Item]:
        """Get all direct children."""
        return [self._create_item(uri, metadata) for uri, metadata in self.datastore.get_all().items()]

    def add(self, *entries: Entry) -> list[Item]:
        """Add children. Existing URIs are skipped, first-one-wins on duplicates.

        Bookmark URIs without a line number default to line 1.

        Returns:
            Added items
        """
        normalized: list[tuple[str, Metadata]] = []
        for uri, metadata in entries:
            self._check_child_uri(uri)
            normalized.append((ensure_line_number(uri), metadata if metadata is not None else {}))

        added = self.datastore.add(normalized)
        first: dict[str, Metadata] = {}
        for uri, metadata in normalized:
            first.setdefault(uri, metadata)

        if added:
            logger.info("Items added", container=self.id, count=len(added))
        return [self._create_item(uri, first[uri]) for uri in added]

    def remove(self, *items: Item) -> list[Item]:
        """Remove children. Removing a container removes everything nested in it.

        Returns:
            Removed items, no duplicates
        """
        removed = set(self.datastore.remove([item.uri for item in items]))
        result: list[Item] = []
        for item in items:
            if item.uri in removed and item not in result:
                result.append(item)

        if result:
            logger.info("Items removed", container=self.id, count=len(result))
        return result

    def remove_all(self) -> None:
        """Remove all children."""
        self.datastore.remove_all()
        logger.info("All items removed", container=self.id)

    def upsert(self, *items: Item) -> list[Item]:
        """Insert or overwrite children. Last-one-wins on duplicates.

        Returns:
            Upserted items, no duplicates
        """
        entries = [(item.uri, item.metadata) for item in items]
        for uri, _ in entries:
            self._check_child_uri(uri)

        upserted = set(self.datastore.add(entries, override=True))
        result: dict[str, Item] = {}
        for item in items:
            if item.uri in upserted:
                result[item.uri] = item
        return list(result.values())

    def move(self, item: Item, target: "Container") -> Item | None:
        """Move `item` from this container into `target`.

        The item is added to `target` first and then removed from here. If the
        removal finds nothing or fails, the addition is rolled back.

        Returns:
            The moved item, or None if it could not be moved
        """
        if isinstance(item, Container):
            if target.id == item.id or target.id.startswith(f"{item.id}/"):
                raise ValueError(f"Cannot move {item.id} into itself")
            new_uri = Container.create_uri_for_name(item.display_name, target)
            metadata = rebase_metadata(item.metadata, item.uri, new_uri)
        else:
            new_uri = item.uri
            metadata = dict(item.metadata)

        added = target.add((new_uri, metadata))
        if not added:
            logger.warning("Move target already holds item", uri=new_uri, target=target.id)
            return None

        try:
            removed = self.remove(item)
        except Exception:
            logger.error("Move failed, rolling back", uri=item.uri, source=self.id, target=target.id)
            target.datastore.remove(new_uri)
            raise

        if not removed:
            logger.warning("Move source not found, rolling back", uri=item.uri, source=self.id)
            target.datastore.remove(new_uri)
            return None

        logger.info("Item moved", uri=item.uri, source=self.id, target=target.id)
        return added[0]

    def rename(self, child: "Container", name: str) -> "Container | None":
        """Rename the child container `child` to `name` in a single write.

        Returns:
            The renamed container, or None if `child` is missing or `name` is taken
        """
        new_uri = Container.create_uri_for_name(name, self)
        if new_uri == child.uri:
            return child
        if self.datastore.contains(new_uri):
            logger.warning("Folder already exists", uri=new_uri)
            return None

        metadata = self.datastore.get_metadata(child.uri)
        if metadata is None:
            return None

        self.datastore.replace(child.uri, new_uri, rebase_metadata(metadata, child.uri, new_uri))
        logger.info("Folder renamed", uri=child.uri, new_uri=new_uri)
        return Container(name, self, self.datastore.nested(new_uri))

    def update_bookmark(
        self,
        bookmark: Bookmark,
        display_name: str | None = None,
        line_number: int | None = None,
        notes: str | None = None,
    ) -> Bookmark | None:
        """Apply changes to a bookmark stored in this container.

        Returns:
            The updated bookmark, or None if it is missing or its new URI is taken
        """
        updated = bookmark.with_changes(display_name=display_name, line_number=line_number, notes=notes)
        if not self.datastore.contains(bookmark.uri):
            return None
        if updated is bookmark:
            return bookmark

        if updated.uri == bookmark.uri:
            self.datastore.add([(updated.uri, updated.metadata)], override=True)
        elif self.datastore.contains(updated.uri):
            logger.warning("Bookmark already exists", uri=updated.uri)
            return None
        else:
            self.datastore.replace(bookmark.uri, updated.uri, updated.metadata)

        logger.info("Bookmark updated", uri=updated.uri, container=self.id)
        return updated

    def find_container(self, container_id: str) -> "Container | None":
        """Find a container by id in this subtree."""
        if container_id == self.id:
            return self
        if not container_id.startswith(f"{self.id}/"):
            return None

        name = container_id[len(self.id) + 1 :].split("/", 1)[0]
        child = self.get_item(Container.create_uri_for_name(name, self))
        return child.find_container(container_id) if isinstance(child, Container) else None

    def walk_bookmarks(self) -> Iterator[Bookmark]:
        """Iterate over all bookmarks in this subtree, depth-first."""
        for item in self.get_items():
            if isinstance(item, Container):
                yield from item.walk_bookmarks()
            else:
                yield item
