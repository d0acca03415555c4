"""Datastore semantics over a raw store of URI -> metadata entries."""

from collections.abc import Iterable

import structlog

from bookmark_manager.raw_store import Metadata, RawData, RawStore

logger = structlog.get_logger()

Entry = tuple[str, Metadata | None]


class Datastore:
    """Flat mapping from URI to metadata with add/remove/replace semantics.

    Every mutating call is a single read-modify-write over the full state of
    the underlying `RawStore`, and writes at most once.
    """

    def __init__(self, raw_store: RawStore) -> None:
        """Initialize datastore.

        Args:
            raw_store: Store that persists the state
        """
        self.raw_store = raw_store

    def add(self, entries: Iterable[Entry], override: bool = False) -> list[str]:
        """Add entries.

        Args:
            entries: `(uri, metadata)` pairs; `None` metadata means empty metadata
            override: Replace metadata of matching entries, otherwise skip them (first-one-wins)

        Returns:
            Added URIs, in input order, no duplicates
        """
        added: list[str] = []
        data = self.get_all()

        for uri, metadata in entries:
            if override or uri not in data:
                data[uri] = metadata if metadata is not None else {}
                if uri not in added:
                    added.append(uri)

        if added:
            self.raw_store.set(data)
            logger.debug("Entries added", count=len(added), override=override)
        return added

    def contains(self, uri: str) -> bool:
        """Check if `uri` is stored (line data is significant)."""
        return uri in self.get_all()

    @property
    def count(self) -> int:
        """Number of entries in the store."""
        return len(self.get_all())

    def get_metadata(self, uri: str) -> Metadata | None:
        """Get metadata associated with `uri` (line data is significant)."""
        return self.get_all().get(uri)

    def get_all(self) -> RawData:
        """Return all data.

        The returned mapping is a working copy: later mutating calls do not update it.
        """
        return self.raw_store.get() or {}

    def remove(self, uris: str | Iterable[str]) -> list[str]:
        """Remove entries.

        Args:
            uris: URI or URIs to remove (line data is significant)

        Returns:
            Removed URIs, no duplicates
        """
        removed: list[str] = []
        data = self.get_all()

        for uri in [uris] if isinstance(uris, str) else uris:
            if uri in data:
                del data[uri]
                removed.append(uri)

        if removed:
            self.raw_store.set(data)
            logger.debug("Entries removed", count=len(removed))
        return removed

    def remove_all(self) -> None:
        """Remove all entries."""
        self.raw_store.set(None)
        logger.debug("All entries removed")

    def replace(self, uri: str, new_uri: str, new_metadata: Metadata | None = None) -> Metadata | None:
        """Move the metadata of `uri` to `new_uri` in a single write.

        Args:
            uri: Source URI
            new_uri: Target URI
            new_metadata: Metadata to store at `new_uri` instead of the current one

        Returns:
            Metadata that was associated with `uri`, or None if `uri` was not found
        """
        data = self.get_all()
        metadata = data.pop(uri, None)
        if metadata is not None:
            data[new_uri] = metadata if new_metadata is None else new_metadata
            self.raw_store.set(data)
            logger.debug("Entry replaced", uri=uri, new_uri=new_uri)
        return metadata

    def upgrade(self) -> bool:
        """Upgrade legacy data formats of the underlying store.

        Returns:
            True if any changes were made
        """
        return self.raw_store.upgrade()

    def nested(self, owner_uri: str) -> "Datastore":
        """Create a datastore virtualizing the container field of `owner_uri`'s entry."""
        from bookmark_manager.stores.metadata import MetadataRawStore

        return Datastore(MetadataRawStore(owner_uri, self))
