"""Raw store virtualizing the container field of an entry owned by a parent datastore."""

from typing import TYPE_CHECKING

import structlog

from bookmark_manager.raw_store import Metadata, RawData, RawStore
from bookmark_manager.uri import CONTAINER_SCHEME, is_container_uri

if TYPE_CHECKING:
    from bookmark_manager.datastore import Datastore

logger = structlog.get_logger()

CONTAINER_METADATA_KEY = "container"


class MetadataRawStore(RawStore):
    """Raw store whose state is one field of the owner entry's metadata.

    The state physically lives inside the parent's data, so every `set` is
    followed by a write-through: the owner entry is upserted into the parent.
    Nested stores cascade the write-through up to the root store.
    """

    def __init__(self, owner_uri: str, parent: "Datastore", field: str = CONTAINER_METADATA_KEY) -> None:
        """Initialize raw store.

        Args:
            owner_uri: URI of the entry owning the virtualized field
            parent: Datastore holding the owner entry
            field: Metadata key being virtualized
        """
        if not is_container_uri(owner_uri):
            raise ValueError(f"Scheme must be '{CONTAINER_SCHEME}': {owner_uri}")

        self.owner_uri = owner_uri
        self.parent = parent
        self.field = field

    @property
    def owner_metadata(self) -> Metadata:
        """Current metadata of the owner entry, read from the parent."""
        return self.parent.get_metadata(self.owner_uri) or {}

    def get(self) -> RawData | None:
        return self.owner_metadata.get(self.field)

    def set(self, state: RawData | None) -> None:
        metadata = self.owner_metadata
        if state:
            metadata[self.field] = state
        else:
            # An empty store is stored as no field at all
            metadata.pop(self.field, None)

        self.parent.add([(self.owner_uri, metadata)], override=True)
        logger.debug("Container written through", owner_uri=self.owner_uri, count=len(state or {}))
