"""Raw store backed by a host key-value slot."""

from bookmark_manager import migration
from bookmark_manager.raw_store import RawData, RawStore
from bookmark_manager.storage import KeyValueStore


class KeyValueRawStore(RawStore):
    """Raw store persisting its state under a single key of a `KeyValueStore`."""

    def __init__(self, store: KeyValueStore, key: str = migration.V1_KEY_NAME) -> None:
        """Initialize raw store.

        Args:
            store: Host key-value slot
            key: Key holding the state
        """
        self.store = store
        self.key = key

    def get(self) -> RawData | None:
        return self.store.get(self.key)

    def set(self, state: RawData | None) -> None:
        self.store.update(self.key, state or None)

    def upgrade(self) -> bool:
        """Upgrade legacy formats found in the host slot."""
        return migration.upgrade(self.store)
