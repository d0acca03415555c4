"""Raw store implementations."""

from bookmark_manager.stores.key_value import KeyValueRawStore
from bookmark_manager.stores.metadata import MetadataRawStore

__all__ = ["KeyValueRawStore", "MetadataRawStore"]
