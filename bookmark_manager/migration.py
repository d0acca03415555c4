"""Upgrade of legacy bookmark data formats.

Three formats have been persisted over time:

- V0 (key `bookmarks`): a list of URI strings, no metadata.
- V1 (key `bookmarks.v1`): a mapping of URI to metadata, where entries created
  before line tracking may lack the `#L<n>` fragment.
- Current: V1 shape, with every non-container URI carrying a line fragment.
"""

import structlog

from bookmark_manager.raw_store import RawData
from bookmark_manager.storage import KeyValueStore
from bookmark_manager.uri import DEFAULT_LINE_NUMBER, has_fragment, is_container_uri, with_line_number

logger = structlog.get_logger()

V0_KEY_NAME = "bookmarks"
V1_KEY_NAME = "bookmarks.v1"


def _merge_v0(v0: list[str], v1: RawData) -> bool:
    """Copy V0 URIs missing from `v1`.

    URIs already present are left alone: they were copied by an earlier (or
    concurrent) upgrade and may carry metadata since.
    """
    changed = False
    for uri in v0:
        if uri not in v1:
            v1[uri] = {}
            changed = True
    return changed


def _add_line_fragments(v1: RawData) -> bool:
    """Rewrite leaf URIs without a fragment to point at the default line."""
    changed = False
    for uri in list(v1.keys()):
        if is_container_uri(uri) or has_fragment(uri):
            continue
        new_uri = with_line_number(uri, DEFAULT_LINE_NUMBER)
        # An entry may already exist at the new URI; keep it
        metadata = v1.pop(uri)
        v1.setdefault(new_uri, metadata)
        changed = True
    return changed


def upgrade(store: KeyValueStore) -> bool:
    """Upgrade `store` in place to the current format.

    Safe to call repeatedly: once upgraded, no writes are made.

    Args:
        store: Host key-value slot holding bookmark data

    Returns:
        True if any changes were made
    """
    v1: RawData = store.get(V1_KEY_NAME) or {}
    v0: list[str] | None = store.get(V0_KEY_NAME)

    changed = False
    if v0 is not None:
        logger.info("Upgrading V0 bookmark data", count=len(v0))
        changed = _merge_v0(v0, v1)

    if _add_line_fragments(v1):
        logger.info("Adding default line numbers to bookmark data")
        changed = True

    if not changed and v0 is None:
        logger.debug("Bookmark data is up to date")
        return False

    if changed:
        store.update(V1_KEY_NAME, v1)
    if v0 is not None:
        store.update(V0_KEY_NAME, None)

    logger.info("Bookmark data upgraded", count=len(v1), removed_v0=v0 is not None)
    return True
