"""Data models for bookmark manager."""

import locale
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Literal

from bookmark_manager.raw_store import Metadata
from bookmark_manager.uri import ensure_line_number, get_line_number, is_container_uri, relative_path, with_line_number

if TYPE_CHECKING:
    from bookmark_manager.container import Container

BookmarkKind = Literal["global", "workspace"]
KINDS: tuple[BookmarkKind, ...] = ("global", "workspace")

DISPLAY_NAME_METADATA_KEY = "displayName"
NOTES_METADATA_KEY = "notes"


@dataclass(frozen=True, eq=False)
class Bookmark:
    """Represents a bookmarked location.

    A bookmark is a view over its container's data: changing it means writing
    through the container and using the returned instance.
    Identity is `(container.id, uri)`; the URI always carries a line fragment.
    """

    container: "Container"
    uri: str
    metadata: Metadata = field(default_factory=dict)

    def __post_init__(self) -> None:
        if is_container_uri(self.uri):
            raise ValueError(f"Not a bookmark URI: {self.uri}")
        object.__setattr__(self, "uri", ensure_line_number(self.uri))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bookmark):
            return NotImplemented
        return self.container.id == other.container.id and self.uri == other.uri

    def __hash__(self) -> int:
        return hash((self.container.id, self.uri))

    def __repr__(self) -> str:
        return f"Bookmark(container={self.container.id!r}, uri={self.uri!r})"

    @property
    def kind(self) -> BookmarkKind:
        return self.container.kind

    @property
    def line_number(self) -> int:
        return get_line_number(self.uri)

    @cached_property
    def default_name(self) -> str:
        """Name derived from the URI, relative to the workspace root."""
        path = relative_path(self.uri, self.container.workspace_root)
        return f"{path}:{self.line_number}"

    @property
    def has_display_name(self) -> bool:
        return bool(self.metadata.get(DISPLAY_NAME_METADATA_KEY))

    @property
    def display_name(self) -> str:
        """Custom display name, if any, otherwise `default_name`."""
        name = self.metadata.get(DISPLAY_NAME_METADATA_KEY)
        return name if isinstance(name, str) and name else self.default_name

    @property
    def notes(self) -> str | None:
        notes = self.metadata.get(NOTES_METADATA_KEY)
        return notes if isinstance(notes, str) else None

    @property
    def sort_key(self) -> tuple[str, str, str, int]:
        """Key ordering bookmarks by kind, display name and line number.

        Names compare case-insensitively first, with case as tiebreak.
        """
        name = self.display_name
        return (self.kind, locale.strxfrm(name.casefold()), locale.strxfrm(name), self.line_number)

    def compare(self, other: "Bookmark") -> int:
        """Compare with `other`: negative, zero or positive."""
        a, b = self.sort_key, other.sort_key
        return (a > b) - (a < b)

    def with_changes(
        self,
        display_name: str | None = None,
        line_number: int | None = None,
        notes: str | None = None,
        container: "Container | None" = None,
    ) -> "Bookmark":
        """Return a bookmark with the requested changes applied.

        An empty `display_name` or `notes` removes the value. Returns this same
        instance if nothing changes.
        """
        metadata = dict(self.metadata)
        for key, value in ((DISPLAY_NAME_METADATA_KEY, display_name), (NOTES_METADATA_KEY, notes)):
            if value is None:
                continue
            if value:
                metadata[key] = value
            else:
                metadata.pop(key, None)

        uri = self.uri if line_number is None else with_line_number(self.uri, line_number)
        target = container if container is not None else self.container

        if uri == self.uri and metadata == self.metadata and target.id == self.container.id:
            return self
        return Bookmark(container=target, uri=uri, metadata=metadata)
