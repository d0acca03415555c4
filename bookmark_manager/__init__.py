"""Bookmark manager: line bookmarks organized in nested folders."""

from bookmark_manager.container import Container
from bookmark_manager.datastore import Datastore
from bookmark_manager.manager import BookmarkManager
from bookmark_manager.models import Bookmark, BookmarkKind

__all__ = ["Bookmark", "BookmarkKind", "BookmarkManager", "Container", "Datastore"]
