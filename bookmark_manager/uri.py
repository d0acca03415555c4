"""URI helpers for bookmark and container entries."""

from pathlib import Path
from urllib.parse import unquote, urlsplit

CONTAINER_SCHEME = "bookmark-container"
DEFAULT_LINE_NUMBER = 1
LINE_FRAGMENT_PREFIX = "L"

_CONTAINER_PREFIX = f"{CONTAINER_SCHEME}:"


def is_container_uri(uri: str) -> bool:
    """Check if `uri` uses the container scheme."""
    return uri.startswith(_CONTAINER_PREFIX)


def container_uri(path: str) -> str:
    """Build a container URI for a `/`-joined path."""
    return f"{_CONTAINER_PREFIX}{path}"


def container_path(uri: str) -> str:
    """Return the `/`-joined path of a container URI."""
    if not is_container_uri(uri):
        raise ValueError(f"Scheme must be '{CONTAINER_SCHEME}': {uri}")
    return uri[len(_CONTAINER_PREFIX) :]


def container_name(uri: str) -> str:
    """Return the last path segment of a container URI."""
    return container_path(uri).rsplit("/", 1)[-1]


def has_fragment(uri: str) -> bool:
    return bool(urlsplit(uri).fragment)


def get_line_number(uri: str) -> int:
    """Read the 1-based line number encoded in the URI fragment.

    Missing or malformed fragments read as line 1.
    """
    fragment = urlsplit(uri).fragment
    if fragment.startswith(LINE_FRAGMENT_PREFIX):
        value = fragment[len(LINE_FRAGMENT_PREFIX) :]
        if value.isdigit() and int(value) >= 1:
            return int(value)
    return DEFAULT_LINE_NUMBER


def with_line_number(uri: str, line_number: int) -> str:
    """Return `uri` with its fragment set to `L<line_number>`."""
    return urlsplit(uri)._replace(fragment=f"{LINE_FRAGMENT_PREFIX}{line_number}").geturl()


def ensure_line_number(uri: str) -> str:
    """Default the line number fragment of leaf URIs to line 1."""
    if is_container_uri(uri) or has_fragment(uri):
        return uri
    return with_line_number(uri, DEFAULT_LINE_NUMBER)


def strip_fragment(uri: str) -> str:
    return urlsplit(uri)._replace(fragment="").geturl()


def path_to_uri(path: str | Path, line_number: int | None = None) -> str:
    """Convert a filesystem path into a `file://` bookmark URI."""
    uri = Path(path).expanduser().resolve().as_uri()
    if line_number is not None:
        uri = with_line_number(uri, line_number)
    return uri


def relative_path(uri: str, workspace_root: Path | None = None) -> str:
    """Return a readable path for `uri`, relative to `workspace_root` when possible."""
    parts = urlsplit(uri)
    if parts.scheme != "file":
        return strip_fragment(uri)

    path = Path(unquote(parts.path))
    if workspace_root is not None:
        try:
            return path.relative_to(workspace_root).as_posix()
        except ValueError:
            pass
    return path.as_posix()
