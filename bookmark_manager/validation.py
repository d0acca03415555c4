"""Validation of user input, run before any store mutation."""

from collections.abc import Iterable

from bookmark_manager.container import Container


def validate_folder_name(parent: Container, name: str, current: str | None = None) -> str | None:
    """Validate a new folder name under `parent`.

    Args:
        parent: Container the folder lives in
        name: Proposed name
        current: Current name, when renaming

    Returns:
        Error message, or None if valid
    """
    normalized = name.strip()
    if not normalized:
        return "Name cannot be empty"
    if "/" in normalized:
        return "Name cannot contain '/'"
    if current is not None and normalized == current:
        return "Name cannot be the current name"
    if any(isinstance(item, Container) and item.display_name == normalized for item in parent.get_items()):
        return "Folder already exists"
    return None


def validate_line_number(value: str | int, taken: Iterable[int] = ()) -> str | None:
    """Validate a line number.

    Args:
        value: Proposed line number (as typed)
        taken: Line numbers already used by other bookmarks of the same file

    Returns:
        Error message, or None if valid
    """
    try:
        number = int(str(value).strip())
    except ValueError:
        number = 0
    if number < 1:
        return "Line number must be an integer value greater than or equal to 1"
    if number in set(taken):
        return "Line number conflicts with an existing bookmark"
    return None


def validate_not_empty(value: str, what: str = "Name") -> str | None:
    return f"{what} cannot be empty" if not value.strip() else None
