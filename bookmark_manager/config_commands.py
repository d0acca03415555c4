"""Settings commands for the bookmark manager CLI."""

from cyclopts import App

from bookmark_manager.config import DEFAULTS, get_config
from bookmark_manager.models import KINDS

config_app = App(name="config", help="Manage bookmark-manager settings")

KNOWN_KEYS = ("workspace.root", "storage.global_file", "storage.workspace_file", "default.kind")


def _scope(global_: bool) -> str:
    return "user" if global_ else "workspace"


@config_app.command
def set(key: str, value: str, global_: bool = False) -> None:
    """Change a setting.

    Args:
        key: One of workspace.root, storage.global_file, storage.workspace_file, default.kind
        value: New value
        global_: Write the user config instead of the workspace config
    """
    if key not in KNOWN_KEYS:
        print(f"Unknown setting {key}, expected one of: {', '.join(KNOWN_KEYS)}")
        return
    if key == "default.kind" and value not in KINDS:
        print(f"default.kind must be one of: {', '.join(KINDS)}")
        return

    get_config(use_global=global_).set(key, value)
    print(f"{key} = {value} ({_scope(global_)})")


@config_app.command
def unset(key: str, global_: bool = False) -> None:
    """Restore the default of a setting."""
    get_config(use_global=global_).unset(key)
    print(f"{key} unset ({_scope(global_)})")


@config_app.command
def get(key: str, global_: bool = False) -> None:
    """Show the effective value of a setting."""
    value = get_config(use_global=global_).get(key)
    print(f"{key} is not set" if value is None else f"{key} = {value}")


@config_app.command(name="list")
def list_config(global_: bool = False) -> None:
    """Show explicit settings, defaults and where bookmarks are stored."""
    config = get_config(use_global=global_)

    for key, value in config.list().items():
        print(f"{key} = {value}")
    for key, value in DEFAULTS.items():
        if key not in config.list():
            print(f"{key} = {value} (default)")

    print(f"global bookmarks: {config.global_state_file}")
    print(f"workspace bookmarks: {config.workspace_state_file}")
