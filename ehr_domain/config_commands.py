"""Configuration commands for the ehr CLI."""

from cyclopts import App

from ehr_domain.config import DEFAULTS, get_config

config_app = App(name="config", help="Manage configuration")


def _scope(global_: bool) -> str:
    return "global" if global_ else "local"


@config_app.command
def set(key: str, value: str, global_: bool = False) -> None:
    """Set a configuration setting.

    Args:
        key: Configuration key, e.g. storage.path or user.privileges
        value: Configuration value
        global_: Write to the global config instead of the local one
    """
    get_config(use_global=global_).set(key, value)
    print(f"Set {key} = {value} ({_scope(global_)})")


@config_app.command
def unset(key: str, global_: bool = False) -> None:
    """Remove a setting so the global value or the built-in default applies again.

    Args:
        key: Configuration key, e.g. storage.backend
        global_: Remove from the global config instead of the local one
    """
    get_config(use_global=global_).unset(key)
    print(f"Unset {key} ({_scope(global_)})")


@config_app.command
def get(key: str, global_: bool = False) -> None:
    """Print the value a command would use for a key.

    Looks at the local config, then the global config, then the defaults
    (storage.backend, storage.path). The user.* keys have no default.
    """
    value = get_config(use_global=global_).get(key)
    if value is None:
        print(f"{key} is not set")
    else:
        print(f"{key} = {value}")


@config_app.command(name="list")
def list_config(global_: bool = False) -> None:
    """List configured settings, followed by the defaults that still apply."""
    settings = get_config(use_global=global_).list()

    if settings:
        print(f"{_scope(global_).capitalize()} settings:\n")
        for key, value in settings.items():
            print(f"{key} = {value}")
    else:
        print(f"No {_scope(global_)} configuration settings")

    defaults = {key: value for key, value in DEFAULTS.items() if key not in settings}
    if defaults:
        print("\nDefaults:\n")
        for key, value in defaults.items():
            print(f"{key} = {value}")
