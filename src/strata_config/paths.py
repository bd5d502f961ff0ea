"""Locate the configuration files for an application.

Project files are searched upward from the working directory; global files
always live in the application's home directory.
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from .models import ConfigPaths

logger = logging.getLogger(__name__)


def config_name(app: str) -> str:
    return f"{app}.config.json"


def user_config_name(app: str) -> str:
    return f"{app}.config.user.json"


def schema_name(app: str) -> str:
    return f"{app}.schema.json"


def home_env_var(app: str) -> str:
    """Environment variable that relocates the application home directory."""
    return f"{app.upper().replace('-', '_')}_CLI_HOME"


def default_home_dir(app: str) -> Path:
    """Get the application home directory.

    Resolution order:
    1. ``<APP>_CLI_HOME`` environment variable
    2. ``~/.<app>``

    Returns:
        Absolute home directory path
    """
    override = os.environ.get(home_env_var(app))
    if override:
        return Path(override).expanduser().resolve()
    return Path.home() / f".{app}"


def search(file_name: str, start_dir: Path | None = None, stop_dirs: Iterable[Path] = ()) -> Path | None:
    """Find a file in a directory or any of its ancestors.

    Args:
        file_name: Bare file name to look for
        start_dir: First directory searched (default: current directory)
        stop_dirs: Directories at which the search ends; they are not searched

    Returns:
        Path to the first match or None if not found
    """
    current = (start_dir or Path.cwd()).resolve()
    stops = {Path(d).resolve() for d in stop_dirs}

    for directory in (current, *current.parents):
        if directory in stops:
            break
        candidate = directory / file_name
        if candidate.is_file():
            return candidate

    return None


def resolve_paths(
    app: str,
    cwd: Path | None = None,
    home_dir: Path | None = None,
    user_home: Path | None = None,
) -> ConfigPaths:
    """Resolve the four layer paths for an application.

    The home directories are excluded from the project search so that a
    global file is never mistaken for a project file.

    Args:
        app: Application name used to build file names
        cwd: Directory the project search starts from (default: current)
        home_dir: Application home directory (default: ``default_home_dir``)
        user_home: OS home directory (default: ``Path.home()``)

    Returns:
        ConfigPaths for all four layers
    """
    cwd = (cwd or Path.cwd()).resolve()
    home_dir = Path(home_dir).expanduser().resolve() if home_dir is not None else default_home_dir(app)
    stops = [home_dir, user_home or Path.home()]

    project_user = search(user_config_name(app), start_dir=cwd, stop_dirs=stops)
    project = search(config_name(app), start_dir=cwd, stop_dirs=stops)

    paths = ConfigPaths(
        project_user=project_user or cwd / user_config_name(app),
        project=project or cwd / config_name(app),
        global_user=home_dir / user_config_name(app),
        global_config=home_dir / config_name(app),
    )
    logger.debug(f"Resolved config paths for '{app}': {paths}")
    return paths
