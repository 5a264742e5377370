"""Utility functions for quicklaunch."""

import os
from pathlib import Path


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path() -> Path:
    """Get the quicklaunch home directory.

    Respects QUICKLAUNCH_HOME environment variable; falls back to ~/.quicklaunch.
    """
    home = os.environ.get("QUICKLAUNCH_HOME", "").strip()
    if home:
        return ensure_dir(Path(home).expanduser())
    return ensure_dir(Path.home() / ".quicklaunch")


def get_db_path() -> Path:
    """Get the directory holding the frecency databases (~/.quicklaunch/data)."""
    return ensure_dir(get_data_path() / "data")


def expand_path(raw: str) -> Path:
    """Expand ``~`` and environment variables in a configured path."""
    return Path(os.path.expandvars(os.path.expanduser(raw)))


def truncate_string(s: str, max_len: int = 100, suffix: str = "...") -> str:
    """Truncate a string to max length, adding suffix if truncated."""
    if len(s) <= max_len:
        return s
    return s[: max_len - len(suffix)] + suffix
