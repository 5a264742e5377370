"""Centralized defaults for generated config files."""

from __future__ import annotations

from typing import Any

DEFAULT_HALF_LIFE_SECONDS = 60.0 * 60.0 * 24.0 * 3.0
DEFAULT_LOCK_TIMEOUT_SECONDS = 10.0
DEFAULT_SEARCH_LIMIT = 9

DEFAULT_APP_PATHS: list[str] = [
    "/usr/share/applications",
    "~/.local/share/applications/",
    "/var/lib/snapd/desktop/applications",
    "/var/lib/flatpak/exports/share/applications",
]

DEFAULT_FRECENCY: dict[str, Any] = {
    "backend": "blob",
    "half_life_seconds": DEFAULT_HALF_LIFE_SECONDS,
    "rebaseline_after_seconds": None,
    "lock_timeout_seconds": DEFAULT_LOCK_TIMEOUT_SECONDS,
}

DEFAULT_APPS: dict[str, Any] = {
    "enabled": True,
    "app_paths": DEFAULT_APP_PATHS,
}

DEFAULT_FILES: dict[str, Any] = {
    "enabled": False,
    "root": "~/Documents",
}


def default_app_paths() -> list[str]:
    return list(DEFAULT_APP_PATHS)
