"""Find desktop entries on disk."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from quicklaunch.apps.desktop_entry import DesktopEntryError, parse_desktop_file
from quicklaunch.apps.models import App
from quicklaunch.frecency.identity import item_identity
from quicklaunch.utils.helpers import expand_path


class ScanError(RuntimeError):
    """A configured directory could not be walked."""

    def __init__(self, directory: Path | str, cause: BaseException | str) -> None:
        self.directory = str(directory)
        self.cause = cause
        super().__init__(f"Failed to scan directory {self.directory} for desktop entries: {cause}")


def desktop_entries(paths: Iterable[str]) -> tuple[list[Path], list[Exception]]:
    """Every ``*.desktop`` file below the given directories."""
    files: list[Path] = []
    errors: list[Exception] = []
    for raw in paths:
        root = expand_path(raw)
        if not root.is_dir():
            errors.append(ScanError(root, "not a directory"))
            continue

        def _on_error(e: OSError, root: Path = root) -> None:
            errors.append(ScanError(root, e))

        for dirpath, _dirnames, filenames in os.walk(root, onerror=_on_error, followlinks=True):
            for filename in sorted(filenames):
                if filename.endswith(".desktop"):
                    files.append(Path(dirpath) / filename)
    return files, errors


def scan_desktop_entries(paths: Iterable[str]) -> tuple[list[App], list[Exception]]:
    """Parse every desktop entry below ``paths``.

    Returns the listable apps sorted by name, one per identity, plus every
    error met on the way. Errors never stop the scan.
    """
    files, errors = desktop_entries(paths)
    apps: list[App] = []
    seen: set[int] = set()
    for path in files:
        try:
            app = parse_desktop_file(path)
        except DesktopEntryError as e:
            errors.append(e)
            continue
        if app is None:
            continue
        key = item_identity(app)
        if key in seen:
            continue
        seen.add(key)
        apps.append(app)

    apps.sort(key=lambda app: (app.name, app.exec, app.icon, app.terminal))
    logger.debug("Found {} apps in {} desktop files ({} errors)", len(apps), len(files), len(errors))
    return apps, errors
