"""Explicit launcher context: the configured databases, built from a Config."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from quicklaunch.apps import App, scan_desktop_entries
from quicklaunch.config.schema import Config
from quicklaunch.files import FileItem, scan_files
from quicklaunch.frecency.models import Container, RescanReport
from quicklaunch.frecency.shared import Scanner, SharedFrecencyDB, open_shared_db


class UnknownPluginError(KeyError):
    """No enabled database is registered under the requested plugin name."""


@dataclass(frozen=True, slots=True)
class _Plugin:
    item_type: type
    scanner: Scanner


class LauncherContext:
    """Owns every enabled frecency database, keyed by plugin name."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self._plugins: dict[str, _Plugin] = {}
        self._dbs: dict[str, SharedFrecencyDB[Any]] = {}

        if config.apps.enabled:
            paths = list(config.apps.app_paths)
            self._plugins["apps"] = _Plugin(App, lambda: scan_desktop_entries(paths))
        if config.files.enabled:
            root = config.files.root_path
            self._plugins["files"] = _Plugin(FileItem, lambda: scan_files(root))

        frecency = config.frecency
        try:
            for name, plugin in self._plugins.items():
                self._dbs[name] = open_shared_db(
                    config.db_path(name),
                    plugin.item_type,
                    plugin.scanner,
                    backend=frecency.backend,
                    name=name,
                    half_life=frecency.half_life_seconds,
                    rebaseline_after=frecency.rebaseline_after_seconds,
                    lock_timeout=frecency.lock_timeout_seconds,
                )
        except Exception:
            self.close()
            raise

    @property
    def plugins(self) -> list[str]:
        return list(self._dbs)

    def db(self, plugin: str) -> SharedFrecencyDB[Any]:
        try:
            return self._dbs[plugin]
        except KeyError:
            raise UnknownPluginError(plugin) from None

    def search(self, plugin: str, text: str, limit: int | None = None) -> list[Container[Any]]:
        if limit is None:
            limit = self.config.search_limit
        return self.db(plugin).get_ranked_list(text, limit)

    def get(self, plugin: str, item_id: int) -> Container[Any] | None:
        return self.db(plugin).get_by_id(item_id)

    def record_launch(self, plugin: str, item_id: int, weight: float = 1.0) -> bool:
        return self.db(plugin).record_launch(item_id, weight)

    def rescan(self, plugin: str) -> RescanReport | None:
        return self.db(plugin).rescan(self._plugins[plugin].scanner)

    def rescan_all(
        self,
        *,
        background: bool = False,
        on_done: Callable[[str, RescanReport], None] | None = None,
    ) -> dict[str, RescanReport | threading.Thread | None]:
        """Rescan every database.

        In the foreground each value is the plugin's report; in the background
        it is the worker thread. None means a rescan was already running.
        """
        results: dict[str, RescanReport | threading.Thread | None] = {}
        for name, shared in self._dbs.items():
            scanner = self._plugins[name].scanner
            if background:
                callback = None
                if on_done is not None:
                    callback = lambda report, name=name: on_done(name, report)
                results[name] = shared.rescan_in_background(scanner, callback)
            else:
                results[name] = shared.rescan(scanner)
        return results

    def stats(self) -> list[dict[str, Any]]:
        return [shared.stats() for shared in self._dbs.values()]

    def rebaseline(self) -> dict[str, bool]:
        return {name: shared.rebaseline() for name, shared in self._dbs.items()}

    def close(self) -> None:
        for name, shared in self._dbs.items():
            try:
                shared.close()
            except Exception as e:
                logger.warning("Failed to close {} database: {}", name, e)
        self._dbs.clear()

    def __enter__(self) -> "LauncherContext":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
