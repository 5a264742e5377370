"""Thread-safe handle around one frecency database."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generic

from loguru import logger

from quicklaunch.frecency.backends.base import FrecencyBackend
from quicklaunch.frecency.backends.blob import DEFAULT_LOCK_TIMEOUT, BlobStore
from quicklaunch.frecency.backends.sqlite import SqliteFrecencyDB
from quicklaunch.frecency.database import FrecencyDatabase
from quicklaunch.frecency.errors import DeserializationError, StorageIOError
from quicklaunch.frecency.models import Container, MergeResult, RescanReport, T
from quicklaunch.frecency.scoring import DEFAULT_HALF_LIFE

Scanner = Callable[[], tuple[list[T], list[Exception]]]


class SharedFrecencyDB(Generic[T]):
    """One database shared by the UI thread and background rescans.

    Every operation holds one coarse lock for its whole duration. Mutations
    are persisted before the lock is released. Rescans run their scanner
    outside the lock and only lock to merge and save; overlapping rescan
    requests are coalesced.
    """

    def __init__(
        self,
        db: FrecencyBackend,
        *,
        name: str = "db",
        path: Path | None = None,
        rebaseline_after: float | None = None,
    ) -> None:
        self.name = name
        self.path = path
        self.rebaseline_after = rebaseline_after
        self._db = db
        self._lock = threading.RLock()
        self._rescan_lock = threading.Lock()
        self._rescanning = False

    @contextmanager
    def locked(self) -> Iterator[FrecencyBackend]:
        """Hold the lock across several operations on the raw database."""
        with self._lock:
            yield self._db

    @property
    def rescanning(self) -> bool:
        with self._rescan_lock:
            return self._rescanning

    def __len__(self) -> int:
        with self._lock:
            return len(self._db)

    def get_ranked_list(self, search: str, limit: int | None = None) -> list[Container[T]]:
        with self._lock:
            return self._db.get_ranked_list(search, limit)

    def get_by_id(self, item_id: int) -> Container[T] | None:
        with self._lock:
            return self._db.get_by_id(item_id)

    def update_score(self, item_id: int, weight: float = 1.0) -> bool:
        """Update a score and persist it. False when the id is unknown."""
        with self._lock:
            if not self._db.update_score(item_id, weight):
                return False
            self._maybe_rebaseline()
            self._db.save()
            return True

    def record_launch(self, item_id: int, weight: float = 1.0) -> bool:
        """Count one launch of ``item_id``. False when the id is unknown."""
        recorded = self.update_score(item_id, weight)
        if recorded:
            logger.debug("{}: recorded launch of {} (weight={})", self.name, item_id, weight)
        return recorded

    def merge_new_entries(self, items: Iterable[T]) -> MergeResult:
        with self._lock:
            result = self._db.merge_new_entries(items)
            self._db.save()
            return result

    def save(self) -> None:
        with self._lock:
            self._db.save()

    def rebaseline(self, now: float | None = None) -> bool:
        with self._lock:
            moved = self._db.rebaseline(now)
            if moved:
                self._db.save()
            return moved

    def _maybe_rebaseline(self) -> None:
        if self.rebaseline_after is None:
            return
        if self._db.secs_elapsed() > self.rebaseline_after:
            logger.info("Rebaselining {} frecency scores", self.name)
            self._db.rebaseline()

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "name": self.name,
                "path": str(self.path) if self.path else None,
                "records": len(self._db),
                "reference_time": self._db.reference_time,
                "half_life": self._db.half_life,
                "rescanning": self.rescanning,
            }

    def close(self) -> None:
        with self._lock:
            self._db.close()

    def _claim_rescan(self) -> bool:
        with self._rescan_lock:
            if self._rescanning:
                return False
            self._rescanning = True
            return True

    def _release_rescan(self) -> None:
        with self._rescan_lock:
            self._rescanning = False

    def _run_rescan(self, scanner: Scanner) -> RescanReport:
        try:
            items, errors = scanner()
            _log_scan_errors(self.name, errors)
            with self._lock:
                merge = self._db.merge_new_entries(items)
                self._db.save()
            logger.debug(
                "{} rescan: scanned={} kept={} added={} removed={} errors={}",
                self.name,
                len(items),
                merge.kept,
                merge.added,
                merge.removed,
                len(errors),
            )
            return RescanReport(merge=merge, errors=list(errors), scanned=len(items))
        finally:
            self._release_rescan()

    def rescan(self, scanner: Scanner) -> RescanReport | None:
        """Scan, then merge and save. Returns None if a rescan is already running."""
        if not self._claim_rescan():
            logger.debug("{} rescan already in progress; skipping", self.name)
            return None
        return self._run_rescan(scanner)

    def rescan_in_background(
        self,
        scanner: Scanner,
        on_done: Callable[[RescanReport], None] | None = None,
    ) -> threading.Thread | None:
        """Run :meth:`rescan` on a daemon thread; None if one is already running."""
        if not self._claim_rescan():
            logger.debug("{} rescan already in progress; skipping", self.name)
            return None

        def _runner() -> None:
            try:
                report = self._run_rescan(scanner)
            except Exception as e:
                logger.error("{} background rescan failed: {}", self.name, e)
                return
            if on_done is not None:
                on_done(report)

        thread = threading.Thread(target=_runner, name=f"{self.name}-rescan", daemon=True)
        thread.start()
        return thread


def _log_scan_errors(name: str, errors: list[Exception]) -> None:
    for err in errors:
        logger.warning("{} scan: {}", name, err)


def _remove_sqlite_files(path: Path) -> None:
    for suffix in ("", "-wal", "-shm"):
        path.with_name(path.name + suffix).unlink(missing_ok=True)


def open_shared_db(
    path: Path,
    item_type: type[T],
    scanner: Scanner,
    *,
    backend: str = "blob",
    name: str = "db",
    half_life: float = DEFAULT_HALF_LIFE,
    rebaseline_after: float | None = None,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
) -> SharedFrecencyDB[T]:
    """Load the database at ``path`` or rebuild it from a fresh scan.

    A missing store is built from a scan and saved; a corrupt one is rebuilt
    the same way. Other I/O failures and lock timeouts propagate with the
    file left untouched.
    """
    path = Path(path)
    if backend not in ("blob", "sqlite"):
        raise ValueError(f"unknown frecency backend {backend!r}")

    db: FrecencyBackend
    try:
        if backend == "sqlite":
            db = SqliteFrecencyDB.load(
                path, item_type, half_life=half_life, busy_timeout=lock_timeout
            )
        else:
            db = FrecencyDatabase.load(path, item_type, lock_timeout=lock_timeout)
    except StorageIOError as e:
        if not isinstance(e.cause, FileNotFoundError):
            raise
        logger.info("Creating frecency database {}", path)
        db = _build(path, item_type, scanner, backend, name, half_life, lock_timeout)
    except DeserializationError as e:
        logger.warning("Frecency database {} is unusable, rebuilding: {}", path, e)
        if backend == "sqlite":
            _remove_sqlite_files(path)
        db = _build(path, item_type, scanner, backend, name, half_life, lock_timeout)
    else:
        logger.debug("Loaded {} database from {} ({} items)", name, path, len(db))

    return SharedFrecencyDB(db, name=name, path=path, rebaseline_after=rebaseline_after)


def _build(
    path: Path,
    item_type: type[T],
    scanner: Scanner,
    backend: str,
    name: str,
    half_life: float,
    lock_timeout: float,
) -> FrecencyBackend:
    items, errors = scanner()
    _log_scan_errors(name, errors)
    db: FrecencyBackend
    if backend == "sqlite":
        db = SqliteFrecencyDB.new(
            path, item_type, items, half_life=half_life, busy_timeout=lock_timeout
        )
    else:
        db = FrecencyDatabase.new(
            item_type,
            items,
            half_life=half_life,
            path=path,
            store=BlobStore(lock_timeout),
        )
        db.save()
    logger.info("Built {} database with {} items", name, len(db))
    return db
