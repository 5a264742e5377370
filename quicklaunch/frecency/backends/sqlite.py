"""SQLite-backed frecency database.

Rows live in ``main(id, score, sort_text, data)``; ``data`` is the item's
JSON encoding. Ranking runs in SQL through the ``calc_score`` scalar
function, and a rescan is swapped in as a new table inside one transaction.
"""

from __future__ import annotations

import math
import sqlite3
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Generic

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from quicklaunch.frecency.errors import DeserializationError, StorageIOError
from quicklaunch.frecency.identity import item_identity
from quicklaunch.frecency.matcher import Matcher, fuzzy_match
from quicklaunch.frecency.models import Container, MergeResult, T
from quicklaunch.frecency.ranking import relevance_for
from quicklaunch.frecency.scoring import (
    DEFAULT_HALF_LIFE,
    current_time_secs,
    decay_factor,
    effective_score,
    update_frecency,
)
from quicklaunch.utils.helpers import ensure_dir

FORMAT_VERSION = 1
DEFAULT_BUSY_TIMEOUT = 5.0
# Below every real sort key, which are all >= 0.
_UNORDERED = -1.0


def _table_def(name: str) -> str:
    return (
        f"CREATE TABLE IF NOT EXISTS {name} ("
        " id INTEGER PRIMARY KEY,"
        " score REAL NOT NULL DEFAULT 0.0,"
        " sort_text TEXT NOT NULL,"
        " data BLOB NOT NULL"
        ")"
    )


def _is_corruption(error: sqlite3.DatabaseError) -> bool:
    """True for a damaged or foreign file, False for busy, locked or I/O failures."""
    code = getattr(error, "sqlite_errorcode", None)
    if code is None:
        return not isinstance(error, sqlite3.OperationalError)
    return code & 0xFF in (sqlite3.SQLITE_CORRUPT, sqlite3.SQLITE_NOTADB)


class SqliteFrecencyDB(Generic[T]):
    """Frecency database stored in an SQLite file."""

    def __init__(
        self,
        db_path: Path,
        item_type: type[T],
        *,
        half_life: float = DEFAULT_HALF_LIFE,
        identity: Callable[[T], int] = item_identity,
        matcher: Matcher = fuzzy_match,
        busy_timeout: float = DEFAULT_BUSY_TIMEOUT,
    ) -> None:
        self.db_path = Path(db_path).expanduser()
        self.item_type = item_type
        self.identity = identity
        self.matcher = matcher
        self._adapter = TypeAdapter(item_type)
        self._lock = threading.RLock()
        try:
            ensure_dir(self.db_path.parent)
            self._conn = sqlite3.connect(
                str(self.db_path),
                timeout=busy_timeout,
                check_same_thread=False,
                isolation_level=None,
            )
        except (OSError, sqlite3.Error) as e:
            raise StorageIOError(self.db_path, "opening", e) from e
        self._conn.row_factory = sqlite3.Row
        self._conn.create_function("calc_score", 5, self._calc_score, deterministic=True)
        try:
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
            self._conn.execute("PRAGMA temp_store=MEMORY")
            self._create_schema()
            self.reference_time, self.half_life = self._load_meta(half_life)
        except DeserializationError:
            self._conn.close()
            raise
        except sqlite3.DatabaseError as e:
            self._conn.close()
            if _is_corruption(e):
                raise DeserializationError(self.db_path, e) from e
            raise StorageIOError(self.db_path, "opening", e) from e

    @classmethod
    def load(cls, path: Path, item_type: type[T], **kwargs) -> "SqliteFrecencyDB[T]":
        """Open an existing database file; fails if it does not exist."""
        path = Path(path).expanduser()
        if not path.is_file():
            raise StorageIOError(path, "opening", FileNotFoundError(str(path)))
        return cls(path, item_type, **kwargs)

    @classmethod
    def new(
        cls,
        path: Path,
        item_type: type[T],
        items: Iterable[T],
        **kwargs,
    ) -> "SqliteFrecencyDB[T]":
        """Create a fresh database at ``path`` from an initial scan, discarding old rows."""
        db = cls(path, item_type, **kwargs)
        db.reset()
        db.merge_new_entries(items)
        return db

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        self._conn.execute("BEGIN IMMEDIATE")
        try:
            yield self._conn
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        else:
            self._conn.execute("COMMIT")

    def _create_schema(self) -> None:
        with self._lock:
            self._conn.execute(_table_def("main"))
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    def _load_meta(self, half_life: float) -> tuple[float, float]:
        rows = {
            str(row["key"]): str(row["value"])
            for row in self._conn.execute("SELECT key, value FROM meta").fetchall()
        }
        try:
            version = int(rows.get("format_version", FORMAT_VERSION))
            reference_time = float(rows["reference_time"]) if "reference_time" in rows else None
            stored_half_life = float(rows["half_life"]) if "half_life" in rows else None
        except ValueError as e:
            raise DeserializationError(self.db_path, f"invalid scorer state: {e}") from e
        if version != FORMAT_VERSION:
            raise DeserializationError(
                self.db_path,
                f"unsupported format version {version} (expected {FORMAT_VERSION})",
            )

        if reference_time is None or stored_half_life is None:
            reference_time = current_time_secs() if reference_time is None else reference_time
            stored_half_life = float(half_life) if stored_half_life is None else stored_half_life
            self._write_meta(reference_time, stored_half_life)
        elif stored_half_life != half_life:
            logger.debug(
                "{} keeps stored half life {}s (configured {}s)",
                self.db_path,
                stored_half_life,
                half_life,
            )
        if stored_half_life <= 0 or not math.isfinite(stored_half_life):
            raise DeserializationError(self.db_path, f"invalid half life {stored_half_life!r}")
        return reference_time, stored_half_life

    def _write_meta(self, reference_time: float, half_life: float) -> None:
        self._conn.executemany(
            "INSERT OR REPLACE INTO meta (key, value) VALUES (?, ?)",
            [
                ("format_version", str(FORMAT_VERSION)),
                ("reference_time", repr(float(reference_time))),
                ("half_life", repr(float(half_life))),
            ],
        )

    def _calc_score(
        self,
        score: float,
        sort_text: str,
        search: str,
        elapsed: float,
        half_life: float,
    ) -> float | None:
        relevance = relevance_for(self.matcher, sort_text, search)
        if relevance is None:
            return None
        key = effective_score(float(score), float(elapsed), float(half_life)) + relevance
        return key if math.isfinite(key) else _UNORDERED

    def _decode(self, data: bytes) -> T:
        try:
            return self._adapter.validate_json(data)
        except ValidationError as e:
            raise DeserializationError(self.db_path, e) from e

    def secs_elapsed(self, now: float | None = None) -> float:
        now = current_time_secs() if now is None else now
        return max(0.0, now - self.reference_time)

    def __len__(self) -> int:
        with self._lock:
            row = self._conn.execute("SELECT COUNT(*) AS c FROM main").fetchone()
        return int(row["c"] if row else 0)

    def reset(self) -> None:
        """Drop every row and restart the reference time at now."""
        with self._lock, self._transaction() as conn:
            conn.execute("DELETE FROM main")
            self.reference_time = current_time_secs()
            self._write_meta(self.reference_time, self.half_life)

    def get_ranked_list(
        self,
        search: str,
        limit: int | None = None,
        *,
        now: float | None = None,
    ) -> list[Container[T]]:
        """Items matching ``search``, best first."""
        if limit is not None and limit <= 0:
            return []
        with self._lock:
            rows = self._conn.execute(
                """
                SELECT id, data, calc_score(score, sort_text, ?, ?, ?) AS sort_score
                FROM main
                WHERE sort_score IS NOT NULL
                ORDER BY sort_score DESC, sort_text ASC, id ASC
                LIMIT ?
                """,
                (search, self.secs_elapsed(now), self.half_life, -1 if limit is None else int(limit)),
            ).fetchall()
        return [
            Container(
                id=int(row["id"]),
                item=self._decode(row["data"]),
                score=max(0.0, float(row["sort_score"])),
            )
            for row in rows
        ]

    def get_by_id(self, item_id: int, *, now: float | None = None) -> Container[T] | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT id, score, data FROM main WHERE id = ? LIMIT 1",
                (int(item_id),),
            ).fetchone()
        if row is None:
            return None
        return Container(
            id=int(row["id"]),
            item=self._decode(row["data"]),
            score=effective_score(float(row["score"]), self.secs_elapsed(now), self.half_life),
        )

    def update_score(self, item_id: int, weight: float = 1.0, *, now: float | None = None) -> bool:
        """Add ``weight`` to an item's score as of now; False for an unknown id."""
        if not math.isfinite(weight):
            raise ValueError(f"weight must be finite, got {weight!r}")
        with self._lock, self._transaction() as conn:
            row = conn.execute(
                "SELECT score FROM main WHERE id = ? LIMIT 1",
                (int(item_id),),
            ).fetchone()
            if row is None:
                logger.debug("update_score: unknown id {}", item_id)
                return False
            new_score = update_frecency(
                float(row["score"]),
                weight,
                self.secs_elapsed(now),
                self.half_life,
            )
            conn.execute("UPDATE main SET score = ? WHERE id = ?", (new_score, int(item_id)))
        return True

    def merge_new_entries(self, items: Iterable[T]) -> MergeResult:
        """Swap in a rescan, inheriting scores of items that are still present."""
        rows = []
        for position, item in enumerate(items):
            rows.append(
                (
                    self.identity(item),
                    item.sort_string(),
                    self._adapter.dump_json(item),
                    position,
                )
            )

        with self._lock, self._transaction() as conn:
            conn.execute("DROP TABLE IF EXISTS temp.scan")
            conn.execute(
                """
                CREATE TEMPORARY TABLE scan (
                    id INTEGER PRIMARY KEY,
                    sort_text TEXT NOT NULL,
                    data BLOB NOT NULL,
                    position INTEGER NOT NULL
                )
                """
            )
            # First occurrence of a repeated item wins.
            conn.executemany(
                "INSERT OR IGNORE INTO scan (id, sort_text, data, position) VALUES (?, ?, ?, ?)",
                rows,
            )
            scanned = int(conn.execute("SELECT COUNT(*) FROM scan").fetchone()[0])
            existing = int(conn.execute("SELECT COUNT(*) FROM main").fetchone()[0])
            kept = int(
                conn.execute("SELECT COUNT(*) FROM scan JOIN main ON scan.id = main.id").fetchone()[0]
            )
            conn.execute("DROP TABLE IF EXISTS tmp")
            conn.execute(_table_def("tmp"))
            conn.execute(
                """
                INSERT INTO tmp (id, score, sort_text, data)
                SELECT
                    scan.id,
                    COALESCE(main.score, 0.0),
                    scan.sort_text,
                    scan.data
                FROM scan LEFT OUTER JOIN main ON scan.id = main.id
                ORDER BY scan.position
                """
            )
            conn.execute("DROP TABLE main")
            conn.execute("ALTER TABLE tmp RENAME TO main")
            conn.execute("DROP TABLE temp.scan")

        result = MergeResult(kept=kept, added=scanned - kept, removed=existing - kept)
        logger.debug(
            "Merged rescan into {}: kept={} added={} removed={}",
            self.db_path,
            result.kept,
            result.added,
            result.removed,
        )
        return result

    def rebaseline(self, now: float | None = None) -> bool:
        """Move the reference time to ``now`` without changing effective scores."""
        now = current_time_secs() if now is None else now
        if now <= self.reference_time:
            return False
        factor = decay_factor(now - self.reference_time, self.half_life)
        with self._lock, self._transaction() as conn:
            if math.isinf(factor):
                conn.execute("UPDATE main SET score = 0.0")
            else:
                conn.execute("UPDATE main SET score = score / ?", (factor,))
            self._write_meta(now, self.half_life)
            self.reference_time = now
        return True

    def save(self, path: Path | None = None) -> None:
        """Make the current state durable, optionally copying it to ``path``.

        Every mutation already commits, so with no ``path`` this only
        checkpoints the write-ahead log.
        """
        with self._lock:
            if path is None or Path(path).expanduser() == self.db_path:
                try:
                    self._conn.execute("PRAGMA wal_checkpoint(PASSIVE)")
                except sqlite3.Error as e:
                    raise StorageIOError(self.db_path, "writing", e) from e
                return
            target = Path(path).expanduser()
            try:
                ensure_dir(target.parent)
                dest = sqlite3.connect(str(target))
                try:
                    self._conn.backup(dest)
                finally:
                    dest.close()
            except (OSError, sqlite3.Error) as e:
                raise StorageIOError(target, "writing", e) from e
