"""Whole-file storage for :class:`FrecencyDatabase`.

The file is a JSON snapshot validated by pydantic. Writers replace it
atomically (temp file + ``os.replace``); readers and writers of other
processes are kept apart by an advisory ``flock`` on a sidecar lock file.
"""

from __future__ import annotations

import fcntl
import os
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from quicklaunch.frecency.database import FrecencyDatabase
from quicklaunch.frecency.errors import DeserializationError, StorageIOError, StorageLockError
from quicklaunch.frecency.models import Record, T

FORMAT_VERSION = 1
DEFAULT_LOCK_TIMEOUT = 10.0
_LOCK_POLL_SECONDS = 0.05


class StoredRecord(BaseModel):
    """One persisted record: item payload, raw score, id."""

    model_config = ConfigDict(extra="forbid")

    data: Any
    score: float = Field(ge=0.0, allow_inf_nan=False)
    id: int = Field(ge=0)


class StoreSnapshot(BaseModel):
    """Everything needed to rebuild a database."""

    model_config = ConfigDict(extra="forbid")

    format_version: int = FORMAT_VERSION
    reference_time: float = Field(allow_inf_nan=False)
    half_life: float = Field(gt=0.0, allow_inf_nan=False)
    records: list[StoredRecord] = Field(default_factory=list)


def lock_path_for(path: Path) -> Path:
    return path.with_name(f"{path.name}.lock")


class BlobStore:
    """Load and save frecency databases as single files."""

    def __init__(self, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self.lock_timeout = max(0.0, float(lock_timeout))

    @contextmanager
    def _file_lock(self, path: Path, *, exclusive: bool) -> Iterator[None]:
        lock_path = lock_path_for(path)
        try:
            fd = os.open(str(lock_path), os.O_CREAT | os.O_RDWR, 0o600)
        except OSError as e:
            raise StorageIOError(lock_path, "opening lock file for", e) from e
        mode = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        deadline = time.monotonic() + self.lock_timeout
        try:
            while True:
                try:
                    fcntl.flock(fd, mode | fcntl.LOCK_NB)
                    break
                except BlockingIOError:
                    if time.monotonic() >= deadline:
                        raise StorageLockError(path, self.lock_timeout) from None
                    time.sleep(_LOCK_POLL_SECONDS)
                except OSError as e:
                    raise StorageLockError(path, self.lock_timeout) from e
            try:
                yield
            finally:
                fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)

    def load(self, path: Path, item_type: type[T]) -> FrecencyDatabase[T]:
        """Read a database file.

        Raises:
            StorageIOError: the file is missing or unreadable.
            DeserializationError: the content is corrupt or from another format version.
            StorageLockError: another process holds the write lock too long.
        """
        path = Path(path)
        if not path.is_file():
            raise StorageIOError(path, "opening", FileNotFoundError(str(path)))
        with self._file_lock(path, exclusive=False):
            try:
                raw = path.read_bytes()
            except OSError as e:
                raise StorageIOError(path, "reading", e) from e

        try:
            snapshot = StoreSnapshot.model_validate_json(raw)
        except ValidationError as e:
            raise DeserializationError(path, e) from e
        if snapshot.format_version != FORMAT_VERSION:
            raise DeserializationError(
                path,
                f"unsupported format version {snapshot.format_version} (expected {FORMAT_VERSION})",
            )

        adapter = TypeAdapter(item_type)
        records: dict[int, Record[T]] = {}
        for stored in snapshot.records:
            if stored.id in records:
                raise DeserializationError(path, f"duplicate record id {stored.id}")
            try:
                item = adapter.validate_python(stored.data)
            except ValidationError as e:
                raise DeserializationError(path, e) from e
            records[stored.id] = Record(id=stored.id, item=item, score=stored.score)

        logger.debug("Loaded {} records from {}", len(records), path)
        return FrecencyDatabase(
            item_type,
            records=records,
            reference_time=snapshot.reference_time,
            half_life=snapshot.half_life,
            path=path,
            store=self,
        )

    def save(self, path: Path, db: FrecencyDatabase[T]) -> None:
        """Replace the file at ``path`` with the content of ``db``."""
        path = Path(path)
        adapter = TypeAdapter(db.item_type)
        snapshot = StoreSnapshot(
            reference_time=db.reference_time,
            half_life=db.half_life,
            records=[
                StoredRecord(
                    data=adapter.dump_python(record.item, mode="json"),
                    score=record.score,
                    id=record.id,
                )
                for record in db.records.values()
            ],
        )
        payload = snapshot.model_dump_json().encode("utf-8")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(path.parent, "creating directory for", e) from e

        tmp_path = path.with_name(f".{path.name}.tmp-{os.getpid()}-{threading.get_ident()}")
        with self._file_lock(path, exclusive=True):
            try:
                with open(tmp_path, "wb") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                try:
                    tmp_path.chmod(0o600)
                except OSError:
                    pass
                os.replace(tmp_path, path)
            except OSError as e:
                tmp_path.unlink(missing_ok=True)
                raise StorageIOError(path, "writing", e) from e
        logger.debug("Saved {} records to {}", len(db.records), path)
