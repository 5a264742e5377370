"""Frecency-ranked item database."""

from quicklaunch.frecency.backends import BlobStore, FrecencyBackend, SqliteFrecencyDB
from quicklaunch.frecency.database import FrecencyDatabase
from quicklaunch.frecency.errors import (
    DeserializationError,
    FrecencyDBError,
    ScoreOverflowError,
    StorageIOError,
    StorageLockError,
)
from quicklaunch.frecency.identity import item_identity
from quicklaunch.frecency.matcher import fuzzy_match
from quicklaunch.frecency.models import Container, DBItem, MergeResult, Record, RescanReport
from quicklaunch.frecency.shared import SharedFrecencyDB, open_shared_db

__all__ = [
    "BlobStore",
    "Container",
    "DBItem",
    "DeserializationError",
    "FrecencyBackend",
    "FrecencyDBError",
    "FrecencyDatabase",
    "MergeResult",
    "Record",
    "RescanReport",
    "ScoreOverflowError",
    "SharedFrecencyDB",
    "SqliteFrecencyDB",
    "StorageIOError",
    "StorageLockError",
    "fuzzy_match",
    "item_identity",
    "open_shared_db",
]
