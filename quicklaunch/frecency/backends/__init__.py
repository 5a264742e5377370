"""Frecency database backends."""

from quicklaunch.frecency.backends.base import FrecencyBackend
from quicklaunch.frecency.backends.blob import BlobStore
from quicklaunch.frecency.backends.sqlite import SqliteFrecencyDB

__all__ = ["BlobStore", "FrecencyBackend", "SqliteFrecencyDB"]
