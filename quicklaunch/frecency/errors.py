"""Errors raised by the frecency database and its storage backends."""

from __future__ import annotations

from pathlib import Path


class FrecencyDBError(RuntimeError):
    """Base class for frecency database failures."""


class StorageIOError(FrecencyDBError):
    """Opening, creating, reading or writing the backing store failed."""

    def __init__(self, path: Path | str, action: str, cause: BaseException | None = None) -> None:
        self.path = str(path)
        self.action = action
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Error {action} frecency database {self.path}{detail}")


class DeserializationError(FrecencyDBError):
    """Persisted data is corrupt or written by an incompatible version."""

    def __init__(self, path: Path | str, cause: BaseException | str) -> None:
        self.path = str(path)
        self.cause = cause
        super().__init__(f"Error parsing frecency database {self.path}: {cause}")


class StorageLockError(FrecencyDBError):
    """The advisory file lock could not be acquired in time."""

    def __init__(self, path: Path | str, timeout: float) -> None:
        self.path = str(path)
        self.timeout = timeout
        super().__init__(
            f"Could not lock frecency database {self.path} within {timeout:g}s; "
            "another launcher process may be writing it"
        )


class ScoreOverflowError(FrecencyDBError):
    """A score update would store a non-finite value."""
