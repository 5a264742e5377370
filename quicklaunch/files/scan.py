"""Index regular files under a directory tree."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict


class FileItem(BaseModel):
    """A file on disk; two scans see the same file when the path matches."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str

    def sort_string(self) -> str:
        return self.name

    def identity_fields(self) -> tuple[Any, ...]:
        return (self.path,)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileItem):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def scan_files(root: Path | str) -> tuple[list[FileItem], list[Exception]]:
    """Walk ``root`` and return every non-hidden file, plus walk errors."""
    root = Path(root)
    errors: list[Exception] = []
    files: list[FileItem] = []
    if not root.is_dir():
        errors.append(NotADirectoryError(f"Error indexing files: {root} is not a directory"))
        return files, errors

    for dirpath, dirnames, filenames in os.walk(root, onerror=errors.append):
        # Prune in place so os.walk never descends into hidden directories.
        dirnames[:] = sorted(d for d in dirnames if not _is_hidden(d))
        for filename in sorted(filenames):
            if _is_hidden(filename):
                continue
            files.append(FileItem(name=filename, path=str(Path(dirpath) / filename)))

    logger.debug("Found {} files under {}", len(files), root)
    return files, errors
