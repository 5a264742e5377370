"""Files below a configured root, searchable by name."""

from quicklaunch.files.scan import FileItem, scan_files

__all__ = ["FileItem", "scan_files"]
