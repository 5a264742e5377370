"""Applications discovered from desktop entries."""

from quicklaunch.apps.desktop_entry import DesktopEntryError, parse_desktop_file
from quicklaunch.apps.models import App
from quicklaunch.apps.scan import ScanError, scan_desktop_entries

__all__ = ["App", "DesktopEntryError", "ScanError", "parse_desktop_file", "scan_desktop_entries"]
