"""Parse freedesktop.org desktop entry files into :class:`App` items."""

from __future__ import annotations

import configparser
from pathlib import Path

from quicklaunch.apps.models import App

SECTION = "Desktop Entry"


class DesktopEntryError(RuntimeError):
    """A desktop entry could not be turned into an app."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = str(path)
        super().__init__(f"Desktop file {self.path} {message}")


def strip_field_codes(exec_line: str) -> str:
    """Drop ``%f``, ``%U`` and similar placeholders from an Exec value."""
    return " ".join(part for part in exec_line.split(" ") if not part.startswith("%"))


def _parse_bool(path: Path, entry: configparser.SectionProxy, key: str) -> bool:
    value = entry.get(key)
    if value is None:
        return False
    value = value.strip()
    if value == "true":
        return True
    if value == "false":
        return False
    raise DesktopEntryError(path, f"property {key} has an invalid value {value!r}")


def parse_desktop_file(path: Path) -> App | None:
    """Read one ``.desktop`` file.

    Returns None for entries that ask not to be listed (``NoDisplay`` or
    ``Hidden``). Raises :class:`DesktopEntryError` for anything malformed.
    """
    path = Path(path)
    parser = configparser.ConfigParser(interpolation=None, strict=False, delimiters=("=",))
    # Keys are case-sensitive in desktop entries.
    parser.optionxform = str
    try:
        with open(path, encoding="utf-8") as f:
            parser.read_file(f)
    except (OSError, UnicodeDecodeError, configparser.Error) as e:
        raise DesktopEntryError(path, f"could not be parsed: {e}") from e

    if not parser.has_section(SECTION):
        raise DesktopEntryError(path, f"is missing the '{SECTION}' section")
    entry = parser[SECTION]

    if _parse_bool(path, entry, "NoDisplay") or _parse_bool(path, entry, "Hidden"):
        return None

    fields: dict[str, str] = {}
    for key in ("Name", "Exec", "Icon"):
        value = entry.get(key)
        if value is None:
            raise DesktopEntryError(path, f"is missing the '{key}' parameter")
        fields[key] = value.strip()

    return App(
        name=fields["Name"],
        exec=strip_field_codes(fields["Exec"]),
        icon=fields["Icon"],
        terminal=_parse_bool(path, entry, "Terminal"),
    )
