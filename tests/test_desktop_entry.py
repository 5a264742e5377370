from pathlib import Path

import pytest

from quicklaunch.apps.desktop_entry import DesktopEntryError, parse_desktop_file, strip_field_codes
from quicklaunch.apps.models import App
from quicklaunch.apps.scan import ScanError, scan_desktop_entries
from quicklaunch.files import FileItem, scan_files


def _entry(directory: Path, filename: str, body: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_text(body)
    return path


def _desktop(name: str, exec_line: str, icon: str = "icon", extra: str = "") -> str:
    return f"[Desktop Entry]\nType=Application\nName={name}\nExec={exec_line}\nIcon={icon}\n{extra}"


def test_strip_field_codes() -> None:
    assert strip_field_codes("/usr/bin/cat --flag") == "/usr/bin/cat --flag"
    assert strip_field_codes("/usr/bin/cat %f --flag") == "/usr/bin/cat --flag"
    assert strip_field_codes("code %U") == "code"


def test_parse_valid_entry(tmp_path: Path) -> None:
    path = _entry(tmp_path, "test.desktop", _desktop("Test", "/usr/bin/test --with-flag %f", "testicon"))
    app = parse_desktop_file(path)
    assert app == App(name="Test", exec="/usr/bin/test --with-flag", icon="testicon", terminal=False)
    assert app.command() == ["/usr/bin/test", "--with-flag"]


def test_parse_ignores_other_sections_and_localized_keys(tmp_path: Path) -> None:
    body = (
        "# comment\n"
        "[Desktop Entry]\n"
        "Name=Firefox\n"
        "Name[de]=Feuerfuchs\n"
        "Exec=firefox --new-window=1 %u\n"
        "Icon=firefox\n"
        "Comment=100% web\n"
        "Terminal=true\n"
        "\n"
        "[Desktop Action new-private-window]\n"
        "Name=Private\n"
        "Exec=firefox --private-window %u\n"
    )
    app = parse_desktop_file(_entry(tmp_path, "firefox.desktop", body))
    assert app == App(name="Firefox", exec="firefox --new-window=1", icon="firefox", terminal=True)
    assert app.terminal is True


@pytest.mark.parametrize("flag", ["NoDisplay=true", "Hidden=true"])
def test_hidden_entries_are_skipped(tmp_path: Path, flag: str) -> None:
    path = _entry(tmp_path, "hidden.desktop", _desktop("Hidden", "hidden", extra=flag + "\n"))
    assert parse_desktop_file(path) is None


def test_explicit_false_flags_are_listed(tmp_path: Path) -> None:
    path = _entry(tmp_path, "shown.desktop", _desktop("Shown", "shown", extra="NoDisplay=false\nHidden=false\n"))
    assert parse_desktop_file(path) is not None


@pytest.mark.parametrize(
    "body",
    [
        "[Something Else]\nName=A\n",
        "[Desktop Entry]\nExec=a\nIcon=a\n",
        "[Desktop Entry]\nName=A\nIcon=a\n",
        "[Desktop Entry]\nName=A\nExec=a\n",
        _desktop("A", "a", extra="NoDisplay=yes\n"),
        _desktop("A", "a", extra="Terminal=1\n"),
        "no section header",
    ],
)
def test_malformed_entries_raise_with_the_path(tmp_path: Path, body: str) -> None:
    path = _entry(tmp_path, "bad.desktop", body)
    with pytest.raises(DesktopEntryError) as excinfo:
        parse_desktop_file(path)
    assert excinfo.value.path == str(path)
    assert str(path) in str(excinfo.value)


def test_scan_walks_sorts_dedups_and_collects_errors(tmp_path: Path) -> None:
    system = tmp_path / "system"
    local = tmp_path / "local"
    _entry(system, "zed.desktop", _desktop("Zed", "zed"))
    _entry(system / "kde", "alpha.desktop", _desktop("Alpha", "alpha"))
    _entry(system, "hidden.desktop", _desktop("Hidden", "hidden", extra="Hidden=true\n"))
    _entry(system, "broken.desktop", "[Desktop Entry]\nName=Broken\n")
    _entry(system, "readme.txt", "not an entry")
    _entry(local, "zed.desktop", _desktop("Zed", "zed"))

    apps, errors = scan_desktop_entries([str(system), str(local), str(tmp_path / "missing")])

    assert [app.name for app in apps] == ["Alpha", "Zed"]
    assert sum(isinstance(e, DesktopEntryError) for e in errors) == 1
    assert sum(isinstance(e, ScanError) for e in errors) == 1


def test_scan_expands_environment_variables(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    apps_dir = tmp_path / "apps"
    _entry(apps_dir, "term.desktop", _desktop("Terminal", "kitty"))
    monkeypatch.setenv("QL_TEST_APPS", str(apps_dir))
    apps, errors = scan_desktop_entries(["$QL_TEST_APPS"])
    assert [app.name for app in apps] == ["Terminal"]
    assert errors == []


def test_scan_files_skips_hidden_entries(tmp_path: Path) -> None:
    root = tmp_path / "docs"
    (root / "sub").mkdir(parents=True)
    (root / ".git").mkdir()
    (root / "a.txt").write_text("a")
    (root / ".secret").write_text("s")
    (root / "sub" / "b.md").write_text("b")
    (root / ".git" / "config").write_text("c")

    files, errors = scan_files(root)

    assert errors == []
    assert sorted(f.name for f in files) == ["a.txt", "b.md"]
    assert FileItem(name="b.md", path=str(root / "sub" / "b.md")) in files


def test_scan_files_reports_missing_root(tmp_path: Path) -> None:
    files, errors = scan_files(tmp_path / "nope")
    assert files == []
    assert len(errors) == 1
