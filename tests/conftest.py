from pathlib import Path

import pytest

from quicklaunch.apps.models import App


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "qlhome"
    monkeypatch.setenv("QUICKLAUNCH_HOME", str(home))
    return home


@pytest.fixture
def apps() -> list[App]:
    return [
        App(name="Firefox", exec="firefox", icon="firefox"),
        App(name="Files", exec="nautilus", icon="system-file-manager"),
        App(name="Filet", exec="filet", icon="filet"),
    ]
