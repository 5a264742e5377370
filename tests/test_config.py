import json
import stat
from pathlib import Path

import pytest

from quicklaunch.config.defaults import DEFAULT_APP_PATHS
from quicklaunch.config.loader import (
    camel_to_snake,
    convert_keys,
    convert_to_camel,
    get_config_path,
    load_config,
    save_config,
    snake_to_camel,
)
from quicklaunch.config.schema import Config


def test_defaults() -> None:
    cfg = Config()
    assert cfg.frecency.backend == "blob"
    assert cfg.frecency.half_life_seconds == 259200.0
    assert cfg.frecency.rebaseline_after_seconds is None
    assert cfg.apps.enabled is True
    assert cfg.apps.app_paths == DEFAULT_APP_PATHS
    assert cfg.files.enabled is False


def test_config_path_follows_quicklaunch_home(_isolated_home: Path) -> None:
    assert get_config_path() == _isolated_home / "config.json"
    assert Config().data_path == _isolated_home / "data"


def test_db_path_depends_on_backend(tmp_path: Path) -> None:
    cfg = Config(data_dir=str(tmp_path))
    assert cfg.db_path("apps") == tmp_path / "apps.db"
    cfg.frecency.backend = "sqlite"
    assert cfg.db_path("files") == tmp_path / "files.sqlite3"


def test_save_writes_camel_case_and_loads_back(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    cfg = Config()
    cfg.frecency.rebaseline_after_seconds = 3600.0
    cfg.apps.app_paths = ["/opt/apps"]
    save_config(cfg, path)

    raw = json.loads(path.read_text())
    assert raw["frecency"]["halfLifeSeconds"] == 259200.0
    assert raw["frecency"]["rebaselineAfterSeconds"] == 3600.0
    assert raw["apps"]["appPaths"] == ["/opt/apps"]
    assert stat.S_IMODE(path.stat().st_mode) == 0o600

    loaded = load_config(path)
    assert loaded.frecency.rebaseline_after_seconds == 3600.0
    assert loaded.apps.app_paths == ["/opt/apps"]


def test_invalid_file_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert load_config(path).frecency.backend == "blob"

    path.write_text(json.dumps({"frecency": {"halfLifeSeconds": -5}}))
    assert load_config(path).frecency.half_life_seconds == 259200.0


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    assert load_config(tmp_path / "none.json").search_limit == Config().search_limit


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QUICKLAUNCH_FRECENCY__BACKEND", "sqlite")
    monkeypatch.setenv("QUICKLAUNCH_SEARCH_LIMIT", "20")
    cfg = Config()
    assert cfg.frecency.backend == "sqlite"
    assert cfg.search_limit == 20


def test_key_conversion_helpers() -> None:
    assert camel_to_snake("halfLifeSeconds") == "half_life_seconds"
    assert snake_to_camel("rebaseline_after_seconds") == "rebaselineAfterSeconds"
    data = {"apps": {"app_paths": ["/a"]}, "search_limit": 3}
    assert convert_keys(convert_to_camel(data)) == data


def test_environment_overrides_a_saved_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.json"
    cfg = Config()
    cfg.search_limit = 5
    cfg.frecency.half_life_seconds = 600.0
    save_config(cfg, path)

    monkeypatch.setenv("QUICKLAUNCH_FRECENCY__BACKEND", "sqlite")
    loaded = load_config(path)
    assert loaded.frecency.backend == "sqlite"
    assert loaded.frecency.half_life_seconds == 600.0
    assert loaded.search_limit == 5
