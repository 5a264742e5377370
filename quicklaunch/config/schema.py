"""Configuration schema using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from quicklaunch.config.defaults import (
    DEFAULT_APPS,
    DEFAULT_FILES,
    DEFAULT_FRECENCY,
    DEFAULT_SEARCH_LIMIT,
    default_app_paths,
)


class FrecencyConfig(BaseModel):
    """How scores decay and where they are stored."""

    model_config = ConfigDict(extra="ignore")

    backend: Literal["blob", "sqlite"] = DEFAULT_FRECENCY["backend"]
    half_life_seconds: float = Field(default=float(DEFAULT_FRECENCY["half_life_seconds"]), gt=0)
    # Rebaseline on launch once the reference time is this old; None disables it.
    rebaseline_after_seconds: float | None = Field(default=DEFAULT_FRECENCY["rebaseline_after_seconds"], gt=0)
    lock_timeout_seconds: float = Field(default=float(DEFAULT_FRECENCY["lock_timeout_seconds"]), ge=0)


class AppsConfig(BaseModel):
    """Desktop entry discovery."""

    model_config = ConfigDict(extra="ignore")

    enabled: bool = bool(DEFAULT_APPS["enabled"])
    app_paths: list[str] = Field(default_factory=default_app_paths)


class FilesConfig(BaseModel):
    """File indexing below one root directory."""

    model_config = ConfigDict(extra="ignore")

    enabled: bool = bool(DEFAULT_FILES["enabled"])
    root: str = str(DEFAULT_FILES["root"])

    @property
    def root_path(self) -> Path:
        from quicklaunch.utils.helpers import expand_path
        return expand_path(self.root)


class Config(BaseSettings):
    """Root configuration for quicklaunch.

    Values passed in (the config file) are overridden by `QUICKLAUNCH_*`
    environment variables.
    """
    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True, env_prefix="QUICKLAUNCH_", env_nested_delimiter="__")

    data_dir: str = ""
    search_limit: int = Field(default=DEFAULT_SEARCH_LIMIT, ge=1)
    frecency: FrecencyConfig = Field(default_factory=FrecencyConfig)
    apps: AppsConfig = Field(default_factory=AppsConfig)
    files: FilesConfig = Field(default_factory=FilesConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @property
    def data_path(self) -> Path:
        """Directory holding the databases; defaults to <home>/data."""
        from quicklaunch.utils.helpers import get_db_path
        if not self.data_dir:
            return get_db_path()
        return Path(self.data_dir).expanduser()

    def db_path(self, plugin: str) -> Path:
        suffix = "sqlite3" if self.frecency.backend == "sqlite" else "db"
        return self.data_path / f"{plugin}.{suffix}"
