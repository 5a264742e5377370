"""Read and write ``config.json``.

The file uses camelCase keys; the models use snake_case.
"""

import json
import os
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from quicklaunch.config.schema import Config


def get_config_path() -> Path:
    from quicklaunch.utils.helpers import get_data_path
    return get_data_path() / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """Load the config file, with environment overrides applied on top.

    A missing file gives the defaults. An unreadable or invalid one is logged
    and also gives the defaults, so a typo never locks the user out.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError("top level must be a JSON object")
            return Config(**convert_keys(raw))
        except (OSError, ValidationError, ValueError) as e:
            logger.warning("Ignoring config {}: {}", path, e)

    return Config()


def save_config(config: Config, config_path: Path | None = None) -> None:
    path = config_path or get_config_path()
    data = convert_to_camel(config.model_dump())
    path.parent.mkdir(parents=True, exist_ok=True)
    # Written beside the target, then swapped in; readers never see half a file.
    tmp_path = path.with_name(f".{path.name}.tmp-{os.getpid()}")
    fd = os.open(str(tmp_path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")
    os.replace(tmp_path, path)


def convert_keys(data: Any) -> Any:
    """Recursively turn camelCase keys into snake_case."""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(v) for v in data]
    return data


def convert_to_camel(data: Any) -> Any:
    if isinstance(data, dict):
        return {snake_to_camel(k): convert_to_camel(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_to_camel(v) for v in data]
    return data


def camel_to_snake(name: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() and i else c.lower() for i, c in enumerate(name))


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)
