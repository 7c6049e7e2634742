"""Store configuration — load [monoxity] from config.toml + .env overrides.

Pure stdlib.  Environment variables (``MONOXITY_TABLE``,
``MONOXITY_FILE_NAME``, ``MONOXITY_DIRECTORY``) win over the TOML file;
``.env`` is read into os.environ first without replacing existing values.
"""

from __future__ import annotations

import os
import pathlib
import tomllib
from typing import NamedTuple

DEFAULT_TABLE = "monoxity"
DEFAULT_FILE_NAME = "monoxity"
DB_EXTENSION = ".db"


class StoreConfig(NamedTuple):
    table: str = DEFAULT_TABLE
    file_name: str = DEFAULT_FILE_NAME
    directory: str = "."

    @property
    def db_path(self) -> pathlib.Path:
        return pathlib.Path(self.directory) / f"{self.file_name}{DB_EXTENSION}"


def _load_dotenv(project_root: pathlib.Path) -> None:
    """Parse a simple .env file and inject into os.environ.

    Handles KEY=VALUE, ignores comments (#) and blank lines.
    Strips optional surrounding quotes from values.
    """
    env_path = project_root / ".env"
    if not env_path.is_file():
        return
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        value = value.strip()
        # Strip matching quotes.
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]
        if key and value:
            os.environ.setdefault(key, value)


def load_store_config(project_root: pathlib.Path) -> StoreConfig:
    """Load store config from config/config.toml + environment variables.

    A missing config file is fine; every field has a default.
    """
    _load_dotenv(project_root)

    section: dict = {}
    cfg_path = project_root / "config" / "config.toml"
    if cfg_path.is_file():
        with open(cfg_path, "rb") as f:
            section = tomllib.load(f).get("monoxity", {})

    return StoreConfig(
        table=os.environ.get("MONOXITY_TABLE") or section.get("table") or DEFAULT_TABLE,
        file_name=(
            os.environ.get("MONOXITY_FILE_NAME")
            or section.get("file_name")
            or DEFAULT_FILE_NAME
        ),
        directory=os.environ.get("MONOXITY_DIRECTORY") or section.get("directory") or ".",
    )
