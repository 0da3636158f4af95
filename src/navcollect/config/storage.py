"""Filesystem locations used by the collector."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_path

APP_DIR_NAME: Final[str] = "navcollect"
DEFAULT_OUTPUT_FILENAME: Final[str] = "NavmeshCollector.db"
DEFAULT_SETTINGS_FILENAME: Final[str] = "settings.json"
DEFAULT_LOG_FILENAME: Final[str] = "NavmeshCollector.log"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    output_filename: str = DEFAULT_OUTPUT_FILENAME
    settings_filename: str = DEFAULT_SETTINGS_FILENAME
    log_filename: str = DEFAULT_LOG_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def output_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.output_filename

    def settings_path(self) -> Path:
        return self.resolve_data_dir() / self.settings_filename

    def log_path(self) -> Path:
        return self.resolve_data_dir() / self.log_filename


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    data_dir = optional_env_path("NAVCOLLECT_DATA_DIR") or _default_data_dir()
    return StorageConfig(data_dir=data_dir)
