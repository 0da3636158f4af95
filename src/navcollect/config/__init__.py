"""Application configuration helpers."""

from __future__ import annotations

from .base_sources import BETHESDA_PLUGINS, read_creation_club_listings, resolve_base_sources
from .env import optional_env_path, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .settings import (
    CellSettings,
    OverrideSettings,
    Settings,
    WorldspaceSelection,
    load_settings,
    save_settings,
)
from .storage import StorageConfig, get_storage_config

__all__ = [
    "BETHESDA_PLUGINS",
    "CellSettings",
    "ConfigurationError",
    "MissingConfigurationError",
    "OverrideSettings",
    "Settings",
    "StorageConfig",
    "WorldspaceSelection",
    "configure_logging",
    "get_storage_config",
    "load_settings",
    "optional_env_path",
    "read_creation_club_listings",
    "require_env_vars",
    "resolve_base_sources",
    "save_settings",
]
