"""Persisted user settings and the policy snapshot derived from them."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from navcollect.domain.model import EntityKey
from navcollect.domain.policy import Policy

if TYPE_CHECKING:
    from pathlib import Path

log = logging.getLogger(__name__)


class SettingsModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, validate_assignment=True)


class WorldspaceSelection(SettingsModel):
    selected_worldspaces: list[str] = Field(default_factory=list, alias="SelectedWorldspaces")

    @field_validator("selected_worldspaces")
    @classmethod
    def _validate_keys(cls, value: list[str]) -> list[str]:
        for item in value:
            EntityKey.parse(item)
        return value


class CellSettings(SettingsModel):
    interior_cells: bool = Field(default=True, alias="InteriorCells")
    exterior_cells: bool = Field(default=True, alias="ExteriorCells")
    modded_cells: bool = Field(default=True, alias="ModdedCells")


class OverrideSettings(SettingsModel):
    include_singles: bool = Field(default=False, alias="IncludeSingles")
    include_identicals: bool = Field(default=False, alias="IncludeIdenticals")
    include_no_conflicts: bool = Field(default=False, alias="IncludeNoConflicts")
    include_bethesda_conflicts: bool = Field(default=False, alias="IncludeBethesdaConflicts")
    include_bethesda_overrides: bool = Field(default=False, alias="IncludeBethesdaOverrides")


class Settings(SettingsModel):
    """Mutable settings document as stored in ``settings.json``."""

    worldspace_selection: WorldspaceSelection = Field(
        default_factory=WorldspaceSelection, alias="WorldspaceSelection"
    )
    cell_settings: CellSettings = Field(default_factory=CellSettings, alias="CellSettings")
    override_settings: OverrideSettings = Field(
        default_factory=OverrideSettings, alias="OverrideSettings"
    )

    def to_policy(self) -> Policy:
        """Take a deep, immutable snapshot for one collection run."""

        cells = self.cell_settings
        overrides = self.override_settings
        return Policy(
            interior_cells=cells.interior_cells,
            exterior_cells=cells.exterior_cells,
            modded_cells=cells.modded_cells,
            include_singles=overrides.include_singles,
            include_identicals=overrides.include_identicals,
            include_no_conflicts=overrides.include_no_conflicts,
            include_base_conflicts=overrides.include_bethesda_conflicts,
            include_base_overrides=overrides.include_bethesda_overrides,
            selected_worldspaces=frozenset(
                EntityKey.parse(item) for item in self.worldspace_selection.selected_worldspaces
            ),
        )


def load_settings(path: Path) -> Settings:
    """Read settings from ``path``; fall back to defaults when absent or unreadable."""

    if not path.exists():
        return Settings()
    try:
        raw = path.read_text(encoding="utf-8")
        if not raw.strip():
            return Settings()
        return Settings.model_validate_json(raw)
    except (OSError, ValidationError, ValueError):
        log.exception("Error loading settings from %s; using defaults", path)
        return Settings()


def save_settings(settings: Settings, path: Path) -> None:
    payload = settings.model_dump(mode="json", by_alias=True)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    log.info("Settings saved to %s", path)
