from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from navcollect.app import collect_navmeshes, read_collected_overrides, resolve_load_order_path
from navcollect.config import MissingConfigurationError, Settings, save_settings
from navcollect.domain.errors import ConcurrentRunRejectedError, ConfigurationError
from navcollect.domain.model import EntityKey, SourceId
from navcollect.domain.runs import RunGuard

if TYPE_CHECKING:
    from pathlib import Path

DUMP = {
    "loadOrder": ["Skyrim.esm", "Update.esm", "ccFish.esm", "ModA.esp", "ModB.esp"],
    "navmeshes": [
        {
            "formKey": "000100:Skyrim.esm",
            "containment": "interior",
            "overrides": [
                {"source": "Skyrim.esm", "data": {"v": 1}},
                {"source": "ModA.esp", "data": {"v": 2}},
                {"source": "ModB.esp", "data": {"v": 3}},
            ],
        },
        {
            "formKey": "000200:Skyrim.esm",
            "containment": "exterior",
            "worldspace": "00003C:Skyrim.esm",
            "overrides": [
                {"source": "Skyrim.esm", "data": {"v": 1}},
                {"source": "ModA.esp", "data": {"v": 2}},
                {"source": "ccFish.esm", "data": {"v": 3}},
            ],
        },
        {
            "formKey": "000300:Skyrim.esm",
            "overrides": [{"source": "Skyrim.esm", "data": {"v": 1}}],
        },
        {
            "formKey": "000400:Skyrim.esm",
            "overrides": [
                {"source": "Skyrim.esm", "data": {"v": 1}},
                {"source": "ModA.esp", "data": None},
            ],
        },
    ],
}


@pytest.fixture
def load_order_path(tmp_path: Path) -> Path:
    path = tmp_path / "dump.json"
    path.write_text(json.dumps(DUMP))
    return path


def test_collect_writes_output_container(data_dir: Path, load_order_path: Path) -> None:
    result = collect_navmeshes(load_order_path=load_order_path, guard=RunGuard())

    output = data_dir.resolve() / "NavmeshCollector.db"
    stored = read_collected_overrides(output)
    assert result.count == 2
    assert {str(override.key) for override in stored} == {
        "000100:Skyrim.esm",
        "000200:Skyrim.esm",
    }
    assert [str(failure.key) for failure in result.collection.errors] == ["000400:Skyrim.esm"]


def test_creation_club_plugins_count_as_base(
    data_dir: Path, load_order_path: Path, tmp_path: Path
) -> None:
    listings = tmp_path / "Skyrim.ccc"
    listings.write_text("ccFish.esm\n")

    result = collect_navmeshes(
        load_order_path=load_order_path,
        creation_club_path=listings,
        output_path=tmp_path / "custom.db",
        guard=RunGuard(),
    )

    assert [str(override.key) for override in result.collection.collected] == [
        "000100:Skyrim.esm"
    ]
    assert (tmp_path / "custom.db").is_file()


def test_settings_document_drives_policy(
    data_dir: Path, load_order_path: Path, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    settings = Settings()
    settings.cell_settings.interior_cells = False
    settings.worldspace_selection.selected_worldspaces = ["00003C:Skyrim.esm"]
    settings_path = tmp_path / "settings.json"
    save_settings(settings, settings_path)

    with caplog.at_level("WARNING"):
        result = collect_navmeshes(
            load_order_path=load_order_path,
            settings_path=settings_path,
            guard=RunGuard(),
        )

    assert [override.key for override in result.collection.collected] == [
        EntityKey(SourceId("Skyrim.esm"), 0x200)
    ]
    assert "Worldspace selection" in caplog.text


def test_invalid_cell_settings_abort_before_writing(
    data_dir: Path, load_order_path: Path, tmp_path: Path
) -> None:
    settings = Settings()
    settings.cell_settings.interior_cells = False
    settings.cell_settings.exterior_cells = False
    settings_path = tmp_path / "settings.json"
    save_settings(settings, settings_path)

    with pytest.raises(ConfigurationError):
        collect_navmeshes(
            load_order_path=load_order_path,
            settings_path=settings_path,
            guard=RunGuard(),
        )

    assert not (data_dir / "NavmeshCollector.db").exists()


def test_busy_guard_rejects_run(data_dir: Path, load_order_path: Path) -> None:
    guard = RunGuard()
    guard.acquire()

    with pytest.raises(ConcurrentRunRejectedError):
        collect_navmeshes(load_order_path=load_order_path, guard=guard)


def test_load_order_path_from_environment(
    monkeypatch: pytest.MonkeyPatch, load_order_path: Path
) -> None:
    monkeypatch.setenv("NAVCOLLECT_LOAD_ORDER", str(load_order_path))

    assert resolve_load_order_path(None) == load_order_path


def test_load_order_path_is_required(data_dir: Path) -> None:
    with pytest.raises(MissingConfigurationError, match="NAVCOLLECT_LOAD_ORDER"):
        resolve_load_order_path(None)


def test_reading_missing_output_is_a_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        read_collected_overrides(tmp_path / "missing.db")
