from __future__ import annotations

from typing import TYPE_CHECKING

from navcollect.config.base_sources import (
    BETHESDA_PLUGINS,
    read_creation_club_listings,
    resolve_base_sources,
)
from navcollect.domain.model import SourceId

if TYPE_CHECKING:
    from pathlib import Path


def test_listings_skip_blank_and_invalid_lines(tmp_path: Path) -> None:
    path = tmp_path / "Skyrim.ccc"
    path.write_text("ccBGSSSE001-Fish.esm\n\n   \nnot a plugin\nccQDRSSE001-SurvivalMode.esl\n")

    assert read_creation_club_listings(path) == frozenset(
        {SourceId("ccBGSSSE001-Fish.esm"), SourceId("ccQDRSSE001-SurvivalMode.esl")}
    )


def test_missing_listings_yield_empty_set(tmp_path: Path) -> None:
    assert read_creation_club_listings(tmp_path / "missing.ccc") == frozenset()
    assert read_creation_club_listings(None) == frozenset()


def test_undecodable_listings_yield_empty_set(tmp_path: Path) -> None:
    path = tmp_path / "Skyrim.ccc"
    path.write_bytes(b"\xff\xfe\xfa\x00bad")

    assert read_creation_club_listings(path) == frozenset()


def test_base_sources_union_includes_bethesda_masters(tmp_path: Path) -> None:
    path = tmp_path / "Skyrim.ccc"
    path.write_text("ccBGSSSE025-AdvDSGS.esm\n")

    sources = resolve_base_sources(path)

    assert set(BETHESDA_PLUGINS) <= sources
    assert SourceId("ccbgssse025-advdsgs.esm") in sources
    assert SourceId("update.esm") in sources
    assert resolve_base_sources() == frozenset(BETHESDA_PLUGINS)
