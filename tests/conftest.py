from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from navcollect.domain.policy import Policy

from tests.support.records import DAWNGUARD, SKYRIM, UPDATE

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from navcollect.domain.model import SourceId


@pytest.fixture
def base_sources() -> frozenset[SourceId]:
    return frozenset({SKYRIM, UPDATE, DAWNGUARD})


@pytest.fixture
def permissive_policy() -> Policy:
    """Policy with every override flag switched on."""

    return Policy(
        include_singles=True,
        include_identicals=True,
        include_no_conflicts=True,
        include_base_conflicts=True,
        include_base_overrides=True,
    )


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    directory = tmp_path / "data"
    monkeypatch.setenv("NAVCOLLECT_DATA_DIR", str(directory))
    monkeypatch.delenv("NAVCOLLECT_LOAD_ORDER", raising=False)
    monkeypatch.delenv("NAVCOLLECT_CREATION_CLUB_LISTINGS", raising=False)
    yield directory
